import pytest

from app.core.criteria import Platform, Region, SearchCriteria
from app.core.query_interpreter import (
    QueryInterpreter,
    detect_language,
    detect_min_followers,
    detect_platforms,
    detect_regions,
    extract_phrase,
    extract_requested_count,
)


@pytest.fixture()
def interpreter(taxonomy):
    return QueryInterpreter(taxonomy)


@pytest.mark.parametrize("text", ["", "   ", "???", "12345", "🎰🎰🎰", None])
def test_interpret_never_raises(interpreter, text):
    criteria = interpreter.interpret(text)
    assert isinstance(criteria, SearchCriteria)


def test_casino_query_in_mexico(interpreter):
    criteria = interpreter.interpret("Show me 7 casino streamers in Mexico")
    assert criteria.regions == [Region.MEXICO]
    assert criteria.platforms == []
    assert criteria.tags[0] == "casino"
    assert {"slots", "roulette", "gambling"} <= set(criteria.tags)
    assert criteria.limit == 7
    assert criteria.min_followers is None


def test_multi_word_subject_stays_one_phrase():
    assert extract_phrase("sports betting streamers on twitch") == "sports betting"
    assert extract_phrase("find streamers in mexico") is None


def test_phrase_keeps_roman_numerals():
    assert extract_phrase("gta v streamers") == "gta v"


def test_region_codes_respect_word_boundaries():
    assert detect_regions("gta streamers") == []
    assert detect_regions("streamers from gt") == [Region.GUATEMALA]
    assert detect_regions("Mexican and Colombian creators") == [Region.MEXICO, Region.COLOMBIA]
    assert detect_regions("el salvador") == [Region.EL_SALVADOR]


def test_platform_vocabulary():
    assert detect_platforms("twitch or youtube") == [Platform.TWITCH, Platform.YOUTUBE]
    assert detect_platforms("yt shorts") == [Platform.YOUTUBE]
    assert detect_platforms("fb gaming partners") == [Platform.FACEBOOK]
    assert detect_platforms("casino streamers") == []


@pytest.mark.parametrize(
    "text,expected",
    [
        ("over 100k followers", 100_000),
        ("1.5 million followers", 1_500_000),
        ("at least 500+ followers", 500),
        ("2m subs", 2_000_000),
        ("more than 3 thousand fans", 3_000),
        ("casino streamers", None),
    ],
)
def test_follower_thresholds(text, expected):
    assert detect_min_followers(text) == expected


@pytest.mark.parametrize(
    "text,expected",
    [
        ("I need 25 streamers", 25),
        ("top 10 creators", 10),
        ("give me 5 mexican influencers", 5),
        ("show me 7 casino streamers", 7),
        ("first 3", 3),
        ("50 results please", 50),
        ("casino streamers", None),
        ("I need 20000 streamers", None),
        ("give me 0 creators", None),
    ],
)
def test_requested_count(text, expected):
    assert extract_requested_count(text) == expected


def test_out_of_range_count_falls_through_to_next_pattern():
    assert extract_requested_count("I need 20000 streamers, first 40") == 40


def test_follower_numbers_are_not_counts():
    assert extract_requested_count("streamers with 100k followers") is None


def test_flags_and_language(interpreter):
    criteria = interpreter.interpret("live vtuber streamers with facecam speaking portuguese")
    assert criteria.is_live is True
    assert criteria.is_vtuber is True
    assert criteria.uses_camera is True
    assert criteria.language == "pt"
    assert detect_language("english streamers") == "en"
    assert detect_language("casino streamers") is None


def test_brand_in_query_expands_to_categories(interpreter):
    criteria = interpreter.interpret("bet365 streamers in Peru")
    assert criteria.regions == [Region.PERU]
    assert "bet365" not in criteria.tags
    assert {"betting", "casino"} <= set(criteria.tags)


def test_previous_criteria_are_refined_not_replaced(interpreter):
    previous = SearchCriteria(regions=[Region.MEXICO], tags=["casino"], limit=50)
    criteria = interpreter.interpret("on twitch", previous)
    assert criteria.platforms == [Platform.TWITCH]
    assert criteria.regions == [Region.MEXICO]
    assert criteria.limit == 50
    assert "casino" in criteria.tags


@pytest.mark.parametrize(
    "text,region",
    [
        ("streamers in costa rica", Region.COSTA_RICA),
        ("streamers in puerto rico", Region.PUERTO_RICO),
        ("streamers from el salvador", Region.EL_SALVADOR),
        ("streamers in the dominican republic", Region.DOMINICAN_REPUBLIC),
    ],
)
def test_multi_word_regions_do_not_leak_into_tags(interpreter, text, region):
    assert extract_phrase(text) is None
    criteria = interpreter.interpret(text)
    assert criteria.tags == []
    assert criteria.regions == [region]


@pytest.mark.parametrize("text", ["streamers in latin america", "streamers from latinoamerica", "latam streamers"])
def test_latam_wording_is_not_a_subject(text):
    assert extract_phrase(text) is None


def test_platform_abbreviations_are_stripped_from_phrase(interpreter):
    criteria = interpreter.interpret("yt streamers from mexico")
    assert criteria.tags == []
    assert criteria.platforms == [Platform.YOUTUBE]
    assert criteria.regions == [Region.MEXICO]

    assert extract_phrase("fb gaming streamers in peru") is None
    assert extract_phrase("poker streamers on fb gaming") == "poker"


def test_abbreviations_only_match_whole_words():
    assert detect_platforms("anything with style") == []
    assert extract_phrase("anything") == "anything"
