from app.core.criteria import FraudStatus, Platform, Region, SearchCriteria
from app.core.repository import InMemoryCreatorRepository, OrderKey
from app.core.search_engine import (
    CreatorSearchEngine,
    build_predicate,
    determine_ordering,
    matches_tag,
)

from conftest import make_creator


class CountingRepository(InMemoryCreatorRepository):
    def __init__(self, records):
        super().__init__(records)
        self.count_calls = 0

    def count(self, predicate):
        self.count_calls += 1
        return super().count(predicate)


def test_mexican_casino_scenario_returns_every_match(casino_repository):
    engine = CreatorSearchEngine(casino_repository)
    criteria = SearchCriteria(regions=[Region.MEXICO], tags=["casino"], min_followers=100_000, limit=50)

    page = engine.execute(criteria)

    assert page.total_count == 30
    assert len(page.creators) == 30
    assert page.has_more is False
    assert page.total_pages == 1
    assert all(creator.region == Region.MEXICO for creator in page.creators)
    assert len({creator.id for creator in page.creators}) == 30


def test_zero_tag_matches_returns_explicit_empty_page(casino_repository):
    repository = CountingRepository(list(casino_repository.find(build_predicate(SearchCriteria()))))
    engine = CreatorSearchEngine(repository)

    page = engine.execute(SearchCriteria(tags=["chess"], limit=10))

    assert page.creators == []
    assert page.total_count == 0
    assert page.has_more is False
    assert repository.count_calls == 0


def test_pagination_with_platform_filter():
    repository = InMemoryCreatorRepository(
        [make_creator(i, followers=10_000 + i) for i in range(25)]
    )
    engine = CreatorSearchEngine(repository)

    second = engine.execute(SearchCriteria(platforms=[Platform.TWITCH], limit=10, page=2))
    third = engine.execute(SearchCriteria(platforms=[Platform.TWITCH], limit=10, page=3))

    assert second.total_pages == 3
    assert second.has_more is True
    assert [c.followers for c in second.creators] == [10_000 + i for i in range(14, 4, -1)]
    assert len(third.creators) == 5
    assert third.has_more is False


def test_flagged_creators_excluded_unless_requested(casino_repository):
    engine = CreatorSearchEngine(casino_repository)
    default = engine.execute(SearchCriteria(tags=["casino"], min_followers=700_000, limit=10))
    flagged = engine.execute(
        SearchCriteria(
            tags=["casino"],
            min_followers=700_000,
            fraud_statuses=[FraudStatus.FLAGGED],
            limit=10,
        )
    )
    assert default.total_count == 0
    assert [c.id for c in flagged.creators] == ["creator-103"]


def test_viewer_range_forces_live_only():
    predicate = build_predicate(SearchCriteria(min_viewers=100))
    assert predicate.is_live is True
    assert predicate.min_viewers == 100
    assert build_predicate(SearchCriteria()).is_live is None


def test_ordering_follows_intent():
    live = determine_ordering(SearchCriteria(is_live=True))
    followers = determine_ordering(SearchCriteria(min_followers=1000))
    default = determine_ordering(SearchCriteria())

    assert [key.field for key in live] == ["current_viewers", "followers", "username"]
    assert [key.field for key in followers][:1] == ["followers"]
    assert [key.field for key in default] == ["followers", "is_live", "current_viewers", "username"]
    assert default[-1] == OrderKey("username", descending=False)


def test_live_search_orders_by_viewers():
    repository = InMemoryCreatorRepository(
        [
            make_creator(1, is_live=True, current_viewers=50, followers=900_000),
            make_creator(2, is_live=True, current_viewers=500, followers=1_000),
            make_creator(3, is_live=False, followers=5_000_000),
        ]
    )
    page = CreatorSearchEngine(repository).execute(
        SearchCriteria(platforms=[Platform.TWITCH], is_live=True, limit=10)
    )
    assert [c.id for c in page.creators] == ["creator-2", "creator-1"]


def test_tag_matching_rules(creator_factory):
    creator = creator_factory(tags=["Sports Betting"], current_game="Online Casino", top_games=["Slots"])

    assert matches_tag(creator, "sports betting")
    assert matches_tag(creator, "casino")
    assert matches_tag(creator, "slots")
    assert matches_tag(creator, "betting tips daily")
    assert not matches_tag(creator, "poker")
    assert not matches_tag(creator, "gg ez")
    assert not matches_tag(creator, "")


def test_single_word_phrase_needs_substring(creator_factory):
    creator = creator_factory(tags=["texas holdem"])
    assert not matches_tag(creator, "poker")
    assert matches_tag(creator, "holdem")


def test_get_creator_by_username_is_case_insensitive():
    repository = InMemoryCreatorRepository(
        [make_creator(1, username="ElRubius", platform=Platform.YOUTUBE)]
    )
    engine = CreatorSearchEngine(repository)
    assert engine.get_creator_by_username("@elrubius").id == "creator-1"
    assert engine.get_creator_by_username("elrubius", Platform.TWITCH) is None
    assert engine.get_creator_by_username("  ") is None


def test_unfiltered_search_serves_creators_outside_the_mix():
    repository = InMemoryCreatorRepository(
        [make_creator(i, platform=Platform.TIKTOK, tags=["casino"]) for i in range(5)]
    )
    page = CreatorSearchEngine(repository).execute(SearchCriteria(regions=[Region.MEXICO], tags=["casino"], limit=50))
    assert page.total_count == 5
    assert len(page.creators) == 5


def test_last_mixed_page_completes_total_count():
    records = [
        make_creator(i, platform=(Platform.TWITCH, Platform.KICK, Platform.YOUTUBE)[i % 3], followers=50_000 + i)
        for i in range(9)
    ]
    records += [make_creator(20 + i, platform=Platform.FACEBOOK, followers=10 + i) for i in range(3)]
    engine = CreatorSearchEngine(InMemoryCreatorRepository(records))

    seen = []
    for page_number in (1, 2, 3):
        page = engine.execute(SearchCriteria(regions=[Region.MEXICO], limit=5, page=page_number))
        seen.extend(creator.id for creator in page.creators)

    assert page.total_count == 12
    assert len(seen) == 12
    assert len(set(seen)) == 12
    assert seen[-3:] == ["creator-22", "creator-21", "creator-20"]


def test_trending_lists_live_creators_by_viewers():
    repository = InMemoryCreatorRepository(
        [
            make_creator(1, is_live=True, current_viewers=300, followers=10_000),
            make_creator(2, is_live=True, current_viewers=900, followers=5_000),
            make_creator(3, is_live=True, current_viewers=300, followers=80_000),
            make_creator(4, is_live=False, followers=9_000_000),
            make_creator(5, is_live=True, current_viewers=5_000, fraud_check=FraudStatus.FLAGGED),
            make_creator(6, is_live=True, current_viewers=2_000, region=Region.CHILE),
        ]
    )
    engine = CreatorSearchEngine(repository)

    assert [c.id for c in engine.trending(Region.MEXICO)] == ["creator-2", "creator-3", "creator-1"]
    assert [c.id for c in engine.trending(limit=2)] == ["creator-6", "creator-2"]


def test_find_similar_keeps_platform_region_tags_and_reach():
    target = make_creator(1, followers=10_000, tags=["casino", "slots"])
    repository = InMemoryCreatorRepository(
        [
            target,
            make_creator(2, followers=5_000, tags=["CASINO"]),
            make_creator(3, followers=20_000, tags=["slots", "irl"]),
            make_creator(4, followers=4_999, tags=["casino"]),
            make_creator(5, followers=20_001, tags=["casino"]),
            make_creator(6, followers=12_000, tags=["casino"], platform=Platform.KICK),
            make_creator(7, followers=12_000, tags=["casino"], region=Region.PERU),
            make_creator(8, followers=12_000, tags=["casino"], fraud_check=FraudStatus.FLAGGED),
            make_creator(9, followers=12_000, tags=["minecraft"]),
        ]
    )
    engine = CreatorSearchEngine(repository)

    assert [c.id for c in engine.find_similar(target)] == ["creator-3", "creator-2"]
    assert [c.id for c in engine.find_similar(target, limit=1)] == ["creator-3"]
    assert engine.find_similar(make_creator(10, followers=10_000, tags=[])) == []
