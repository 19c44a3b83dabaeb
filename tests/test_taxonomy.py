import json

import pytest

from app.core.taxonomy import BRAND_TAXONOMY, KEYWORD_TAXONOMY, BrandTaxonomyResolver, TaxonomyEntry


def _resolver():
    return BrandTaxonomyResolver(
        brands=[
            TaxonomyEntry("bet365", ("betting", "casino"), "operators"),
            TaxonomyEntry("stake", ("casino", "crypto"), "crypto"),
        ],
        keywords=[TaxonomyEntry("gta", ("gta", "grand theft auto"), "games")],
    )


def test_brand_matches_on_word_boundaries_only():
    resolver = _resolver()
    assert resolver.resolve("bet365 promo") == ["betting", "casino"]
    assert resolver.resolve("quarterly stakeholder meeting") == []
    assert resolver.resolve("stake.") == ["casino", "crypto"]


def test_default_tables_resolve_known_operator(taxonomy):
    tags = taxonomy.resolve("creators for a bet365 launch")
    assert {"betting", "sports betting", "casino", "gambling"} <= set(tags)
    assert all(entry.pattern != "stake" for entry in taxonomy.match_brands("stakeholder"))


@pytest.mark.parametrize(
    "text,group,tag",
    [
        ("caliente sponsorship", "latam_operators", "betting"),
        ("pinnacle odds", "global_operators", "sports betting"),
        ("pokerstars series", "poker_brands", "poker"),
        ("roobet promo", "crypto_gambling", "crypto"),
        ("ggbet partners", "esports_betting", "esports betting"),
        ("betmgm launch", "us_operators", "casino"),
        ("sportsbet campaign", "australian_operators", "sports betting"),
        ("hollywoodbets deal", "african_operators", "sports betting"),
        ("prizepicks creators", "fantasy_sports", "fantasy sports"),
    ],
)
def test_default_tables_cover_every_market(taxonomy, text, group, tag):
    matches = taxonomy.match_brands(text)
    assert any(entry.group == group for entry in matches)
    assert tag in taxonomy.resolve(text)


def test_default_brand_table_size():
    assert len(BRAND_TAXONOMY) == 230
    assert len({entry.pattern for entry in BRAND_TAXONOMY}) == 230


def test_brand_replaces_phrase_tag_in_place():
    resolver = _resolver()
    expanded = resolver.expand_brands("bet365 slots", ["minecraft", "bet365 slots"])
    assert expanded == ["minecraft", "betting", "casino"]


def test_brand_appends_when_no_phrase_mentions_it():
    resolver = _resolver()
    expanded = resolver.expand_brands("bet365", ["slots"])
    assert expanded == ["slots", "betting", "casino"]


def test_keywords_append_variants_with_leading_boundary():
    resolver = _resolver()
    assert resolver.expand_keywords("gta5 clips", ["clips"]) == ["clips", "gta", "grand theft auto"]
    assert resolver.expand_keywords("bigtable", []) == []


def test_empty_text_has_no_matches(taxonomy):
    assert taxonomy.resolve("") == []
    assert taxonomy.expand_keywords("", ["x"]) == ["x"]


def test_from_file_loads_json_tables(tmp_path):
    path = tmp_path / "taxonomy.json"
    path.write_text(
        json.dumps(
            {
                "brands": [{"pattern": "Acme Bet", "tags": ["Betting"], "group": "custom"}],
                "keywords": [{"pattern": "chess", "tags": ["chess", "board games"]}],
            }
        ),
        encoding="utf-8",
    )
    resolver = BrandTaxonomyResolver.from_file(str(path))
    assert resolver.resolve("sponsor acme   bet now") == ["betting"]
    assert resolver.expand_keywords("chess night", []) == ["chess", "board games"]


def test_from_file_without_path_uses_builtin_tables():
    resolver = BrandTaxonomyResolver.from_file(None)
    assert len(resolver.brands) == len(BRAND_TAXONOMY)
    assert len(resolver.keywords) == len(KEYWORD_TAXONOMY)
