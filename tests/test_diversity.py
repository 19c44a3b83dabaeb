from collections import Counter

from app.core.diversity import DEFAULT_DIVERSITY_TARGETS, DiversitySelector
from app.core.recommendation import RecommendedCreator


def _candidate(index, tier, score):
    return RecommendedCreator(
        id=f"{tier}-{index}",
        platform="TWITCH",
        username=f"{tier}{index}",
        display_name=f"{tier} {index}",
        followers=0,
        region=None,
        avatar_url=None,
        igaming_score=0.0,
        gambling_compatible=False,
        brand_safety_score=None,
        score=score,
        tier=tier,
    )


def _pool(**sizes):
    pool = []
    for tier, size in sizes.items():
        pool.extend(_candidate(i, tier, 90 - i * 0.5) for i in range(size))
    return pool


def test_targets_round_half_up():
    assert DEFAULT_DIVERSITY_TARGETS.counts(20) == {"nano": 6, "micro": 7, "mid": 6, "macro": 1}
    assert DEFAULT_DIVERSITY_TARGETS.counts(10) == {"nano": 3, "micro": 4, "mid": 3, "macro": 1}


def test_selection_matches_tier_targets():
    selected = DiversitySelector().select(_pool(nano=25, micro=10, mid=10, macro=5), 20)
    assert len(selected) == 20
    assert Counter(item.tier for item in selected) == {"nano": 6, "micro": 7, "mid": 6, "macro": 1}


def test_result_sorted_by_score():
    selected = DiversitySelector().select(_pool(nano=25, micro=10, mid=10, macro=5), 20)
    scores = [item.score for item in selected]
    assert scores == sorted(scores, reverse=True)


def test_shortfall_backfilled_from_best_remaining():
    pool = _pool(nano=20, micro=2)
    selected = DiversitySelector().select(pool, 10)
    tiers = Counter(item.tier for item in selected)
    assert len(selected) == 10
    assert tiers == {"nano": 8, "micro": 2}
    assert len({item.id for item in selected}) == 10


def test_small_pool_returns_everything():
    pool = _pool(nano=4, macro=3)
    selected = DiversitySelector().select(pool, 20)
    assert len(selected) == len(pool)


def test_never_exceeds_requested_total():
    # Half-up rounding can over-allocate, e.g. 10 gives 3+4+3+1.
    pool = _pool(nano=10, micro=10, mid=10, macro=10)
    for total in range(1, 25):
        assert len(DiversitySelector().select(pool, total)) == total


def test_empty_inputs():
    assert DiversitySelector().select([], 5) == []
    assert DiversitySelector().select(_pool(nano=3), 0) == []
