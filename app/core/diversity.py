"""Tier-balanced selection of scored recommendations."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Sequence

from app.core.recommendation import RecommendedCreator

TIER_ORDER = ("nano", "micro", "mid", "macro")


@dataclass(frozen=True)
class DiversityTargets:
    nano: float = 0.30
    micro: float = 0.35
    mid: float = 0.30
    macro: float = 0.05

    def counts(self, total: int) -> Dict[str, int]:
        # Half-up rounding, so 0.5 always rounds away from zero.
        return {tier: int(math.floor(total * getattr(self, tier) + 0.5)) for tier in TIER_ORDER}


DEFAULT_DIVERSITY_TARGETS = DiversityTargets()


def _by_score(items: Sequence[RecommendedCreator]) -> List[RecommendedCreator]:
    return sorted(items, key=lambda item: item.score, reverse=True)


class DiversitySelector:
    def __init__(self, targets: DiversityTargets = DEFAULT_DIVERSITY_TARGETS):
        self.targets = targets

    def select(self, candidates: Sequence[RecommendedCreator], total_count: int) -> List[RecommendedCreator]:
        """Fill per-tier targets with top scorers, backfill from the best leftovers, then rank by score."""
        if total_count <= 0 or not candidates:
            return []

        by_tier: Dict[str, List[RecommendedCreator]] = {tier: [] for tier in TIER_ORDER}
        for candidate in candidates:
            by_tier.setdefault(candidate.tier, []).append(candidate)

        selected: List[RecommendedCreator] = []
        for tier, target in self.targets.counts(total_count).items():
            selected.extend(_by_score(by_tier.get(tier, []))[:target])

        remaining = total_count - len(selected)
        if remaining > 0:
            used = {id(item) for item in selected}
            leftovers = _by_score([item for item in candidates if id(item) not in used])
            selected.extend(leftovers[:remaining])

        return _by_score(selected)[:total_count]
