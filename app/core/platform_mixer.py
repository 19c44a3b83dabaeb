"""Balance unfiltered search pages across the three major streaming platforms."""
from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from app.core.criteria import Platform
from app.core.repository import CreatorPredicate, CreatorRecord, CreatorRepository, OrderKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlatformMix:
    """Interleave order and share of each page per platform; the last platform takes the remainder."""

    order: Tuple[Platform, ...] = (Platform.TWITCH, Platform.KICK, Platform.YOUTUBE)
    shares: Tuple[float, ...] = (0.4, 0.3)

    def allocate(self, window: int) -> Dict[Platform, int]:
        counts: Dict[Platform, int] = {}
        remaining = window
        for platform, share in zip(self.order, self.shares):
            counts[platform] = math.ceil(window * share)
            remaining -= counts[platform]
        for platform in self.order[len(self.shares):]:
            counts[platform] = max(0, remaining)
            remaining = 0
        return counts


DEFAULT_PLATFORM_MIX = PlatformMix()

# Stream key for platforms outside the mix; served after the mixed rows.
OTHER_PLATFORMS = "other"


def rebalance(
    targets: Dict[Hashable, int],
    available: Dict[Hashable, int],
    order: Sequence[Hashable],
) -> Dict[Hashable, int]:
    """Cap each target by availability, then hand any shortfall to platforms with spare rows, in mix order."""
    taken = {platform: min(targets.get(platform, 0), available.get(platform, 0)) for platform in order}
    shortfall = sum(targets.values()) - sum(taken.values())
    for platform in order:
        if shortfall <= 0:
            break
        extra = min(shortfall, available.get(platform, 0) - taken[platform])
        taken[platform] += extra
        shortfall -= extra
    return taken


def interleave(streams: Sequence[Sequence[CreatorRecord]]) -> List[CreatorRecord]:
    """Round-robin merge, one item per stream per round, skipping exhausted streams."""
    mixed: List[CreatorRecord] = []
    longest = max((len(stream) for stream in streams), default=0)
    for index in range(longest):
        for stream in streams:
            if index < len(stream):
                mixed.append(stream[index])
    return mixed


class PlatformMixer:
    def __init__(self, repository: CreatorRepository, mix: PlatformMix = DEFAULT_PLATFORM_MIX, max_workers: int = 3):
        self.repository = repository
        self.mix = mix
        self.max_workers = max_workers

    def fetch(
        self,
        predicate: CreatorPredicate,
        order_by: Optional[Sequence[OrderKey]],
        limit: int,
        offset: int = 0,
    ) -> List[CreatorRecord]:
        """Return one mixed page; degrade to a single unmixed query if any sub-query fails."""
        try:
            return self._mixed_page(predicate, order_by, limit, offset)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Platform mixing failed, using unmixed search: %s", exc, exc_info=True)
            return self.repository.find(predicate, order_by=order_by, limit=limit, offset=offset)

    def _mixed_page(
        self,
        predicate: CreatorPredicate,
        order_by: Optional[Sequence[OrderKey]],
        limit: int,
        offset: int,
    ) -> List[CreatorRecord]:
        # Allocate over everything up to the end of the requested page so later pages stay mixed.
        window = max(0, offset) + max(0, limit)
        counts = self.mix.allocate(window)
        logger.info(
            "Mixing platforms | window=%s %s",
            window,
            " ".join(f"{platform.value.lower()}={count}" for platform, count in counts.items()),
        )

        subqueries = {platform: predicate.for_platform(platform) for platform in self.mix.order}
        others = [platform for platform in Platform if platform not in self.mix.order]
        if others:
            subqueries[OTHER_PLATFORMS] = replace(predicate, platforms=others)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                key: executor.submit(self.repository.find, sub_predicate, order_by, window, 0)
                for key, sub_predicate in subqueries.items()
            }
            fetched = {key: future.result() for key, future in futures.items()}

        order = list(subqueries)
        targets = dict(counts)
        targets[OTHER_PLATFORMS] = 0
        taken = rebalance(targets, {key: len(rows) for key, rows in fetched.items()}, order)
        mixed = interleave([fetched[platform][:taken[platform]] for platform in self.mix.order])
        if OTHER_PLATFORMS in fetched:
            mixed.extend(fetched[OTHER_PLATFORMS][:taken[OTHER_PLATFORMS]])
        start = max(0, offset)
        return mixed[start:start + limit]
