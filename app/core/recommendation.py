"""
Campaign-aware creator scoring.

Each candidate gets five bounded sub-scores (vertical fit, historical performance,
brand safety, budget alignment, user-history bonus) combined with fixed weights.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.core.criteria import CampaignCriteria, FraudStatus
from app.core.repository import CreatorRecord, CreatorRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommendationWeights:
    vertical_fit: float = 0.30
    historical_performance: float = 0.25
    brand_safety: float = 0.20
    budget_alignment: float = 0.15
    user_history_bonus: float = 0.10

    def __post_init__(self) -> None:
        total = (
            self.vertical_fit
            + self.historical_performance
            + self.brand_safety
            + self.budget_alignment
            + self.user_history_bonus
        )
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Recommendation weights must sum to 1.0, got {total:.4f}")


@dataclass(frozen=True)
class TierBoundaries:
    """Upper follower bounds (exclusive) for nano, micro and mid; everything above is macro."""
    nano: int = 10_000
    micro: int = 50_000
    mid: int = 500_000

    def tier_for(self, followers: int) -> str:
        if followers < self.nano:
            return "nano"
        if followers < self.micro:
            return "micro"
        if followers < self.mid:
            return "mid"
        return "macro"


@dataclass(frozen=True)
class BudgetBands:
    # (exclusive follower ceiling, estimated rate); the last rate applies above every ceiling
    rate_card: Tuple[Tuple[int, float], ...] = (
        (10_000, 100.0),
        (50_000, 250.0),
        (100_000, 500.0),
        (500_000, 1500.0),
    )
    top_rate: float = 5000.0
    sweet_spot: Tuple[float, float] = (0.2, 0.5)
    neutral_score: float = 50.0

    def estimated_rate(self, followers: int) -> float:
        for ceiling, rate in self.rate_card:
            if followers < ceiling:
                return rate
        return self.top_rate


DEFAULT_WEIGHTS = RecommendationWeights()
DEFAULT_TIERS = TierBoundaries()
DEFAULT_BUDGET_BANDS = BudgetBands()

COMPATIBILITY_BONUS = 20.0
CATEGORY_MATCH_BONUS = 20.0
CLEAN_FRAUD_BONUS = 10.0
UNKNOWN_BRAND_SAFETY = 50.0
NEUTRAL_CPA_SCORE = 15.0


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


@dataclass
class ScoreBreakdown:
    vertical_fit: int = 0
    historical_performance: int = 0
    brand_safety: int = 0
    budget_alignment: int = 0
    user_history_bonus: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "vertical_fit": self.vertical_fit,
            "historical_performance": self.historical_performance,
            "brand_safety": self.brand_safety,
            "budget_alignment": self.budget_alignment,
            "user_history_bonus": self.user_history_bonus,
        }


@dataclass
class RecommendedCreator:
    """A scored candidate ready for diversity selection"""
    id: str
    platform: str
    username: str
    display_name: str
    followers: int
    region: Optional[str]
    avatar_url: Optional[str]
    igaming_score: float
    gambling_compatible: bool
    brand_safety_score: Optional[float]
    score: float
    tier: str
    breakdown: ScoreBreakdown = field(default_factory=ScoreBreakdown)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "platform": self.platform,
            "username": self.username,
            "display_name": self.display_name,
            "followers": self.followers,
            "region": self.region,
            "avatar_url": self.avatar_url,
            "igaming_score": self.igaming_score,
            "gambling_compatible": self.gambling_compatible,
            "brand_safety_score": self.brand_safety_score,
            "score": self.score,
            "tier": self.tier,
            "score_breakdown": self.breakdown.to_dict(),
        }


def vertical_fit_score(creator: CreatorRecord, criteria: CampaignCriteria) -> float:
    if criteria.is_vertical_restricted:
        score = 0.6 * _clamp(creator.igaming_score)
        if creator.gambling_compatible:
            score += COMPATIBILITY_BONUS
    else:
        score = min(50.0, 10.0 * max(0.0, creator.engagement_rate))

    if criteria.vertical and creator.inferred_category and creator.inferred_category.lower() == criteria.vertical:
        score += CATEGORY_MATCH_BONUS
    return _clamp(score)


def historical_performance_score(creator: CreatorRecord) -> float:
    conversions = min(40.0, 40.0 * max(0, creator.historical_conversions) / 100.0)
    roi = min(30.0, max(0.0, 30.0 * creator.avg_roi / 500.0))

    cpa = creator.historical_cpa
    if not cpa or cpa <= 0:
        cpa_score = NEUTRAL_CPA_SCORE
    elif cpa < 200:
        cpa_score = max(0.0, 30.0 - 30.0 * cpa / 200.0)
    else:
        cpa_score = 0.0
    return _clamp(conversions + roi + cpa_score)


def brand_safety_score(creator: CreatorRecord) -> float:
    score = creator.brand_safety_score if creator.brand_safety_score is not None else UNKNOWN_BRAND_SAFETY
    if creator.fraud_check == FraudStatus.CLEAN:
        score += CLEAN_FRAUD_BONUS
    return _clamp(score)


def budget_alignment_score(
    followers: int,
    budget: Optional[float],
    bands: BudgetBands = DEFAULT_BUDGET_BANDS,
) -> float:
    """Peak at the sweet-spot ratio band; decay gently under budget and steeply over it."""
    if not budget or budget <= 0:
        return bands.neutral_score

    ratio = bands.estimated_rate(followers) / budget
    low, high = bands.sweet_spot
    if low <= ratio <= high:
        return 100.0
    if ratio < low:
        return _clamp(70.0 + 30.0 * ratio / low)
    if ratio <= 1.0:
        return _clamp(100.0 - 50.0 * (ratio - high) / (1.0 - high))
    return _clamp(50.0 - 50.0 * (ratio - 1.0))


def user_history_score(creator: CreatorRecord, favorites: Sequence[CreatorRecord]) -> float:
    """Weighted overlap with the user's favourites: platform 40, region 30, category 30."""
    if not favorites:
        return 0.0
    total = len(favorites)
    platform_hits = sum(1 for fav in favorites if fav.platform == creator.platform)
    region_hits = sum(1 for fav in favorites if fav.region == creator.region)
    category_hits = sum(1 for fav in favorites if fav.inferred_category == creator.inferred_category)
    score = 40.0 * platform_hits / total + 30.0 * region_hits / total + 30.0 * category_hits / total
    return _clamp(score)


class RecommendationScorer:
    """Score candidates against campaign criteria and optional user history."""

    def __init__(
        self,
        repository: CreatorRepository,
        weights: RecommendationWeights = DEFAULT_WEIGHTS,
        tiers: TierBoundaries = DEFAULT_TIERS,
        budget_bands: BudgetBands = DEFAULT_BUDGET_BANDS,
    ):
        self.repository = repository
        self.weights = weights
        self.tiers = tiers
        self.budget_bands = budget_bands

    def load_favorites(self, user_id: Optional[str]) -> List[CreatorRecord]:
        if not user_id:
            return []
        try:
            return list(self.repository.find_favorites(user_id))
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Favourites lookup failed for user %s: %s", user_id, exc)
            return []

    def _user_history(self, creator: CreatorRecord, favorites: Sequence[CreatorRecord]) -> float:
        try:
            return user_history_score(creator, favorites)
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("User history bonus failed for creator %s: %s", creator.id, exc)
            return 0.0

    def score(
        self,
        creator: CreatorRecord,
        criteria: CampaignCriteria,
        favorites: Sequence[CreatorRecord] = (),
    ) -> RecommendedCreator:
        vertical = vertical_fit_score(creator, criteria)
        historical = historical_performance_score(creator)
        safety = brand_safety_score(creator)
        budget = budget_alignment_score(creator.followers, criteria.budget, self.budget_bands)
        history = self._user_history(creator, favorites)

        composite = (
            vertical * self.weights.vertical_fit
            + historical * self.weights.historical_performance
            + safety * self.weights.brand_safety
            + budget * self.weights.budget_alignment
            + history * self.weights.user_history_bonus
        )

        return RecommendedCreator(
            id=creator.id,
            platform=creator.platform.value,
            username=creator.username,
            display_name=creator.display_name,
            followers=creator.followers,
            region=creator.region.value if creator.region else None,
            avatar_url=creator.avatar_url,
            igaming_score=creator.igaming_score,
            gambling_compatible=creator.gambling_compatible,
            brand_safety_score=creator.brand_safety_score,
            score=round(_clamp(composite), 2),
            tier=self.tiers.tier_for(creator.followers),
            breakdown=ScoreBreakdown(
                vertical_fit=int(round(vertical)),
                historical_performance=int(round(historical)),
                brand_safety=int(round(safety)),
                budget_alignment=int(round(budget)),
                user_history_bonus=int(round(history)),
            ),
        )

    def score_all(
        self,
        candidates: Sequence[CreatorRecord],
        criteria: CampaignCriteria,
        user_id: Optional[str] = None,
    ) -> List[RecommendedCreator]:
        """Score a batch; favourites are fetched once and a failing candidate is skipped."""
        favorites = self.load_favorites(user_id)
        scored: List[RecommendedCreator] = []
        for creator in candidates:
            try:
                scored.append(self.score(creator, criteria, favorites))
            except Exception as exc:  # pylint: disable=broad-except
                logger.warning("Skipping creator %s during scoring: %s", getattr(creator, "id", "?"), exc)
        return scored
