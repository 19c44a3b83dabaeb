"""Service that turns campaign criteria into a tier-balanced creator shortlist."""

from __future__ import annotations

import logging
from typing import List, Optional

from app.core.criteria import CampaignCriteria, Region
from app.core.diversity import DiversitySelector
from app.core.recommendation import RecommendationScorer, RecommendedCreator
from app.core.repository import CreatorPredicate, CreatorRepository, OrderKey

logger = logging.getLogger(__name__)

CANDIDATE_POOL_FACTOR = 5
QUICK_MIN_VERTICAL_FIT = 60.0
CANDIDATE_ORDERING = (OrderKey("igaming_score"), OrderKey("followers"), OrderKey("username", descending=False))


class RecommendationService:
    """Fetch candidates, score them and apply diversity selection."""

    def __init__(
        self,
        repository: CreatorRepository,
        scorer: Optional[RecommendationScorer] = None,
        selector: Optional[DiversitySelector] = None,
    ) -> None:
        self._repository = repository
        self._scorer = scorer or RecommendationScorer(repository)
        self._selector = selector or DiversitySelector()

    @staticmethod
    def build_predicate(criteria: CampaignCriteria) -> CreatorPredicate:
        predicate = CreatorPredicate(exclude_flagged=False)
        if criteria.region is not None:
            predicate.regions = [criteria.region]
        if criteria.platforms:
            predicate.platforms = list(criteria.platforms)
        if criteria.require_gambling_compatible:
            predicate.gambling_compatible = True
        if criteria.min_vertical_fit:
            predicate.min_igaming_score = criteria.min_vertical_fit
        return predicate

    def recommend(self, criteria: CampaignCriteria, user_id: Optional[str] = None) -> List[RecommendedCreator]:
        pool_size = criteria.total_count * CANDIDATE_POOL_FACTOR
        candidates = self._repository.find(
            self.build_predicate(criteria),
            order_by=list(CANDIDATE_ORDERING),
            limit=pool_size,
        )
        scored = self._scorer.score_all(candidates, criteria, user_id)
        selected = self._selector.select(scored, criteria.total_count)
        logger.info(
            "Recommendations | vertical=%s region=%s candidates=%s scored=%s selected=%s",
            criteria.vertical,
            criteria.region.value if criteria.region else None,
            len(candidates),
            len(scored),
            len(selected),
        )
        return selected

    def quick_recommendations(
        self,
        vertical: str,
        region: Optional[Region] = None,
        count: int = 10,
    ) -> List[RecommendedCreator]:
        """Shortcut used by the assistant; iGaming implies compatibility and a fit floor."""
        is_igaming = (vertical or "").strip().lower() == "igaming"
        criteria = CampaignCriteria(
            vertical=vertical,
            region=region,
            total_count=count,
            require_gambling_compatible=is_igaming,
            min_vertical_fit=QUICK_MIN_VERTICAL_FIT if is_igaming else None,
        )
        return self.recommend(criteria)
