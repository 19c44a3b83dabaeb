"""Public service interfaces."""

from .recommendation_service import RecommendationService
from .search_service import CreatorNotFoundError, CreatorSearchService, SearchExecutionError, SearchOutcome

__all__ = [
    "CreatorNotFoundError",
    "CreatorSearchService",
    "RecommendationService",
    "SearchExecutionError",
    "SearchOutcome",
]
