"""Shared dependencies for FastAPI endpoints"""
import os
from fastapi import HTTPException

from app.config import settings

# Global instances
_repository = None
_search_service = None
_recommendation_service = None


def build_repository():
    """Prefer an explicit dataset file, otherwise the LanceDB table."""
    from app.core.lance_repository import LanceCreatorRepository
    from app.core.repository import InMemoryCreatorRepository

    if settings.DATASET_PATH:
        repository = InMemoryCreatorRepository.load(settings.DATASET_PATH)
        print("✅ Creator dataset loaded")
        print(f"   • Dataset: {settings.DATASET_PATH} ({len(repository)} creators)")
        return repository

    db_path = settings.DB_PATH
    if db_path and os.path.exists(db_path):
        repository = LanceCreatorRepository(
            db_path,
            table_name=settings.TABLE_NAME,
            favorites_table=settings.FAVORITES_TABLE_NAME,
        )
        print("✅ Creator repository initialized")
        print(f"   • DB path: {db_path}")
        return repository

    print(f"Database not found at: {db_path}")
    return None


def init_repository() -> bool:
    global _repository
    try:
        _repository = build_repository()
    except Exception as e:
        print(f"Error initializing creator repository: {e}")
        _repository = None
    return _repository is not None


def _build_parser():
    if not settings.USE_CONVERSATIONAL_PARSER:
        return None
    if not settings.OPENAI_API_KEY:
        print("⚠️ USE_CONVERSATIONAL_PARSER is set but OPENAI_API_KEY is missing; using heuristics only")
        return None
    from app.core.conversational import ConversationalParser

    print(f"✅ Conversational parser ready (model: {settings.PARSER_MODEL})")
    return ConversationalParser(model=settings.PARSER_MODEL, api_key=settings.OPENAI_API_KEY)


def init_search_service() -> bool:
    """Initialize the creator search service"""
    global _search_service
    if _repository is None and not init_repository():
        return False
    try:
        from app.core.query_interpreter import QueryInterpreter
        from app.core.search_engine import CreatorSearchEngine
        from app.core.taxonomy import BrandTaxonomyResolver
        from app.core.validator import CriteriaValidator
        from app.services.search_service import CreatorSearchService

        taxonomy = BrandTaxonomyResolver.from_file(settings.TAXONOMY_PATH)
        _search_service = CreatorSearchService(
            engine=CreatorSearchEngine(_repository, tag_match_row_cap=settings.TAG_MATCH_ROW_CAP),
            interpreter=QueryInterpreter(taxonomy),
            validator=CriteriaValidator(
                default_language=settings.DEFAULT_LANGUAGE,
                default_limit=settings.DEFAULT_RESULT_LIMIT,
            ),
            parser=_build_parser(),
        )
        print("✅ Search service initialized")
        return True
    except Exception as e:
        print(f"❌ Error initializing search service: {e}")
        _search_service = None
        return False


def init_recommendation_service() -> bool:
    """Initialize the recommendation service"""
    global _recommendation_service
    if _repository is None and not init_repository():
        return False
    try:
        from app.services.recommendation_service import RecommendationService

        _recommendation_service = RecommendationService(_repository)
        print("✅ Recommendation service initialized")
        return True
    except Exception as e:
        print(f"❌ Error initializing recommendation service: {e}")
        _recommendation_service = None
        return False


def get_search_service():
    """Dependency to get search service instance"""
    if _search_service is None:
        raise HTTPException(
            status_code=503,
            detail="Search service not initialized. Please ensure the creator database is available."
        )
    return _search_service


def get_recommendation_service():
    """Dependency to get recommendation service instance"""
    if _recommendation_service is None:
        raise HTTPException(
            status_code=503,
            detail="Recommendation service not initialized. Please ensure the creator database is available."
        )
    return _recommendation_service
