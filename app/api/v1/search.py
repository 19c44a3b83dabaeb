"""Creator search API endpoints."""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import get_search_service
from app.models.search import (
    SearchRequest,
    InterpretRequest,
    SearchResponse,
    InterpretResponse,
    UsernameSearchResponse,
    TrendingResponse,
    SimilarCreatorsResponse,
    CompareRequest,
    CompareResponse,
)
from app.core.criteria import Region
from app.services.search_service import CreatorNotFoundError, SearchExecutionError
from app.services.summary import format_followers

router = APIRouter()

logger = logging.getLogger("search_api")
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[SearchAPI] %(asctime)s %(levelname)s: %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

PROFILE_URL_TEMPLATES = {
    "twitch": "https://twitch.tv/{username}",
    "youtube": "https://youtube.com/@{username}",
    "kick": "https://kick.com/{username}",
    "tiktok": "https://www.tiktok.com/@{username}",
    "facebook": "https://facebook.com/{username}",
}


def _profile_url(platform: Optional[str], username: str) -> Optional[str]:
    template = PROFILE_URL_TEMPLATES.get(platform or "")
    if not template or not username:
        return None
    return template.format(username=username)


def creator_to_dict(creator) -> Dict[str, Any]:
    payload = creator.to_dict()
    platform_normalized = payload["platform"].lower() if payload.get("platform") else None
    payload["platform"] = platform_normalized
    payload["followers_formatted"] = format_followers(creator.followers)
    payload["engagement_rate_pct"] = (creator.engagement_rate or 0.0) * 100
    payload["profile_url"] = payload.get("profile_url") or _profile_url(platform_normalized, creator.username)
    return payload


@router.get("/username/{username}", response_model=UsernameSearchResponse)
async def get_creator_by_username(username: str, search_service=Depends(get_search_service)):
    sanitized = username.strip()
    if not sanitized:
        raise HTTPException(status_code=400, detail="Username is required")

    try:
        result = search_service.get_creator_by_username(sanitized)
        if not result:
            raise HTTPException(status_code=404, detail=f"Creator '@{sanitized}' not found")
        return {"success": True, "result": creator_to_dict(result)}
    except HTTPException:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Username lookup failed: %s", exc)
        raise HTTPException(status_code=500, detail="Username lookup failed") from exc


@router.post("/", response_model=SearchResponse)
async def search_creators(request: SearchRequest, search_service=Depends(get_search_service)):
    logger.info(
        "Search request | page=%s preset=%s query=%s",
        request.page,
        request.preset_criteria is not None,
        request.query,
    )

    try:
        preset = request.preset_criteria.to_criteria() if request.preset_criteria else None
        outcome = search_service.search(
            request.query,
            preset_criteria=preset,
            page=request.page,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SearchExecutionError as exc:
        logger.exception("Search failed: %s", exc)
        raise HTTPException(status_code=500, detail="Search failed") from exc
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Unexpected search error: %s", exc)
        raise HTTPException(status_code=500, detail="Internal search error") from exc

    result = outcome.page
    return SearchResponse(
        success=True,
        creators=[creator_to_dict(creator) for creator in result.creators],
        total_count=result.total_count,
        page=result.page,
        total_pages=result.total_pages,
        has_more=result.has_more,
        criteria=outcome.criteria.to_dict(),
        summary=outcome.summary,
        processing_time_ms=outcome.processing_time_ms,
    )


@router.post("/interpret", response_model=InterpretResponse)
async def interpret_query(request: InterpretRequest, search_service=Depends(get_search_service)):
    logger.info("Interpret request | query=%s", request.query)

    try:
        previous = request.previous_criteria.to_criteria() if request.previous_criteria else None
        criteria = search_service.interpret(request.query, previous)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Interpretation failed: %s", exc)
        raise HTTPException(status_code=500, detail="Interpretation failed") from exc

    return InterpretResponse(success=True, criteria=criteria.to_dict())


@router.get("/trending", response_model=TrendingResponse)
async def trending_creators(
    region: Optional[str] = Query(None, description="Region code, e.g. MEXICO"),
    limit: int = Query(10, ge=1, le=100),
    search_service=Depends(get_search_service),
):
    logger.info("Trending request | region=%s limit=%s", region, limit)

    try:
        parsed_region = Region(region.strip().upper().replace(" ", "_")) if region else None
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Unknown region '{region}'") from exc

    try:
        outcome = search_service.trending(parsed_region, limit)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Trending lookup failed: %s", exc)
        raise HTTPException(status_code=500, detail="Trending lookup failed") from exc

    return TrendingResponse(
        success=True,
        creators=[creator_to_dict(creator) for creator in outcome.creators],
        insights=outcome.insights,
    )


@router.get("/similar/{username}", response_model=SimilarCreatorsResponse)
async def similar_creators(
    username: str,
    limit: int = Query(5, ge=1, le=50),
    search_service=Depends(get_search_service),
):
    sanitized = username.strip()
    if not sanitized:
        raise HTTPException(status_code=400, detail="Username is required")

    try:
        creator, similar = search_service.find_similar(sanitized, limit)
    except CreatorNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Similar lookup failed: %s", exc)
        raise HTTPException(status_code=500, detail="Similar lookup failed") from exc

    return SimilarCreatorsResponse(
        success=True,
        creator=creator_to_dict(creator),
        similar=[creator_to_dict(item) for item in similar],
    )


@router.post("/compare", response_model=CompareResponse)
async def compare_creators(request: CompareRequest, search_service=Depends(get_search_service)):
    logger.info("Compare request | usernames=%s", request.usernames)

    try:
        outcome = search_service.compare(request.usernames)
    except CreatorNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Comparison failed: %s", exc)
        raise HTTPException(status_code=500, detail="Comparison failed") from exc

    return CompareResponse(
        success=True,
        comparison=[row.to_dict() for row in outcome.rows],
        recommendation=outcome.recommendation,
    )
