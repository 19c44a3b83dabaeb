"""Campaign recommendation endpoints."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_recommendation_service
from app.models.recommendation import (
    RecommendationRequest,
    QuickRecommendationRequest,
    RecommendationResponse,
)

router = APIRouter()

logger = logging.getLogger("recommendation_api")
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[RecommendationAPI] %(asctime)s %(levelname)s: %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)


@router.post("/", response_model=RecommendationResponse)
async def recommend_creators(request: RecommendationRequest, service=Depends(get_recommendation_service)):
    logger.info(
        "Recommendation request | vertical=%s region=%s total=%s user=%s",
        request.vertical,
        request.region,
        request.total_count,
        request.user_id,
    )

    try:
        results = service.recommend(request.to_criteria(), user_id=request.user_id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Recommendation failed: %s", exc)
        raise HTTPException(status_code=500, detail="Recommendation failed") from exc

    payload = [item.to_dict() for item in results]
    return RecommendationResponse(success=True, results=payload, count=len(payload))


@router.post("/quick", response_model=RecommendationResponse)
async def quick_recommendations(request: QuickRecommendationRequest, service=Depends(get_recommendation_service)):
    logger.info("Quick recommendations | vertical=%s region=%s count=%s", request.vertical, request.region, request.count)

    try:
        results = service.quick_recommendations(request.vertical, region=request.region, count=request.count)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Quick recommendations failed: %s", exc)
        raise HTTPException(status_code=500, detail="Recommendation failed") from exc

    payload = [item.to_dict() for item in results]
    return RecommendationResponse(success=True, results=payload, count=len(payload))
