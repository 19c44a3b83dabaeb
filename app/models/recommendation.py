"""Recommendation request/response models."""
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field

from app.core.criteria import CampaignCriteria


class RecommendationRequest(BaseModel):
    vertical: Optional[str] = Field(default=None, description="Campaign vertical, e.g. igaming")
    region: Optional[str] = Field(default=None)
    budget: Optional[float] = Field(default=None, gt=0)
    min_vertical_fit: Optional[float] = Field(default=None, ge=0, le=100)
    require_gambling_compatible: bool = Field(default=False)
    platforms: List[str] = Field(default_factory=list)
    total_count: int = Field(default=20, ge=1, le=200)
    user_id: Optional[str] = Field(default=None)

    def to_criteria(self) -> CampaignCriteria:
        return CampaignCriteria(
            vertical=self.vertical,
            region=self.region,
            budget=self.budget,
            min_vertical_fit=self.min_vertical_fit,
            require_gambling_compatible=self.require_gambling_compatible,
            platforms=list(self.platforms),
            total_count=self.total_count,
        )


class QuickRecommendationRequest(BaseModel):
    vertical: str = Field(..., min_length=1)
    region: Optional[str] = Field(default=None)
    count: int = Field(default=10, ge=1, le=100)


class RecommendationResponse(BaseModel):
    success: bool
    results: List[Dict[str, Any]]
    count: int
