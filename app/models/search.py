"""Search-related Pydantic models for the creator search API."""
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field

from app.core.criteria import MAX_RESULT_LIMIT, SearchCriteria


class CriteriaModel(BaseModel):
    """Structured filters a client may pin alongside a free-text query."""

    platforms: List[str] = Field(default_factory=list, description="TWITCH, YOUTUBE, KICK, FACEBOOK, TIKTOK")
    regions: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    min_followers: Optional[int] = Field(default=None, ge=0)
    max_followers: Optional[int] = Field(default=None, ge=0)
    min_viewers: Optional[int] = Field(default=None, ge=0)
    max_viewers: Optional[int] = Field(default=None, ge=0)

    is_live: Optional[bool] = Field(default=None)
    uses_camera: Optional[bool] = Field(default=None)
    is_vtuber: Optional[bool] = Field(default=None)
    fraud_statuses: List[str] = Field(default_factory=list)
    language: Optional[str] = Field(default=None, max_length=8)
    limit: Optional[int] = Field(default=None, ge=1, le=MAX_RESULT_LIMIT)

    def to_criteria(self) -> SearchCriteria:
        if (
            self.min_followers is not None
            and self.max_followers is not None
            and self.min_followers > self.max_followers
        ):
            raise ValueError("min_followers cannot exceed max_followers")
        if (
            self.min_viewers is not None
            and self.max_viewers is not None
            and self.min_viewers > self.max_viewers
        ):
            raise ValueError("min_viewers cannot exceed max_viewers")
        return SearchCriteria.from_dict(self.model_dump(exclude_none=True))


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Free-text creator brief")
    preset_criteria: Optional[CriteriaModel] = Field(
        default=None, description="Known filters; values found in the query take precedence"
    )
    page: Optional[int] = Field(default=None, ge=1)


class InterpretRequest(BaseModel):
    query: str = Field(..., min_length=1)
    previous_criteria: Optional[CriteriaModel] = Field(default=None)


class SearchResponse(BaseModel):
    success: bool
    creators: List[Dict[str, Any]]
    total_count: int
    page: int
    total_pages: int
    has_more: bool
    criteria: Dict[str, Any]
    summary: str
    processing_time_ms: int


class InterpretResponse(BaseModel):
    success: bool
    criteria: Dict[str, Any]


class UsernameSearchResponse(BaseModel):
    success: bool
    result: Dict[str, Any]


class TrendingResponse(BaseModel):
    success: bool
    creators: List[Dict[str, Any]]
    insights: str


class SimilarCreatorsResponse(BaseModel):
    success: bool
    creator: Dict[str, Any]
    similar: List[Dict[str, Any]]


class CompareRequest(BaseModel):
    usernames: List[str] = Field(..., min_length=2, max_length=10, description="Creators to compare")


class CompareResponse(BaseModel):
    success: bool
    comparison: List[Dict[str, Any]]
    recommendation: str
