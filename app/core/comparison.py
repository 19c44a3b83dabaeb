"""Side-by-side metrics for a shortlist of creators."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from app.core.repository import CreatorRecord


@dataclass
class ComparisonRow:
    id: str
    name: str
    platform: str
    followers: int
    avg_viewers: int
    engagement_rate: float
    tags: List[str] = field(default_factory=list)
    region: Optional[str] = None
    is_live: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "platform": self.platform,
            "followers": self.followers,
            "avg_viewers": self.avg_viewers,
            "engagement_rate": self.engagement_rate,
            "tags": list(self.tags),
            "region": self.region,
            "is_live": self.is_live,
        }


def engagement_rate(creator: CreatorRecord) -> float:
    """Current viewers as a percentage of followers, two decimals; 0 when either is missing."""
    if not creator.current_viewers or not creator.followers:
        return 0.0
    return round(creator.current_viewers / creator.followers * 100, 2)


def comparison_metrics(creators: Sequence[CreatorRecord]) -> List[ComparisonRow]:
    return [
        ComparisonRow(
            id=creator.id,
            name=creator.display_name or creator.username,
            platform=creator.platform.value,
            followers=creator.followers,
            avg_viewers=creator.current_viewers or 0,
            engagement_rate=engagement_rate(creator),
            tags=list(creator.tags),
            region=creator.region.value if creator.region else None,
            is_live=creator.is_live,
        )
        for creator in creators
    ]
