"""Search and campaign criteria shared by the interpreter, executor and recommender."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

MAX_RESULT_LIMIT = 10000
MIN_RESULT_LIMIT = 1


class Platform(str, Enum):
    TWITCH = "TWITCH"
    YOUTUBE = "YOUTUBE"
    KICK = "KICK"
    FACEBOOK = "FACEBOOK"
    TIKTOK = "TIKTOK"


class Region(str, Enum):
    MEXICO = "MEXICO"
    COLOMBIA = "COLOMBIA"
    ARGENTINA = "ARGENTINA"
    CHILE = "CHILE"
    PERU = "PERU"
    VENEZUELA = "VENEZUELA"
    ECUADOR = "ECUADOR"
    BOLIVIA = "BOLIVIA"
    PARAGUAY = "PARAGUAY"
    URUGUAY = "URUGUAY"
    COSTA_RICA = "COSTA_RICA"
    PANAMA = "PANAMA"
    GUATEMALA = "GUATEMALA"
    EL_SALVADOR = "EL_SALVADOR"
    HONDURAS = "HONDURAS"
    NICARAGUA = "NICARAGUA"
    DOMINICAN_REPUBLIC = "DOMINICAN_REPUBLIC"
    PUERTO_RICO = "PUERTO_RICO"
    BRAZIL = "BRAZIL"


class FraudStatus(str, Enum):
    CLEAN = "CLEAN"
    SUSPICIOUS = "SUSPICIOUS"
    FLAGGED = "FLAGGED"
    PENDING_REVIEW = "PENDING_REVIEW"


def _coerce_enum_list(enum_cls, values: Optional[Iterable[Any]]) -> List[Any]:
    """Convert loose strings to enum members, silently dropping unknown values."""
    if not values:
        return []
    if isinstance(values, (str, Enum)):
        values = [values]
    members: List[Any] = []
    for value in values:
        if isinstance(value, enum_cls):
            member = value
        else:
            key = str(value).strip().upper().replace(" ", "_")
            try:
                member = enum_cls(key)
            except ValueError:
                continue
        if member not in members:
            members.append(member)
    return members


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Lowercase, trim and de-duplicate tags while preserving first-seen order."""
    normalized: List[str] = []
    for tag in tags or []:
        value = " ".join(str(tag).split()).lower()
        if value and value not in normalized:
            normalized.append(value)
    return normalized


def clamp_limit(limit: Optional[int]) -> Optional[int]:
    if limit is None:
        return None
    return max(MIN_RESULT_LIMIT, min(MAX_RESULT_LIMIT, int(limit)))


@dataclass
class SearchCriteria:
    """Structured creator filter produced from a free-text brief."""

    platforms: List[Platform] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    min_followers: Optional[int] = None
    max_followers: Optional[int] = None
    min_viewers: Optional[int] = None
    max_viewers: Optional[int] = None
    is_live: Optional[bool] = None
    uses_camera: Optional[bool] = None
    is_vtuber: Optional[bool] = None
    fraud_statuses: List[FraudStatus] = field(default_factory=list)
    language: Optional[str] = None
    limit: Optional[int] = None
    page: int = 1

    def __post_init__(self) -> None:
        self.platforms = _coerce_enum_list(Platform, self.platforms)
        self.regions = _coerce_enum_list(Region, self.regions)
        self.fraud_statuses = _coerce_enum_list(FraudStatus, self.fraud_statuses)
        self.tags = normalize_tags(self.tags)
        self.limit = clamp_limit(self.limit)
        self.page = max(1, int(self.page or 1))

    def has_signal(self) -> bool:
        """True when any platform/region/tag/follower/live/language signal is present."""
        return bool(
            self.platforms
            or self.regions
            or self.tags
            or self.min_followers
            or self.is_live
            or self.language
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "platforms": [p.value for p in self.platforms],
            "regions": [r.value for r in self.regions],
            "tags": list(self.tags),
            "min_followers": self.min_followers,
            "max_followers": self.max_followers,
            "min_viewers": self.min_viewers,
            "max_viewers": self.max_viewers,
            "is_live": self.is_live,
            "uses_camera": self.uses_camera,
            "is_vtuber": self.is_vtuber,
            "fraud_statuses": [s.value for s in self.fraud_statuses],
            "language": self.language,
            "limit": self.limit,
            "page": self.page,
        }

    @classmethod
    def from_dict(cls, payload: Optional[Dict[str, Any]]) -> "SearchCriteria":
        """Build criteria from API or LLM payloads, accepting camelCase keys too."""
        if not payload:
            return cls()

        aliases = {
            "minFollowers": "min_followers",
            "maxFollowers": "max_followers",
            "minViewers": "min_viewers",
            "maxViewers": "max_viewers",
            "isLive": "is_live",
            "usesCamera": "uses_camera",
            "isVtuber": "is_vtuber",
            "fraudStatus": "fraud_statuses",
            "fraud_status": "fraud_statuses",
        }
        known = {f.name for f in fields(cls)}
        data: Dict[str, Any] = {}
        for key, value in payload.items():
            name = aliases.get(key, key)
            if name in known and value is not None:
                data[name] = value

        for numeric in ("min_followers", "max_followers", "min_viewers", "max_viewers", "limit"):
            if numeric in data:
                try:
                    data[numeric] = int(float(data[numeric]))
                except (TypeError, ValueError):
                    data.pop(numeric)
        if "page" in data:
            try:
                data["page"] = int(data["page"])
            except (TypeError, ValueError):
                data.pop("page")
        if "language" in data:
            data["language"] = str(data["language"]).strip().lower() or None
        if "tags" in data and isinstance(data["tags"], str):
            data["tags"] = [data["tags"]]
        return cls(**data)


def merge_criteria(previous: Optional[SearchCriteria], fresh: Optional[SearchCriteria]) -> SearchCriteria:
    """Overlay ``fresh`` on ``previous`` field by field; empty fresh values keep the previous ones."""
    if previous is None:
        return replace(fresh) if fresh is not None else SearchCriteria()
    if fresh is None:
        return replace(previous)

    updates: Dict[str, Any] = {}
    for f in fields(SearchCriteria):
        if f.name == "page":
            continue
        value = getattr(fresh, f.name)
        if isinstance(value, list):
            if value:
                updates[f.name] = list(value)
        elif value is not None:
            updates[f.name] = value

    merged = replace(previous, **updates)
    if fresh.page != 1:
        merged.page = fresh.page
    return merged


@dataclass
class CampaignCriteria:
    """What a campaign asks of the recommender."""

    vertical: Optional[str] = None
    region: Optional[Region] = None
    budget: Optional[float] = None
    min_vertical_fit: Optional[float] = None
    require_gambling_compatible: bool = False
    platforms: List[Platform] = field(default_factory=list)
    total_count: int = 20

    def __post_init__(self) -> None:
        if self.region is not None:
            regions = _coerce_enum_list(Region, [self.region])
            self.region = regions[0] if regions else None
        self.platforms = _coerce_enum_list(Platform, self.platforms)
        if self.vertical:
            self.vertical = self.vertical.strip().lower() or None
        self.total_count = max(1, int(self.total_count or 20))

    @property
    def is_vertical_restricted(self) -> bool:
        return self.vertical == "igaming" or self.require_gambling_compatible
