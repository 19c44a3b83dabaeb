"""
Read-only creator repository contract plus an in-memory implementation.

The search and recommendation code only ever talks to ``CreatorRepository``;
storage backends translate ``CreatorPredicate`` and ``OrderKey`` into whatever
their engine understands.
"""
from __future__ import annotations

import abc
import os
from dataclasses import dataclass, field, replace
from typing import Any, Collection, Dict, Iterable, List, Optional, Sequence

import pandas as pd

from app.core.criteria import FraudStatus, Platform, Region


class RepositoryError(RuntimeError):
    """Raised when the backing store cannot answer a query."""


@dataclass
class CreatorRecord:
    """A single creator as stored by the enrichment pipeline."""

    id: str
    platform: Platform
    username: str
    display_name: str = ""
    followers: int = 0
    current_viewers: Optional[int] = None
    is_live: bool = False
    tags: List[str] = field(default_factory=list)
    current_game: Optional[str] = None
    top_games: List[str] = field(default_factory=list)
    region: Optional[Region] = None
    language: Optional[str] = None
    igaming_score: float = 0.0
    gambling_compatible: bool = False
    brand_safety_score: Optional[float] = None
    historical_conversions: int = 0
    historical_cpa: Optional[float] = None
    avg_roi: float = 0.0
    engagement_rate: float = 0.0
    fraud_check: FraudStatus = FraudStatus.CLEAN
    uses_camera: Optional[bool] = None
    is_vtuber: Optional[bool] = None
    inferred_category: Optional[str] = None
    avatar_url: Optional[str] = None
    profile_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "platform": self.platform.value,
            "username": self.username,
            "display_name": self.display_name,
            "followers": self.followers,
            "current_viewers": self.current_viewers,
            "is_live": self.is_live,
            "tags": list(self.tags),
            "current_game": self.current_game,
            "top_games": list(self.top_games),
            "region": self.region.value if self.region else None,
            "language": self.language,
            "igaming_score": self.igaming_score,
            "gambling_compatible": self.gambling_compatible,
            "brand_safety_score": self.brand_safety_score,
            "historical_conversions": self.historical_conversions,
            "historical_cpa": self.historical_cpa,
            "avg_roi": self.avg_roi,
            "engagement_rate": self.engagement_rate,
            "fraud_check": self.fraud_check.value,
            "uses_camera": self.uses_camera,
            "is_vtuber": self.is_vtuber,
            "inferred_category": self.inferred_category,
            "avatar_url": self.avatar_url,
            "profile_url": self.profile_url,
        }


@dataclass
class CreatorPredicate:
    """Conjunction of optional field filters; unset fields do not constrain."""

    ids: Optional[Collection[str]] = None
    username: Optional[str] = None
    platforms: List[Platform] = field(default_factory=list)
    regions: List[Region] = field(default_factory=list)
    min_followers: Optional[int] = None
    max_followers: Optional[int] = None
    min_viewers: Optional[int] = None
    max_viewers: Optional[int] = None
    is_live: Optional[bool] = None
    uses_camera: Optional[bool] = None
    is_vtuber: Optional[bool] = None
    language: Optional[str] = None
    fraud_statuses: List[FraudStatus] = field(default_factory=list)
    exclude_flagged: bool = True
    gambling_compatible: Optional[bool] = None
    min_igaming_score: Optional[float] = None

    def for_platform(self, platform: Platform) -> "CreatorPredicate":
        return replace(self, platforms=[platform])

    def matches(self, record: CreatorRecord) -> bool:
        if self.ids is not None and record.id not in self.ids:
            return False
        if self.username and record.username.lower() != self.username.lower():
            return False
        if self.platforms and record.platform not in self.platforms:
            return False
        if self.regions and record.region not in self.regions:
            return False
        if self.min_followers is not None and record.followers < self.min_followers:
            return False
        if self.max_followers is not None and record.followers > self.max_followers:
            return False
        if self.min_viewers is not None and (record.current_viewers is None or record.current_viewers < self.min_viewers):
            return False
        if self.max_viewers is not None and (record.current_viewers is None or record.current_viewers > self.max_viewers):
            return False
        if self.is_live is not None and record.is_live != self.is_live:
            return False
        if self.uses_camera is not None and record.uses_camera != self.uses_camera:
            return False
        if self.is_vtuber is not None and record.is_vtuber != self.is_vtuber:
            return False
        if self.language and (record.language or "").lower() != self.language.lower():
            return False
        if self.fraud_statuses:
            if record.fraud_check not in self.fraud_statuses:
                return False
        elif self.exclude_flagged and record.fraud_check == FraudStatus.FLAGGED:
            return False
        if self.gambling_compatible is not None and record.gambling_compatible != self.gambling_compatible:
            return False
        if self.min_igaming_score is not None and record.igaming_score < self.min_igaming_score:
            return False
        return True


@dataclass(frozen=True)
class OrderKey:
    field: str
    descending: bool = True


def sort_records(records: Iterable[CreatorRecord], order_by: Optional[Sequence[OrderKey]]) -> List[CreatorRecord]:
    """Stable multi-key sort; missing values always sort last."""
    ordered = list(records)
    for key in reversed(list(order_by or [])):
        present = [r for r in ordered if getattr(r, key.field) is not None]
        missing = [r for r in ordered if getattr(r, key.field) is None]
        present.sort(key=lambda r: getattr(r, key.field), reverse=key.descending)
        ordered = present + missing
    return ordered


class CreatorRepository(abc.ABC):
    """Read contract consumed by the search executor, mixer and recommender."""

    @abc.abstractmethod
    def find(
        self,
        predicate: CreatorPredicate,
        order_by: Optional[Sequence[OrderKey]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[CreatorRecord]:
        ...

    @abc.abstractmethod
    def count(self, predicate: CreatorPredicate) -> int:
        ...

    @abc.abstractmethod
    def find_favorites(self, user_id: str) -> List[CreatorRecord]:
        ...


# --- row conversion -------------------------------------------------------

def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and value != value:
        return True
    return isinstance(value, str) and value.strip().lower() in {"", "nan", "none", "null"}


def safe_int(value: Any, default: Optional[int] = 0) -> Optional[int]:
    if _is_missing(value):
        return default
    try:
        return int(float(value))
    except (ValueError, TypeError):
        return default


def safe_float(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    if _is_missing(value):
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def safe_str(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    return str(value)


def safe_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if _is_missing(value):
        return None
    text_value = str(value).strip().lower()
    if text_value in {'true', '1', 'yes', 'y'}:
        return True
    if text_value in {'false', '0', 'no', 'n'}:
        return False
    return None


def safe_list(value: Any) -> List[str]:
    """Accept lists, numpy arrays, or '|'/','-delimited strings."""
    if value is None:
        return []
    if isinstance(value, str):
        if _is_missing(value):
            return []
        separator = "|" if "|" in value else ","
        return [part.strip() for part in value.split(separator) if part.strip()]
    if isinstance(value, float):
        return []
    try:
        return [str(item) for item in list(value) if not _is_missing(item)]
    except TypeError:
        return []


def _safe_enum(enum_cls, value: Any, default=None):
    text_value = safe_str(value)
    if not text_value:
        return default
    try:
        return enum_cls(text_value.strip().upper().replace(" ", "_"))
    except ValueError:
        return default


def record_from_row(row: Any) -> CreatorRecord:
    """Convert a mapping or pandas row into a CreatorRecord, tolerating NaN and loose types."""
    platform = _safe_enum(Platform, row.get('platform'))
    if platform is None:
        raise ValueError(f"Unknown platform for creator row: {row.get('platform')!r}")

    username = safe_str(row.get('username') or row.get('account')) or ""
    return CreatorRecord(
        id=safe_str(row.get('id')) or f"{platform.value.lower()}:{username}",
        platform=platform,
        username=username,
        display_name=safe_str(row.get('display_name') or row.get('displayName')) or username,
        followers=safe_int(row.get('followers', 0)),
        current_viewers=safe_int(row.get('current_viewers', row.get('currentViewers')), None),
        is_live=bool(safe_bool(row.get('is_live', row.get('isLive')))),
        tags=safe_list(row.get('tags')),
        current_game=safe_str(row.get('current_game', row.get('currentGame'))),
        top_games=safe_list(row.get('top_games', row.get('topGames'))),
        region=_safe_enum(Region, row.get('region')),
        language=(safe_str(row.get('language')) or None),
        igaming_score=safe_float(row.get('igaming_score', row.get('igamingScore', 0.0))),
        gambling_compatible=bool(safe_bool(row.get('gambling_compatible', row.get('gamblingCompatibility')))),
        brand_safety_score=safe_float(row.get('brand_safety_score', row.get('brandSafetyScore')), None),
        historical_conversions=safe_int(row.get('historical_conversions', row.get('historicalConversions', 0))),
        historical_cpa=safe_float(row.get('historical_cpa', row.get('historicalCpa')), None),
        avg_roi=safe_float(row.get('avg_roi', row.get('avgRoi', 0.0))),
        engagement_rate=safe_float(row.get('engagement_rate', row.get('engagementRate', 0.0))),
        fraud_check=_safe_enum(FraudStatus, row.get('fraud_check', row.get('fraudCheck')), FraudStatus.CLEAN),
        uses_camera=safe_bool(row.get('uses_camera', row.get('usesCamera'))),
        is_vtuber=safe_bool(row.get('is_vtuber', row.get('isVtuber'))),
        inferred_category=safe_str(row.get('inferred_category', row.get('inferredCategory'))),
        avatar_url=safe_str(row.get('avatar_url', row.get('avatarUrl'))),
        profile_url=safe_str(row.get('profile_url', row.get('profileUrl'))),
    )


def read_dataset(path: str) -> pd.DataFrame:
    """Load a creator dataset from JSON, JSON-lines, CSV or Parquet."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Creator dataset not found at: {path}")

    lowered = path.lower()
    if lowered.endswith(".parquet"):
        return pd.read_parquet(path)
    if lowered.endswith(".csv"):
        return pd.read_csv(path)
    if lowered.endswith(".jsonl"):
        return pd.read_json(path, lines=True)
    return pd.read_json(path)


class InMemoryCreatorRepository(CreatorRepository):
    """Repository over a list of records held in process memory."""

    def __init__(
        self,
        records: Optional[Iterable[CreatorRecord]] = None,
        favorites: Optional[Dict[str, List[str]]] = None,
    ) -> None:
        self._records: List[CreatorRecord] = list(records or [])
        self._favorites: Dict[str, List[str]] = {k: list(v) for k, v in (favorites or {}).items()}

    @classmethod
    def from_dataframe(
        cls,
        dataframe: pd.DataFrame,
        favorites: Optional[Dict[str, List[str]]] = None,
    ) -> "InMemoryCreatorRepository":
        records = [record_from_row(row) for _, row in dataframe.iterrows()]
        return cls(records, favorites)

    @classmethod
    def load(cls, path: str) -> "InMemoryCreatorRepository":
        return cls.from_dataframe(read_dataset(path))

    def __len__(self) -> int:
        return len(self._records)

    def add_favorite(self, user_id: str, creator_id: str) -> None:
        favorites = self._favorites.setdefault(user_id, [])
        if creator_id not in favorites:
            favorites.append(creator_id)

    def find(
        self,
        predicate: CreatorPredicate,
        order_by: Optional[Sequence[OrderKey]] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[CreatorRecord]:
        matched = [record for record in self._records if predicate.matches(record)]
        ordered = sort_records(matched, order_by)
        start = max(0, offset)
        end = None if limit is None else start + max(0, limit)
        return ordered[start:end]

    def count(self, predicate: CreatorPredicate) -> int:
        return sum(1 for record in self._records if predicate.matches(record))

    def find_favorites(self, user_id: str) -> List[CreatorRecord]:
        wanted = self._favorites.get(user_id, [])
        by_id = {record.id: record for record in self._records}
        return [by_id[creator_id] for creator_id in wanted if creator_id in by_id]
