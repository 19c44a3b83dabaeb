"""
Execute validated creator criteria against a repository.
Handles predicate construction, tag matching, intent-based ordering, pagination and platform mixing.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from app.core.criteria import Platform, Region, SearchCriteria
from app.core.platform_mixer import PlatformMixer
from app.core.repository import CreatorPredicate, CreatorRecord, CreatorRepository, OrderKey

logger = logging.getLogger(__name__)

DEFAULT_TAG_MATCH_ROW_CAP = 50000
MIN_WORD_LENGTH = 3
DEFAULT_TRENDING_LIMIT = 10
DEFAULT_SIMILAR_LIMIT = 5

LIVE_ORDERING = (OrderKey("current_viewers"), OrderKey("followers"))
FOLLOWER_ORDERING = (OrderKey("followers"), OrderKey("is_live"), OrderKey("current_viewers"))
DEFAULT_ORDERING = (OrderKey("followers"), OrderKey("is_live"), OrderKey("current_viewers"))
TIE_BREAKER = OrderKey("username", descending=False)


@dataclass
class SearchPage:
    """One page of creators plus pagination bookkeeping"""
    creators: List[CreatorRecord] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    total_pages: int = 0
    has_more: bool = False


def build_predicate(criteria: SearchCriteria) -> CreatorPredicate:
    """Map every set criteria field onto a repository predicate (tags excluded)."""
    predicate = CreatorPredicate(
        platforms=list(criteria.platforms),
        regions=list(criteria.regions),
        min_followers=criteria.min_followers,
        max_followers=criteria.max_followers,
        uses_camera=criteria.uses_camera,
        is_vtuber=criteria.is_vtuber,
        language=criteria.language,
        fraud_statuses=list(criteria.fraud_statuses),
    )

    # Viewer counts only exist while a creator is live.
    if criteria.min_viewers is not None or criteria.max_viewers is not None:
        predicate.is_live = True
        predicate.min_viewers = criteria.min_viewers
        predicate.max_viewers = criteria.max_viewers

    if criteria.is_live is not None:
        predicate.is_live = criteria.is_live
    return predicate


def determine_ordering(criteria: SearchCriteria) -> List[OrderKey]:
    if criteria.is_live:
        keys = LIVE_ORDERING
    elif criteria.min_followers:
        keys = FOLLOWER_ORDERING
    else:
        keys = DEFAULT_ORDERING
    return list(keys) + [TIE_BREAKER]


def _content_fields(record: CreatorRecord) -> List[str]:
    values: List[str] = []
    if record.current_game:
        values.append(record.current_game.lower())
    values.extend(game.lower() for game in record.top_games)
    values.extend(tag.lower() for tag in record.tags)
    return values


def matches_tag(record: CreatorRecord, phrase: str) -> bool:
    """Exact field equality, then any significant word, then whole-phrase containment."""
    term = phrase.lower().strip()
    if not term:
        return False
    content = _content_fields(record)

    if term in content:
        return True

    words = [word for word in term.split() if len(word) >= MIN_WORD_LENGTH]
    if len(words) > 1 and any(word in value for word in words for value in content):
        return True

    return any(term in value for value in content)


def matches_any_tag(record: CreatorRecord, phrases: Iterable[str]) -> bool:
    return any(matches_tag(record, phrase) for phrase in phrases)


class CreatorSearchEngine:
    """Run validated criteria against the creator repository"""

    def __init__(
        self,
        repository: CreatorRepository,
        mixer: Optional[PlatformMixer] = None,
        tag_match_row_cap: int = DEFAULT_TAG_MATCH_ROW_CAP,
    ):
        self.repository = repository
        self.mixer = mixer or PlatformMixer(repository)
        self.tag_match_row_cap = tag_match_row_cap

    def _resolve_tag_matches(self, predicate: CreatorPredicate, tags: Sequence[str]) -> List[str]:
        candidates = self.repository.find(predicate, limit=self.tag_match_row_cap)
        matched = [record.id for record in candidates if matches_any_tag(record, tags)]
        logger.info(
            "Tag matching complete | tags=%s candidates=%s matched=%s",
            list(tags),
            len(candidates),
            len(matched),
        )
        return matched

    def execute(self, criteria: SearchCriteria) -> SearchPage:
        """Return the requested page; zero tag matches yields an empty page, not an unfiltered one."""
        page = max(1, criteria.page or 1)
        limit = criteria.limit or 1
        predicate = build_predicate(criteria)

        if criteria.tags:
            matched_ids = self._resolve_tag_matches(predicate, criteria.tags)
            if not matched_ids:
                logger.warning("No creators matched tags %s", criteria.tags)
                return SearchPage(creators=[], total_count=0, page=page, total_pages=0, has_more=False)
            predicate.ids = set(matched_ids)

        order_by = determine_ordering(criteria)
        offset = (page - 1) * limit
        total_count = self.repository.count(predicate)

        if criteria.platforms:
            creators = self.repository.find(predicate, order_by=order_by, limit=limit, offset=offset)
        else:
            creators = self.mixer.fetch(predicate, order_by, limit, offset)

        total_pages = math.ceil(total_count / limit) if total_count else 0
        result = SearchPage(
            creators=creators,
            total_count=total_count,
            page=page,
            total_pages=total_pages,
            has_more=page < total_pages,
        )
        logger.info(
            "Search executed | count=%s total=%s page=%s/%s has_more=%s",
            len(creators),
            total_count,
            page,
            total_pages,
            result.has_more,
        )
        return result

    def get_creator_by_username(self, username: str, platform: Optional[Platform] = None) -> Optional[CreatorRecord]:
        """Fetch a single creator profile by username."""
        if not username:
            return None

        normalized = username.strip().lstrip('@')
        if not normalized:
            return None

        predicate = CreatorPredicate(username=normalized, exclude_flagged=False)
        if platform is not None:
            predicate.platforms = [platform]
        matches = self.repository.find(predicate, order_by=[OrderKey("followers"), TIE_BREAKER], limit=1)
        return matches[0] if matches else None

    def trending(self, region: Optional[Region] = None, limit: int = DEFAULT_TRENDING_LIMIT) -> List[CreatorRecord]:
        """Live creators ranked by current viewers, then followers; flagged accounts excluded."""
        predicate = CreatorPredicate(is_live=True)
        if region is not None:
            predicate.regions = [region]
        creators = self.repository.find(predicate, order_by=list(LIVE_ORDERING) + [TIE_BREAKER], limit=max(1, limit))
        logger.info("Trending lookup | region=%s count=%s", region.value if region else None, len(creators))
        return creators

    def find_similar(self, creator: CreatorRecord, limit: int = DEFAULT_SIMILAR_LIMIT) -> List[CreatorRecord]:
        """Creators on the same platform and region sharing a tag, with 0.5x to 2x the followers."""
        wanted = {tag.lower() for tag in creator.tags}
        if not wanted:
            return []

        predicate = CreatorPredicate(
            platforms=[creator.platform],
            min_followers=math.ceil(creator.followers * 0.5),
            max_followers=creator.followers * 2,
        )
        if creator.region is not None:
            predicate.regions = [creator.region]

        candidates = self.repository.find(
            predicate,
            order_by=[OrderKey("followers"), TIE_BREAKER],
            limit=self.tag_match_row_cap,
        )
        similar = [
            candidate
            for candidate in candidates
            if candidate.id != creator.id and wanted.intersection(tag.lower() for tag in candidate.tags)
        ]
        logger.info(
            "Similar lookup | creator=%s candidates=%s matched=%s",
            creator.username,
            len(candidates),
            len(similar),
        )
        return similar[: max(1, limit)]
