"""Service that orchestrates interpret → validate → execute → summarise for creator search."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from app.core.comparison import ComparisonRow, comparison_metrics
from app.core.conversational import ConversationalParser, ConversationalParserError
from app.core.criteria import Platform, Region, SearchCriteria, merge_criteria
from app.core.query_interpreter import QueryInterpreter
from app.core.repository import CreatorRecord
from app.core.search_engine import DEFAULT_SIMILAR_LIMIT, DEFAULT_TRENDING_LIMIT, CreatorSearchEngine, SearchPage
from app.core.validator import CriteriaValidator
from app.services.summary import recommend_from_comparison, summarize_results, summarize_trending

logger = logging.getLogger(__name__)

ProgressCallback = Optional[Callable[[str, Dict[str, object]], None]]


class SearchExecutionError(RuntimeError):
    """Raised when the primary search path fails (distinct from an empty result)."""


class CreatorNotFoundError(LookupError):
    """Raised when a named creator is not in the repository."""


@dataclass
class SearchOutcome:
    page: SearchPage
    criteria: SearchCriteria
    summary: str = ""
    processing_time_ms: int = 0
    interpreted_by: str = "heuristic"


@dataclass
class TrendingOutcome:
    creators: List[CreatorRecord]
    insights: str = ""


@dataclass
class ComparisonOutcome:
    rows: List[ComparisonRow]
    recommendation: str = ""


class CreatorSearchService:
    """Turn a free-text brief into a page of creators in clearly defined stages."""

    def __init__(
        self,
        engine: CreatorSearchEngine,
        interpreter: QueryInterpreter,
        validator: CriteriaValidator,
        parser: Optional[ConversationalParser] = None,
    ) -> None:
        self._engine = engine
        self._interpreter = interpreter
        self._validator = validator
        self._parser = parser

    def _fresh_criteria(self, query: str, context: Optional[SearchCriteria]) -> Tuple[SearchCriteria, str]:
        if self._parser is not None:
            try:
                return self._parser.parse(query, context), "conversational"
            except ConversationalParserError as exc:
                logger.warning("Conversational parser failed, using heuristics: %s", exc)
        return self._interpreter.interpret(query), "heuristic"

    def interpret(self, query: str, previous: Optional[SearchCriteria] = None) -> SearchCriteria:
        """Interpret and validate without touching the repository."""
        criteria, _ = self._interpret(query, previous)
        return criteria

    def _interpret(self, query: str, previous: Optional[SearchCriteria]) -> Tuple[SearchCriteria, str]:
        fresh, source = self._fresh_criteria(query or "", previous)
        merged = merge_criteria(previous, fresh)
        return self._validator.validate(merged, query or ""), source

    def search(
        self,
        query: str,
        preset_criteria: Optional[SearchCriteria] = None,
        page: Optional[int] = None,
        *,
        progress_cb: ProgressCallback = None,
    ) -> SearchOutcome:
        """Execute the search and emit progress events."""

        def emit(stage: str, data: Dict[str, object]) -> None:
            if progress_cb:
                progress_cb(stage, data)

        started = time.perf_counter()
        criteria, source = self._interpret(query, preset_criteria)
        if page is not None:
            criteria = replace(criteria, page=max(1, int(page)))
        logger.info("Final criteria | query=%s source=%s criteria=%s", query, source, criteria.to_dict())
        emit("interpret_completed", {"criteria": criteria.to_dict(), "source": source})

        try:
            result = self._engine.execute(criteria)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Creator search failed for query %r: %s", query, exc)
            raise SearchExecutionError("Failed to search creators") from exc

        emit(
            "search_completed",
            {
                "count": len(result.creators),
                "total_count": result.total_count,
                "page": result.page,
            },
        )

        summary = summarize_results(query, criteria, result.creators, count=result.total_count)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return SearchOutcome(
            page=result,
            criteria=criteria,
            summary=summary,
            processing_time_ms=elapsed_ms,
            interpreted_by=source,
        )

    def get_creator_by_username(self, username: str, platform: Optional[Platform] = None) -> Optional[CreatorRecord]:
        return self._engine.get_creator_by_username(username, platform)

    def _require_creator(self, username: str) -> CreatorRecord:
        creator = self._engine.get_creator_by_username(username)
        if creator is None:
            raise CreatorNotFoundError(f"Creator '@{username.strip().lstrip('@')}' not found")
        return creator

    def trending(self, region: Optional[Region] = None, limit: int = DEFAULT_TRENDING_LIMIT) -> TrendingOutcome:
        creators = self._engine.trending(region, limit)
        return TrendingOutcome(creators=creators, insights=summarize_trending(creators, region))

    def find_similar(self, username: str, limit: int = DEFAULT_SIMILAR_LIMIT) -> Tuple[CreatorRecord, List[CreatorRecord]]:
        """Resolve the creator by username, then return it with its look-alikes."""
        creator = self._require_creator(username)
        return creator, self._engine.find_similar(creator, limit)

    def compare(self, usernames: Sequence[str]) -> ComparisonOutcome:
        seen: Dict[str, CreatorRecord] = {}
        for username in usernames:
            creator = self._require_creator(username)
            seen.setdefault(creator.id, creator)
        rows = comparison_metrics(list(seen.values()))
        logger.info("Comparison built | creators=%s", [row.name for row in rows])
        return ComparisonOutcome(rows=rows, recommendation=recommend_from_comparison(rows))
