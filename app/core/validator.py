"""Sanitise interpreted criteria and settle the effective result limit."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from app.core.criteria import MAX_RESULT_LIMIT, Region, SearchCriteria, clamp_limit, normalize_tags
from app.core.query_interpreter import LATAM_PATTERN, extract_requested_count

logger = logging.getLogger(__name__)

NON_DEFAULT_LANGUAGE_PATTERN = re.compile(r"\benglish\b|\bportuguese\b")

LATAM_REGIONS: Sequence[Region] = (
    Region.MEXICO,
    Region.COLOMBIA,
    Region.ARGENTINA,
    Region.CHILE,
    Region.PERU,
)


@dataclass
class CriteriaValidator:
    default_language: str = "es"
    default_limit: int = MAX_RESULT_LIMIT

    def validate(self, criteria: Optional[SearchCriteria], original_text: str) -> SearchCriteria:
        """Return a cleaned copy of ``criteria`` ready for execution."""
        refined = replace(criteria) if criteria is not None else SearchCriteria()
        text = (original_text or "").lower()

        refined.tags = normalize_tags(refined.tags)

        if not refined.has_signal():
            if not NON_DEFAULT_LANGUAGE_PATTERN.search(text):
                refined.language = self.default_language
            if LATAM_PATTERN.search(text):
                refined.regions = list(LATAM_REGIONS)

        # An explicit count in the user's own words beats any limit set upstream.
        requested = extract_requested_count(original_text or "")
        if requested is not None:
            if refined.limit != requested:
                logger.info("Honouring requested count | query=%s count=%s", original_text, requested)
            refined.limit = requested
        elif refined.limit is None:
            refined.limit = self.default_limit

        refined.limit = clamp_limit(refined.limit)
        return refined
