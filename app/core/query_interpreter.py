"""
Heuristic translator from a free-text marketing brief to SearchCriteria.

Each signal (platform, region, follower threshold, result count, ...) is read
by small independent matchers. Where a signal has several candidate patterns
they are evaluated in priority order and the first hit wins.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Pattern, Sequence, Tuple

from app.core.criteria import (
    MAX_RESULT_LIMIT,
    MIN_RESULT_LIMIT,
    Platform,
    Region,
    SearchCriteria,
    merge_criteria,
)
from app.core.taxonomy import BrandTaxonomyResolver

logger = logging.getLogger(__name__)

# Abbreviations only count as whole words ("yt" must not fire inside "anything").
PLATFORM_ABBREVIATIONS = frozenset({"yt", "fb gaming"})

PLATFORM_VOCABULARY: Sequence[Tuple[Platform, Tuple[str, ...]]] = (
    (Platform.TWITCH, ("twitch",)),
    (Platform.YOUTUBE, ("youtube", "yt")),
    (Platform.KICK, ("kick",)),
    (Platform.FACEBOOK, ("facebook", "fb gaming")),
    (Platform.TIKTOK, ("tiktok",)),
)

REGION_VOCABULARY: Dict[str, Region] = {
    "mexico": Region.MEXICO, "mexican": Region.MEXICO, "mx": Region.MEXICO,
    "colombia": Region.COLOMBIA, "colombian": Region.COLOMBIA, "co": Region.COLOMBIA,
    "argentina": Region.ARGENTINA, "argentinian": Region.ARGENTINA, "argentine": Region.ARGENTINA,
    "ar": Region.ARGENTINA,
    "chile": Region.CHILE, "chilean": Region.CHILE, "cl": Region.CHILE,
    "peru": Region.PERU, "peruvian": Region.PERU, "pe": Region.PERU,
    "venezuela": Region.VENEZUELA, "venezuelan": Region.VENEZUELA, "ve": Region.VENEZUELA,
    "ecuador": Region.ECUADOR, "ecuadorian": Region.ECUADOR, "ec": Region.ECUADOR,
    "bolivia": Region.BOLIVIA, "bolivian": Region.BOLIVIA, "bo": Region.BOLIVIA,
    "paraguay": Region.PARAGUAY, "paraguayan": Region.PARAGUAY, "py": Region.PARAGUAY,
    "uruguay": Region.URUGUAY, "uruguayan": Region.URUGUAY, "uy": Region.URUGUAY,
    "costa rica": Region.COSTA_RICA, "costarrican": Region.COSTA_RICA, "cr": Region.COSTA_RICA,
    "panama": Region.PANAMA, "panamanian": Region.PANAMA, "pa": Region.PANAMA,
    "guatemala": Region.GUATEMALA, "guatemalan": Region.GUATEMALA, "gt": Region.GUATEMALA,
    "el salvador": Region.EL_SALVADOR, "salvadoran": Region.EL_SALVADOR, "sv": Region.EL_SALVADOR,
    "honduras": Region.HONDURAS, "honduran": Region.HONDURAS, "hn": Region.HONDURAS,
    "nicaragua": Region.NICARAGUA, "nicaraguan": Region.NICARAGUA, "ni": Region.NICARAGUA,
    "dominican republic": Region.DOMINICAN_REPUBLIC, "dominican": Region.DOMINICAN_REPUBLIC,
    "do": Region.DOMINICAN_REPUBLIC,
    "puerto rico": Region.PUERTO_RICO, "puertorican": Region.PUERTO_RICO, "pr": Region.PUERTO_RICO,
    "brazil": Region.BRAZIL, "brazilian": Region.BRAZIL, "br": Region.BRAZIL,
}

STOP_WORDS = frozenset({
    "the", "and", "for", "with", "who", "play", "stream", "streamer", "streamers", "playing",
    "that", "have", "has", "want", "need", "looking", "search", "find", "show", "give", "me",
    "i", "a", "an", "in", "on", "at", "to", "from", "of", "is", "are", "was", "were", "be",
    "been", "being", "across",
})

FILTER_WORDS = frozenset({
    "twitch", "youtube", "kick", "facebook", "tiktok", "live", "followers", "viewers", "latam",
    "million", "thousand", "over", "more", "than", "less", "campaign", "promotion", "brand",
    "ads", "advertising", "sponsorship", "influencers", "creators", "content", "now",
    "currently", "streaming", "gaming",
})

_PUNCTUATION = ".,!?;:\"'()[]{}"
_ROMAN_NUMERAL = re.compile(r"^[ivx]+$", re.IGNORECASE)
_COUNT_TOKEN = re.compile(r"^\d+$|^\d+[km]$", re.IGNORECASE)

Matcher = Callable[[str], Optional[int]]


def _compile_phrase(key: str) -> Pattern[str]:
    body = r"\s+".join(re.escape(part) for part in key.split())
    return re.compile(rf"\b{body}\b", re.IGNORECASE)


_REGION_PATTERNS: List[Tuple[Pattern[str], Region]] = [
    (_compile_phrase(key), region) for key, region in REGION_VOCABULARY.items()
]

LATAM_PATTERN = re.compile(r"\blatam\b|\blatin\s+america\b|\blatinoam[eé]rica\b")

_ABBREVIATION_PATTERNS: Dict[str, Pattern[str]] = {name: _compile_phrase(name) for name in PLATFORM_ABBREVIATIONS}

# Spans removed before a query is reduced to its subject phrase; longest first so
# "dominican republic" goes before "dominican".
_VOCABULARY_SPANS: List[Pattern[str]] = [LATAM_PATTERN] + [
    _compile_phrase(key)
    for key in sorted(
        set(REGION_VOCABULARY) | {name for _, names in PLATFORM_VOCABULARY for name in names},
        key=len,
        reverse=True,
    )
]

_SUFFIX_MULTIPLIERS = {"k": 1_000, "thousand": 1_000, "m": 1_000_000, "million": 1_000_000}


def _scaled(pattern: str, multiplier: int) -> Matcher:
    regex = re.compile(pattern, re.IGNORECASE)

    def match(text: str) -> Optional[int]:
        found = regex.search(text)
        if not found:
            return None
        number = next(group for group in found.groups() if group is not None)
        return int(round(float(number) * multiplier))

    return match


def _with_suffix(pattern: str) -> Matcher:
    regex = re.compile(pattern, re.IGNORECASE)

    def match(text: str) -> Optional[int]:
        found = regex.search(text)
        if not found:
            return None
        number, suffix = found.group(1), found.group(2).lower()
        return int(round(float(number) * _SUFFIX_MULTIPLIERS[suffix]))

    return match


FOLLOWER_MATCHERS: Sequence[Matcher] = (
    _scaled(r"(\d+(?:\.\d+)?)\s*million|(\d+(?:\.\d+)?)m\b", 1_000_000),
    _scaled(r"(\d+(?:\.\d+)?)\s*thousand|(\d+(?:\.\d+)?)k\b", 1_000),
    _scaled(r"(\d+)\+", 1),
    _with_suffix(r"over\s+(\d+(?:\.\d+)?)\s*(k|m|thousand|million)\b"),
    _with_suffix(r"more\s+than\s+(\d+(?:\.\d+)?)\s*(k|m|thousand|million)\b"),
)

_CREATOR_NOUNS = r"(?:streamers|influencers|creators|twitch\s+streamers|youtube\s+streamers)"
# Up to three descriptive words may sit between the number and the noun ("7 casino streamers").
_QUALIFIERS = r"(?:(?!(?:followers|viewers|subscribers|subs|million|thousand|k|m)\b)[a-z][a-z\-]*\s+){0,3}?"

COUNT_PATTERNS: Sequence[Pattern[str]] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        rf"\bi\s+need\s+(\d+)\s+{_QUALIFIERS}{_CREATOR_NOUNS}",
        rf"\b(?:show|find|get|give)\s+me\s+(\d+)\s+{_QUALIFIERS}{_CREATOR_NOUNS}",
        rf"\b(?:top|best)\s+(\d+)\s+{_QUALIFIERS}{_CREATOR_NOUNS}",
        rf"\b(\d+)\s+{_QUALIFIERS}{_CREATOR_NOUNS}",
        r"\b(?:find|search|list)\s+(\d+)\s+(?:streamers|influencers|creators)",
        r"\b(\d+)\s+(?:of|from)\s+(?:the\s+)?(?:top|best)",
        r"\bfirst\s+(\d+)",
        r"\b(\d+)\s+results",
        r"\bwant\s+(\d+)\s+(?:streamers|influencers|creators)",
        r"\blooking\s+for\s+(\d+)\s+(?:streamers|influencers|creators)",
    )
)

LIVE_PATTERN = re.compile(r"\blive\b|\blive now\b|\bstreaming now\b|\bcurrently streaming\b|\bon air\b")
VTUBER_PATTERN = re.compile(r"\bvtuber\b|\bvirtual\b|\banime\b|\bavatar\b")
CAMERA_PATTERN = re.compile(r"\bcamera\b|\bfacecam\b|\bwebcam\b|\bface cam\b")
LANGUAGE_PATTERNS: Sequence[Tuple[str, Pattern[str]]] = (
    ("es", re.compile(r"\bes\b|\bspanish\b|\bespañol\b")),
    ("pt", re.compile(r"\bpt\b|\bportuguese\b|\bportuguês\b")),
    ("en", re.compile(r"\ben\b|\benglish\b|\binglés\b")),
)


def first_match(matchers: Sequence[Matcher], text: str) -> Optional[int]:
    """Run matchers in priority order and return the first non-None value."""
    for matcher in matchers:
        value = matcher(text)
        if value is not None:
            return value
    return None


def extract_requested_count(text: str) -> Optional[int]:
    """Return an explicit "give me N creators" count, or None.

    Captures outside [1, 10000] are skipped and the next pattern is tried.
    """
    lowered = (text or "").lower()
    for pattern in COUNT_PATTERNS:
        found = pattern.search(lowered)
        if not found:
            continue
        count = int(found.group(1))
        if MIN_RESULT_LIMIT <= count <= MAX_RESULT_LIMIT:
            logger.debug("Count pattern matched | pattern=%s count=%s", pattern.pattern, count)
            return count
        logger.warning("Requested count %s outside %s-%s; ignoring", count, MIN_RESULT_LIMIT, MAX_RESULT_LIMIT)
    return None


def _mentions_platform(name: str, lowered: str) -> bool:
    if name in _ABBREVIATION_PATTERNS:
        return bool(_ABBREVIATION_PATTERNS[name].search(lowered))
    return name in lowered


def detect_platforms(text: str) -> List[Platform]:
    lowered = (text or "").lower()
    return [
        platform for platform, names in PLATFORM_VOCABULARY if any(_mentions_platform(name, lowered) for name in names)
    ]


def detect_regions(text: str) -> List[Region]:
    lowered = (text or "").lower()
    regions: List[Region] = []
    for pattern, region in _REGION_PATTERNS:
        if region not in regions and pattern.search(lowered):
            regions.append(region)
    return regions


def detect_min_followers(text: str) -> Optional[int]:
    return first_match(FOLLOWER_MATCHERS, (text or "").lower())


def detect_language(text: str) -> Optional[str]:
    lowered = (text or "").lower()
    for code, pattern in LANGUAGE_PATTERNS:
        if pattern.search(lowered):
            return code
    return None


def _flag(pattern: Pattern[str], text: str) -> Optional[bool]:
    return True if pattern.search((text or "").lower()) else None


def extract_phrase(text: str) -> Optional[str]:
    """Collapse the non-vocabulary words of the query into one multi-word tag."""
    stripped = (text or "").lower()
    for pattern in _VOCABULARY_SPANS:
        stripped = pattern.sub(" ", stripped)

    words: List[str] = []
    for raw in stripped.split():
        word = raw.strip(_PUNCTUATION)
        if not word or word in STOP_WORDS or word in FILTER_WORDS:
            continue
        if _COUNT_TOKEN.match(word):
            continue
        if len(word) == 1 and not _ROMAN_NUMERAL.match(word):
            continue
        if word in REGION_VOCABULARY:
            continue
        words.append(word)
    return " ".join(words) if words else None


@dataclass
class QueryInterpreter:
    """Turns query text into SearchCriteria without ever raising."""

    taxonomy: BrandTaxonomyResolver

    def interpret(self, text: Optional[str], previous: Optional[SearchCriteria] = None) -> SearchCriteria:
        try:
            criteria = self._interpret(text or "")
        except Exception:  # pylint: disable=broad-except
            logger.exception("Heuristic interpretation failed; returning empty criteria")
            criteria = SearchCriteria()

        if previous is not None:
            criteria = merge_criteria(previous, criteria)
        return criteria

    def _interpret(self, text: str) -> SearchCriteria:
        lowered = text.lower()

        tags: List[str] = []
        phrase = extract_phrase(lowered)
        if phrase:
            tags.append(phrase)
        tags = self.taxonomy.expand_keywords(lowered, tags)
        tags = self.taxonomy.expand_brands(lowered, tags)

        criteria = SearchCriteria(
            platforms=detect_platforms(lowered),
            regions=detect_regions(lowered),
            tags=tags,
            min_followers=detect_min_followers(lowered),
            is_live=_flag(LIVE_PATTERN, lowered),
            uses_camera=_flag(CAMERA_PATTERN, lowered),
            is_vtuber=_flag(VTUBER_PATTERN, lowered),
            language=detect_language(lowered),
            limit=extract_requested_count(text),
        )
        logger.info("Heuristic criteria | query=%s criteria=%s", text, criteria.to_dict())
        return criteria
