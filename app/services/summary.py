"""Template summaries for search result pages."""
from __future__ import annotations

import re
from collections import Counter
from typing import Dict, List, Optional, Sequence

from app.core.comparison import ComparisonRow
from app.core.criteria import Region, SearchCriteria
from app.core.repository import CreatorRecord

GAMBLING_TAGS = frozenset({"casino", "slots", "gambling", "betting", "poker"})

REGION_DEMONYMS: Dict[str, str] = {
    "BRAZIL": "Brazilian",
    "MEXICO": "Mexican",
    "ARGENTINA": "Argentinian",
    "COLOMBIA": "Colombian",
    "CHILE": "Chilean",
    "PERU": "Peruvian",
    "VENEZUELA": "Venezuelan",
    "ECUADOR": "Ecuadorian",
    "PARAGUAY": "Paraguayan",
    "URUGUAY": "Uruguayan",
}

CAMPAIGN_TYPES = (
    ("casino/betting", re.compile(r"betting|casino|slots|gambling|poker", re.IGNORECASE)),
    ("gaming", re.compile(r"gaming|game|esports", re.IGNORECASE)),
    ("music", re.compile(r"music", re.IGNORECASE)),
    ("lifestyle", re.compile(r"irl|lifestyle", re.IGNORECASE)),
)


def format_followers(count: Optional[int]) -> str:
    """Compact follower label: 1.2M, 12.3K or the raw number."""
    value = int(count or 0)
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return str(value)


def _short_reach(value: int) -> str:
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    return f"{value // 1_000}K"


def detect_campaign_type(query: str, tags: Sequence[str]) -> str:
    if any(tag in GAMBLING_TAGS for tag in tags):
        return "casino/betting"
    for label, pattern in CAMPAIGN_TYPES:
        if pattern.search(query or ""):
            return label
    return ""


def summarize_results(
    query: str,
    criteria: Optional[SearchCriteria],
    creators: Sequence[CreatorRecord],
    count: Optional[int] = None,
) -> str:
    count = len(creators) if count is None else count
    if count == 0:
        return "No creators found matching your criteria. Try broadening your search."

    tags = list(criteria.tags) if criteria else []
    regions = [region.value for region in criteria.regions] if criteria else []
    has_gambling_tags = any(tag in GAMBLING_TAGS for tag in tags)

    campaign_type = detect_campaign_type(query, tags)
    noun = "creator" if count == 1 else "creators"
    summary = " ".join(part for part in ("Found", str(count), campaign_type, noun) if part)
    if regions:
        summary += " from " + ", ".join(REGION_DEMONYMS.get(region, region) for region in regions)
    summary += "."

    insights: List[str] = []
    top = creators[0] if creators else None
    if top is not None:
        reach = _short_reach(top.followers) if top.followers >= 1000 else str(top.followers)
        insights.append(f"Top: {top.display_name or top.username} ({reach} followers)")

    live_count = sum(1 for creator in creators if creator.is_live)
    if live_count:
        insights.append(f"{live_count} currently live")

    if creators:
        average = sum(creator.followers for creator in creators) // len(creators)
        if average >= 10_000:
            insights.append(f"avg {_short_reach(average)} followers")

    platforms = Counter(creator.platform.value for creator in creators)
    if len(platforms) > 1:
        insights.append(", ".join(f"{total} {platform.lower()}" for platform, total in platforms.items()))

    if not has_gambling_tags:
        tag_counts = Counter(tag for creator in creators for tag in creator.tags)
        top_tags = [tag for tag, _ in tag_counts.most_common(3)]
        if top_tags:
            insights.append("top tags: " + ", ".join(top_tags))

    if insights:
        summary += " " + " • ".join(insights) + "."
    return summary


def summarize_trending(creators: Sequence[CreatorRecord], region: Optional[Region] = None) -> str:
    where = f" in {region.value.replace('_', ' ').title()}" if region else ""
    if not creators:
        return f"No creators are live{where} right now."

    top = creators[0]
    noun = "creator" if len(creators) == 1 else "creators"
    summary = (
        f"{len(creators)} {noun} live{where}. Top: {top.display_name or top.username} with "
        f"{top.current_viewers or 0} viewers ({format_followers(top.followers)} followers)."
    )
    games = Counter(creator.current_game for creator in creators if creator.current_game)
    if games:
        summary += " Most streamed: " + ", ".join(game for game, _ in games.most_common(3)) + "."
    return summary


def recommend_from_comparison(rows: Sequence[ComparisonRow]) -> str:
    fallback = "All creators show strong potential. Consider your campaign goals and target audience."
    if not rows:
        return fallback

    engaged = max(rows, key=lambda row: row.engagement_rate)
    widest = max(rows, key=lambda row: row.followers)
    if engaged.engagement_rate <= 0:
        return f"{widest.name} offers the widest reach ({format_followers(widest.followers)} followers). {fallback}"

    text = f"{engaged.name} has the strongest live engagement ({engaged.engagement_rate:.2f}% of followers watching)."
    if widest.id != engaged.id:
        text += f" {widest.name} offers the widest reach ({format_followers(widest.followers)} followers)."
    return text
