"""
Human-readable reason for a pick, derived from its score breakdown.

Used by the response to tell the user why this item surfaced.
"""

from typing import List

from ..models.scoring import ScoredCandidate
from ..models.user import UserContext

HIGH_QUALITY = 0.8
TRENDING = 0.6
HIGH_WILDNESS = 70


def matching_topics(pick: ScoredCandidate, user: UserContext, limit: int = 2) -> List[str]:
    """Topics shared between the pick and the user, alphabetical, at most limit."""
    return sorted(pick.candidate.topics & user.preferred_topics)[:limit]


def explain_pick(pick: ScoredCandidate, user: UserContext, wildness: int) -> str:
    """
    One-line reason, first matching rule wins.

    Rules in priority order: trending + topic match, quality + topic match,
    topic match, wild pick with no topic match, high quality, trending, cold start.
    """
    topics = matching_topics(pick, user)
    is_quality = pick.quality_signal > HIGH_QUALITY
    is_trending = pick.trending_signal > TRENDING
    wild = wildness > HIGH_WILDNESS

    if topics and is_trending:
        return f"Trending {topics[0]} content people are loving"
    if topics and is_quality:
        return f"Quality {topics[0]} content curated for you"
    if topics:
        return f"Based on your interest in {' and '.join(topics)}"
    if wild and not user.cold_start:
        return "Serendipitous discovery - time to explore something new!"
    if is_quality:
        return "Curated high-quality content"
    if is_trending:
        return "Trending right now"
    if wild:
        return "Wild discovery based on your exploration settings"
    if user.cold_start:
        return "A fresh pick to help learn what you like"
    return "Recommended content to discover"
