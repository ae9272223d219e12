"""
Feature scoring: composite relevance per candidate.

score = w1 * topic_affinity + w2 * quality + w3 * trending + w4 * novelty,
all four signals normalized to 0–1. Deterministic: no randomness here.
"""

from collections import Counter
from typing import List, Sequence

from ..models.candidate import Candidate
from ..models.config import DEFAULT_CONFIG, DiscoveryConfig
from ..models.scoring import ScoredCandidate
from ..models.user import UserContext


def topic_affinity(candidate: Candidate, user: UserContext, cold_start_value: float = 0.5) -> float:
    """
    |candidate.topics ∩ user.preferred_topics| / max(|candidate.topics|, 1).

    Cold start (no preferred topics): the same neutral value for every candidate.
    """
    if not user.preferred_topics:
        return cold_start_value
    overlap = len(candidate.topics & user.preferred_topics)
    return overlap / max(len(candidate.topics), 1)


def novelty(domain: str, domain_window: Sequence[str]) -> float:
    """1 - share of the recent domain window taken by this domain; 1.0 for an empty window."""
    if not domain_window:
        return 1.0
    appearances = Counter(domain_window)[domain]
    return 1.0 - appearances / len(domain_window)


def _clip(value: float) -> float:
    return min(1.0, max(0.0, value))


def score_candidate(
    candidate: Candidate,
    user: UserContext,
    domain_window: Sequence[str] = (),
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> ScoredCandidate:
    """Compute the four signals for one candidate and blend them with the configured weights."""
    affinity = topic_affinity(candidate, user, config.cold_start_topic_affinity)
    quality = _clip(candidate.quality)
    trending = _clip(candidate.trending)
    novel = novelty(candidate.domain, domain_window)
    final = (
        config.weight_topic_affinity * affinity
        + config.weight_quality * quality
        + config.weight_trending * trending
        + config.weight_novelty * novel
    )
    return ScoredCandidate(
        candidate=candidate,
        topic_affinity=affinity,
        quality_signal=quality,
        trending_signal=trending,
        novelty_signal=novel,
        score=final,
    )


def score_candidates(
    candidates: List[Candidate],
    user: UserContext,
    domain_window: Sequence[str] = (),
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> List[ScoredCandidate]:
    """Score every candidate; input order is preserved."""
    window = list(domain_window)
    return [score_candidate(c, user, window, config) for c in candidates]
