"""
Engine outputs: DiscoveryResult for a successful pick, EngineStats for degraded-path counters.
"""

from typing import Dict, Literal

from pydantic import BaseModel

from .scoring import ScoredCandidate

RetrievalSource = Literal["primary", "relaxed", "trending"]


class DiscoveryResult(BaseModel):
    """The pick returned for one 'next discovery' request."""

    user_id: str
    session_id: str
    pick: ScoredCandidate
    reason: str
    wildness: int
    temperature: float
    source: RetrievalSource
    pool_size: int
    attempts: int
    diversity_violation: bool = False

    @property
    def candidate_id(self) -> str:
        return self.pick.candidate.id

    def breakdown(self) -> Dict[str, float]:
        return self.pick.breakdown()


class EngineStats(BaseModel):
    """Counters for selections and degraded paths, for operators and tests."""

    requests: int = 0
    selections: int = 0
    no_content: int = 0
    topic_relaxations: int = 0
    trending_fallbacks: int = 0
    retrieval_failures: int = 0
    ineligible_rows_dropped: int = 0
    diversity_rejections: int = 0
    diversity_violations: int = 0
    wildness_clamped: int = 0
    malformed_preferences: int = 0
