"""
Scoring model: ScoredCandidate, the per-request composite score with its breakdown.

ScoredCandidate values live for one request only and are never cached.
"""

from typing import Dict

from pydantic import BaseModel

from .candidate import Candidate


class ScoredCandidate(BaseModel):
    """A candidate with all its scoring components."""

    candidate: Candidate
    topic_affinity: float
    quality_signal: float
    trending_signal: float
    novelty_signal: float
    score: float

    @property
    def id(self) -> str:
        return self.candidate.id

    @property
    def domain(self) -> str:
        return self.candidate.domain

    def breakdown(self, digits: int = 4) -> Dict[str, float]:
        """Per-factor signals plus the composite, rounded for logging and responses."""
        return {
            "topic_affinity": round(self.topic_affinity, digits),
            "quality": round(self.quality_signal, digits),
            "trending": round(self.trending_signal, digits),
            "novelty": round(self.novelty_signal, digits),
            "score": round(self.score, digits),
        }
