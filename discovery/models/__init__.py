"""Data models for the discovery engine."""

from .candidate import Candidate, ensure_candidates, normalize_domain, normalize_domains
from .config import DEFAULT_CONFIG, DiscoveryConfig, resolve_config
from .result import DiscoveryResult, EngineStats, RetrievalSource
from .scoring import ScoredCandidate
from .session import SessionState
from .trending import TrendingSnapshot
from .user import UserContext, clamp_wildness

__all__ = [
    "Candidate",
    "DEFAULT_CONFIG",
    "DiscoveryConfig",
    "DiscoveryResult",
    "EngineStats",
    "RetrievalSource",
    "ScoredCandidate",
    "SessionState",
    "TrendingSnapshot",
    "UserContext",
    "clamp_wildness",
    "ensure_candidates",
    "normalize_domain",
    "normalize_domains",
    "resolve_config",
]
