"""
Discovery selection engine: one surprising, relevant item per request.

Single entry point for the discovery package:
- models/: DiscoveryConfig, Candidate, UserContext, ScoredCandidate, SessionState, results
- stages/: candidate_pool, feature_scoring, exploration, diversity, session_tracker, orchestrator
- errors: NoContentAvailable and the locally-recovered error kinds
"""

from .errors import (
    DiscoveryError,
    EmptyCandidatePool,
    InvalidWildness,
    MalformedPreferences,
    NoContentAvailable,
    RetrievalTimeout,
)
from .models import (
    DEFAULT_CONFIG,
    Candidate,
    DiscoveryConfig,
    DiscoveryResult,
    EngineStats,
    ScoredCandidate,
    SessionState,
    TrendingSnapshot,
    UserContext,
    resolve_config,
)
from .random_source import RandomSource, default_random_source
from .stages import (
    CandidateRetriever,
    ContentStore,
    DiscoveryEngine,
    SessionRegistry,
    SessionStateTracker,
    accept,
    score_candidate,
    score_candidates,
    select,
    select_with_diversity,
    wildness_to_temperature,
)

__all__ = [
    "DEFAULT_CONFIG",
    "Candidate",
    "CandidateRetriever",
    "ContentStore",
    "DiscoveryConfig",
    "DiscoveryEngine",
    "DiscoveryError",
    "DiscoveryResult",
    "EmptyCandidatePool",
    "EngineStats",
    "InvalidWildness",
    "MalformedPreferences",
    "NoContentAvailable",
    "RandomSource",
    "RetrievalTimeout",
    "ScoredCandidate",
    "SessionRegistry",
    "SessionState",
    "SessionStateTracker",
    "TrendingSnapshot",
    "UserContext",
    "accept",
    "default_random_source",
    "resolve_config",
    "score_candidate",
    "score_candidates",
    "select",
    "select_with_diversity",
    "wildness_to_temperature",
]
