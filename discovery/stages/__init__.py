"""Pipeline stages: retrieval, scoring, exploration, diversity, session tracking, orchestration."""

from .candidate_pool import CandidateRetriever, ContentStore, Retrieval
from .diversity import DiversifiedPick, accept, select_with_diversity
from .exploration import rank_for_selection, select, selection_probabilities, wildness_to_temperature
from .feature_scoring import novelty, score_candidate, score_candidates, topic_affinity
from .orchestrator import DiscoveryEngine
from .reasons import explain_pick
from .session_tracker import SessionRegistry, SessionStateTracker

__all__ = [
    "CandidateRetriever",
    "ContentStore",
    "DiscoveryEngine",
    "DiversifiedPick",
    "Retrieval",
    "SessionRegistry",
    "SessionStateTracker",
    "accept",
    "explain_pick",
    "novelty",
    "rank_for_selection",
    "score_candidate",
    "score_candidates",
    "select",
    "select_with_diversity",
    "selection_probabilities",
    "topic_affinity",
    "wildness_to_temperature",
]
