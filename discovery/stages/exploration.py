"""
Exploration controller: wildness-driven softmax selection over scored candidates.

wildness 0 is exact exploitation (max score, ties by id). Rising wildness raises
the softmax temperature until selection is near-uniform at the top of the dial.
The wildness -> temperature mapping is kept in its own function so its curve can
change without touching selection.
"""

from typing import List, Sequence

import numpy as np

from ..errors import EmptyCandidatePool
from ..models.config import DEFAULT_CONFIG, DiscoveryConfig
from ..models.scoring import ScoredCandidate
from ..random_source import RandomSource


def wildness_to_temperature(wildness: float, config: DiscoveryConfig = DEFAULT_CONFIG) -> float:
    """
    Map wildness in [wildness_min, wildness_max] to a softmax temperature in [0, temperature_max].

    linear:    tau = x * tau_max
    quadratic: tau = x**2 * tau_max
    where x is wildness rescaled to 0–1. Out-of-range input is clamped.
    """
    span = config.wildness_max - config.wildness_min
    x = (wildness - config.wildness_min) / span
    x = min(1.0, max(0.0, x))
    if config.temperature_curve == "quadratic":
        x = x * x
    return x * config.temperature_max


def rank_for_selection(scored: Sequence[ScoredCandidate]) -> List[ScoredCandidate]:
    """Score descending, exact ties broken by candidate id ascending."""
    return sorted(scored, key=lambda s: (-s.score, s.candidate.id))


def selection_probabilities(scored: Sequence[ScoredCandidate], temperature: float) -> np.ndarray:
    """
    Softmax p_i = exp(score_i / tau) / sum_j exp(score_j / tau), in the order given.

    tau <= 0 puts all mass on the first maximum-score entry.
    """
    scores = np.array([s.score for s in scored], dtype=float)
    if temperature <= 0.0:
        probs = np.zeros(len(scores))
        probs[int(np.argmax(scores))] = 1.0
        return probs
    logits = (scores - scores.max()) / temperature
    weights = np.exp(logits)
    return weights / weights.sum()


def select(
    scored: Sequence[ScoredCandidate],
    wildness: float,
    rng: RandomSource,
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> ScoredCandidate:
    """
    Pick one candidate.

    Candidates are ranked (score desc, id asc) before sampling so the draw is
    reproducible for a fixed pool and seeded rng. Raises EmptyCandidatePool on
    an empty list; callers must signal emptiness before reaching here.
    """
    if not scored:
        raise EmptyCandidatePool("select() requires at least one scored candidate")
    ranked = rank_for_selection(scored)
    temperature = wildness_to_temperature(wildness, config)
    if temperature <= 0.0 or len(ranked) == 1:
        return ranked[0]

    probs = selection_probabilities(ranked, temperature)
    cdf = np.cumsum(probs)
    u = float(rng.random())
    if not 0.0 <= u < 1.0:
        raise ValueError(f"random source returned {u!r}, expected a float in [0, 1)")
    idx = int(np.searchsorted(cdf, u * cdf[-1], side="right"))
    return ranked[min(idx, len(ranked) - 1)]
