"""
Domain diversity: reject picks whose domain was shown in the last K picks, then resample.

Diversity is applied during selection (reject and redraw) rather than by
reordering afterwards. It is a soft constraint: after M attempts the last pick
is accepted anyway and the violation is reported.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from ..models.config import DEFAULT_CONFIG, DiscoveryConfig
from ..models.scoring import ScoredCandidate
from ..random_source import RandomSource
from .exploration import select

logger = logging.getLogger(__name__)


def accept(pick: ScoredCandidate, domain_window: Sequence[str], window_size: int = 3) -> bool:
    """True unless pick's domain appears among the last window_size entries of the window."""
    if window_size <= 0:
        return True
    recent = list(domain_window)[-window_size:]
    return pick.candidate.domain not in recent


@dataclass
class DiversifiedPick:
    """Outcome of the select/accept loop."""

    pick: ScoredCandidate
    attempts: int
    rejections: int
    violation: bool


def select_with_diversity(
    scored: Sequence[ScoredCandidate],
    wildness: float,
    rng: RandomSource,
    domain_window: Sequence[str],
    config: DiscoveryConfig = DEFAULT_CONFIG,
) -> DiversifiedPick:
    """
    Select, check the domain window, and redraw on rejection.

    A rejected pick leaves the eligible set together with every other candidate
    on the same domain, since accept() would reject those too. Stops after
    diversity_max_attempts draws or when the eligible set runs dry; the last
    drawn pick is then accepted as a violation.

    Args:
        scored: Non-empty list of scored candidates. Not mutated.
        wildness: Exploration dial value passed through to select().
        rng: Injected random source.
        domain_window: Recently shown domains, oldest first.
        config: Window size K and attempt budget M.

    Returns:
        DiversifiedPick with the accepted pick, draw count, and violation flag.
    """
    remaining: List[ScoredCandidate] = list(scored)
    window = list(domain_window)
    k = config.diversity_window_size
    attempts = 0
    rejections = 0
    last = None

    while remaining and attempts < config.diversity_max_attempts:
        last = select(remaining, wildness, rng, config)
        attempts += 1
        if accept(last, window, k):
            return DiversifiedPick(pick=last, attempts=attempts, rejections=rejections, violation=False)
        rejections += 1
        rejected_domain = last.candidate.domain
        remaining = [s for s in remaining if s.candidate.domain != rejected_domain]

    if last is None:
        # Only reachable with an empty input; select() raises the contract error
        last = select(remaining, wildness, rng, config)

    logger.warning(
        "[diversity] DIVERSITY_VIOLATION candidate_id=%s domain=%s attempts=%d window=%s",
        last.candidate.id, last.candidate.domain, attempts, window[-k:] if k else [],
    )
    return DiversifiedPick(pick=last, attempts=attempts, rejections=rejections, violation=True)
