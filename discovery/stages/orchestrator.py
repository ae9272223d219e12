"""
Pipeline orchestrator: one "next discovery" request end to end.

Session exclusions -> candidate retrieval -> feature scoring -> exploration
(with diversity resampling) -> record shown -> result.

The main entry point is DiscoveryEngine.select_next. It raises NoContentAvailable
when nothing is eligible; every other degraded path is absorbed, logged, and counted
in EngineStats.
"""

import logging
from typing import Iterable, Optional

from ..errors import NoContentAvailable, RetrievalTimeout
from ..models.config import DiscoveryConfig, resolve_config
from ..models.result import DiscoveryResult, EngineStats
from ..models.user import UserContext
from ..random_source import RandomSource, default_random_source
from .candidate_pool import CandidateRetriever, Retrieval
from .diversity import select_with_diversity
from .exploration import wildness_to_temperature
from .feature_scoring import score_candidates
from .reasons import explain_pick
from .session_tracker import SessionRegistry

logger = logging.getLogger(__name__)


class DiscoveryEngine:
    """Personalized discovery selection engine."""

    def __init__(
        self,
        retriever: CandidateRetriever,
        config: Optional[DiscoveryConfig] = None,
        rng: Optional[RandomSource] = None,
        sessions: Optional[SessionRegistry] = None,
    ):
        self.config = resolve_config(config)
        self.retriever = retriever
        self.rng = rng if rng is not None else default_random_source()
        self.sessions = sessions if sessions is not None else SessionRegistry(self.config)
        self.stats = EngineStats()

    def _count_preferences(self, user: UserContext) -> None:
        if user.wildness_clamped:
            self.stats.wildness_clamped += 1
        if user.preferences_malformed:
            self.stats.malformed_preferences += 1

    def _count_retrieval(self, retrieval: Retrieval) -> None:
        if retrieval.topic_relaxed:
            self.stats.topic_relaxations += 1
        if retrieval.trending_fallback:
            self.stats.trending_fallbacks += 1
        if retrieval.primary_failed:
            self.stats.retrieval_failures += 1
        self.stats.ineligible_rows_dropped += retrieval.dropped

    async def select_next(
        self,
        user: UserContext,
        session_id: str,
        extra_excluded_ids: Iterable[str] = (),
    ) -> DiscoveryResult:
        """
        Select the next discovery for user in session_id.

        extra_excluded_ids (e.g. permanently skipped content from the history service)
        are excluded for this request but not recorded into the session.

        Raises:
            NoContentAvailable: the eligible pool is empty after all fallbacks.
        """
        config = self.config
        self.stats.requests += 1
        if not config.wildness_min <= user.wildness <= config.wildness_max:
            user = user.with_wildness(user.wildness, config)
        self._count_preferences(user)
        tracker = self.sessions.get_or_create(user.user_id, session_id)

        async with tracker.lock:
            excluded = tracker.current_exclusions() | frozenset(extra_excluded_ids)
            window = tracker.current_domain_window()

            try:
                retrieval = await self.retriever.fetch(user, excluded, config.candidate_limit)
            except RetrievalTimeout as e:
                self.stats.retrieval_failures += 1
                self.stats.no_content += 1
                logger.error(
                    "[discovery] RETRIEVAL_TIMEOUT user_id=%s session_id=%s error=%s",
                    user.user_id, session_id, e,
                )
                raise NoContentAvailable(user.user_id, session_id, cause="retrieval_timeout") from e
            except NoContentAvailable as e:
                self.stats.no_content += 1
                logger.warning(
                    "[discovery] NO_CONTENT user_id=%s session_id=%s excluded=%d",
                    user.user_id, session_id, len(excluded),
                )
                raise NoContentAvailable(user.user_id, session_id, cause=e.cause) from e
            self._count_retrieval(retrieval)

            scored = score_candidates(retrieval.candidates, user, window, config)
            outcome = select_with_diversity(scored, user.wildness, self.rng, window, config)
            self.stats.diversity_rejections += outcome.rejections
            if outcome.violation:
                self.stats.diversity_violations += 1

            pick = outcome.pick
            # No await past this point: a cancelled request never records a pick
            tracker.record_shown(pick.candidate.id, pick.candidate.domain)
            self.stats.selections += 1

        result = DiscoveryResult(
            user_id=user.user_id,
            session_id=session_id,
            pick=pick,
            reason=explain_pick(pick, user, user.wildness),
            wildness=user.wildness,
            temperature=wildness_to_temperature(user.wildness, config),
            source=retrieval.source,
            pool_size=len(scored),
            attempts=outcome.attempts,
            diversity_violation=outcome.violation,
        )
        logger.info(
            "[discovery] SELECTED user_id=%s session_id=%s candidate_id=%s domain=%s "
            "wildness=%d pool=%d source=%s attempts=%d breakdown=%s",
            user.user_id, session_id, pick.candidate.id, pick.candidate.domain,
            user.wildness, len(scored), retrieval.source, outcome.attempts, pick.breakdown(),
        )
        return result

    def end_session(self, user_id: str, session_id: str):
        """Discard session state; returns the final SessionState or None."""
        return self.sessions.end(user_id, session_id)
