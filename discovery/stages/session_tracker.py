"""
Session state tracking: shown-set and domain window per (user, session).

Each tracker carries its own asyncio.Lock; the orchestrator holds it across
read-exclusions -> select -> record_shown so overlapping requests for one session
serialize. Trackers for different users never share state or locks.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from ..models.config import DEFAULT_CONFIG, DiscoveryConfig
from ..models.session import SessionState

logger = logging.getLogger(__name__)


class SessionStateTracker:
    """Append-only shown-set plus a FIFO window of the last K shown domains."""

    def __init__(self, state: SessionState):
        self._state = state
        self.lock = asyncio.Lock()

    @classmethod
    def start(cls, user_id: str, session_id: str, window_size: int = 3) -> "SessionStateTracker":
        return cls(
            SessionState(
                user_id=user_id,
                session_id=session_id,
                window_size=window_size,
                created_at=datetime.now(timezone.utc).isoformat(),
            )
        )

    @property
    def user_id(self) -> str:
        return self._state.user_id

    @property
    def session_id(self) -> str:
        return self._state.session_id

    def record_shown(self, candidate_id: str, domain: str) -> None:
        """Add the id to the shown-set and push the domain, evicting the oldest beyond K."""
        self._state.shown_ids.add(candidate_id)
        window = self._state.recent_domains
        window.append(domain)
        overflow = len(window) - self._state.window_size
        if overflow > 0:
            del window[:overflow]

    def current_exclusions(self) -> FrozenSet[str]:
        return frozenset(self._state.shown_ids)

    def current_domain_window(self) -> List[str]:
        """Last K shown domains, oldest first."""
        return list(self._state.recent_domains)

    def snapshot(self) -> SessionState:
        """Deep copy of the state, e.g. for an archiving collaborator."""
        return self._state.model_copy(deep=True)


class SessionRegistry:
    """
    In-process map of (user_id, session_id) -> tracker.

    Sessions idle for longer than session_idle_ttl_seconds are evicted on the
    next registry access. A tracker whose lock is held is never evicted.
    """

    def __init__(
        self,
        config: DiscoveryConfig = DEFAULT_CONFIG,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = config
        self._clock = clock
        self._trackers: Dict[Tuple[str, str], SessionStateTracker] = {}
        self._last_seen: Dict[Tuple[str, str], float] = {}

    def _evict_idle(self, now: float) -> None:
        ttl = self._config.session_idle_ttl_seconds
        expired = [
            key
            for key, seen in self._last_seen.items()
            if now - seen > ttl and not self._trackers[key].lock.locked()
        ]
        for key in expired:
            tracker = self._trackers.pop(key)
            del self._last_seen[key]
            logger.info(
                "[sessions] SESSION_EXPIRED user_id=%s session_id=%s shown=%d",
                key[0], key[1], len(tracker.current_exclusions()),
            )

    def get_or_create(self, user_id: str, session_id: str) -> SessionStateTracker:
        now = self._clock()
        self._evict_idle(now)
        key = (user_id, session_id)
        tracker = self._trackers.get(key)
        if tracker is None:
            tracker = SessionStateTracker.start(user_id, session_id, self._config.diversity_window_size)
            self._trackers[key] = tracker
            logger.info("[sessions] SESSION_STARTED user_id=%s session_id=%s", user_id, session_id)
        self._last_seen[key] = now
        return tracker

    def get(self, user_id: str, session_id: str) -> Optional[SessionStateTracker]:
        self._evict_idle(self._clock())
        return self._trackers.get((user_id, session_id))

    def end(self, user_id: str, session_id: str) -> Optional[SessionState]:
        """Discard a session; returns its final state, or None if unknown."""
        self._evict_idle(self._clock())
        key = (user_id, session_id)
        tracker = self._trackers.pop(key, None)
        if tracker is None:
            return None
        del self._last_seen[key]
        logger.info(
            "[sessions] SESSION_ENDED user_id=%s session_id=%s shown=%d",
            user_id, session_id, len(tracker.current_exclusions()),
        )
        return tracker.snapshot()

    def __len__(self) -> int:
        return len(self._trackers)
