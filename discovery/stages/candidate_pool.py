"""
Candidate retrieval: fetch a bounded, pre-filtered pool from the content store.

Exclusion (shown ids, blocked domains, active-only) is pushed into the store query.
Returned rows are validated one by one and re-checked against the same three rules,
so a single bad row is dropped without failing the fetch and the blocked-domain
invariant holds even if a store misbehaves.

Shortfall policy (fewer than min_viable_candidates):
1. Drop the preferred-topic narrowing and fetch again (never the domain/active rules).
2. Merge in the cached trending snapshot, filtered locally for this user.
3. Still empty: NoContentAvailable.

Both store queries share one fetch_timeout_seconds deadline. A timeout or error
goes straight to step 2, keeping anything already fetched; if that leaves nothing
and the trending snapshot is unavailable too, RetrievalTimeout is raised.

The public entry point is CandidateRetriever.fetch.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Protocol,
    Set,
    Tuple,
    Union,
)

from pydantic import ValidationError

from ..errors import NoContentAvailable, RetrievalTimeout
from ..models.candidate import Candidate
from ..models.config import DEFAULT_CONFIG, DiscoveryConfig
from ..models.result import RetrievalSource
from ..models.trending import TrendingSnapshot
from ..models.user import UserContext

logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    """
    Storage collaborator query contract.

    Returns active candidates whose id is not in excluded_ids and whose domain is
    not in blocked_domains, quality descending, at most limit rows. When topics is
    given, only candidates sharing at least one of them.
    """

    async def fetch_candidates_async(
        self,
        excluded_ids: FrozenSet[str],
        blocked_domains: FrozenSet[str],
        limit: int,
        topics: Optional[FrozenSet[str]] = None,
    ) -> List[Union[Dict[str, Any], Candidate]]:
        ...


TrendingSupplier = Callable[[], Optional[TrendingSnapshot]]


@dataclass
class Retrieval:
    """A retrieved pool plus which path produced it."""

    candidates: List[Candidate]
    source: RetrievalSource
    topic_relaxed: bool = False
    trending_fallback: bool = False
    primary_failed: bool = False
    dropped: int = 0


def _is_eligible(candidate: Candidate, user: UserContext, excluded_ids: Set[str]) -> bool:
    return (
        candidate.active
        and candidate.domain not in user.blocked_domains
        and candidate.id not in excluded_ids
    )


def _enforce_eligibility(
    candidates: Iterable[Candidate],
    user: UserContext,
    excluded_ids: Set[str],
) -> Tuple[List[Candidate], int]:
    """Keep only active, unblocked, unexcluded candidates; returns (kept, dropped_count)."""
    kept, dropped = [], 0
    for c in candidates:
        if _is_eligible(c, user, excluded_ids):
            kept.append(c)
        else:
            dropped += 1
    return kept, dropped


def _sort_and_cap(
    candidates: List[Candidate],
    config: DiscoveryConfig,
    limit: int,
) -> List[Candidate]:
    """Quality descending (id breaks ties), at most max_candidates_per_domain per domain, up to limit."""
    ordered = sorted(candidates, key=lambda c: (-c.quality, c.id))
    per_domain: Dict[str, int] = {}
    out: List[Candidate] = []
    for c in ordered:
        count = per_domain.get(c.domain, 0)
        if count >= config.max_candidates_per_domain:
            continue
        per_domain[c.domain] = count + 1
        out.append(c)
        if len(out) >= limit:
            break
    return out


def _merge_unique(*pools: Iterable[Candidate]) -> List[Candidate]:
    seen: Set[str] = set()
    out: List[Candidate] = []
    for pool in pools:
        for c in pool:
            if c.id not in seen:
                seen.add(c.id)
                out.append(c)
    return out


def _coerce_rows(rows: Iterable[Any], user_id: str) -> Tuple[List[Candidate], int]:
    """Validate store rows one at a time; rows that fail validation are dropped and counted."""
    kept: List[Candidate] = []
    invalid = 0
    for row in rows:
        if isinstance(row, Candidate):
            kept.append(row)
            continue
        try:
            kept.append(Candidate.model_validate(row))
        except ValidationError as e:
            invalid += 1
            row_id = row.get("id") if isinstance(row, dict) else None
            logger.warning(
                "[retrieval] INVALID_ROW_DROPPED user_id=%s row_id=%r errors=%d",
                user_id, row_id, e.error_count(),
            )
    return kept, invalid


class CandidateRetriever:
    """Fetches the per-request candidate pool with timeout and fallback handling."""

    def __init__(
        self,
        store: Any,
        trending: Optional[TrendingSupplier] = None,
        config: DiscoveryConfig = DEFAULT_CONFIG,
    ):
        if not hasattr(store, "fetch_candidates_async") and not hasattr(store, "fetch_candidates"):
            raise TypeError("store must provide fetch_candidates_async (or sync fetch_candidates)")
        self._store = store
        self._trending = trending or (lambda: None)
        self._config = config

    async def _query_store(
        self,
        user: UserContext,
        excluded_ids: FrozenSet[str],
        limit: int,
        topics: Optional[FrozenSet[str]],
        deadline: float,
    ) -> Tuple[List[Candidate], int]:
        """
        One store query bounded by the request-wide deadline (loop time).

        Returns (eligible candidates, rows dropped as invalid or ineligible).
        """
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            raise asyncio.TimeoutError()
        blocked = user.blocked_domains
        if hasattr(self._store, "fetch_candidates_async"):
            call = self._store.fetch_candidates_async(excluded_ids, blocked, limit, topics)
        else:
            call = asyncio.to_thread(self._store.fetch_candidates, excluded_ids, blocked, limit, topics)
        rows = await asyncio.wait_for(call, timeout=remaining)
        candidates, invalid = _coerce_rows(list(rows or []), user.user_id)
        eligible, ineligible = _enforce_eligibility(candidates, user, excluded_ids)
        return eligible, invalid + ineligible

    def _log_fetch_failure(self, event: str, user: UserContext, error: BaseException) -> None:
        if isinstance(error, asyncio.TimeoutError):
            logger.warning(
                "[retrieval] %s user_id=%s timeout=%.2fs",
                event, user.user_id, self._config.fetch_timeout_seconds,
            )
        else:
            logger.warning(
                "[retrieval] %s user_id=%s error=%s: %s",
                event, user.user_id, type(error).__name__, error,
            )

    def _trending_candidates(
        self,
        user: UserContext,
        excluded_ids: Set[str],
    ) -> Optional[List[Candidate]]:
        """Eligible trending items for this user, or None when the snapshot is unavailable."""
        try:
            snapshot = self._trending()
        except Exception as e:
            logger.warning("[retrieval] TRENDING_SNAPSHOT_ERROR user_id=%s error=%s", user.user_id, e)
            return None
        if snapshot is None:
            return None
        eligible, _ = _enforce_eligibility(snapshot.candidates, user, excluded_ids)
        return eligible[: self._config.trending_fallback_limit]

    async def fetch(
        self,
        user: UserContext,
        excluded_ids: Iterable[str],
        limit: Optional[int] = None,
    ) -> Retrieval:
        """
        Return the eligible pool for this request, quality descending.

        The narrowed and relaxed store queries share one fetch_timeout_seconds
        deadline. A failed relaxation keeps whatever the narrowed query returned.

        Raises:
            NoContentAvailable: every path came back empty.
            RetrievalTimeout: the store yielded nothing because of a timeout or
                error, and no trending snapshot is available.
        """
        config = self._config
        limit = limit or config.candidate_limit
        excluded = frozenset(excluded_ids)
        topics = (
            user.preferred_topics
            if config.topic_prefilter_enabled and user.preferred_topics
            else None
        )
        deadline = asyncio.get_running_loop().time() + config.fetch_timeout_seconds

        result = Retrieval(candidates=[], source="primary")
        pool: List[Candidate] = []
        try:
            pool, dropped = await self._query_store(user, excluded, limit, topics, deadline)
            result.dropped += dropped
        except Exception as e:
            self._log_fetch_failure(
                "PRIMARY_FETCH_TIMEOUT" if isinstance(e, asyncio.TimeoutError) else "PRIMARY_FETCH_ERROR",
                user, e,
            )
            result.primary_failed = True

        if not result.primary_failed and topics is not None and len(pool) < config.min_viable_candidates:
            logger.warning(
                "[retrieval] TOPIC_FILTER_RELAXED user_id=%s narrowed=%d min=%d",
                user.user_id, len(pool), config.min_viable_candidates,
            )
            result.topic_relaxed = True
            try:
                relaxed, dropped = await self._query_store(user, excluded, limit, None, deadline)
            except Exception as e:
                self._log_fetch_failure("TOPIC_RELAX_FAILED", user, e)
                result.primary_failed = True
            else:
                result.dropped += dropped
                pool = _merge_unique(pool, relaxed)
                result.source = "relaxed"

        if result.dropped:
            logger.warning(
                "[retrieval] INELIGIBLE_ROWS_DROPPED user_id=%s dropped=%d",
                user.user_id, result.dropped,
            )

        if result.primary_failed or len(pool) < config.min_viable_candidates:
            trending = self._trending_candidates(user, excluded)
            if trending is None:
                if result.primary_failed and not pool:
                    raise RetrievalTimeout(
                        f"primary fetch failed and no trending snapshot for user={user.user_id!r}"
                    )
            else:
                logger.warning(
                    "[retrieval] TRENDING_FALLBACK user_id=%s primary=%d trending=%d primary_failed=%s",
                    user.user_id, len(pool), len(trending), result.primary_failed,
                )
                pool = _merge_unique(pool, trending)
                result.trending_fallback = True
                result.source = "trending"

        if not pool:
            raise NoContentAvailable(user.user_id, cause="exhausted")

        result.candidates = _sort_and_cap(pool, config, limit)
        return result
