"""Shared fixtures: candidate/scored builders, seeded random sources, stores, and engines."""

import asyncio
from typing import Dict, List, Optional

import numpy as np
import pytest

from discovery import (
    Candidate,
    CandidateRetriever,
    DiscoveryConfig,
    DiscoveryEngine,
    ScoredCandidate,
    TrendingSnapshot,
    UserContext,
)
from server.services import InMemoryContentStore


def make_candidate(
    idx: int,
    domain: Optional[str] = None,
    topics=("science",),
    quality: float = 0.5,
    trending: float = 0.5,
    **extra,
) -> Candidate:
    return Candidate(
        id=f"c{idx:03d}",
        domain=domain or f"site{idx}.com",
        topics=list(topics),
        quality=quality,
        trending=trending,
        **extra,
    )


def make_scored(cid: str, score: float, domain: Optional[str] = None) -> ScoredCandidate:
    return ScoredCandidate(
        candidate=Candidate(id=cid, domain=domain or f"{cid}.com"),
        topic_affinity=0.0,
        quality_signal=0.0,
        trending_signal=0.0,
        novelty_signal=0.0,
        score=score,
    )


class SlowStore(InMemoryContentStore):
    """Content store whose async fetch sleeps first (timeouts, cancellation, interleaving)."""

    def __init__(self, items, delay: float):
        super().__init__(items)
        self.delay = delay
        self.calls = 0

    async def fetch_candidates_async(self, excluded_ids, blocked_domains, limit, topics=None):
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.fetch_candidates(excluded_ids, blocked_domains, limit, topics)


class FailingStore:
    """Content store that always errors."""

    def __init__(self):
        self.calls = 0

    async def fetch_candidates_async(self, excluded_ids, blocked_domains, limit, topics=None):
        self.calls += 1
        raise ConnectionError("database unavailable")


class NarrowOnlyStore(InMemoryContentStore):
    """Answers topic-narrowed queries; the un-narrowed query errors, or stalls for relaxed_delay."""

    def __init__(self, items, relaxed_delay=None):
        super().__init__(items)
        self.relaxed_delay = relaxed_delay

    async def fetch_candidates_async(self, excluded_ids, blocked_domains, limit, topics=None):
        if topics is None:
            if self.relaxed_delay is None:
                raise ConnectionError("replica unavailable")
            await asyncio.sleep(self.relaxed_delay)
        return self.fetch_candidates(excluded_ids, blocked_domains, limit, topics)


class LeakyStore:
    """Content store that ignores every filter (returns all rows as-is)."""

    def __init__(self, items: List[Candidate]):
        self.items = list(items)

    async def fetch_candidates_async(self, excluded_ids, blocked_domains, limit, topics=None):
        return list(self.items)[:limit]


@pytest.fixture
def candidate():
    return make_candidate


@pytest.fixture
def scored():
    return make_scored


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def config():
    return DiscoveryConfig()


@pytest.fixture
def user():
    return UserContext(user_id="u1", preferred_topics={"science"}, wildness=0)


@pytest.fixture
def pool() -> List[Candidate]:
    """Twelve candidates over six domains, two per domain, varied gauges."""
    items = []
    for i in range(12):
        items.append(
            make_candidate(
                i,
                domain=f"domain{i % 6}.com",
                topics=("science",) if i % 2 == 0 else ("art",),
                quality=round(0.95 - i * 0.05, 2),
                trending=round(0.2 + (i % 4) * 0.15, 2),
            )
        )
    return items


@pytest.fixture
def build_engine():
    """Factory: engine over an in-memory (or given) store with a seeded rng."""

    def _build(
        items=None,
        store=None,
        trending: Optional[TrendingSnapshot] = None,
        config: Optional[DiscoveryConfig] = None,
        seed: int = 7,
    ) -> DiscoveryEngine:
        config = config or DiscoveryConfig()
        store = store if store is not None else InMemoryContentStore(items or [])
        retriever = CandidateRetriever(store, trending=lambda: trending, config=config)
        return DiscoveryEngine(retriever, config=config, rng=np.random.default_rng(seed))

    return _build


@pytest.fixture
def stores() -> Dict[str, type]:
    return {"slow": SlowStore, "failing": FailingStore, "leaky": LeakyStore}
