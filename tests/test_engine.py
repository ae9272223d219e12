"""
End-to-end engine tests: no repeats, blocked domains, diversity over a session,
determinism, degraded paths, cancellation and concurrency.
"""

import asyncio
import logging

import pytest

from discovery import DiscoveryConfig, NoContentAvailable, UserContext

from .conftest import FailingStore, LeakyStore, NarrowOnlyStore, SlowStore, make_candidate


async def _drain(engine, user, session_id, limit=100):
    """Request picks until NoContentAvailable; returns the picks in order."""
    picks = []
    for _ in range(limit):
        try:
            picks.append(await engine.select_next(user, session_id))
        except NoContentAvailable:
            return picks
    raise AssertionError("pool never exhausted")


class TestNoRepeat:
    @pytest.mark.parametrize("wildness", [0, 50, 100])
    async def test_every_pick_unique_until_exhausted(self, build_engine, pool, wildness):
        engine = build_engine(items=pool)
        user = UserContext(user_id="u", preferred_topics={"science"}, wildness=wildness)
        picks = await _drain(engine, user, "s1")
        ids = [p.candidate_id for p in picks]
        assert len(ids) == len(pool)
        assert len(set(ids)) == len(ids)
        assert engine.stats.no_content == 1

    async def test_new_session_starts_fresh(self, build_engine, pool):
        engine = build_engine(items=pool)
        user = UserContext(user_id="u", wildness=0)
        await _drain(engine, user, "s1")
        second = await engine.select_next(user, "s2")
        assert second.candidate_id in {c.id for c in pool}


class TestBlockedDomains:
    @pytest.mark.parametrize("wildness", [0, 35, 100])
    async def test_blocked_domain_never_returned(self, build_engine, pool, wildness):
        engine = build_engine(items=pool)
        user = UserContext(user_id="u", wildness=wildness, blocked_domains={"domain0.com"})
        picks = await _drain(engine, user, "s1")
        assert len(picks) == len(pool) - 2
        assert all(p.pick.domain != "domain0.com" for p in picks)

    async def test_blocked_domain_held_even_when_store_ignores_filters(self, build_engine, pool):
        engine = build_engine(store=LeakyStore(pool))
        user = UserContext(user_id="u", wildness=100, blocked_domains={"WWW.Domain0.com"})
        picks = await _drain(engine, user, "s1")
        assert all(p.pick.domain != "domain0.com" for p in picks)
        assert len({p.candidate_id for p in picks}) == len(picks)
        assert engine.stats.ineligible_rows_dropped > 0


class TestSessionDiversity:
    async def test_no_domain_repeats_within_three_picks(self, build_engine):
        items = [
            make_candidate(i, domain=f"{d}.com", quality=0.9 - i * 0.05)
            for i, d in enumerate(["a", "a", "b", "b", "c", "c", "d", "d"])
        ]
        engine = build_engine(items=items)
        user = UserContext(user_id="u", wildness=0)
        picks = await _drain(engine, user, "s1")
        domains = [p.pick.domain for p in picks]
        assert len(domains) == 8
        for i in range(len(domains) - 2):
            assert len(set(domains[i : i + 3])) == 3, domains
        assert engine.stats.diversity_violations == 0

    async def test_unavoidable_repeat_is_counted_as_violation(self, build_engine, caplog):
        items = [make_candidate(1, domain="only.com"), make_candidate(2, domain="only.com")]
        engine = build_engine(items=items)
        user = UserContext(user_id="u", wildness=0)
        with caplog.at_level(logging.WARNING):
            first = await engine.select_next(user, "s1")
            second = await engine.select_next(user, "s1")
        assert not first.diversity_violation
        assert second.diversity_violation
        assert engine.stats.diversity_violations == 1
        assert "DIVERSITY_VIOLATION" in caplog.text


class TestDeterminism:
    async def test_same_seed_same_session(self, build_engine, pool):
        user = UserContext(user_id="u", preferred_topics={"art"}, wildness=60)
        first = await _drain(build_engine(items=pool, seed=3), user, "s")
        second = await _drain(build_engine(items=pool, seed=3), user, "s")
        assert [p.candidate_id for p in first] == [p.candidate_id for p in second]

    async def test_wildness_zero_takes_top_score(self, build_engine, pool):
        engine = build_engine(items=pool)
        user = UserContext(user_id="u", preferred_topics={"science"}, wildness=0)
        result = await engine.select_next(user, "s")
        assert result.temperature == 0.0
        assert result.attempts == 1
        assert result.pick.topic_affinity == 1.0
        assert result.reason


class TestColdStart:
    async def test_cold_start_user_gets_neutral_affinity(self, build_engine, pool):
        engine = build_engine(items=pool)
        user = UserContext.from_preferences("newbie", None)
        result = await engine.select_next(user, "s")
        assert user.cold_start
        assert result.pick.topic_affinity == 0.5
        assert result.wildness == DiscoveryConfig().default_wildness


class TestNoContent:
    async def test_empty_catalogue(self, build_engine):
        engine = build_engine(items=[])
        with pytest.raises(NoContentAvailable) as exc:
            await engine.select_next(UserContext(user_id="u"), "s9")
        assert exc.value.session_id == "s9"
        assert exc.value.cause == "exhausted"
        assert engine.stats.no_content == 1
        assert engine.stats.selections == 0

    async def test_retrieval_failure_without_trending(self, build_engine):
        engine = build_engine(store=FailingStore())
        with pytest.raises(NoContentAvailable) as exc:
            await engine.select_next(UserContext(user_id="u"), "s")
        assert exc.value.cause == "retrieval_timeout"
        assert engine.stats.retrieval_failures == 1


class TestExclusions:
    async def test_extra_exclusions_not_recorded(self, build_engine, pool):
        engine = build_engine(items=pool)
        user = UserContext(user_id="u", wildness=0)
        baseline = (await build_engine(items=pool).select_next(user, "baseline")).candidate_id

        result = await engine.select_next(user, "s", extra_excluded_ids={baseline})
        assert result.candidate_id != baseline
        tracker = engine.sessions.get("u", "s")
        assert tracker.current_exclusions() == {result.candidate_id}


class TestConcurrency:
    async def test_cancelled_request_records_nothing(self, build_engine, pool):
        store = SlowStore(pool, delay=10)
        engine = build_engine(store=store, config=DiscoveryConfig(fetch_timeout_seconds=5))
        user = UserContext(user_id="u", wildness=0)

        task = asyncio.create_task(engine.select_next(user, "s"))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        tracker = engine.sessions.get("u", "s")
        assert tracker.current_exclusions() == frozenset()
        assert tracker.current_domain_window() == []
        assert not tracker.lock.locked()
        assert engine.stats.selections == 0

    async def test_overlapping_requests_in_one_session_never_repeat(self, build_engine, pool):
        store = SlowStore(pool, delay=0.01)
        engine = build_engine(store=store)
        user = UserContext(user_id="u", wildness=0)
        results = await asyncio.gather(*(engine.select_next(user, "s") for _ in range(6)))
        ids = [r.candidate_id for r in results]
        assert len(set(ids)) == 6

    async def test_users_do_not_share_session_state(self, build_engine, pool):
        engine = build_engine(items=pool)
        a = UserContext(user_id="a", wildness=0)
        b = UserContext(user_id="b", wildness=0)
        pick_a = await engine.select_next(a, "same-session")
        pick_b = await engine.select_next(b, "same-session")
        assert pick_a.candidate_id == pick_b.candidate_id
        assert len(engine.sessions) == 2

    async def test_end_session_returns_final_state(self, build_engine, pool):
        engine = build_engine(items=pool)
        user = UserContext(user_id="u", wildness=0)
        picked = (await engine.select_next(user, "s")).candidate_id
        final = engine.end_session("u", "s")
        assert final.shown_ids == {picked}
        assert engine.end_session("u", "s") is None


class TestStats:
    async def test_clamped_wildness_is_counted(self, build_engine, pool):
        engine = build_engine(items=pool)
        user = UserContext.from_preferences("u", {"preferred_topics": ["science"], "wildness": 500})
        result = await engine.select_next(user, "s")
        assert result.wildness == 100
        assert engine.stats.wildness_clamped == 1
        assert engine.stats.requests == 1
        assert engine.stats.selections == 1


class TestDegradedRetrieval:
    async def test_failed_relaxation_still_serves_narrowed_pick(self, build_engine, candidate):
        items = [candidate(i, topics=("rare",)) for i in range(2)]
        items += [candidate(10 + i, topics=("common",)) for i in range(6)]
        engine = build_engine(store=NarrowOnlyStore(items))
        user = UserContext(user_id="u", preferred_topics={"rare"}, wildness=0)
        result = await engine.select_next(user, "s")
        assert result.candidate_id in {"c000", "c001"}
        assert engine.stats.retrieval_failures == 1
        assert engine.stats.no_content == 0


class TestWildnessBounds:
    @pytest.mark.parametrize("raw, expected", [(500, 100), (-20, 0)])
    async def test_out_of_range_context_is_clamped(self, build_engine, pool, raw, expected):
        engine = build_engine(items=pool)
        user = UserContext(user_id="u", preferred_topics={"science"}, wildness=raw)
        result = await engine.select_next(user, "s")
        assert result.wildness == expected
        assert engine.stats.wildness_clamped == 1

    async def test_in_range_context_is_untouched(self, build_engine, pool):
        engine = build_engine(items=pool)
        result = await engine.select_next(UserContext(user_id="u", wildness=42), "s")
        assert result.wildness == 42
        assert engine.stats.wildness_clamped == 0
