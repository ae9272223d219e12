"""
Session state tracker tests: monotonic shown-set, FIFO domain window, registry isolation.
"""

from discovery import DiscoveryConfig, SessionRegistry, SessionStateTracker


class TestSessionStateTracker:
    def test_record_shown_adds_to_exclusions(self):
        tracker = SessionStateTracker.start("u1", "s1")
        tracker.record_shown("c1", "a.com")
        tracker.record_shown("c2", "b.com")
        assert tracker.current_exclusions() == {"c1", "c2"}

    def test_shown_set_only_grows(self):
        tracker = SessionStateTracker.start("u1", "s1", window_size=2)
        sizes = []
        for i in range(10):
            tracker.record_shown(f"c{i}", f"d{i % 3}.com")
            sizes.append(len(tracker.current_exclusions()))
        assert sizes == list(range(1, 11))

    def test_domain_window_is_fifo_bounded(self):
        tracker = SessionStateTracker.start("u1", "s1", window_size=3)
        for i, domain in enumerate(["a.com", "b.com", "c.com", "d.com", "e.com"]):
            tracker.record_shown(f"c{i}", domain)
        assert tracker.current_domain_window() == ["c.com", "d.com", "e.com"]

    def test_window_keeps_repeats(self):
        tracker = SessionStateTracker.start("u1", "s1", window_size=3)
        for i, domain in enumerate(["a.com", "a.com", "b.com"]):
            tracker.record_shown(f"c{i}", domain)
        assert tracker.current_domain_window() == ["a.com", "a.com", "b.com"]

    def test_reads_are_copies(self):
        tracker = SessionStateTracker.start("u1", "s1")
        tracker.record_shown("c1", "a.com")
        window = tracker.current_domain_window()
        window.append("evil.com")
        assert tracker.current_domain_window() == ["a.com"]

    def test_snapshot_is_detached(self):
        tracker = SessionStateTracker.start("u1", "s1")
        tracker.record_shown("c1", "a.com")
        snap = tracker.snapshot()
        tracker.record_shown("c2", "b.com")
        assert snap.shown_ids == {"c1"}
        assert snap.recent_domains == ["a.com"]


class TestSessionRegistry:
    def test_get_or_create_returns_same_tracker(self):
        registry = SessionRegistry()
        assert registry.get_or_create("u1", "s1") is registry.get_or_create("u1", "s1")

    def test_users_never_share_a_tracker(self):
        registry = SessionRegistry()
        a = registry.get_or_create("alice", "same-id")
        b = registry.get_or_create("bob", "same-id")
        a.record_shown("c1", "a.com")
        assert a is not b
        assert a.lock is not b.lock
        assert b.current_exclusions() == frozenset()

    def test_window_size_follows_config(self):
        registry = SessionRegistry(DiscoveryConfig(diversity_window_size=2))
        tracker = registry.get_or_create("u1", "s1")
        for i, domain in enumerate(["a.com", "b.com", "c.com"]):
            tracker.record_shown(f"c{i}", domain)
        assert tracker.current_domain_window() == ["b.com", "c.com"]

    def test_end_discards_session(self):
        registry = SessionRegistry()
        tracker = registry.get_or_create("u1", "s1")
        tracker.record_shown("c1", "a.com")
        final = registry.end("u1", "s1")
        assert final.shown_ids == {"c1"}
        assert registry.get("u1", "s1") is None
        assert registry.end("u1", "s1") is None
        assert len(registry) == 0


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestSessionExpiry:
    def test_idle_sessions_are_evicted(self):
        clock = FakeClock()
        registry = SessionRegistry(DiscoveryConfig(session_idle_ttl_seconds=60), clock=clock)
        registry.get_or_create("u1", "abandoned").record_shown("c1", "a.com")
        clock.now += 61
        registry.get_or_create("u1", "fresh")
        assert registry.get("u1", "abandoned") is None
        assert len(registry) == 1

    def test_activity_keeps_session_alive(self):
        clock = FakeClock()
        registry = SessionRegistry(DiscoveryConfig(session_idle_ttl_seconds=60), clock=clock)
        tracker = registry.get_or_create("u1", "s1")
        tracker.record_shown("c1", "a.com")
        for _ in range(5):
            clock.now += 50
            assert registry.get_or_create("u1", "s1") is tracker
        assert tracker.current_exclusions() == {"c1"}

    async def test_session_with_request_in_flight_is_kept(self):
        clock = FakeClock()
        registry = SessionRegistry(DiscoveryConfig(session_idle_ttl_seconds=60), clock=clock)
        tracker = registry.get_or_create("u1", "busy")
        async with tracker.lock:
            clock.now += 120
            registry.get_or_create("u2", "other")
            assert registry.get("u1", "busy") is tracker
        clock.now += 1
        registry.get_or_create("u2", "other")
        assert registry.get("u1", "busy") is None

    def test_expired_session_cannot_be_ended(self):
        clock = FakeClock()
        registry = SessionRegistry(DiscoveryConfig(session_idle_ttl_seconds=60), clock=clock)
        registry.get_or_create("u1", "s1")
        clock.now += 61
        assert registry.end("u1", "s1") is None
