"""Unit tests for the in-memory cache."""

from propcheck.storage.cache import MemoryCache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestMemoryCache:
    """Tests for MemoryCache expiry and invalidation."""

    def test_get_before_expiry(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("schedule:nba:2024-03-01", ["g-1"], ttl_seconds=60)
        clock.now += 59
        assert cache.get("schedule:nba:2024-03-01") == ["g-1"]

    def test_expired(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("k", "v", ttl_seconds=60)
        clock.now += 60
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_zero_ttl_stores_nothing(self):
        cache = MemoryCache()
        cache.set("k", "v", ttl_seconds=0)
        assert cache.get("k") is None

    def test_invalidate_and_clear(self):
        cache = MemoryCache()
        cache.set("a", 1, 60)
        cache.set("b", 2, 60)
        cache.invalidate("a")
        cache.invalidate("missing")
        assert cache.get("a") is None
        assert cache.get("b") == 2
        cache.clear()
        assert len(cache) == 0
