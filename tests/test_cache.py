# ============================================================================
# TTL CACHE TESTS
# ============================================================================
# STATUS: Tests - Check result cache
# PURPOSE: Verify TTL expiry, lazy eviction, sweeping and clearing
# CREATED: 18 OCT 2026
# ============================================================================
"""
TTL Cache Tests

Uses an injected fake clock so expiry is deterministic.

Run with:
    pytest tests/test_cache.py -v
"""

import asyncio
import pytest

from health.cache import TTLCache


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(clock=clock)


class TestTTLCache:
    """Test get/set/expiry semantics."""

    def test_get_before_ttl(self, cache, clock):
        cache.set("k", "v", 1000)
        clock.advance_ms(999)
        assert cache.get("k") == "v"

    def test_get_after_ttl_evicts(self, cache, clock):
        cache.set("k", "v", 1000)
        clock.advance_ms(1001)
        assert cache.size() == 1  # not yet evicted
        assert cache.get("k") is None
        assert cache.size() == 0

    def test_missing_key(self, cache):
        assert cache.get("nope") is None

    def test_set_overwrites(self, cache):
        cache.set("k", "a", 1000)
        cache.set("k", "b", 1000)
        assert cache.get("k") == "b"
        assert len(cache) == 1

    def test_clear_single_key(self, cache):
        cache.set("a", 1, 1000)
        cache.set("b", 2, 1000)
        cache.clear("a")
        assert cache.get("a") is None
        assert cache.get("b") == 2

    def test_clear_all(self, cache):
        cache.set("a", 1, 1000)
        cache.set("b", 2, 1000)
        cache.clear()
        assert cache.size() == 0

    def test_cleanup_sweeps_only_expired(self, cache, clock):
        cache.set("short", 1, 100)
        cache.set("long", 2, 10000)
        clock.advance_ms(500)
        assert cache.cleanup() == 1
        assert cache.size() == 1
        assert "long" in cache


class TestSweeper:
    """Test the background sweeper."""

    def test_sweeper_evicts_expired_entries(self, cache, clock):
        async def scenario():
            cache.set("k", "v", 10)
            clock.advance_ms(50)
            cache.start_sweeper(interval_seconds=0.01)
            await asyncio.sleep(0.05)
            await cache.stop_sweeper()
            return cache.size()

        assert asyncio.run(scenario()) == 0

    def test_stop_without_start(self, cache):
        asyncio.run(cache.stop_sweeper())
