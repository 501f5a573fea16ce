"""Unit tests for the in-memory recommendation cache."""

import pytest

from reading_recommender.cache.memory import InMemoryRecommendationCache


class _FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> _FakeClock:
    """Create a fake clock."""
    return _FakeClock()


@pytest.fixture
def cache(clock: _FakeClock) -> InMemoryRecommendationCache:
    """Create a cache driven by the fake clock."""
    return InMemoryRecommendationCache(clock=clock)


class TestInMemoryRecommendationCache:
    """Tests for InMemoryRecommendationCache."""

    def test_miss(self, cache: InMemoryRecommendationCache) -> None:
        """Test unknown keys miss."""
        assert cache.get("recommended_count:1") is None

    def test_hit_before_expiry(
        self, cache: InMemoryRecommendationCache, clock: _FakeClock
    ) -> None:
        """Test values are returned until their TTL elapses."""
        cache.put("k", (10, 4), ttl_seconds=30)
        clock.now += 29.9

        assert cache.get("k") == (10, 4)

    def test_expired_entry_evicted(
        self, cache: InMemoryRecommendationCache, clock: _FakeClock
    ) -> None:
        """Test expired values miss and are dropped."""
        cache.put("k", 1, ttl_seconds=30)
        clock.now += 30

        assert cache.get("k") is None
        assert len(cache) == 0

    def test_non_positive_ttl_not_stored(self, cache: InMemoryRecommendationCache) -> None:
        """Test a zero TTL disables caching."""
        cache.put("k", 1, ttl_seconds=0)

        assert cache.get("k") is None
        assert len(cache) == 0

    def test_put_overwrites(self, cache: InMemoryRecommendationCache) -> None:
        """Test a second put replaces the value."""
        cache.put("k", 1)
        cache.put("k", 2)

        assert cache.get("k") == 2

    def test_invalidate_and_clear(self, cache: InMemoryRecommendationCache) -> None:
        """Test single-key and full invalidation."""
        cache.put("a", 1)
        cache.put("b", 2)

        cache.invalidate("a")
        cache.invalidate("missing")

        assert cache.get("a") is None
        assert cache.get("b") == 2

        cache.clear()

        assert len(cache) == 0
