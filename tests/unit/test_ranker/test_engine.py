"""Unit tests for the recommendation engine."""

import random
from collections.abc import Generator
from datetime import timedelta

import pytest

from reading_recommender.cache.memory import InMemoryRecommendationCache
from reading_recommender.ranker.engine import RecommendationEngine
from reading_recommender.ranker.metrics import RankerMetrics
from reading_recommender.store.models import DiscoveredUserStatus
from reading_recommender.store.store import SqliteStore
from tests.helpers.time import FIXED_NOW


def _engine(store: SqliteStore, **kwargs: object) -> RecommendationEngine:
    return RecommendationEngine.from_store(
        store, rng=random.Random(0), now=FIXED_NOW, **kwargs
    )


def _add_discovered(
    store: SqliteStore, n: int, difficulty: float | None = 3.3, language: str = "spanish"
) -> int:
    discovered = store.add_discovered_article(
        f"https://b.example/{n}",
        title=f"Noticia {n}",
        language=language,
        published_at=FIXED_NOW - timedelta(days=n),
        difficulty_score=difficulty,
    )
    return discovered.id


@pytest.fixture
def store() -> Generator[SqliteStore]:
    """Create an in-memory store for a user at level 3.0."""
    RankerMetrics.reset()
    s = SqliteStore(":memory:")
    s.connect()
    word = s.add_word("palabra", "spanish", frequency_rank=2000)
    s.add_review_item(1, word.id)
    yield s
    s.close()


class TestRecommend:
    """Tests for RecommendationEngine.recommend."""

    def test_returns_entries(self, store: SqliteStore) -> None:
        """Test discovered entries are projected into recommendations."""
        discovered_id = _add_discovered(store, 1)

        recommendations = _engine(store).recommend(1, limit=5)

        assert len(recommendations) == 1
        entry = recommendations[0]
        assert entry.is_discovered is True
        assert entry.id is None
        assert entry.discovered_article_id == discovered_id
        assert entry.title == "Noticia 1"
        assert entry.score == pytest.approx(0.9)

    def test_non_positive_limit(self, store: SqliteStore) -> None:
        """Test a zero limit returns nothing."""
        _add_discovered(store, 1)

        assert _engine(store).recommend(1, limit=0) == []

    def test_empty_when_nothing_scores(self, store: SqliteStore) -> None:
        """Test an untagged, old catalogued article yields no recommendations."""
        old = FIXED_NOW - timedelta(days=90)
        store.add_article("Nada", "https://a.example/1", "spanish", inserted_at=old)

        assert _engine(store).recommend(1) == []

    def test_respects_limit(self, store: SqliteStore) -> None:
        """Test the result never exceeds the limit."""
        for n in range(1, 9):
            _add_discovered(store, n)

        assert len(_engine(store).recommend(1, limit=3)) == 3

    def test_records_metrics(self, store: SqliteStore) -> None:
        """Test candidate counts are recorded."""
        for n in range(1, 4):
            _add_discovered(store, n)

        _engine(store).recommend(1, limit=2)

        metrics = RankerMetrics.get_instance()
        assert metrics.candidates_in == 3
        assert metrics.candidates_out == 2


class TestRecommendedCount:
    """Tests for the cached recommendation count."""

    def test_count_is_cached(self, store: SqliteStore) -> None:
        """Test a second lookup is served from the cache."""
        _add_discovered(store, 1)
        engine = _engine(store)

        assert engine.recommended_count(1) == 1
        _add_discovered(store, 2)

        assert engine.recommended_count(1) == 1

    def test_invalidate_recomputes(self, store: SqliteStore) -> None:
        """Test invalidation drops the cached count."""
        _add_discovered(store, 1)
        engine = _engine(store)
        engine.recommended_count(1)
        _add_discovered(store, 2)

        engine.invalidate(1)

        assert engine.recommended_count(1) == 2

    def test_different_limit_recomputes(self, store: SqliteStore) -> None:
        """Test a count cached for one page size is not reused for another."""
        for n in range(1, 4):
            _add_discovered(store, n)
        engine = _engine(store)

        assert engine.recommended_count(1, limit=2) == 2
        assert engine.recommended_count(1, limit=10) == 3

    def test_expired_entry_recomputes(self, store: SqliteStore) -> None:
        """Test an expired count is recomputed."""
        now = [0.0]
        cache = InMemoryRecommendationCache(clock=lambda: now[0])
        _add_discovered(store, 1)
        engine = _engine(store, cache=cache, cache_ttl_seconds=10)
        engine.recommended_count(1)
        _add_discovered(store, 2)

        now[0] = 11.0

        assert engine.recommended_count(1) == 2

    def test_users_cached_separately(self, store: SqliteStore) -> None:
        """Test one user's cached count does not leak to another."""
        _add_discovered(store, 1)
        engine = _engine(store)
        engine.recommended_count(1)
        store.set_discovered_user_status(1, 2, DiscoveredUserStatus.DISMISSED)

        assert engine.recommended_count(2) == 0


class TestRecommendForLevel:
    """Tests for RecommendationEngine.recommend_for_level."""

    def test_window_and_order(self, store: SqliteStore) -> None:
        """Test only articles within two levels are returned, best match first."""
        easy = _add_discovered(store, 1, difficulty=1.0)
        close = _add_discovered(store, 2, difficulty=3.3)
        harder = _add_discovered(store, 3, difficulty=5.0)
        _add_discovered(store, 4, difficulty=5.5)
        _add_discovered(store, 5, difficulty=None)

        recommendations = _engine(store).recommend_for_level(1, limit=5)

        assert [r.discovered_article_id for r in recommendations] == [close, harder, easy]
        assert recommendations[0].score == pytest.approx(0.9)
        assert recommendations[1].score == pytest.approx(0.58)
        assert recommendations[2].score == pytest.approx(0.5)

    def test_excludes_other_languages_and_dismissed(self, store: SqliteStore) -> None:
        """Test language and user decisions filter the window."""
        _add_discovered(store, 1, language="french")
        dismissed = _add_discovered(store, 2)
        store.set_discovered_user_status(dismissed, 1, DiscoveredUserStatus.DISMISSED)
        recommended = _add_discovered(store, 3)
        store.set_discovered_user_status(recommended, 1, DiscoveredUserStatus.RECOMMENDED)

        recommendations = _engine(store).recommend_for_level(1)

        assert [r.discovered_article_id for r in recommendations] == [recommended]

    def test_limit(self, store: SqliteStore) -> None:
        """Test the result is truncated to the limit."""
        for n in range(1, 8):
            _add_discovered(store, n)

        assert len(_engine(store).recommend_for_level(1, limit=2)) == 2
        assert _engine(store).recommend_for_level(1, limit=0) == []
