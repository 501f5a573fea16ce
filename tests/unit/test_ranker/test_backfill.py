"""Unit tests for difficulty backfill sweeps."""

from collections.abc import Generator

import pytest

from reading_recommender.ranker.backfill import BackfillFailure, DifficultyBackfill
from reading_recommender.ranker.difficulty import DifficultyEstimator
from reading_recommender.store.models import Sentence
from reading_recommender.store.store import SqliteStore


class _FlakySentencesStore(SqliteStore):
    """In-memory store whose sentence lookup fails for selected articles."""

    def __init__(self, failing_ids: set[int]) -> None:
        super().__init__(":memory:")
        self.failing_ids = failing_ids

    def list_sentences(self, article_id: int) -> list[Sentence]:
        if article_id in self.failing_ids:
            msg = f"sentences missing for {article_id}"
            raise RuntimeError(msg)
        return super().list_sentences(article_id)


def _backfill(store: SqliteStore) -> DifficultyBackfill:
    return DifficultyBackfill(
        catalog=store,
        discovery=store,
        estimator=DifficultyEstimator(store, store, store),
    )


@pytest.fixture
def flaky_store() -> Generator[_FlakySentencesStore]:
    """Create a store where article 2 cannot be processed."""
    s = _FlakySentencesStore(failing_ids={2})
    s.connect()
    yield s
    s.close()


class TestRefreshCatalog:
    """Tests for DifficultyBackfill.refresh_catalog."""

    def test_continues_past_failures(self, flaky_store: _FlakySentencesStore) -> None:
        """Test one failing article is recorded and the rest are persisted."""
        for i in range(1, 4):
            flaky_store.add_article(f"Artículo {i}", f"https://a.example/{i}", "spanish")

        result = _backfill(flaky_store).refresh_catalog()

        assert result.kind == "catalog"
        assert result.processed == 3
        assert result.succeeded == 2
        assert result.failures == [
            BackfillFailure(item_id=2, error="sentences missing for 2")
        ]
        assert flaky_store.get_article(1).difficulty_score == 5.0
        assert flaky_store.get_article(2).difficulty_score is None
        assert flaky_store.get_article(3).difficulty_score == 5.0

    def test_empty_catalog(self, flaky_store: _FlakySentencesStore) -> None:
        """Test an empty catalog produces an empty result."""
        result = _backfill(flaky_store).refresh_catalog()

        assert result.processed == 0
        assert result.failed == 0

    def test_to_dict(self, flaky_store: _FlakySentencesStore) -> None:
        """Test the summary serializes failures."""
        flaky_store.add_article("Uno", "https://a.example/1", "spanish")
        flaky_store.add_article("Dos", "https://a.example/2", "spanish")

        summary = _backfill(flaky_store).refresh_catalog().to_dict()

        assert summary["processed"] == 2
        assert summary["failed"] == 1
        assert summary["failures"] == [{"item_id": 2, "error": "sentences missing for 2"}]


class TestRefreshDiscovered:
    """Tests for DifficultyBackfill.refresh_discovered."""

    def test_only_unestimated_articles(self, flaky_store: _FlakySentencesStore) -> None:
        """Test articles that already have an estimate are skipped."""
        flaky_store.add_word("hola", "spanish", frequency_rank=100)
        pending = flaky_store.add_discovered_article("https://b.example/1", title="Hola.")
        flaky_store.add_discovered_article(
            "https://b.example/2", title="Ya estimado", difficulty_score=4.0
        )

        result = _backfill(flaky_store).refresh_discovered()

        assert result.processed == 1
        assert result.succeeded == 1
        stored = flaky_store.get_discovered_article(pending.id)
        assert stored.difficulty_score == pytest.approx(0.7 * 0.2)
        assert flaky_store.list_discovered_missing_difficulty() == []
