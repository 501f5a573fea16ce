"""Integration tests for the SQLite content store."""

import tempfile
from collections.abc import Generator
from datetime import timedelta
from pathlib import Path

import pytest

from reading_recommender.store.errors import ArticleNotFoundError, StoreConnectionError
from reading_recommender.store.migrations import CURRENT_VERSION
from reading_recommender.store.models import (
    ArticleDifficulty,
    ArticleUserStatus,
    DiscoveredStatus,
    DiscoveredUserStatus,
)
from reading_recommender.store.store import SqliteStore
from tests.helpers.time import FIXED_NOW


@pytest.fixture
def temp_db_path() -> Generator[Path]:
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test_recommender.sqlite"


@pytest.fixture
def store(temp_db_path: Path) -> Generator[SqliteStore]:
    """Create a connected store."""
    store = SqliteStore(temp_db_path, run_id="test-run-001")
    store.connect()
    yield store
    store.close()


class TestSqliteStoreConnection:
    """Tests for store connection and setup."""

    def test_connect_creates_database(self, temp_db_path: Path) -> None:
        """Test connecting creates the database file."""
        store = SqliteStore(temp_db_path)
        assert not temp_db_path.exists()

        store.connect()
        assert temp_db_path.exists()
        store.close()

    def test_connect_creates_parent_dirs(self, temp_db_path: Path) -> None:
        """Test connecting creates parent directories."""
        nested_path = temp_db_path.parent / "subdir" / "recommender.sqlite"
        store = SqliteStore(nested_path)
        store.connect()
        assert nested_path.exists()
        store.close()

    def test_context_manager(self, temp_db_path: Path) -> None:
        """Test store works as context manager."""
        with SqliteStore(temp_db_path) as store:
            assert store.is_connected
            assert store.get_schema_version() == CURRENT_VERSION

        assert not store.is_connected

    def test_wal_mode_enabled(self, store: SqliteStore) -> None:
        """Test WAL mode is enabled."""
        conn = store._ensure_connected()
        cursor = conn.execute("PRAGMA journal_mode")
        mode = cursor.fetchone()[0]
        assert mode.lower() == "wal"

    def test_operations_require_connection(self, temp_db_path: Path) -> None:
        """Test using a closed store raises."""
        store = SqliteStore(temp_db_path)

        with pytest.raises(StoreConnectionError):
            store.list_article_ids()

    def test_reopen_keeps_data(self, temp_db_path: Path) -> None:
        """Test data survives reconnecting."""
        with SqliteStore(temp_db_path) as store:
            store.add_article("Uno", "https://a.example/1", "spanish")

        with SqliteStore(temp_db_path) as store:
            assert store.list_article_ids() == [1]


class TestVocabulary:
    """Tests for word storage and lookup."""

    def test_add_word_normalizes(self, store: SqliteStore) -> None:
        """Test stored forms are normalized."""
        word = store.add_word("Canción", "spanish", frequency_rank=1200)

        assert word.normalized_form == "cancion"

    def test_resolve_words_by_language(self, store: SqliteStore) -> None:
        """Test lookup is scoped to a language and ignores unknown forms."""
        spanish = store.add_word("casa", "spanish", frequency_rank=100)
        store.add_word("casa", "portuguese", frequency_rank=90)

        words = store.resolve_words(["Casa", "inexistente"], "spanish")

        assert [w.id for w in words] == [spanish.id]

    def test_resolve_many_words(self, store: SqliteStore) -> None:
        """Test lookups larger than one IN clause chunk."""
        for i in range(1200):
            store.add_word(f"palabra{i}", "spanish", frequency_rank=i + 1)

        words = store.resolve_words([f"palabra{i}" for i in range(1200)], "spanish")

        assert len(words) == 1200
        assert len(store.get_words(w.id for w in words)) == 1200

    def test_user_word_counts_exclude_archived(self, store: SqliteStore) -> None:
        """Test exposure counts cover only non-archived library articles."""
        word = store.add_word("gato", "spanish")
        reading = store.add_article("Leyendo", "https://a.example/1", "spanish")
        archived = store.add_article("Archivado", "https://a.example/2", "spanish")
        for article in (reading, archived):
            sentence = store.add_sentence(article.id, 0, "el gato y el gato")
            store.add_occurrence(sentence.id, word.id, 1)
            store.add_occurrence(sentence.id, word.id, 4)
        store.associate_user(reading.id, 1)
        store.associate_user(archived.id, 1, ArticleUserStatus.ARCHIVED)

        assert store.user_word_counts(1) == {word.id: 2}
        assert store.user_word_counts(2) == {}

    def test_review_ranks_skip_unranked(self, store: SqliteStore) -> None:
        """Test only ranked review words contribute ranks."""
        ranked = store.add_word("perro", "spanish", frequency_rank=800)
        unranked = store.add_word("xilofono", "spanish")
        store.add_review_item(1, ranked.id, repetitions=2, quality_history=[4, 5])
        store.add_review_item(1, unranked.id)

        assert store.review_frequency_ranks(1) == [800]
        assert store.review_word_ids(1) == {ranked.id, unranked.id}


class TestCatalog:
    """Tests for catalogued articles and topics."""

    def test_topics_round_trip_in_confidence_order(self, store: SqliteStore) -> None:
        """Test topics come back ordered by confidence descending."""
        article = store.add_article("Ciencia", "https://a.example/1", "spanish")

        store.tag_article(article.id, [("deportes", 0.4), ("ciencia", 0.9)])

        topics = store.list_topics_for_article(article.id)
        assert [(t.topic, t.confidence) for t in topics] == [
            ("ciencia", 0.9),
            ("deportes", 0.4),
        ]
        assert all(t.language == "spanish" for t in topics)
        assert store.get_article(article.id).topics == topics

    def test_retag_replaces_topics(self, store: SqliteStore) -> None:
        """Test tagging again replaces the previous topics."""
        article = store.add_article("Ciencia", "https://a.example/1", "spanish")
        store.tag_article(article.id, [("ciencia", 0.9)])

        store.tag_article(article.id, [("salud", 0.5)])

        assert [t.topic for t in store.list_topics_for_article(article.id)] == ["salud"]

    def test_tag_rejects_bad_confidence(self, store: SqliteStore) -> None:
        """Test confidence outside 0-1 is rejected before writing."""
        article = store.add_article("Ciencia", "https://a.example/1", "spanish")

        with pytest.raises(ValueError, match="Confidence"):
            store.tag_article(article.id, [("ciencia", 1.5)])

    def test_tag_missing_article(self, store: SqliteStore) -> None:
        """Test tagging an unknown article raises."""
        with pytest.raises(ArticleNotFoundError):
            store.tag_article(99, [("ciencia", 0.5)])

    def test_candidate_articles_exclude_library(self, store: SqliteStore) -> None:
        """Test candidates skip the user's articles and are newest first."""
        older = store.add_article(
            "Viejo", "https://a.example/1", "spanish", inserted_at=FIXED_NOW - timedelta(days=2)
        )
        owned = store.add_article(
            "Mío", "https://a.example/2", "spanish", inserted_at=FIXED_NOW
        )
        newer = store.add_article(
            "Nuevo", "https://a.example/3", "spanish", inserted_at=FIXED_NOW - timedelta(days=1)
        )
        store.associate_user(owned.id, 1, ArticleUserStatus.FINISHED)

        candidates = store.list_candidate_articles(1, limit=10)

        assert [a.id for a in candidates] == [newer.id, older.id]
        assert [a.id for a in store.list_candidate_articles(1, limit=1)] == [newer.id]
        assert store.list_user_article_ids(1) == {owned.id}

    def test_article_words_are_distinct(self, store: SqliteStore) -> None:
        """Test repeated occurrences yield one word."""
        article = store.add_article("Texto", "https://a.example/1", "spanish")
        word = store.add_word("sol", "spanish")
        for position in range(2):
            sentence = store.add_sentence(article.id, position, "sol y sol")
            store.add_occurrence(sentence.id, word.id)

        assert [w.id for w in store.list_article_words(article.id)] == [word.id]
        assert [s.position for s in store.list_sentences(article.id)] == [0, 1]

    def test_update_difficulty(self, store: SqliteStore) -> None:
        """Test derived metrics are persisted."""
        article = store.add_article("Texto", "https://a.example/1", "spanish")

        store.update_article_difficulty(
            article.id,
            ArticleDifficulty(
                difficulty_score=4.2,
                unique_word_count=12,
                avg_word_frequency=1800.5,
                avg_sentence_length=11.0,
            ),
        )

        stored = store.get_article(article.id)
        assert stored.difficulty_score == pytest.approx(4.2)
        assert stored.unique_word_count == 12
        assert stored.avg_word_frequency == pytest.approx(1800.5)

    def test_update_difficulty_missing(self, store: SqliteStore) -> None:
        """Test updating an unknown article raises."""
        with pytest.raises(ArticleNotFoundError):
            store.update_article_difficulty(
                99, ArticleDifficulty(difficulty_score=5.0, unique_word_count=0)
            )

    def test_topic_preferences(self, store: SqliteStore) -> None:
        """Test preferences are per user and overwritten on update."""
        store.set_topic_preference(1, "ciencia", 1.5)
        store.set_topic_preference(1, "ciencia", 2.0)
        store.set_topic_preference(2, "deportes", 0.5)

        assert store.topic_preferences(1) == {"ciencia": 2.0}


class TestDiscovery:
    """Tests for discovered article eligibility."""

    def _add(self, store: SqliteStore, n: int, **kwargs: object) -> int:
        discovered = store.add_discovered_article(
            f"https://b.example/{n}",
            discovered_at=FIXED_NOW - timedelta(hours=n),
            **kwargs,  # type: ignore[arg-type]
        )
        return discovered.id

    def test_new_articles_eligible_newest_first(self, store: SqliteStore) -> None:
        """Test new articles are listed most recently discovered first."""
        first = self._add(store, 1)
        second = self._add(store, 2)

        assert [d.id for d in store.list_eligible_discovered(1, 10)] == [first, second]
        assert [d.id for d in store.list_eligible_discovered(1, 1)] == [first]

    def test_user_decisions_filter(self, store: SqliteStore) -> None:
        """Test dismissed and imported decisions exclude an article."""
        dismissed = self._add(store, 1)
        imported = self._add(store, 2)
        recommended = self._add(store, 3)
        store.set_discovered_user_status(dismissed, 1, DiscoveredUserStatus.DISMISSED)
        store.set_discovered_user_status(imported, 1, DiscoveredUserStatus.IMPORTED)
        store.set_discovered_user_status(recommended, 1, DiscoveredUserStatus.RECOMMENDED)

        assert [d.id for d in store.list_eligible_discovered(1, 10)] == [recommended]
        assert len(store.list_eligible_discovered(2, 10)) == 3

    def test_skipped_article_eligible_only_if_recommended(self, store: SqliteStore) -> None:
        """Test non-new articles stay eligible for users they were recommended to."""
        skipped = self._add(store, 1, status=DiscoveredStatus.SKIPPED)
        store.set_discovered_user_status(skipped, 1, DiscoveredUserStatus.RECOMMENDED)

        assert [d.id for d in store.list_eligible_discovered(1, 10)] == [skipped]
        assert store.list_eligible_discovered(2, 10) == []

    def test_linked_article_in_library_excluded(self, store: SqliteStore) -> None:
        """Test a discovered article linked to an owned catalog article is excluded."""
        article = store.add_article("Ciencia", "https://b.example/1", "spanish")
        linked = self._add(store, 1, article_id=article.id)
        store.associate_user(article.id, 1)

        assert store.list_eligible_discovered(1, 10) == []
        eligible = store.list_eligible_discovered(2, 10)
        assert [d.id for d in eligible] == [linked]
        assert eligible[0].article is not None
        assert eligible[0].article.id == article.id

    def test_source_site_preloaded(self, store: SqliteStore) -> None:
        """Test the source site is attached to discovered articles."""
        site = store.add_source_site("El Diario", "https://diario.example")
        self._add(store, 1, source_site_id=site.id, title="Hola")

        discovered = store.list_eligible_discovered(1, 10)[0]

        assert discovered.source_site is not None
        assert discovered.source_site.name == "El Diario"
        assert discovered.title == "Hola"

    def test_difficulty_window(self, store: SqliteStore) -> None:
        """Test the window filters by language, estimate, and user decision."""
        inside = self._add(store, 1, language="spanish", difficulty_score=3.0)
        self._add(store, 2, language="spanish", difficulty_score=8.0)
        self._add(store, 3, language="french", difficulty_score=3.0)
        self._add(store, 4, language="spanish")
        dismissed = self._add(store, 5, language="spanish", difficulty_score=2.5)
        store.set_discovered_user_status(dismissed, 1, DiscoveredUserStatus.DISMISSED)

        window = store.list_discovered_in_difficulty_window(1, 1.0, 5.0, "spanish", 10)

        assert [d.id for d in window] == [inside]

    def test_missing_difficulty_and_update(self, store: SqliteStore) -> None:
        """Test unestimated articles are listed until an estimate is stored."""
        pending = self._add(store, 1)
        self._add(store, 2, difficulty_score=4.0)

        assert store.list_discovered_missing_difficulty() == [pending]

        store.update_discovered_difficulty(pending, 2.5, 7.0)

        assert store.list_discovered_missing_difficulty() == []
        stored = store.get_discovered_article(pending)
        assert stored.difficulty_score == pytest.approx(2.5)
        assert stored.avg_sentence_length == pytest.approx(7.0)

    def test_missing_discovered_article(self, store: SqliteStore) -> None:
        """Test unknown discovered IDs raise."""
        with pytest.raises(ArticleNotFoundError):
            store.get_discovered_article(42)
        with pytest.raises(ArticleNotFoundError):
            store.update_discovered_difficulty(42, 1.0, None)
