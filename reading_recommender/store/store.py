"""SQLite content store implementation."""

import json
import sqlite3
import time
import uuid
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

import structlog

from reading_recommender.store.errors import ArticleNotFoundError, StoreConnectionError
from reading_recommender.store.migrations import CURRENT_VERSION, MigrationManager
from reading_recommender.store.models import (
    ArticleDifficulty,
    ArticleTopic,
    ArticleUserStatus,
    CatalogArticle,
    DiscoveredArticle,
    DiscoveredStatus,
    DiscoveredUserStatus,
    Sentence,
    SourceSite,
    Word,
    normalize_form,
)


logger = structlog.get_logger()

# SQLite's default bound-parameter limit is 999 on older builds.
_IN_CLAUSE_CHUNK = 500


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _chunks(values: list, size: int = _IN_CLAUSE_CHUNK) -> Iterable[list]:
    for start in range(0, len(values), size):
        yield values[start : start + size]


class SqliteStore:
    """SQLite store for catalogued articles, vocabulary, and study state.

    Implements every storage protocol the engine consumes (catalog, discovery,
    vocabulary, review history, preferences, topics) plus the write paths
    used to populate them. Uses WAL mode and applies schema migrations on
    connect.
    """

    def __init__(self, db_path: Path | str, run_id: str | None = None) -> None:
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file, or ":memory:".
            run_id: Optional run ID for logging context.
        """
        self._db_path = Path(db_path) if isinstance(db_path, str) else db_path
        self._run_id = run_id or str(uuid.uuid4())
        self._conn: sqlite3.Connection | None = None
        self._log = logger.bind(
            component="store",
            run_id=self._run_id,
            db_path=str(self._db_path),
        )

    @property
    def db_path(self) -> Path:
        """Get the database path."""
        return self._db_path

    @property
    def is_connected(self) -> bool:
        """Check if connected to database."""
        return self._conn is not None

    def connect(self) -> None:
        """Open connection to database and apply migrations.

        Creates the database file and parent directories if they don't exist.
        """
        if self._conn is not None:
            return

        in_memory = str(self._db_path) == ":memory:"
        if not in_memory:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)

        self._log.info("connecting_to_database")

        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.row_factory = sqlite3.Row

        if not in_memory:
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA synchronous=NORMAL")
        self._conn.execute("PRAGMA foreign_keys=ON")

        migration_mgr = MigrationManager(self._conn)
        old_version = migration_mgr.get_current_version()
        applied = migration_mgr.apply_migrations()

        self._log.info(
            "database_connected",
            old_version=old_version,
            new_version=CURRENT_VERSION,
            migrations_applied=applied,
        )

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._log.info("database_closed")

    def __enter__(self) -> "SqliteStore":
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    def get_schema_version(self) -> int:
        """Get the applied schema version."""
        return MigrationManager(self._ensure_connected()).get_current_version()

    def _ensure_connected(self) -> sqlite3.Connection:
        """Ensure database is connected.

        Returns:
            The database connection.

        Raises:
            StoreConnectionError: If not connected.
        """
        if self._conn is None:
            raise StoreConnectionError("Database not connected. Call connect() first.")
        return self._conn

    @contextmanager
    def _transaction(self, operation: str) -> Generator[sqlite3.Connection]:
        """Run a block in a transaction with timing and logging.

        Args:
            operation: Name of the operation for logging.

        Yields:
            The database connection.
        """
        conn = self._ensure_connected()
        start_ns = time.perf_counter_ns()

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            self._log.error(
                "transaction_failed",
                op=operation,
                duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
            )
            raise

        self._log.debug(
            "transaction_complete",
            op=operation,
            duration_ms=round((time.perf_counter_ns() - start_ns) / 1_000_000, 2),
        )

    # ===== Vocabulary =====

    def add_word(
        self,
        normalized_form: str,
        language: str,
        frequency_rank: int | None = None,
        part_of_speech: str | None = None,
    ) -> Word:
        """Insert a word, normalizing its form.

        Args:
            normalized_form: Surface or normalized form.
            language: Language of the word.
            frequency_rank: Position in the language frequency table.
            part_of_speech: Optional part-of-speech tag.

        Returns:
            The stored Word.
        """
        form = normalize_form(normalized_form)
        with self._transaction("add_word") as conn:
            cursor = conn.execute(
                """
                INSERT INTO words (normalized_form, language, frequency_rank, part_of_speech)
                VALUES (?, ?, ?, ?)
                """,
                (form, language, frequency_rank, part_of_speech),
            )
            word_id = cursor.lastrowid
        return Word(
            id=word_id,
            normalized_form=form,
            language=language,
            frequency_rank=frequency_rank,
            part_of_speech=part_of_speech,
        )

    def resolve_words(self, normalized_forms: Iterable[str], language: str) -> list[Word]:
        """Batch-resolve words by normalized form within a language.

        Args:
            normalized_forms: Forms to look up (normalized again here).
            language: Language to search.

        Returns:
            Words found; unknown forms are skipped.
        """
        forms = sorted({normalize_form(f) for f in normalized_forms if f})
        conn = self._ensure_connected()
        words: list[Word] = []
        for chunk in _chunks(forms):
            placeholders = ",".join("?" * len(chunk))
            rows = conn.execute(
                f"SELECT * FROM words WHERE language = ? AND normalized_form IN ({placeholders})",  # noqa: S608
                (language, *chunk),
            ).fetchall()
            words.extend(self._row_to_word(row) for row in rows)
        return words

    def get_words(self, word_ids: Iterable[int]) -> list[Word]:
        """Batch-fetch words by ID."""
        ids = sorted(set(word_ids))
        conn = self._ensure_connected()
        words: list[Word] = []
        for chunk in _chunks(ids):
            placeholders = ",".join("?" * len(chunk))
            rows = conn.execute(
                f"SELECT * FROM words WHERE id IN ({placeholders})",  # noqa: S608
                chunk,
            ).fetchall()
            words.extend(self._row_to_word(row) for row in rows)
        return words

    def user_word_counts(self, user_id: int) -> dict[int, int]:
        """Occurrence count per word across the user's non-archived articles."""
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT wo.word_id AS word_id, COUNT(wo.id) AS occurrences
            FROM word_occurrences wo
            JOIN sentences s ON s.id = wo.sentence_id
            JOIN article_users au ON au.article_id = s.article_id
            WHERE au.user_id = ? AND au.status != ?
            GROUP BY wo.word_id
            """,
            (user_id, ArticleUserStatus.ARCHIVED.value),
        ).fetchall()
        return {row["word_id"]: row["occurrences"] for row in rows}

    @staticmethod
    def _row_to_word(row: sqlite3.Row) -> Word:
        return Word(
            id=row["id"],
            normalized_form=row["normalized_form"],
            language=row["language"],
            frequency_rank=row["frequency_rank"],
            part_of_speech=row["part_of_speech"],
        )

    # ===== Catalog =====

    def add_article(  # noqa: PLR0913
        self,
        title: str,
        url: str,
        language: str,
        source: str | None = None,
        inserted_at: datetime | None = None,
        difficulty_score: float | None = None,
    ) -> CatalogArticle:
        """Insert a catalogued article.

        Returns:
            The stored CatalogArticle.
        """
        inserted_at = inserted_at or datetime.now(UTC)
        with self._transaction("add_article") as conn:
            cursor = conn.execute(
                """
                INSERT INTO articles (title, url, source, language, difficulty_score, inserted_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (title, url, source, language, difficulty_score, inserted_at.isoformat()),
            )
            article_id = cursor.lastrowid
        return self.get_article(article_id)

    def get_article(self, article_id: int) -> CatalogArticle:
        """Get one article with topics preloaded.

        Raises:
            ArticleNotFoundError: If the article does not exist.
        """
        conn = self._ensure_connected()
        row = conn.execute("SELECT * FROM articles WHERE id = ?", (article_id,)).fetchone()
        if row is None:
            raise ArticleNotFoundError(article_id)
        return self._row_to_article(row, self.list_topics_for_article(article_id))

    def list_article_ids(self) -> list[int]:
        """List the IDs of every catalogued article."""
        conn = self._ensure_connected()
        return [row["id"] for row in conn.execute("SELECT id FROM articles ORDER BY id")]

    def list_candidate_articles(self, user_id: int, limit: int) -> list[CatalogArticle]:
        """List articles the user has no association with, topics preloaded.

        Args:
            user_id: The learner.
            limit: Maximum number of articles.

        Returns:
            Articles, newest first.
        """
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT a.* FROM articles a
            WHERE NOT EXISTS (
                SELECT 1 FROM article_users au
                WHERE au.article_id = a.id AND au.user_id = ?
            )
            ORDER BY a.inserted_at DESC, a.id DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
        topics = self._topics_by_article([row["id"] for row in rows])
        return [self._row_to_article(row, topics.get(row["id"], [])) for row in rows]

    def add_sentence(self, article_id: int, position: int, content: str) -> Sentence:
        """Insert a sentence of an article."""
        with self._transaction("add_sentence") as conn:
            cursor = conn.execute(
                "INSERT INTO sentences (article_id, position, content) VALUES (?, ?, ?)",
                (article_id, position, content),
            )
            sentence_id = cursor.lastrowid
        return Sentence(
            id=sentence_id, article_id=article_id, position=position, content=content
        )

    def add_occurrence(self, sentence_id: int, word_id: int, position: int = 0) -> None:
        """Link a word to a sentence it occurs in."""
        with self._transaction("add_occurrence") as conn:
            conn.execute(
                """
                INSERT INTO word_occurrences (sentence_id, word_id, position)
                VALUES (?, ?, ?)
                """,
                (sentence_id, word_id, position),
            )

    def list_sentences(self, article_id: int) -> list[Sentence]:
        """List an article's sentences in reading order."""
        conn = self._ensure_connected()
        rows = conn.execute(
            "SELECT * FROM sentences WHERE article_id = ? ORDER BY position, id",
            (article_id,),
        ).fetchall()
        return [
            Sentence(
                id=row["id"],
                article_id=row["article_id"],
                position=row["position"],
                content=row["content"],
            )
            for row in rows
        ]

    def list_article_words(self, article_id: int) -> list[Word]:
        """List the distinct words occurring in an article."""
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT DISTINCT w.* FROM words w
            JOIN word_occurrences wo ON wo.word_id = w.id
            JOIN sentences s ON s.id = wo.sentence_id
            WHERE s.article_id = ?
            ORDER BY w.id
            """,
            (article_id,),
        ).fetchall()
        return [self._row_to_word(row) for row in rows]

    def update_article_difficulty(
        self, article_id: int, metrics: ArticleDifficulty
    ) -> None:
        """Persist derived difficulty metrics.

        Raises:
            ArticleNotFoundError: If the article does not exist.
        """
        with self._transaction("update_article_difficulty") as conn:
            cursor = conn.execute(
                """
                UPDATE articles SET
                    difficulty_score = ?, unique_word_count = ?,
                    avg_word_frequency = ?, avg_sentence_length = ?
                WHERE id = ?
                """,
                (
                    metrics.difficulty_score,
                    metrics.unique_word_count,
                    metrics.avg_word_frequency,
                    metrics.avg_sentence_length,
                    article_id,
                ),
            )
            if cursor.rowcount == 0:
                raise ArticleNotFoundError(article_id)

    @staticmethod
    def _row_to_article(row: sqlite3.Row, topics: list[ArticleTopic]) -> CatalogArticle:
        return CatalogArticle(
            id=row["id"],
            title=row["title"],
            url=row["url"],
            source=row["source"],
            language=row["language"],
            difficulty_score=row["difficulty_score"],
            unique_word_count=row["unique_word_count"],
            avg_word_frequency=row["avg_word_frequency"],
            avg_sentence_length=row["avg_sentence_length"],
            inserted_at=datetime.fromisoformat(row["inserted_at"]),
            topics=topics,
        )

    # ===== Topics =====

    def tag_article(self, article_id: int, topics: list[tuple[str, float]]) -> None:
        """Replace an article's topics.

        Args:
            article_id: Article to tag.
            topics: (topic, confidence) pairs, confidence in [0, 1].

        Raises:
            ArticleNotFoundError: If the article does not exist.
            ValueError: If a confidence is out of range.
        """
        for topic, confidence in topics:
            if not 0.0 <= confidence <= 1.0:
                msg = f"Confidence for {topic!r} must be in [0, 1], got {confidence}"
                raise ValueError(msg)

        article = self.get_article(article_id)
        with self._transaction("tag_article") as conn:
            conn.execute("DELETE FROM article_topics WHERE article_id = ?", (article_id,))
            conn.executemany(
                """
                INSERT INTO article_topics (article_id, topic, confidence, language)
                VALUES (?, ?, ?, ?)
                """,
                [(article_id, t, c, article.language) for t, c in topics],
            )

    def list_topics_for_article(self, article_id: int) -> list[ArticleTopic]:
        """List topics ordered by confidence descending."""
        return self._topics_by_article([article_id]).get(article_id, [])

    def _topics_by_article(self, article_ids: list[int]) -> dict[int, list[ArticleTopic]]:
        conn = self._ensure_connected()
        result: dict[int, list[ArticleTopic]] = {}
        for chunk in _chunks(sorted(set(article_ids))):
            placeholders = ",".join("?" * len(chunk))
            rows = conn.execute(
                f"""
                SELECT * FROM article_topics WHERE article_id IN ({placeholders})
                ORDER BY confidence DESC, topic ASC
                """,  # noqa: S608
                chunk,
            ).fetchall()
            for row in rows:
                result.setdefault(row["article_id"], []).append(
                    ArticleTopic(
                        article_id=row["article_id"],
                        topic=row["topic"],
                        confidence=row["confidence"],
                        language=row["language"],
                    )
                )
        return result

    # ===== User library and preferences =====

    def associate_user(
        self,
        article_id: int,
        user_id: int,
        status: ArticleUserStatus = ArticleUserStatus.IMPORTED,
    ) -> None:
        """Add an article to a user's library, or update its status."""
        with self._transaction("associate_user") as conn:
            conn.execute(
                """
                INSERT INTO article_users (article_id, user_id, status) VALUES (?, ?, ?)
                ON CONFLICT (article_id, user_id) DO UPDATE SET status = excluded.status
                """,
                (article_id, user_id, status.value),
            )

    def list_user_article_ids(self, user_id: int) -> set[int]:
        """IDs of every article associated with the user, any status."""
        conn = self._ensure_connected()
        rows = conn.execute(
            "SELECT article_id FROM article_users WHERE user_id = ?", (user_id,)
        ).fetchall()
        return {row["article_id"] for row in rows}

    def set_topic_preference(self, user_id: int, topic: str, weight: float) -> None:
        """Set a user's preference multiplier for a topic."""
        with self._transaction("set_topic_preference") as conn:
            conn.execute(
                """
                INSERT INTO user_topic_preferences (user_id, topic, weight) VALUES (?, ?, ?)
                ON CONFLICT (user_id, topic) DO UPDATE SET weight = excluded.weight
                """,
                (user_id, topic, weight),
            )

    def topic_preferences(self, user_id: int) -> dict[str, float]:
        """Topic to weight map; absent topics weigh 1.0."""
        conn = self._ensure_connected()
        rows = conn.execute(
            "SELECT topic, weight FROM user_topic_preferences WHERE user_id = ?",
            (user_id,),
        ).fetchall()
        return {row["topic"]: row["weight"] for row in rows}

    # ===== Review history =====

    def add_review_item(
        self,
        user_id: int,
        word_id: int,
        repetitions: int = 0,
        quality_history: list[int] | None = None,
        due_date: datetime | None = None,
    ) -> None:
        """Schedule a word for review by a user."""
        with self._transaction("add_review_item") as conn:
            conn.execute(
                """
                INSERT INTO review_items (user_id, word_id, repetitions, quality_history, due_date)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (user_id, word_id) DO UPDATE SET
                    repetitions = excluded.repetitions,
                    quality_history = excluded.quality_history,
                    due_date = excluded.due_date
                """,
                (
                    user_id,
                    word_id,
                    repetitions,
                    json.dumps(quality_history or []),
                    _to_iso(due_date),
                ),
            )

    def review_word_ids(self, user_id: int) -> set[int]:
        """Word IDs currently under active review for the user."""
        conn = self._ensure_connected()
        rows = conn.execute(
            "SELECT word_id FROM review_items WHERE user_id = ?", (user_id,)
        ).fetchall()
        return {row["word_id"] for row in rows}

    def review_frequency_ranks(self, user_id: int) -> list[int]:
        """Frequency ranks of reviewed words that have one."""
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT w.frequency_rank AS frequency_rank FROM review_items r
            JOIN words w ON w.id = r.word_id
            WHERE r.user_id = ? AND w.frequency_rank IS NOT NULL
            """,
            (user_id,),
        ).fetchall()
        return [row["frequency_rank"] for row in rows]

    # ===== Discovery =====

    def add_source_site(self, name: str, url: str) -> SourceSite:
        """Insert a crawled source site."""
        with self._transaction("add_source_site") as conn:
            cursor = conn.execute(
                "INSERT INTO source_sites (name, url) VALUES (?, ?)", (name, url)
            )
            site_id = cursor.lastrowid
        return SourceSite(id=site_id, name=name, url=url)

    def add_discovered_article(  # noqa: PLR0913
        self,
        url: str,
        source_site_id: int | None = None,
        title: str | None = None,
        summary: str | None = None,
        language: str | None = None,
        published_at: datetime | None = None,
        discovered_at: datetime | None = None,
        status: DiscoveredStatus = DiscoveredStatus.NEW,
        difficulty_score: float | None = None,
        article_id: int | None = None,
    ) -> DiscoveredArticle:
        """Insert a discovered article.

        Returns:
            The stored DiscoveredArticle with relations preloaded.
        """
        discovered_at = discovered_at or datetime.now(UTC)
        with self._transaction("add_discovered_article") as conn:
            cursor = conn.execute(
                """
                INSERT INTO discovered_articles (
                    source_site_id, url, title, summary, language, published_at,
                    discovered_at, status, difficulty_score, article_id
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    source_site_id,
                    url,
                    title,
                    summary,
                    language,
                    _to_iso(published_at),
                    discovered_at.isoformat(),
                    status.value,
                    difficulty_score,
                    article_id,
                ),
            )
            discovered_id = cursor.lastrowid
        return self.get_discovered_article(discovered_id)

    def set_discovered_user_status(
        self, discovered_id: int, user_id: int, status: DiscoveredUserStatus
    ) -> None:
        """Record a user's decision on a discovered article."""
        with self._transaction("set_discovered_user_status") as conn:
            conn.execute(
                """
                INSERT INTO discovered_article_users (discovered_article_id, user_id, status)
                VALUES (?, ?, ?)
                ON CONFLICT (discovered_article_id, user_id)
                DO UPDATE SET status = excluded.status
                """,
                (discovered_id, user_id, status.value),
            )

    def get_discovered_article(self, discovered_id: int) -> DiscoveredArticle:
        """Get one discovered article with relations preloaded.

        Raises:
            ArticleNotFoundError: If the article does not exist.
        """
        conn = self._ensure_connected()
        row = conn.execute(
            "SELECT * FROM discovered_articles WHERE id = ?", (discovered_id,)
        ).fetchone()
        if row is None:
            raise ArticleNotFoundError(discovered_id, kind="discovered_article")
        return self._preload_discovered([row])[0]

    def list_eligible_discovered(
        self, user_id: int, limit: int
    ) -> list[DiscoveredArticle]:
        """List discovered articles eligible for recommendation to a user.

        Args:
            user_id: The learner.
            limit: Maximum number of articles.

        Returns:
            Articles, most recently discovered first.
        """
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT da.* FROM discovered_articles da
            LEFT JOIN discovered_article_users dau
                ON dau.discovered_article_id = da.id AND dau.user_id = ?
            WHERE (dau.status IS NULL OR dau.status = ?)
              AND (da.status = ? OR (dau.status = ? AND da.article_id IS NULL))
              AND (
                da.article_id IS NULL
                OR da.article_id NOT IN (
                    SELECT article_id FROM article_users WHERE user_id = ?
                )
              )
            ORDER BY da.discovered_at DESC, da.id DESC
            LIMIT ?
            """,
            (
                user_id,
                DiscoveredUserStatus.RECOMMENDED.value,
                DiscoveredStatus.NEW.value,
                DiscoveredUserStatus.RECOMMENDED.value,
                user_id,
                limit,
            ),
        ).fetchall()
        return self._preload_discovered(rows)

    def list_discovered_in_difficulty_window(
        self,
        user_id: int,
        low: float,
        high: float,
        language: str,
        limit: int,
    ) -> list[DiscoveredArticle]:
        """List estimated articles within a difficulty window the user has not acted on."""
        conn = self._ensure_connected()
        rows = conn.execute(
            """
            SELECT da.* FROM discovered_articles da
            LEFT JOIN discovered_article_users dau
                ON dau.discovered_article_id = da.id AND dau.user_id = ?
            WHERE da.language = ?
              AND da.difficulty_score IS NOT NULL
              AND da.difficulty_score >= ? AND da.difficulty_score <= ?
              AND (dau.status IS NULL OR dau.status = ?)
            ORDER BY da.published_at DESC, da.id DESC
            LIMIT ?
            """,
            (
                user_id,
                language,
                low,
                high,
                DiscoveredUserStatus.RECOMMENDED.value,
                limit,
            ),
        ).fetchall()
        return self._preload_discovered(rows)

    def list_discovered_missing_difficulty(self) -> list[int]:
        """IDs of discovered articles without a difficulty estimate."""
        conn = self._ensure_connected()
        rows = conn.execute(
            "SELECT id FROM discovered_articles WHERE difficulty_score IS NULL ORDER BY id"
        ).fetchall()
        return [row["id"] for row in rows]

    def update_discovered_difficulty(
        self,
        discovered_id: int,
        difficulty_score: float,
        avg_sentence_length: float | None,
    ) -> None:
        """Persist a pre-import difficulty estimate.

        Raises:
            ArticleNotFoundError: If the article does not exist.
        """
        with self._transaction("update_discovered_difficulty") as conn:
            cursor = conn.execute(
                """
                UPDATE discovered_articles
                SET difficulty_score = ?, avg_sentence_length = ?
                WHERE id = ?
                """,
                (difficulty_score, avg_sentence_length, discovered_id),
            )
            if cursor.rowcount == 0:
                raise ArticleNotFoundError(discovered_id, kind="discovered_article")

    def _preload_discovered(self, rows: list[sqlite3.Row]) -> list[DiscoveredArticle]:
        """Build DiscoveredArticle models with source site and linked article."""
        conn = self._ensure_connected()
        site_ids = sorted({row["source_site_id"] for row in rows if row["source_site_id"]})
        sites: dict[int, SourceSite] = {}
        for chunk in _chunks(site_ids):
            placeholders = ",".join("?" * len(chunk))
            for site_row in conn.execute(
                f"SELECT * FROM source_sites WHERE id IN ({placeholders})",  # noqa: S608
                chunk,
            ):
                sites[site_row["id"]] = SourceSite(
                    id=site_row["id"], name=site_row["name"], url=site_row["url"]
                )

        articles: dict[int, CatalogArticle] = {}
        for article_id in {row["article_id"] for row in rows if row["article_id"]}:
            articles[article_id] = self.get_article(article_id)

        return [
            DiscoveredArticle(
                id=row["id"],
                source_site_id=row["source_site_id"],
                url=row["url"],
                title=row["title"],
                summary=row["summary"],
                language=row["language"],
                published_at=_from_iso(row["published_at"]),
                discovered_at=datetime.fromisoformat(row["discovered_at"]),
                status=DiscoveredStatus(row["status"]),
                difficulty_score=row["difficulty_score"],
                avg_sentence_length=row["avg_sentence_length"],
                article_id=row["article_id"],
                source_site=sites.get(row["source_site_id"]),
                article=articles.get(row["article_id"]),
            )
            for row in rows
        ]
