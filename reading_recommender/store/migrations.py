"""SQLite schema migrations for the content store."""

import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from reading_recommender.store.errors import MigrationError


logger = structlog.get_logger()

CURRENT_VERSION = 2


@dataclass(frozen=True)
class Migration:
    """A database migration.

    Attributes:
        version: Target version after applying this migration.
        description: Human-readable description.
        up_sql: SQL to apply the migration.
    """

    version: int
    description: str
    up_sql: str


MIGRATIONS: list[Migration] = [
    Migration(
        version=1,
        description="Catalog, vocabulary, and study tables",
        up_sql="""
CREATE TABLE IF NOT EXISTS words (
    id INTEGER PRIMARY KEY,
    normalized_form TEXT NOT NULL,
    language TEXT NOT NULL,
    frequency_rank INTEGER,
    part_of_speech TEXT,
    UNIQUE (normalized_form, language)
);

CREATE TABLE IF NOT EXISTS articles (
    id INTEGER PRIMARY KEY,
    title TEXT NOT NULL,
    url TEXT NOT NULL UNIQUE,
    source TEXT,
    language TEXT NOT NULL,
    difficulty_score REAL,
    unique_word_count INTEGER,
    avg_word_frequency REAL,
    avg_sentence_length REAL,
    inserted_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS article_topics (
    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
    topic TEXT NOT NULL,
    confidence REAL NOT NULL CHECK (confidence >= 0.0 AND confidence <= 1.0),
    language TEXT NOT NULL,
    PRIMARY KEY (article_id, topic)
);

CREATE TABLE IF NOT EXISTS sentences (
    id INTEGER PRIMARY KEY,
    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    content TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_sentences_article_id ON sentences(article_id);

CREATE TABLE IF NOT EXISTS word_occurrences (
    id INTEGER PRIMARY KEY,
    sentence_id INTEGER NOT NULL REFERENCES sentences(id) ON DELETE CASCADE,
    word_id INTEGER NOT NULL REFERENCES words(id),
    position INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_sentence_id
    ON word_occurrences(sentence_id);
CREATE INDEX IF NOT EXISTS idx_word_occurrences_word_id ON word_occurrences(word_id);

CREATE TABLE IF NOT EXISTS article_users (
    article_id INTEGER NOT NULL REFERENCES articles(id) ON DELETE CASCADE,
    user_id INTEGER NOT NULL,
    status TEXT NOT NULL,
    PRIMARY KEY (article_id, user_id)
);
CREATE INDEX IF NOT EXISTS idx_article_users_user_id ON article_users(user_id);

CREATE TABLE IF NOT EXISTS user_topic_preferences (
    user_id INTEGER NOT NULL,
    topic TEXT NOT NULL,
    weight REAL NOT NULL,
    PRIMARY KEY (user_id, topic)
);

CREATE TABLE IF NOT EXISTS review_items (
    user_id INTEGER NOT NULL,
    word_id INTEGER NOT NULL REFERENCES words(id),
    repetitions INTEGER NOT NULL DEFAULT 0,
    quality_history TEXT NOT NULL DEFAULT '[]',
    due_date TEXT,
    PRIMARY KEY (user_id, word_id)
);
""",
    ),
    Migration(
        version=2,
        description="Source sites and discovered articles",
        up_sql="""
CREATE TABLE IF NOT EXISTS source_sites (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    url TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS discovered_articles (
    id INTEGER PRIMARY KEY,
    source_site_id INTEGER REFERENCES source_sites(id),
    url TEXT NOT NULL,
    title TEXT,
    summary TEXT,
    language TEXT,
    published_at TEXT,
    discovered_at TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'new',
    difficulty_score REAL,
    avg_sentence_length REAL,
    article_id INTEGER REFERENCES articles(id),
    UNIQUE (source_site_id, url)
);
CREATE INDEX IF NOT EXISTS idx_discovered_articles_discovered_at
    ON discovered_articles(discovered_at);

CREATE TABLE IF NOT EXISTS discovered_article_users (
    discovered_article_id INTEGER NOT NULL
        REFERENCES discovered_articles(id) ON DELETE CASCADE,
    user_id INTEGER NOT NULL,
    status TEXT NOT NULL,
    PRIMARY KEY (discovered_article_id, user_id)
);
""",
    ),
]


class MigrationManager:
    """Manages SQLite schema migrations."""

    VERSION_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL,
    description TEXT
);
"""

    def __init__(self, connection: sqlite3.Connection) -> None:
        """Initialize the migration manager.

        Args:
            connection: SQLite connection to manage.
        """
        self._conn = connection
        self._log = logger.bind(component="store", operation="migration")

    def get_current_version(self) -> int:
        """Get the current schema version.

        Returns:
            Current version number, or 0 if no migrations applied.
        """
        self._conn.execute(self.VERSION_TABLE_SQL)
        self._conn.commit()
        row = self._conn.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0] if row[0] is not None else 0

    def apply_migrations(self) -> list[int]:
        """Apply all pending migrations.

        Returns:
            List of version numbers that were applied.

        Raises:
            MigrationError: If a migration fails.
        """
        current = self.get_current_version()
        pending = [m for m in MIGRATIONS if m.version > current]
        applied: list[int] = []

        for migration in pending:
            self._log.info(
                "applying_migration",
                version=migration.version,
                description=migration.description,
            )
            try:
                self._conn.executescript(migration.up_sql)
                self._conn.execute(
                    """
                    INSERT INTO schema_version (version, applied_at, description)
                    VALUES (?, ?, ?)
                    """,
                    (
                        migration.version,
                        datetime.now(UTC).isoformat(),
                        migration.description,
                    ),
                )
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                self._log.error(
                    "migration_failed", version=migration.version, error=str(e)
                )
                raise MigrationError(migration.version, str(e)) from e
            applied.append(migration.version)

        return applied
