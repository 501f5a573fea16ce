"""Unit tests for schema migrations."""

import sqlite3
from collections.abc import Generator

import pytest

from reading_recommender.store.migrations import (
    CURRENT_VERSION,
    MIGRATIONS,
    MigrationManager,
)


class TestMigrationConstants:
    """Tests for migration constants."""

    def test_current_version_positive(self) -> None:
        """Test current version is positive."""
        assert CURRENT_VERSION > 0

    def test_migrations_in_order(self) -> None:
        """Test migrations are in ascending version order."""
        versions = [m.version for m in MIGRATIONS]
        assert versions == sorted(versions)

    def test_migrations_have_sql(self) -> None:
        """Test all migrations have up SQL."""
        for migration in MIGRATIONS:
            assert migration.up_sql.strip()

    def test_current_version_matches_latest_migration(self) -> None:
        """Test current version matches the latest migration."""
        assert MIGRATIONS[-1].version == CURRENT_VERSION


class TestMigrationManager:
    """Tests for MigrationManager."""

    @pytest.fixture
    def temp_db(self) -> Generator[sqlite3.Connection]:
        """Create a temporary in-memory database."""
        conn = sqlite3.connect(":memory:")
        yield conn
        conn.close()

    def test_initial_version_zero(self, temp_db: sqlite3.Connection) -> None:
        """Test a fresh database is at version 0."""
        assert MigrationManager(temp_db).get_current_version() == 0

    def test_apply_all(self, temp_db: sqlite3.Connection) -> None:
        """Test applying every migration reaches the current version."""
        manager = MigrationManager(temp_db)

        applied = manager.apply_migrations()

        assert applied == [m.version for m in MIGRATIONS]
        assert manager.get_current_version() == CURRENT_VERSION

    def test_apply_idempotent(self, temp_db: sqlite3.Connection) -> None:
        """Test a second run applies nothing."""
        manager = MigrationManager(temp_db)
        manager.apply_migrations()

        assert manager.apply_migrations() == []

    def test_tables_created(self, temp_db: sqlite3.Connection) -> None:
        """Test the catalog, study, and discovery tables exist."""
        MigrationManager(temp_db).apply_migrations()

        tables = {
            row[0]
            for row in temp_db.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert {
            "words",
            "articles",
            "article_topics",
            "sentences",
            "word_occurrences",
            "article_users",
            "user_topic_preferences",
            "review_items",
            "source_sites",
            "discovered_articles",
            "discovered_article_users",
            "schema_version",
        } <= tables

    def test_confidence_check_constraint(self, temp_db: sqlite3.Connection) -> None:
        """Test topic confidence outside 0-1 is rejected by the schema."""
        MigrationManager(temp_db).apply_migrations()
        temp_db.execute(
            "INSERT INTO articles (id, title, url, language, inserted_at) "
            "VALUES (1, 't', 'https://a.example/1', 'spanish', '2026-01-01T00:00:00+00:00')"
        )

        with pytest.raises(sqlite3.IntegrityError):
            temp_db.execute(
                "INSERT INTO article_topics (article_id, topic, confidence, language) "
                "VALUES (1, 'ciencia', 1.5, 'spanish')"
            )
