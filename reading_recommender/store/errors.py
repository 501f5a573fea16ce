"""Domain exceptions for the content store.

Infrastructure errors (database issues) are separated from domain errors
(missing records) so callers can isolate per-item failures.
"""


class StoreError(Exception):
    """Base exception for all store errors."""


class StoreConnectionError(StoreError):
    """Raised when the database connection is missing or broken."""

    def __init__(self, message: str = "Database not connected") -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class ArticleNotFoundError(StoreError):
    """Raised when a catalogued or discovered article does not exist."""

    def __init__(self, article_id: int, kind: str = "article") -> None:
        """Initialize the error with the missing ID.

        Args:
            article_id: The ID that was not found.
            kind: Which table was searched ("article" or "discovered_article").
        """
        self.article_id = article_id
        self.kind = kind
        super().__init__(f"{kind} not found: {article_id}")


class MigrationError(StoreError):
    """Raised when a schema migration fails."""

    def __init__(self, version: int, message: str) -> None:
        """Initialize the migration error.

        Args:
            version: The migration version that failed.
            message: Human-readable error message.
        """
        self.version = version
        super().__init__(f"Migration {version} failed: {message}")
