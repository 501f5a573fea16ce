"""Metrics collection for title lookups."""

from dataclasses import dataclass, field
from typing import ClassVar

from reading_recommender.fetch.models import FetchErrorKind


@dataclass
class FetchMetrics:
    """Metrics for title lookups.

    Singleton class that tracks lookup counts, failures by kind, and
    time spent fetching.
    """

    title_fetches_total: int = 0
    title_fetch_successes: int = 0
    title_fetch_failures: dict[str, int] = field(default_factory=dict)
    title_fetch_duration_ms_total: float = 0.0

    _instance: ClassVar["FetchMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_success(self, duration_ms: float) -> None:
        """Record a lookup that found a title.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.title_fetches_total += 1
        self.title_fetch_successes += 1
        self.title_fetch_duration_ms_total += duration_ms

    def record_failure(self, kind: FetchErrorKind, duration_ms: float) -> None:
        """Record a failed lookup.

        Args:
            kind: Classification of the failure.
            duration_ms: Duration in milliseconds.
        """
        self.title_fetches_total += 1
        key = kind.value
        self.title_fetch_failures[key] = self.title_fetch_failures.get(key, 0) + 1
        self.title_fetch_duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, int | float | dict[str, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "title_fetches_total": self.title_fetches_total,
            "title_fetch_successes": self.title_fetch_successes,
            "title_fetch_failures": dict(self.title_fetch_failures),
            "title_fetch_duration_ms_total": self.title_fetch_duration_ms_total,
        }
