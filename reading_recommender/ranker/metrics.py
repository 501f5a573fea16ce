"""Metrics collection for the ranker module."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RankerMetrics:
    """Metrics for ranker operations.

    Attributes:
        candidates_in: Candidates in the last aggregated pool.
        candidates_out: Recommendations in the last result.
        dropped_below_threshold: Candidates dropped by the score filter.
        scoring_failures: Candidates whose scoring raised.
        titles_resolved: Missing titles filled from a page lookup.
        score_values: Scores from the latest aggregation, for percentiles.
        aggregation_duration_ms: Time spent aggregating.
        diversity_duration_ms: Time spent on diversity selection.
    """

    candidates_in: int = 0
    candidates_out: int = 0
    dropped_below_threshold: int = 0
    scoring_failures: int = 0
    titles_resolved: int = 0
    score_values: list[float] = field(default_factory=list)
    aggregation_duration_ms: float = 0.0
    diversity_duration_ms: float = 0.0

    _instance: ClassVar["RankerMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RankerMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_candidates_in(self, count: int) -> None:
        """Record pool size.

        Args:
            count: Number of candidates.
        """
        self.candidates_in = count

    def record_candidates_out(self, count: int) -> None:
        """Record result size.

        Args:
            count: Number of recommendations.
        """
        self.candidates_out = count

    def record_dropped(self, count: int) -> None:
        """Record candidates dropped by the score filter.

        Args:
            count: Number dropped.
        """
        self.dropped_below_threshold += count

    def record_scoring_failure(self) -> None:
        """Record a candidate whose scoring raised."""
        self.scoring_failures += 1

    def record_titles_resolved(self, count: int) -> None:
        """Record titles filled from page lookups.

        Args:
            count: Number resolved.
        """
        self.titles_resolved += count

    def clear_scores(self) -> None:
        """Drop scores recorded by a previous aggregation."""
        self.score_values.clear()

    def record_score(self, score: float) -> None:
        """Record a score for percentile calculation.

        Args:
            score: Score value.
        """
        self.score_values.append(score)

    def record_aggregation_duration(self, duration_ms: float) -> None:
        """Record aggregation duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.aggregation_duration_ms = duration_ms

    def record_diversity_duration(self, duration_ms: float) -> None:
        """Record diversity selection duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.diversity_duration_ms = duration_ms

    def get_score_percentiles(self) -> dict[str, float]:
        """Calculate score percentiles (p50/p90/p99).

        Returns:
            Dictionary with p50, p90, p99 values.
        """
        if not self.score_values:
            return {"p50": 0.0, "p90": 0.0, "p99": 0.0}

        sorted_scores = sorted(self.score_values)
        n = len(sorted_scores)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_scores[min(idx, n - 1)]

        return {
            "p50": percentile(50),
            "p90": percentile(90),
            "p99": percentile(99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "candidates_in": self.candidates_in,
            "candidates_out": self.candidates_out,
            "dropped_below_threshold": self.dropped_below_threshold,
            "scoring_failures": self.scoring_failures,
            "titles_resolved": self.titles_resolved,
            "aggregation_duration_ms": self.aggregation_duration_ms,
            "diversity_duration_ms": self.diversity_duration_ms,
            "score_percentiles": self.get_score_percentiles(),
        }
