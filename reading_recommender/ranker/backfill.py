"""Batch recomputation of stored difficulty scores."""

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from reading_recommender.ranker.difficulty import DifficultyEstimator
from reading_recommender.store.protocols import CatalogStore, DiscoveryStore


logger = structlog.get_logger()


@dataclass(frozen=True)
class BackfillFailure:
    """A single item that could not be recomputed.

    Attributes:
        item_id: Article or discovered article ID.
        error: Error message.
    """

    item_id: int
    error: str


@dataclass
class BackfillResult:
    """Outcome of a difficulty sweep.

    Attributes:
        kind: "catalog" or "discovered".
        processed: Items attempted.
        succeeded: Items recomputed and persisted.
        failures: Items that failed, in processing order.
        duration_ms: Wall-clock duration.
    """

    kind: str
    processed: int = 0
    succeeded: int = 0
    failures: list[BackfillFailure] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def failed(self) -> int:
        """Number of failed items."""
        return len(self.failures)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind,
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": [{"item_id": f.item_id, "error": f.error} for f in self.failures],
            "duration_ms": round(self.duration_ms, 2),
        }


class DifficultyBackfill:
    """Recomputes difficulty across the catalog or unestimated discovered articles.

    Each item is computed and persisted on its own; one failure is recorded
    and the sweep moves on.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        discovery: DiscoveryStore,
        estimator: DifficultyEstimator,
        default_language: str = "spanish",
        run_id: str | None = None,
    ) -> None:
        """Initialize the backfill.

        Args:
            catalog: Catalog store.
            discovery: Discovery store.
            estimator: Difficulty estimator that persists results.
            default_language: Language for discovered articles without one.
            run_id: Run identifier for logging.
        """
        self._catalog = catalog
        self._discovery = discovery
        self._estimator = estimator
        self._default_language = default_language
        self._log = logger.bind(
            component="ranker",
            subcomponent="backfill",
            run_id=run_id,
        )

    def refresh_catalog(self) -> BackfillResult:
        """Recompute and persist difficulty for every catalogued article."""
        return self._sweep(
            "catalog",
            self._catalog.list_article_ids(),
            self._estimator.calculate_article_difficulty,
        )

    def refresh_discovered(self) -> BackfillResult:
        """Estimate and persist difficulty for discovered articles missing one."""

        def _process(discovered_id: int) -> object:
            discovered = self._discovery.get_discovered_article(discovered_id)
            return self._estimator.calculate_discovered_difficulty(
                discovered, self._default_language
            )

        return self._sweep(
            "discovered",
            self._discovery.list_discovered_missing_difficulty(),
            _process,
        )

    def _sweep(
        self,
        kind: str,
        item_ids: list[int],
        process: Callable[[int], object],
    ) -> BackfillResult:
        start_ns = time.perf_counter_ns()
        result = BackfillResult(kind=kind)
        self._log.info("backfill_started", kind=kind, items=len(item_ids))

        for item_id in item_ids:
            result.processed += 1
            try:
                process(item_id)
            except Exception as e:  # noqa: BLE001
                result.failures.append(BackfillFailure(item_id=item_id, error=str(e)))
                self._log.warning(
                    "backfill_item_failed", kind=kind, item_id=item_id, error=str(e)
                )
                continue
            result.succeeded += 1

        result.duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000
        self._log.info(
            "backfill_complete",
            kind=kind,
            processed=result.processed,
            succeeded=result.succeeded,
            failed=result.failed,
            duration_ms=round(result.duration_ms, 2),
        )
        return result
