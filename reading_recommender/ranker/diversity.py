"""Source diversity selection for recommendation pages."""

import math
import random

import structlog

from reading_recommender.config.schemas import DiversityConfig
from reading_recommender.ranker.models import ScoredCandidate


logger = structlog.get_logger()


def max_per_source_pure(limit: int, source_count: int, cap: int = 3) -> int:
    """Per-source cap for one selection round.

    Args:
        limit: Requested result count.
        source_count: Number of distinct sources in the pool.
        cap: Upper bound regardless of limit.

    Returns:
        min(cap, max(1, ceil(limit / source_count))).
    """
    return min(cap, max(1, math.ceil(limit / source_count)))


class DiversitySelector:
    """Re-ranks a scored pool so no single source monopolizes the page.

    Items are grouped by source; within a source they keep descending score
    order. Sources are visited in a randomized order, each round taking up
    to max_per_source items per source, and rounds repeat until the limit is
    filled or every source is exhausted.
    """

    def __init__(
        self,
        config: DiversityConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the selector.

        Args:
            config: Diversity configuration.
            rng: Random source for the cross-source order.
        """
        self._config = config or DiversityConfig()
        self._rng = rng or random.Random()  # noqa: S311
        self._log = logger.bind(component="ranker", subcomponent="diversity")

    def select(self, scored: list[ScoredCandidate], limit: int) -> list[ScoredCandidate]:
        """Pick up to limit items with bounded per-source share.

        Args:
            scored: Candidates sorted by score descending.
            limit: Requested result count.

        Returns:
            Selected candidates in selection order.
        """
        if limit <= 0 or not scored:
            return []

        unknown = self._config.unknown_source
        queues: dict[str, list[ScoredCandidate]] = {}
        for item in scored:
            queues.setdefault(item.candidate.source_key(unknown), []).append(item)

        if len(queues) <= 1 or len(scored) <= limit:
            return scored[:limit]

        per_round = max_per_source_pure(
            limit, len(queues), self._config.max_per_source_cap
        )
        sources = list(queues)
        self._rng.shuffle(sources)

        # Index of the next untaken item per source
        cursors = dict.fromkeys(sources, 0)
        selected: list[ScoredCandidate] = []

        while len(selected) < limit:
            took_any = False
            for source in sources:
                queue = queues[source]
                start = cursors[source]
                end = min(start + per_round, len(queue), start + limit - len(selected))
                if end > start:
                    selected.extend(queue[start:end])
                    cursors[source] = end
                    took_any = True
                if len(selected) >= limit:
                    break
            if not took_any:
                break

        self._log.debug(
            "diversity_selected",
            pool=len(scored),
            sources=len(sources),
            max_per_source=per_round,
            selected=len(selected),
        )
        return selected
