"""Recommendation engine entry point."""

import random
import time
import uuid
from datetime import datetime

import structlog

from reading_recommender.cache.memory import (
    DEFAULT_TTL_SECONDS,
    InMemoryRecommendationCache,
    RecommendationCache,
)
from reading_recommender.config.schemas import RecommenderConfig
from reading_recommender.fetch.title import TitleFetcher
from reading_recommender.observability.logging import (
    bind_user_context,
    clear_user_context,
)
from reading_recommender.ranker.aggregator import (
    CandidateAggregator,
    discovered_match_score_pure,
    sort_key,
)
from reading_recommender.ranker.constants import (
    LEVEL_WINDOW,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
)
from reading_recommender.ranker.diversity import DiversitySelector
from reading_recommender.ranker.metrics import RankerMetrics
from reading_recommender.ranker.models import (
    Candidate,
    Recommendation,
    ScoredCandidate,
)
from reading_recommender.ranker.user_level import UserLevelEstimator
from reading_recommender.store.protocols import (
    CatalogStore,
    DiscoveryStore,
    PreferenceStore,
    ReviewHistoryStore,
    VocabularyStore,
)
from reading_recommender.store.store import SqliteStore


logger = structlog.get_logger()

# Pool fetched per result slot for level-window recommendations
LEVEL_WINDOW_POOL_MULTIPLIER = 3


def _count_key(user_id: int) -> str:
    return f"recommended_count:{user_id}"


class RecommendationEngine:
    """Produces ranked, source-diverse reading recommendations for a learner.

    Flow:
        aggregate (pool + scores) -> diversity selection -> entries

    The only cached value is the per-user recommendation count; the cache is
    advisory and every lookup may miss.
    """

    def __init__(  # noqa: PLR0913
        self,
        catalog: CatalogStore,
        discovery: DiscoveryStore,
        vocabulary: VocabularyStore,
        reviews: ReviewHistoryStore,
        preferences: PreferenceStore,
        title_fetcher: TitleFetcher | None = None,
        cache: RecommendationCache | None = None,
        config: RecommenderConfig | None = None,
        cache_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        rng: random.Random | None = None,
        metrics: RankerMetrics | None = None,
        now: datetime | None = None,
        run_id: str | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            catalog: Catalog store.
            discovery: Discovery store.
            vocabulary: Vocabulary store.
            reviews: Review history store.
            preferences: Topic preference store.
            title_fetcher: Title lookup collaborator.
            cache: Recommendation count cache.
            config: Recommender configuration.
            cache_ttl_seconds: Lifetime of cached counts.
            rng: Random source for diversity interleaving.
            metrics: Optional metrics instance.
            now: Reference time for freshness.
            run_id: Run identifier for logging.
        """
        self._run_id = run_id or str(uuid.uuid4())
        self._discovery = discovery
        self._config = config or RecommenderConfig()
        self._cache = cache if cache is not None else InMemoryRecommendationCache()
        self._cache_ttl_seconds = cache_ttl_seconds
        self._metrics = metrics or RankerMetrics.get_instance()
        self._level_estimator = UserLevelEstimator(reviews)
        self._aggregator = CandidateAggregator(
            catalog=catalog,
            discovery=discovery,
            vocabulary=vocabulary,
            reviews=reviews,
            preferences=preferences,
            title_fetcher=title_fetcher,
            config=self._config,
            metrics=self._metrics,
            now=now,
            run_id=self._run_id,
        )
        self._selector = DiversitySelector(self._config.diversity, rng=rng)
        self._log = logger.bind(component="ranker", run_id=self._run_id)

    @classmethod
    def from_store(cls, store: SqliteStore, **kwargs: object) -> "RecommendationEngine":
        """Build an engine whose collaborators are all one SqliteStore.

        Args:
            store: Connected store.
            **kwargs: Remaining constructor arguments.

        Returns:
            The engine.
        """
        return cls(
            catalog=store,
            discovery=store,
            vocabulary=store,
            reviews=store,
            preferences=store,
            **kwargs,  # type: ignore[arg-type]
        )

    @property
    def aggregator(self) -> CandidateAggregator:
        """The candidate aggregator."""
        return self._aggregator

    def recommend(self, user_id: int, limit: int = 10) -> list[Recommendation]:
        """Recommend articles for a user.

        Args:
            user_id: The learner.
            limit: Maximum number of recommendations.

        Returns:
            Recommendations in selection order; empty when nothing scores
            above the threshold.
        """
        bind_user_context(user_id)
        try:
            self._log.info("recommend_started", limit=limit)
            if limit <= 0:
                return []

            scored = self._aggregator.aggregate(user_id, limit)

            start = time.perf_counter()
            selected = self._selector.select(scored, limit)
            self._metrics.record_diversity_duration((time.perf_counter() - start) * 1000)

            recommendations = [Recommendation.from_scored(s) for s in selected]
            self._metrics.record_candidates_out(len(recommendations))
            self._cache.put(
                _count_key(user_id),
                (limit, len(recommendations)),
                self._cache_ttl_seconds,
            )

            self._log.info(
                "recommend_complete",
                pool=len(scored),
                returned=len(recommendations),
                discovered=sum(1 for r in recommendations if r.is_discovered),
            )
            return recommendations
        finally:
            clear_user_context()

    def recommended_count(self, user_id: int, limit: int = 10) -> int:
        """Number of recommendations available, cached per user.

        Args:
            user_id: The learner.
            limit: Page size the count is computed for.

        Returns:
            Count of recommendations recommend() would return.
        """
        cached = self._cache.get(_count_key(user_id))
        if isinstance(cached, tuple) and cached[0] == limit:
            self._log.debug("recommended_count_cache_hit", user_id=user_id)
            return int(cached[1])
        return len(self.recommend(user_id, limit))

    def recommend_for_level(self, user_id: int, limit: int = 5) -> list[Recommendation]:
        """Recommend discovered articles whose difficulty suits the user's level.

        Only articles with an estimate within LEVEL_WINDOW of the user's
        numeric level, and not yet acted on by the user, are considered.

        Args:
            user_id: The learner.
            limit: Maximum number of recommendations.

        Returns:
            Recommendations, best match first.
        """
        if limit <= 0:
            return []

        level = self._level_estimator.estimate(user_id).numeric_level
        low = max(level - LEVEL_WINDOW, MIN_DIFFICULTY)
        high = min(level + LEVEL_WINDOW, MAX_DIFFICULTY)
        pool = self._discovery.list_discovered_in_difficulty_window(
            user_id,
            low,
            high,
            self._config.default_language,
            limit * LEVEL_WINDOW_POOL_MULTIPLIER,
        )

        scored = [
            ScoredCandidate(
                candidate=Candidate.from_discovered(d, self._config.default_language),
                score=discovered_match_score_pure(
                    d.difficulty_score, level, self._config.scoring
                ),
            )
            for d in pool
        ]
        scored.sort(key=sort_key)

        self._log.info(
            "level_recommendations_complete",
            user_id=user_id,
            numeric_level=round(level, 3),
            pool=len(pool),
        )
        return [Recommendation.from_scored(s) for s in scored[:limit]]

    def invalidate(self, user_id: int) -> None:
        """Drop cached results after the user's library changes.

        Args:
            user_id: The learner.
        """
        self._cache.invalidate(_count_key(user_id))
        self._log.debug("recommendations_invalidated", user_id=user_id)
