"""Candidate pool assembly and per-candidate scoring."""

import time
from dataclasses import dataclass, field
from datetime import datetime

import structlog

from reading_recommender.config.schemas import RecommenderConfig, ScoringConfig
from reading_recommender.fetch.title import TitleFetcher, resolve_titles
from reading_recommender.ranker.constants import (
    LEVEL_GAP_BANDS,
    NEUTRAL_DIFFICULTY,
    NEUTRAL_SIGNAL,
)
from reading_recommender.ranker.metrics import RankerMetrics
from reading_recommender.ranker.models import (
    Candidate,
    CandidateKind,
    ScoredCandidate,
    UserLevel,
)
from reading_recommender.ranker.novelty import VocabularyNoveltyScorer
from reading_recommender.ranker.topic_affinity import TopicAffinityScorer
from reading_recommender.ranker.user_level import UserLevelEstimator
from reading_recommender.store.models import CatalogArticle, DiscoveredArticle
from reading_recommender.store.protocols import (
    CatalogStore,
    DiscoveryStore,
    PreferenceStore,
    ReviewHistoryStore,
    VocabularyStore,
)


logger = structlog.get_logger()


def _level_match(gap: float) -> float:
    for upper, score in LEVEL_GAP_BANDS:
        if gap <= upper:
            return score
    return 0.0


def _novelty_proxy(diff: float) -> float:
    if diff < 0:
        return 0.5
    if diff == 0:
        return 0.8
    if diff <= 1.5:
        return 1.0
    if diff <= 2.5:
        return 0.7
    return 0.3


def _challenge_bonus(diff: float) -> float:
    if diff <= 0:
        return 0.5
    if diff <= 1.0:
        return 1.0
    if diff <= 2.0:
        return 0.7
    return 0.3


def discovered_match_score_pure(
    difficulty_score: float | None,
    user_level: float,
    config: ScoringConfig | None = None,
) -> float:
    """Score a discovered article's difficulty against a user's level.

    Combines level match, a difficulty-gap novelty proxy, a constant topic
    placeholder, and a bonus for content slightly above the user's level.

    Args:
        difficulty_score: Estimated difficulty, None if never estimated.
        user_level: The user's numeric level.
        config: Scoring weights.

    Returns:
        Score in [0, 1].
    """
    config = config or ScoringConfig()
    estimated = difficulty_score is not None
    difficulty = difficulty_score if difficulty_score is not None else NEUTRAL_DIFFICULTY
    diff = difficulty - user_level

    level_match = _level_match(abs(diff))
    novelty_proxy = _novelty_proxy(diff) if estimated else NEUTRAL_SIGNAL
    challenge = _challenge_bonus(diff)

    return (
        config.level_match_weight * level_match
        + config.novelty_proxy_weight * novelty_proxy
        + config.topic_placeholder_weight * NEUTRAL_SIGNAL
        + config.challenge_weight * challenge
    )


def catalog_score_pure(
    topic_score: float,
    novelty_score: float,
    has_words: bool,
    config: ScoringConfig | None = None,
) -> float:
    """Combine topic and novelty scores for a catalogued article.

    Without extracted words the novelty signal is meaningless, so topic
    affinity carries the full weight.

    Args:
        topic_score: Topic affinity score.
        novelty_score: Vocabulary novelty score.
        has_words: Whether the article has extracted words.
        config: Scoring weights.

    Returns:
        Final score.
    """
    config = config or ScoringConfig()
    if not has_words:
        return topic_score
    return (
        topic_score * config.catalog_topic_weight
        + novelty_score * config.catalog_vocab_weight
    )


def sort_key(scored: ScoredCandidate) -> tuple[float, str]:
    """Deterministic ordering: score descending, then URL ascending."""
    return (-scored.score, scored.candidate.url)


@dataclass
class UserContext:
    """Per-user signals loaded once per aggregation.

    Attributes:
        user_id: The learner.
        level: Estimated level.
        preferences: Topic weights.
        word_counts: Word exposure counts.
        review_ids: Word IDs under active review.
    """

    user_id: int
    level: UserLevel
    preferences: dict[str, float] = field(default_factory=dict)
    word_counts: dict[int, int] = field(default_factory=dict)
    review_ids: set[int] = field(default_factory=set)


def build_candidates_pure(
    discovered: list[DiscoveredArticle],
    catalogued: list[CatalogArticle],
    default_language: str,
) -> list[Candidate]:
    """Resolve raw pool entries into deduplicated candidates.

    Discovered entries linked to a catalogued article become catalogued
    candidates. Identity is the catalog ID, else the URL; a discovered-only
    entry whose URL matches a catalogued candidate is dropped.

    Args:
        discovered: Eligible discovered entries, most recent first.
        catalogued: Catalogued articles not associated with the user.
        default_language: Language for discovered entries without one.

    Returns:
        Candidates with catalogued ones first.
    """
    catalog_candidates: list[Candidate] = []
    discovered_only: list[DiscoveredArticle] = []
    for entry in discovered:
        if entry.article is not None:
            catalog_candidates.append(Candidate.from_catalog(entry.article, entry))
        else:
            discovered_only.append(entry)
    catalog_candidates.extend(Candidate.from_catalog(a) for a in catalogued)

    result: list[Candidate] = []
    seen: set[tuple[str, int | str]] = set()
    catalog_urls: set[str] = set()
    for candidate in catalog_candidates:
        if candidate.identity in seen:
            continue
        seen.add(candidate.identity)
        catalog_urls.add(candidate.url)
        result.append(candidate)

    for entry in discovered_only:
        candidate = Candidate.from_discovered(entry, default_language)
        if candidate.url in catalog_urls or candidate.identity in seen:
            continue
        seen.add(candidate.identity)
        result.append(candidate)

    return result


class CandidateAggregator:
    """Assembles the candidate pool and scores every candidate for a user.

    Catalogued candidates are scored on topic affinity and vocabulary
    novelty; discovered-only candidates on estimated difficulty vs. the
    user's level. A failure while scoring one candidate gives it score 0 and
    never aborts the batch.
    """

    def __init__(  # noqa: PLR0913
        self,
        catalog: CatalogStore,
        discovery: DiscoveryStore,
        vocabulary: VocabularyStore,
        reviews: ReviewHistoryStore,
        preferences: PreferenceStore,
        title_fetcher: TitleFetcher | None = None,
        config: RecommenderConfig | None = None,
        metrics: RankerMetrics | None = None,
        now: datetime | None = None,
        run_id: str | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            catalog: Catalog store.
            discovery: Discovery store.
            vocabulary: Vocabulary store.
            reviews: Review history store.
            preferences: Topic preference store.
            title_fetcher: Title lookup collaborator; without one, missing
                titles fall back to the URL.
            config: Recommender configuration.
            metrics: Optional metrics instance.
            now: Reference time for freshness.
            run_id: Run identifier for logging.
        """
        self._catalog = catalog
        self._discovery = discovery
        self._vocabulary = vocabulary
        self._reviews = reviews
        self._preferences = preferences
        self._title_fetcher = title_fetcher
        self._config = config or RecommenderConfig()
        self._metrics = metrics or RankerMetrics.get_instance()
        self._level_estimator = UserLevelEstimator(reviews)
        self._topic_scorer = TopicAffinityScorer(self._config.scoring, now=now)
        self._novelty_scorer = VocabularyNoveltyScorer(
            self._config.scoring.novelty_seen_threshold
        )
        self._log = logger.bind(
            component="ranker",
            subcomponent="aggregator",
            run_id=run_id,
        )

    def load_user_context(self, user_id: int) -> UserContext:
        """Load the per-user signals used by every candidate.

        Args:
            user_id: The learner.

        Returns:
            UserContext for scoring.
        """
        return UserContext(
            user_id=user_id,
            level=self._level_estimator.estimate(user_id),
            preferences=self._preferences.topic_preferences(user_id),
            word_counts=self._vocabulary.user_word_counts(user_id),
            review_ids=self._reviews.review_word_ids(user_id),
        )

    def aggregate(self, user_id: int, limit: int) -> list[ScoredCandidate]:
        """Build, score, filter, and order the candidate pool.

        Args:
            user_id: The learner.
            limit: Requested number of recommendations; pool sizes scale
                with it.

        Returns:
            Candidates scoring above the threshold, best first.
        """
        start = time.perf_counter()
        pool = self._config.pool
        self._metrics.clear_scores()

        discovered = self._discovery.list_eligible_discovered(
            user_id, limit * pool.discovered_pool_multiplier
        )
        catalogued = self._catalog.list_candidate_articles(
            user_id, limit * pool.catalog_pool_multiplier
        )
        candidates = build_candidates_pure(
            discovered, catalogued, self._config.default_language
        )
        self._metrics.record_candidates_in(len(candidates))

        candidates = self._resolve_titles(candidates)
        context = self.load_user_context(user_id)

        scored = [self._score_candidate(c, context) for c in candidates]
        for s in scored:
            self._metrics.record_score(s.score)

        min_score = self._config.scoring.min_score
        kept = [s for s in scored if s.score > min_score]
        kept.sort(key=sort_key)
        self._metrics.record_dropped(len(scored) - len(kept))

        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_aggregation_duration(duration_ms)
        self._log.info(
            "aggregation_complete",
            discovered_in=len(discovered),
            catalogued_in=len(catalogued),
            candidates=len(candidates),
            kept=len(kept),
            user_level=round(context.level.numeric_level, 3),
            duration_ms=round(duration_ms, 2),
        )
        return kept

    def score_article_for_user(
        self,
        article: CatalogArticle,
        user_id: int,
        context: UserContext | None = None,
    ) -> float:
        """Score a catalogued article for a user.

        Args:
            article: The catalogued article, topics preloaded.
            user_id: The learner.
            context: Preloaded user signals, loaded on demand if None.

        Returns:
            Combined topic and novelty score.
        """
        context = context or self.load_user_context(user_id)
        words = self._catalog.list_article_words(article.id)
        topic_score = self._topic_scorer.score(
            article.topics, context.preferences, article.inserted_at
        )
        novelty_score = self._novelty_scorer.score(
            words, context.word_counts, context.review_ids
        )
        return catalog_score_pure(
            topic_score, novelty_score, bool(words), self._config.scoring
        )

    def score_discovered_article_match(
        self,
        discovered: DiscoveredArticle,
        user_id: int,
        level: UserLevel | None = None,
    ) -> float:
        """Score a discovered article's estimated difficulty for a user.

        Args:
            discovered: The discovered article.
            user_id: The learner.
            level: Preloaded user level, estimated on demand if None.

        Returns:
            Match score in [0, 1].
        """
        level = level or self._level_estimator.estimate(user_id)
        return discovered_match_score_pure(
            discovered.difficulty_score, level.numeric_level, self._config.scoring
        )

    def _score_candidate(
        self, candidate: Candidate, context: UserContext
    ) -> ScoredCandidate:
        try:
            if candidate.kind == CandidateKind.CATALOGUED and candidate.article:
                score = self.score_article_for_user(
                    candidate.article, context.user_id, context
                )
            else:
                score = discovered_match_score_pure(
                    candidate.difficulty_score,
                    context.level.numeric_level,
                    self._config.scoring,
                )
        except Exception as e:  # noqa: BLE001
            self._metrics.record_scoring_failure()
            self._log.warning(
                "candidate_scoring_failed",
                kind=candidate.kind.value,
                article_id=candidate.id,
                discovered_article_id=candidate.discovered_article_id,
                error=str(e),
            )
            return ScoredCandidate(candidate=candidate, score=0.0, error=str(e))
        return ScoredCandidate(candidate=candidate, score=score)

    def _resolve_titles(self, candidates: list[Candidate]) -> list[Candidate]:
        """Fill in missing titles of discovered candidates, falling back to the URL."""
        missing = [
            c.url
            for c in candidates
            if c.kind == CandidateKind.DISCOVERED and not c.title
        ]
        if not missing:
            return candidates

        if self._title_fetcher is None:
            titles = {url: url for url in missing}
        else:
            fetch_config = self._config.title_fetch
            titles = resolve_titles(
                self._title_fetcher,
                missing,
                max_workers=fetch_config.max_concurrency,
                timeout_seconds=fetch_config.timeout_seconds,
            )
        self._metrics.record_titles_resolved(
            sum(1 for url in missing if titles.get(url, url) != url)
        )
        return [
            c.with_title(titles.get(c.url, c.url))
            if c.kind == CandidateKind.DISCOVERED and not c.title
            else c
            for c in candidates
        ]