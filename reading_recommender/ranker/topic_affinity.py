"""Topic affinity scoring with a small freshness bonus."""

from datetime import UTC, datetime

from reading_recommender.config.schemas import ScoringConfig
from reading_recommender.store.models import ArticleTopic


DEFAULT_TOPIC_WEIGHT = 1.0


def freshness_bonus_pure(
    published_at: datetime | None,
    now: datetime,
    window_days: int = 30,
    max_bonus: float = 0.1,
) -> float:
    """Linear freshness bonus over whole days since publication.

    Args:
        published_at: Publication (or insertion) time; None gets no bonus.
        now: Reference time.
        window_days: Days after which the bonus reaches zero.
        max_bonus: Bonus for content published today.

    Returns:
        Bonus in [0, max_bonus].
    """
    if published_at is None:
        return 0.0
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=UTC)
    days = max(0, (now - published_at).days)
    return max(0.0, 1.0 - days / window_days) * max_bonus


class TopicAffinityScorer:
    """Scores an article's topics against a user's topic preferences.

    score = sum(confidence * user_weight(topic)) + freshness_bonus, where
    topics without an explicit preference weigh 1.0.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the scorer.

        Args:
            config: Scoring configuration.
            now: Fixed reference time for freshness; the current time is
                read on every call when omitted.
        """
        self._config = config or ScoringConfig()
        self._now = now

    def score(
        self,
        topics: list[ArticleTopic],
        preferences: dict[str, float],
        published_at: datetime | None,
    ) -> float:
        """Compute the topic affinity score.

        Args:
            topics: The article's topics.
            preferences: User topic weights.
            published_at: When the article was published or inserted.

        Returns:
            Non-negative score, typically 0-2.
        """
        base = sum(
            t.confidence * preferences.get(t.topic, DEFAULT_TOPIC_WEIGHT) for t in topics
        )
        bonus = freshness_bonus_pure(
            published_at,
            self._now or datetime.now(UTC),
            window_days=self._config.freshness_window_days,
            max_bonus=self._config.freshness_max_bonus,
        )
        return base + bonus
