"""Learner level estimation from review history."""

import structlog

from reading_recommender.ranker.constants import (
    LEVEL_BANDS,
    MAX_LEVEL_NUMERIC,
    MAX_USER_LEVEL,
    MIN_USER_LEVEL,
)
from reading_recommender.ranker.models import CefrLevel, UserLevel
from reading_recommender.store.protocols import ReviewHistoryStore


logger = structlog.get_logger()

DEFAULT_USER_LEVEL = UserLevel(cefr_level=CefrLevel.A1, numeric_level=MIN_USER_LEVEL)


def level_from_ranks_pure(ranks: list[int]) -> UserLevel:
    """Map the frequency ranks of reviewed words to a level.

    Args:
        ranks: Frequency ranks of the words under review.

    Returns:
        UserLevel; A1/1.0 when there is nothing to go on.
    """
    if not ranks:
        return DEFAULT_USER_LEVEL

    avg_rank = sum(ranks) / len(ranks)
    for upper, cefr, base, offset, divisor in LEVEL_BANDS:
        if avg_rank <= upper:
            numeric = base + (avg_rank - offset) / divisor
            return UserLevel(
                cefr_level=CefrLevel(cefr),
                numeric_level=min(MAX_USER_LEVEL, max(MIN_USER_LEVEL, numeric)),
            )

    return UserLevel(cefr_level=CefrLevel.C2, numeric_level=MAX_LEVEL_NUMERIC)


class UserLevelEstimator:
    """Derives a learner's CEFR bucket and numeric level."""

    def __init__(self, reviews: ReviewHistoryStore) -> None:
        """Initialize the estimator.

        Args:
            reviews: Review history store.
        """
        self._reviews = reviews
        self._log = logger.bind(component="ranker", subcomponent="user_level")

    def estimate(self, user_id: int) -> UserLevel:
        """Estimate a user's level from their ranked review items.

        Args:
            user_id: The learner.

        Returns:
            The estimated level.
        """
        ranks = self._reviews.review_frequency_ranks(user_id)
        level = level_from_ranks_pure(ranks)
        self._log.debug(
            "user_level_estimated",
            ranked_items=len(ranks),
            cefr_level=level.cefr_level.value,
            numeric_level=round(level.numeric_level, 3),
        )
        return level
