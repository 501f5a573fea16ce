"""Vocabulary novelty scoring."""

from reading_recommender.ranker.constants import (
    NOVELTY_FAMILIAR,
    NOVELTY_SEEN_FEW,
    NOVELTY_UNDER_REVIEW,
    NOVELTY_UNSEEN,
)
from reading_recommender.store.models import Word


def word_novelty_pure(
    count: int,
    under_review: bool,
    seen_threshold: int = 3,
) -> float:
    """Novelty of one word for a user.

    Args:
        count: Times the user has met the word in their articles.
        under_review: Whether the word has a review item.
        seen_threshold: Count at which the word is familiar.

    Returns:
        1.0 unseen, 0.5 seen a few times, 0.2 if also under review, 0.0 familiar.
    """
    if count <= 0:
        return NOVELTY_UNSEEN
    if count >= seen_threshold:
        return NOVELTY_FAMILIAR
    return NOVELTY_UNDER_REVIEW if under_review else NOVELTY_SEEN_FEW


class VocabularyNoveltyScorer:
    """Scores how much new vocabulary an article offers a user."""

    def __init__(self, seen_threshold: int = 3) -> None:
        """Initialize the scorer.

        Args:
            seen_threshold: Occurrences after which a word is no longer novel.
        """
        self._seen_threshold = seen_threshold

    def score(
        self,
        words: list[Word],
        user_counts: dict[int, int],
        review_ids: set[int],
    ) -> float:
        """Mean per-word novelty over the article's distinct words.

        Args:
            words: Words occurring in the article.
            user_counts: Word ID to the user's exposure count.
            review_ids: Word IDs under active review.

        Returns:
            Score in [0, 1]; 0.0 for an article without words.
        """
        word_ids = {w.id for w in words}
        if not word_ids:
            return 0.0
        total = sum(
            word_novelty_pure(
                user_counts.get(word_id, 0),
                word_id in review_ids,
                self._seen_threshold,
            )
            for word_id in word_ids
        )
        return total / len(word_ids)
