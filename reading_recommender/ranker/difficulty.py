"""Text difficulty estimation from vocabulary rarity and sentence length.

Difficulty is a 0-10 heuristic: 70% vocabulary rarity (mean frequency rank
of the words, mapped through piecewise-linear bands) and 30% readability
(mean words per sentence, bucketed). Missing data on either side yields the
neutral 5.0 for that side.
"""

import re

import structlog

from reading_recommender.ranker.constants import (
    LONG_SENTENCE_SCORE,
    MAX_DIFFICULTY,
    MIN_DIFFICULTY,
    NEUTRAL_DIFFICULTY,
    RANK_SCORE_BANDS,
    RANK_SCORE_DIVISOR,
    READABILITY_DIFFICULTY_WEIGHT,
    SENTENCE_LENGTH_BANDS,
    VOCABULARY_DIFFICULTY_WEIGHT,
)
from reading_recommender.store.models import ArticleDifficulty, DiscoveredArticle, Word
from reading_recommender.store.protocols import (
    CatalogStore,
    DiscoveryStore,
    VocabularyStore,
)


logger = structlog.get_logger()

_WORD_SPLIT = re.compile(r"\W+")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def _clamp(value: float) -> float:
    return max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, value))


def frequency_rank_to_score(rank: float) -> float:
    """Map a frequency rank to a 0-10 vocabulary difficulty.

    Args:
        rank: Frequency rank (or mean rank); smaller is more common.

    Returns:
        Monotonic non-decreasing score in [0, 10].
    """
    for upper, base, offset in RANK_SCORE_BANDS:
        if rank <= upper:
            return _clamp(base + (rank - offset) / RANK_SCORE_DIVISOR)
    return MAX_DIFFICULTY


def vocabulary_score(ranks: list[int]) -> float:
    """Score the mean frequency rank; neutral when nothing is ranked."""
    if not ranks:
        return NEUTRAL_DIFFICULTY
    return frequency_rank_to_score(sum(ranks) / len(ranks))


def sentence_length_to_score(avg_sentence_length: float | None) -> float:
    """Bucket mean words per sentence into a readability score.

    Args:
        avg_sentence_length: Mean words per sentence, None without sentences.

    Returns:
        Score in {0, 3, 5, 7, 10}, or the neutral 5.0 for None.
    """
    if avg_sentence_length is None:
        return NEUTRAL_DIFFICULTY
    for upper, score in SENTENCE_LENGTH_BANDS:
        if avg_sentence_length < upper:
            return score
    return LONG_SENTENCE_SCORE


def combine_difficulty(vocabulary: float, readability: float) -> float:
    """Weighted combination of the two components, clamped to [0, 10]."""
    return _clamp(
        VOCABULARY_DIFFICULTY_WEIGHT * vocabulary
        + READABILITY_DIFFICULTY_WEIGHT * readability
    )


def tokenize(text: str) -> list[str]:
    """Lowercase and split on non-word characters."""
    return [token for token in _WORD_SPLIT.split(text.lower()) if token]


def split_sentences(text: str) -> list[str]:
    """Split on sentence terminators, dropping blank fragments."""
    return [part for part in _SENTENCE_SPLIT.split(text) if part.strip()]


def average_sentence_length(sentences: list[str]) -> float | None:
    """Mean whitespace-separated tokens per sentence, None without sentences."""
    if not sentences:
        return None
    return sum(len(s.split()) for s in sentences) / len(sentences)


def _ranked(words: list[Word]) -> list[int]:
    return [w.frequency_rank for w in words if w.frequency_rank is not None]


class DifficultyEstimator:
    """Estimates and persists article difficulty.

    Catalogued articles are scored from their extracted words and sentences;
    discovered articles from their title and summary, resolved against the
    vocabulary table.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        vocabulary: VocabularyStore,
        discovery: DiscoveryStore | None = None,
    ) -> None:
        """Initialize the estimator.

        Args:
            catalog: Catalog store for articles and sentences.
            vocabulary: Vocabulary store for resolving tokens.
            discovery: Discovery store, needed only to persist estimates.
        """
        self._catalog = catalog
        self._vocabulary = vocabulary
        self._discovery = discovery
        self._log = logger.bind(component="ranker", subcomponent="difficulty")

    def estimate_article(self, article_id: int) -> ArticleDifficulty:
        """Compute difficulty metrics for a catalogued article.

        An article with no extracted words scores exactly the neutral 5.0.

        Args:
            article_id: Catalogued article ID.

        Returns:
            Derived difficulty metrics.
        """
        words = self._catalog.list_article_words(article_id)
        ranks = _ranked(words)
        sentences = self._catalog.list_sentences(article_id)
        avg_length = average_sentence_length([s.content for s in sentences])

        if words:
            score = combine_difficulty(
                vocabulary_score(ranks), sentence_length_to_score(avg_length)
            )
        else:
            score = NEUTRAL_DIFFICULTY

        return ArticleDifficulty(
            difficulty_score=score,
            unique_word_count=len({w.id for w in words}),
            avg_word_frequency=sum(ranks) / len(ranks) if ranks else None,
            avg_sentence_length=avg_length,
        )

    def calculate_article_difficulty(self, article_id: int) -> ArticleDifficulty:
        """Estimate and persist difficulty for a catalogued article.

        Args:
            article_id: Catalogued article ID.

        Returns:
            The persisted metrics.
        """
        metrics = self.estimate_article(article_id)
        self._catalog.update_article_difficulty(article_id, metrics)
        self._log.info(
            "article_difficulty_calculated",
            article_id=article_id,
            difficulty_score=round(metrics.difficulty_score, 3),
            unique_word_count=metrics.unique_word_count,
        )
        return metrics

    def estimate_text(
        self,
        title: str | None,
        summary: str | None,
        language: str,
    ) -> ArticleDifficulty:
        """Estimate difficulty from a title and summary.

        Args:
            title: Article title.
            summary: Article summary.
            language: Language to resolve tokens in.

        Returns:
            Metrics; empty text yields the neutral 5.0 with no lengths.
        """
        text = " ".join(part for part in (title, summary) if part and part.strip())
        if not text:
            return ArticleDifficulty(
                difficulty_score=NEUTRAL_DIFFICULTY, unique_word_count=0
            )

        tokens = tokenize(text)
        sentences = split_sentences(text)
        avg_length = len(tokens) / len(sentences) if sentences else None

        words = self._vocabulary.resolve_words(set(tokens), language) if tokens else []
        ranks = _ranked(words)

        score = combine_difficulty(
            vocabulary_score(ranks), sentence_length_to_score(avg_length)
        )
        return ArticleDifficulty(
            difficulty_score=score,
            unique_word_count=len({w.id for w in words}),
            avg_word_frequency=sum(ranks) / len(ranks) if ranks else None,
            avg_sentence_length=avg_length,
        )

    def calculate_discovered_difficulty(
        self,
        discovered: DiscoveredArticle,
        default_language: str = "spanish",
    ) -> ArticleDifficulty:
        """Estimate and persist difficulty for a discovered article.

        Args:
            discovered: The discovered article.
            default_language: Language assumed when the article has none.

        Returns:
            The persisted metrics.

        Raises:
            ValueError: If no discovery store was configured.
        """
        if self._discovery is None:
            msg = "A discovery store is required to persist discovered difficulty"
            raise ValueError(msg)

        metrics = self.estimate_text(
            discovered.title,
            discovered.summary,
            discovered.language or default_language,
        )
        self._discovery.update_discovered_difficulty(
            discovered.id, metrics.difficulty_score, metrics.avg_sentence_length
        )
        self._log.info(
            "discovered_difficulty_calculated",
            discovered_article_id=discovered.id,
            difficulty_score=round(metrics.difficulty_score, 3),
        )
        return metrics
