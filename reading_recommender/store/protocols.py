"""Storage collaborator interfaces consumed by the engine.

Each protocol covers one concern. SqliteStore implements all of them; tests
and other backends may implement any subset.
"""

from collections.abc import Iterable
from typing import Protocol

from reading_recommender.store.models import (
    ArticleDifficulty,
    ArticleTopic,
    CatalogArticle,
    DiscoveredArticle,
    Sentence,
    Word,
)


class CatalogStore(Protocol):
    """Access to catalogued articles and their extracted text."""

    def list_candidate_articles(self, user_id: int, limit: int) -> list[CatalogArticle]:
        """List articles the user has no association with, topics preloaded."""
        ...

    def get_article(self, article_id: int) -> CatalogArticle:
        """Get one article with topics preloaded.

        Raises:
            ArticleNotFoundError: If the article does not exist.
        """
        ...

    def list_article_ids(self) -> list[int]:
        """List the IDs of every catalogued article."""
        ...

    def list_sentences(self, article_id: int) -> list[Sentence]:
        """List an article's sentences in reading order."""
        ...

    def list_article_words(self, article_id: int) -> list[Word]:
        """List the distinct words occurring in an article."""
        ...

    def update_article_difficulty(
        self, article_id: int, metrics: ArticleDifficulty
    ) -> None:
        """Persist derived difficulty metrics."""
        ...

    def list_user_article_ids(self, user_id: int) -> set[int]:
        """IDs of every article associated with the user, any status."""
        ...


class DiscoveryStore(Protocol):
    """Access to crawled, possibly not yet imported articles."""

    def list_eligible_discovered(
        self, user_id: int, limit: int
    ) -> list[DiscoveredArticle]:
        """List discovered articles eligible for recommendation to a user.

        Eligible means status "new", or recommended to this user and not yet
        linked; linked articles the user already owns are excluded. Source
        site and linked article are preloaded.
        """
        ...

    def list_discovered_in_difficulty_window(
        self,
        user_id: int,
        low: float,
        high: float,
        language: str,
        limit: int,
    ) -> list[DiscoveredArticle]:
        """List estimated articles within a difficulty window the user has not acted on."""
        ...

    def list_discovered_missing_difficulty(self) -> list[int]:
        """IDs of discovered articles without a difficulty estimate."""
        ...

    def get_discovered_article(self, discovered_id: int) -> DiscoveredArticle:
        """Get one discovered article.

        Raises:
            ArticleNotFoundError: If the article does not exist.
        """
        ...

    def update_discovered_difficulty(
        self,
        discovered_id: int,
        difficulty_score: float,
        avg_sentence_length: float | None,
    ) -> None:
        """Persist a pre-import difficulty estimate."""
        ...


class VocabularyStore(Protocol):
    """Access to the word table and per-user exposure counts."""

    def resolve_words(self, normalized_forms: Iterable[str], language: str) -> list[Word]:
        """Batch-resolve words by normalized form within a language."""
        ...

    def get_words(self, word_ids: Iterable[int]) -> list[Word]:
        """Batch-fetch words by ID."""
        ...

    def user_word_counts(self, user_id: int) -> dict[int, int]:
        """Occurrence count per word across the user's non-archived articles."""
        ...


class ReviewHistoryStore(Protocol):
    """Access to spaced-repetition review history."""

    def review_word_ids(self, user_id: int) -> set[int]:
        """Word IDs currently under active review for the user."""
        ...

    def review_frequency_ranks(self, user_id: int) -> list[int]:
        """Frequency ranks of reviewed words that have one."""
        ...


class PreferenceStore(Protocol):
    """Access to per-user topic preference weights."""

    def topic_preferences(self, user_id: int) -> dict[str, float]:
        """Topic to weight map; absent topics weigh 1.0."""
        ...


class TopicStore(Protocol):
    """Topic tagging of catalogued articles."""

    def tag_article(self, article_id: int, topics: list[tuple[str, float]]) -> None:
        """Replace an article's topics."""
        ...

    def list_topics_for_article(self, article_id: int) -> list[ArticleTopic]:
        """List topics ordered by confidence descending."""
        ...
