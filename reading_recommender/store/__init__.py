"""Content store for catalogued articles, vocabulary, and study state.

Provides the storage protocols the engine consumes and a SQLite
implementation of all of them.
"""

from reading_recommender.store.errors import (
    ArticleNotFoundError,
    MigrationError,
    StoreConnectionError,
    StoreError,
)
from reading_recommender.store.models import (
    ArticleDifficulty,
    ArticleTopic,
    ArticleUserAssociation,
    ArticleUserStatus,
    CatalogArticle,
    DiscoveredArticle,
    DiscoveredArticleUser,
    DiscoveredStatus,
    DiscoveredUserStatus,
    ReviewHistoryItem,
    Sentence,
    SourceSite,
    Word,
    WordOccurrence,
    normalize_form,
)
from reading_recommender.store.protocols import (
    CatalogStore,
    DiscoveryStore,
    PreferenceStore,
    ReviewHistoryStore,
    TopicStore,
    VocabularyStore,
)
from reading_recommender.store.store import SqliteStore


__all__ = [
    "ArticleDifficulty",
    "ArticleNotFoundError",
    "ArticleTopic",
    "ArticleUserAssociation",
    "ArticleUserStatus",
    "CatalogArticle",
    "CatalogStore",
    "DiscoveredArticle",
    "DiscoveredArticleUser",
    "DiscoveredStatus",
    "DiscoveredUserStatus",
    "DiscoveryStore",
    "MigrationError",
    "PreferenceStore",
    "ReviewHistoryItem",
    "ReviewHistoryStore",
    "Sentence",
    "SourceSite",
    "SqliteStore",
    "StoreConnectionError",
    "StoreError",
    "TopicStore",
    "VocabularyStore",
    "Word",
    "WordOccurrence",
    "normalize_form",
]
