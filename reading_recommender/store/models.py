"""Data models for the content, vocabulary, and study stores."""

import unicodedata
from datetime import UTC, datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


def normalize_form(term: str) -> str:
    """Normalize a surface form for vocabulary lookup.

    Decomposes accented characters, lowercases, and strips combining marks,
    so "Canción" and "cancion" resolve to the same word.

    Args:
        term: Raw token.

    Returns:
        Normalized form.
    """
    decomposed = unicodedata.normalize("NFD", term).lower()
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


class ArticleUserStatus(str, Enum):
    """Status of an article in a user's library.

    - IMPORTED: In the library, being read
    - ARCHIVED: Put away; excluded from exposure counts
    - FINISHED: Read to the end
    """

    IMPORTED = "imported"
    ARCHIVED = "archived"
    FINISHED = "finished"


class DiscoveredStatus(str, Enum):
    """Crawl status of a discovered article."""

    NEW = "new"
    IMPORTED = "imported"
    SKIPPED = "skipped"


class DiscoveredUserStatus(str, Enum):
    """Per-user decision on a discovered article."""

    RECOMMENDED = "recommended"
    DISMISSED = "dismissed"
    IMPORTED = "imported"


class Word(BaseModel):
    """Vocabulary entry with its language-wide frequency rank."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    normalized_form: Annotated[str, Field(min_length=1)]
    language: Annotated[str, Field(min_length=1)]
    frequency_rank: Annotated[int, Field(ge=1)] | None = None
    part_of_speech: str | None = None


class ArticleTopic(BaseModel):
    """Topic tag on a catalogued article."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    article_id: int
    topic: Annotated[str, Field(min_length=1)]
    confidence: Annotated[float, Field(ge=0.0, le=1.0)]
    language: Annotated[str, Field(min_length=1)]


class CatalogArticle(BaseModel):
    """Article imported into the catalog with extracted sentences.

    The difficulty fields are derived and written back by the engine.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    title: str
    url: Annotated[str, Field(min_length=1)]
    source: str | None = None
    language: Annotated[str, Field(min_length=1)]
    difficulty_score: Annotated[float, Field(ge=0.0, le=10.0)] | None = None
    unique_word_count: Annotated[int, Field(ge=0)] | None = None
    avg_word_frequency: float | None = None
    avg_sentence_length: float | None = None
    inserted_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    topics: list[ArticleTopic] = Field(default_factory=list)


class Sentence(BaseModel):
    """A sentence of a catalogued article."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    article_id: int
    position: Annotated[int, Field(ge=0)]
    content: str


class WordOccurrence(BaseModel):
    """Link between a sentence and a word it contains."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sentence_id: int
    word_id: int
    position: Annotated[int, Field(ge=0)]


class SourceSite(BaseModel):
    """A crawled site that produces discovered articles."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    name: Annotated[str, Field(min_length=1)]
    url: str


class DiscoveredArticle(BaseModel):
    """Article found by a crawler but not necessarily imported.

    difficulty_score is a cheap estimate from title and summary; once the
    article is linked to a CatalogArticle, that article's signals win.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int
    source_site_id: int | None = None
    url: Annotated[str, Field(min_length=1)]
    title: str | None = None
    summary: str | None = None
    language: str | None = None
    published_at: datetime | None = None
    discovered_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: DiscoveredStatus = DiscoveredStatus.NEW
    difficulty_score: Annotated[float, Field(ge=0.0, le=10.0)] | None = None
    avg_sentence_length: float | None = None
    article_id: int | None = None
    source_site: SourceSite | None = None
    article: CatalogArticle | None = None


class DiscoveredArticleUser(BaseModel):
    """A user's decision on a discovered article."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    discovered_article_id: int
    user_id: int
    status: DiscoveredUserStatus


class ArticleUserAssociation(BaseModel):
    """Membership of an article in a user's library."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    article_id: int
    user_id: int
    status: ArticleUserStatus = ArticleUserStatus.IMPORTED


class ReviewHistoryItem(BaseModel):
    """Spaced-repetition state for one (user, word) pair."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: int
    word_id: int
    repetitions: Annotated[int, Field(ge=0)] = 0
    quality_history: list[int] = Field(default_factory=list)
    due_date: datetime | None = None


class ArticleDifficulty(BaseModel):
    """Derived difficulty metrics persisted on a catalogued article."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    difficulty_score: Annotated[float, Field(ge=0.0, le=10.0)]
    unique_word_count: Annotated[int, Field(ge=0)]
    avg_word_frequency: float | None = None
    avg_sentence_length: float | None = None
