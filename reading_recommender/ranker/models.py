"""Data models for the recommendation ranker."""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Annotated
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from reading_recommender.store.models import CatalogArticle, DiscoveredArticle


class CefrLevel(str, Enum):
    """CEFR proficiency buckets, lowest to highest."""

    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"


@dataclass(frozen=True)
class UserLevel:
    """A learner's estimated level.

    Attributes:
        cefr_level: Coarse CEFR bucket.
        numeric_level: Continuous level in [1, 10].
    """

    cefr_level: CefrLevel
    numeric_level: float

    def to_dict(self) -> dict[str, str | float]:
        """Convert to dictionary for serialization."""
        return {"cefr_level": self.cefr_level.value, "numeric_level": self.numeric_level}


class CandidateKind(str, Enum):
    """How a candidate is scored.

    - CATALOGUED: Backed by a CatalogArticle; scored on topics and vocabulary
    - DISCOVERED: Crawled only; scored on estimated difficulty vs. user level
    """

    CATALOGUED = "catalogued"
    DISCOVERED = "discovered"


@dataclass(frozen=True)
class Candidate:
    """A recommendable article resolved once into a uniform projection.

    Exactly one of article/discovered drives scoring: a CATALOGUED candidate
    always carries its CatalogArticle, even when it was reached through a
    discovered entry that links to it.

    Attributes:
        kind: Scoring path.
        id: Catalog article ID, None for discovered-only candidates.
        discovered_article_id: Discovered entry ID, if reached through one.
        title: Display title, None when still to be resolved.
        url: Article URL.
        source: Explicit source name, if any.
        language: Article language.
        difficulty_score: Stored difficulty, if estimated.
        avg_sentence_length: Stored average sentence length, if known.
        published_at: Timestamp the freshness bonus is measured from.
        article: Backing catalogued article.
        discovered: Backing discovered entry.
    """

    kind: CandidateKind
    id: int | None
    discovered_article_id: int | None
    title: str | None
    url: str
    source: str | None
    language: str
    difficulty_score: float | None
    avg_sentence_length: float | None
    published_at: datetime | None
    article: CatalogArticle | None = None
    discovered: DiscoveredArticle | None = None

    @classmethod
    def from_catalog(
        cls,
        article: CatalogArticle,
        discovered: DiscoveredArticle | None = None,
    ) -> "Candidate":
        """Build a catalogued candidate.

        Args:
            article: The catalogued article.
            discovered: Discovered entry linking to the article, if any.

        Returns:
            Candidate scored on the catalogued article's signals.
        """
        source = article.source
        if source is None and discovered is not None and discovered.source_site:
            source = discovered.source_site.name
        return cls(
            kind=CandidateKind.CATALOGUED,
            id=article.id,
            discovered_article_id=discovered.id if discovered is not None else None,
            title=article.title or None,
            url=article.url,
            source=source,
            language=article.language,
            difficulty_score=article.difficulty_score,
            avg_sentence_length=article.avg_sentence_length,
            published_at=article.inserted_at,
            article=article,
            discovered=discovered,
        )

    @classmethod
    def from_discovered(
        cls,
        discovered: DiscoveredArticle,
        default_language: str,
    ) -> "Candidate":
        """Build a discovered-only candidate.

        Args:
            discovered: The discovered entry, not linked to a catalogued article.
            default_language: Language to assume when the entry has none.

        Returns:
            Candidate scored on the difficulty estimate.
        """
        title = discovered.title.strip() if discovered.title else ""
        return cls(
            kind=CandidateKind.DISCOVERED,
            id=None,
            discovered_article_id=discovered.id,
            title=title or None,
            url=discovered.url,
            source=discovered.source_site.name if discovered.source_site else None,
            language=discovered.language or default_language,
            difficulty_score=discovered.difficulty_score,
            avg_sentence_length=discovered.avg_sentence_length,
            published_at=discovered.published_at or discovered.discovered_at,
            discovered=discovered,
        )

    @property
    def identity(self) -> tuple[str, int | str]:
        """Deduplication key: catalog ID, else URL."""
        if self.id is not None:
            return ("id", self.id)
        return ("url", self.url)

    def source_key(self, unknown: str = "unknown") -> str:
        """Source identity for diversity: explicit source, else URL host.

        Args:
            unknown: Bucket for candidates with neither.

        Returns:
            Source key.
        """
        if self.source:
            return self.source
        host = urlparse(self.url).hostname
        return host or unknown

    def with_title(self, title: str) -> "Candidate":
        """Return a copy with the title replaced."""
        return replace(self, title=title)


@dataclass
class ScoredCandidate:
    """A candidate with its computed score.

    Attributes:
        candidate: The candidate.
        score: Final score; 0.0 when scoring failed.
        error: Error message if scoring failed.
    """

    candidate: Candidate
    score: float
    error: str | None = None


class Recommendation(BaseModel):
    """One entry of a recommendation list as returned to callers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: int | None = None
    title: str
    url: Annotated[str, Field(min_length=1)]
    source: str | None = None
    language: str
    difficulty_score: float | None = None
    avg_sentence_length: float | None = None
    is_discovered: bool
    discovered_article_id: int | None = None
    score: float

    @classmethod
    def from_scored(cls, scored: ScoredCandidate) -> "Recommendation":
        """Project a scored candidate into a recommendation entry.

        Args:
            scored: Scored candidate with a resolved title.

        Returns:
            Recommendation entry.
        """
        candidate = scored.candidate
        return cls(
            id=candidate.id,
            title=candidate.title or candidate.url,
            url=candidate.url,
            source=candidate.source,
            language=candidate.language,
            difficulty_score=candidate.difficulty_score,
            avg_sentence_length=candidate.avg_sentence_length,
            is_discovered=candidate.kind == CandidateKind.DISCOVERED,
            discovered_article_id=candidate.discovered_article_id,
            score=scored.score,
        )
