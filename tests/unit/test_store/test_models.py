"""Unit tests for store data models."""

import pytest
from pydantic import ValidationError

from reading_recommender.store.models import (
    ArticleDifficulty,
    ArticleTopic,
    CatalogArticle,
    DiscoveredArticle,
    DiscoveredStatus,
    normalize_form,
)


class TestNormalizeForm:
    """Tests for normalize_form."""

    @pytest.mark.parametrize(
        ("term", "expected"),
        [
            ("Canción", "cancion"),
            ("ÁRBOL", "arbol"),
            ("pingüino", "pinguino"),
            ("niño", "nino"),
            ("casa", "casa"),
        ],
    )
    def test_strips_accents_and_case(self, term: str, expected: str) -> None:
        """Test accents and case do not affect the normalized form."""
        assert normalize_form(term) == expected


class TestModels:
    """Tests for model validation."""

    def test_topic_confidence_bounds(self) -> None:
        """Test confidence must be within 0-1."""
        with pytest.raises(ValidationError):
            ArticleTopic(article_id=1, topic="ciencia", confidence=1.2, language="spanish")

    def test_difficulty_bounds(self) -> None:
        """Test difficulty must be within 0-10."""
        with pytest.raises(ValidationError):
            ArticleDifficulty(difficulty_score=11.0, unique_word_count=0)

    def test_catalog_article_is_frozen(self) -> None:
        """Test models cannot be mutated."""
        article = CatalogArticle(
            id=1, title="t", url="https://a.example/1", language="spanish"
        )

        with pytest.raises(ValidationError):
            article.title = "other"  # type: ignore[misc]

    def test_discovered_defaults(self) -> None:
        """Test a discovered article starts as new and unestimated."""
        discovered = DiscoveredArticle(id=1, url="https://b.example/1")

        assert discovered.status == DiscoveredStatus.NEW
        assert discovered.difficulty_score is None
        assert discovered.discovered_at.tzinfo is not None

    def test_extra_fields_forbidden(self) -> None:
        """Test unknown fields are rejected."""
        with pytest.raises(ValidationError):
            DiscoveredArticle(id=1, url="https://b.example/1", rating=5)  # type: ignore[call-arg]
