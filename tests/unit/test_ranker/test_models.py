"""Unit tests for ranker models."""

from dataclasses import asdict

from reading_recommender.ranker.models import Candidate
from reading_recommender.store.models import DiscoveredArticle
from tests.helpers.time import FIXED_NOW


class TestCandidateWithTitle:
    """Tests for Candidate.with_title."""

    def test_only_title_changes(self) -> None:
        """Test every other field is carried over to the copy."""
        discovered = DiscoveredArticle(
            id=7,
            url="https://b.example/1",
            language="french",
            published_at=FIXED_NOW,
            difficulty_score=4.2,
            avg_sentence_length=11.0,
        )
        candidate = Candidate.from_discovered(discovered, "spanish")

        titled = candidate.with_title("Titular")

        assert titled.title == "Titular"
        assert candidate.title is None
        assert {**asdict(titled), "title": None} == asdict(candidate)
