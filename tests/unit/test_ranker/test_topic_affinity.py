"""Unit tests for topic affinity scoring."""

from datetime import datetime, timedelta

import pytest

from reading_recommender.config.schemas import ScoringConfig
from reading_recommender.ranker import topic_affinity
from reading_recommender.ranker.topic_affinity import (
    TopicAffinityScorer,
    freshness_bonus_pure,
)
from reading_recommender.store.models import ArticleTopic
from tests.helpers.time import FIXED_NOW


class _SteppedClock(datetime):
    """Datetime whose now() returns a settable instant."""

    current: datetime = FIXED_NOW

    @classmethod
    def now(cls, tz: object = None) -> datetime:  # type: ignore[override]
        return cls.current


def _topic(topic: str, confidence: float) -> ArticleTopic:
    return ArticleTopic(article_id=1, topic=topic, confidence=confidence, language="spanish")


class TestFreshnessBonus:
    """Tests for freshness_bonus_pure."""

    def test_published_now_gets_full_bonus(self) -> None:
        """Test content from today gets the maximum bonus."""
        assert freshness_bonus_pure(FIXED_NOW, FIXED_NOW) == pytest.approx(0.1)

    def test_partial_day_counts_as_zero_days(self) -> None:
        """Test elapsed time is measured in whole days."""
        published = FIXED_NOW - timedelta(hours=23)
        assert freshness_bonus_pure(published, FIXED_NOW) == pytest.approx(0.1)

    def test_linear_decay(self) -> None:
        """Test the bonus halves at half the window."""
        published = FIXED_NOW - timedelta(days=15)
        assert freshness_bonus_pure(published, FIXED_NOW) == pytest.approx(0.05)

    def test_old_content_gets_nothing(self) -> None:
        """Test content older than the window gets no bonus."""
        published = FIXED_NOW - timedelta(days=90)
        assert freshness_bonus_pure(published, FIXED_NOW) == 0.0

    def test_future_content_is_clamped(self) -> None:
        """Test future timestamps never exceed the maximum bonus."""
        published = FIXED_NOW + timedelta(days=3)
        assert freshness_bonus_pure(published, FIXED_NOW) == pytest.approx(0.1)

    def test_missing_timestamp(self) -> None:
        """Test no timestamp means no bonus."""
        assert freshness_bonus_pure(None, FIXED_NOW) == 0.0

    def test_naive_timestamp_treated_as_utc(self) -> None:
        """Test naive datetimes do not raise."""
        naive = datetime(2026, 1, 15, 12, 0, 0)  # noqa: DTZ001
        assert freshness_bonus_pure(naive, FIXED_NOW) == pytest.approx(0.1)


class TestTopicAffinityScorer:
    """Tests for TopicAffinityScorer."""

    def test_weighted_topics_with_freshness(self) -> None:
        """Test preference-weighted confidence plus the freshness bonus."""
        scorer = TopicAffinityScorer(now=FIXED_NOW)

        score = scorer.score(
            [_topic("ciencia", 0.8)],
            {"ciencia": 1.0},
            FIXED_NOW,
        )

        assert score == pytest.approx(0.9)

    def test_unknown_topic_weighs_one(self) -> None:
        """Test topics without a preference use weight 1.0."""
        scorer = TopicAffinityScorer(now=FIXED_NOW)

        score = scorer.score(
            [_topic("ciencia", 0.5), _topic("deportes", 0.4)],
            {"ciencia": 2.0},
            FIXED_NOW - timedelta(days=60),
        )

        assert score == pytest.approx(0.5 * 2.0 + 0.4)

    def test_no_topics_scores_only_freshness(self) -> None:
        """Test an untagged article scores the freshness bonus alone."""
        scorer = TopicAffinityScorer(now=FIXED_NOW)

        assert scorer.score([], {"ciencia": 2.0}, FIXED_NOW) == pytest.approx(0.1)

    def test_configured_freshness(self) -> None:
        """Test the window and bonus come from config."""
        config = ScoringConfig(freshness_window_days=10, freshness_max_bonus=0.5)
        scorer = TopicAffinityScorer(config, now=FIXED_NOW)

        score = scorer.score([], {}, FIXED_NOW - timedelta(days=5))

        assert score == pytest.approx(0.25)

    def test_reads_clock_on_every_call(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a long-lived scorer without a fixed time ages articles."""
        monkeypatch.setattr(topic_affinity, "datetime", _SteppedClock)
        monkeypatch.setattr(_SteppedClock, "current", FIXED_NOW)
        scorer = TopicAffinityScorer()
        topics = [_topic("ciencia", 0.8)]

        assert scorer.score(topics, {}, FIXED_NOW) == pytest.approx(0.9)

        monkeypatch.setattr(_SteppedClock, "current", FIXED_NOW + timedelta(days=40))

        assert scorer.score(topics, {}, FIXED_NOW) == pytest.approx(0.8)
