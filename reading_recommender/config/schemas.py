"""Configuration schema for the recommendation engine."""

from typing import Annotated

from pydantic import Field, model_validator

from reading_recommender.data_model import StrictBaseModel


class ScoringConfig(StrictBaseModel):
    """Scoring weights configuration.

    Attributes:
        catalog_topic_weight: Topic weight for catalogued articles with words.
        catalog_vocab_weight: Novelty weight for catalogued articles with words.
        level_match_weight: Weight of the level-match term for discovered articles.
        novelty_proxy_weight: Weight of the difficulty-gap novelty proxy.
        topic_placeholder_weight: Weight of the constant discovered topic term.
        challenge_weight: Weight of the challenge bonus.
        min_score: Candidates scoring at or below this are dropped.
        freshness_window_days: Days over which the freshness bonus decays to zero.
        freshness_max_bonus: Freshness bonus for brand-new content.
        novelty_seen_threshold: Occurrences after which a word is no longer novel.
    """

    catalog_topic_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    catalog_vocab_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    level_match_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.4
    novelty_proxy_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3
    topic_placeholder_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.2
    challenge_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    min_score: Annotated[float, Field(ge=0.0)] = 0.1
    freshness_window_days: Annotated[int, Field(ge=1, le=365)] = 30
    freshness_max_bonus: Annotated[float, Field(ge=0.0, le=1.0)] = 0.1
    novelty_seen_threshold: Annotated[int, Field(ge=1, le=100)] = 3

    @model_validator(mode="after")
    def validate_catalog_weights(self) -> "ScoringConfig":
        """Ensure catalogued weights form a convex combination."""
        total = self.catalog_topic_weight + self.catalog_vocab_weight
        if abs(total - 1.0) > 1e-9:
            msg = f"catalog_topic_weight + catalog_vocab_weight must be 1.0, got {total}"
            raise ValueError(msg)
        return self


class PoolConfig(StrictBaseModel):
    """Candidate pool sizing.

    Pool sizes scale with the requested result count to bound scoring cost.

    Attributes:
        discovered_pool_multiplier: Discovered candidates fetched per result slot.
        catalog_pool_multiplier: Catalogued candidates fetched per result slot.
    """

    discovered_pool_multiplier: Annotated[int, Field(ge=1, le=50)] = 10
    catalog_pool_multiplier: Annotated[int, Field(ge=1, le=50)] = 20


class DiversityConfig(StrictBaseModel):
    """Source diversity configuration.

    Attributes:
        max_per_source_cap: Upper bound on items per source per selection round.
        unknown_source: Bucket name for candidates without a source or URL host.
    """

    max_per_source_cap: Annotated[int, Field(ge=1, le=50)] = 3
    unknown_source: Annotated[str, Field(min_length=1)] = "unknown"


class TitleFetchConfig(StrictBaseModel):
    """Configuration for best-effort title lookups.

    Attributes:
        timeout_seconds: Timeout for each fetch.
        max_concurrency: Maximum fetches in flight.
        user_agent: User-Agent header sent with fetches.
        max_response_size_bytes: Responses larger than this are not parsed.
    """

    timeout_seconds: Annotated[float, Field(gt=0.0, le=60.0)] = 5.0
    max_concurrency: Annotated[int, Field(ge=1, le=32)] = 5
    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = "LanglerBot/0.1"
    max_response_size_bytes: Annotated[int, Field(ge=1024)] = 2 * 1024 * 1024


class RecommenderConfig(StrictBaseModel):
    """Root configuration for recommender.yaml.

    Attributes:
        version: Schema version.
        default_language: Language assumed for discovered articles without one.
        scoring: Scoring weights configuration.
        pool: Candidate pool sizing.
        diversity: Source diversity configuration.
        title_fetch: Title lookup configuration.
    """

    version: Annotated[str, Field(pattern=r"^\d+\.\d+$")] = "1.0"
    default_language: Annotated[str, Field(min_length=1)] = "spanish"
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    pool: PoolConfig = Field(default_factory=PoolConfig)
    diversity: DiversityConfig = Field(default_factory=DiversityConfig)
    title_fetch: TitleFetchConfig = Field(default_factory=TitleFetchConfig)
