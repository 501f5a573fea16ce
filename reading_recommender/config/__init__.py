"""Recommender configuration schemas and loader."""

from reading_recommender.config.loader import ConfigValidationError, load_config
from reading_recommender.config.schemas import (
    DiversityConfig,
    PoolConfig,
    RecommenderConfig,
    ScoringConfig,
    TitleFetchConfig,
)


__all__ = [
    "ConfigValidationError",
    "DiversityConfig",
    "PoolConfig",
    "RecommenderConfig",
    "ScoringConfig",
    "TitleFetchConfig",
    "load_config",
]
