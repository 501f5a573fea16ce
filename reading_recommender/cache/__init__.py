"""Advisory caching for recommendation results."""

from reading_recommender.cache.memory import (
    DEFAULT_TTL_SECONDS,
    InMemoryRecommendationCache,
    RecommendationCache,
)


__all__ = [
    "DEFAULT_TTL_SECONDS",
    "InMemoryRecommendationCache",
    "RecommendationCache",
]
