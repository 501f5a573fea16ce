"""Reading recommendation ranker.

Scores catalogued and discovered articles for a learner from topic
affinity, vocabulary novelty, and estimated difficulty vs. the learner's
level, then interleaves sources so no single site dominates a page.
"""

from reading_recommender.ranker.aggregator import (
    CandidateAggregator,
    build_candidates_pure,
    catalog_score_pure,
    discovered_match_score_pure,
)
from reading_recommender.ranker.backfill import (
    BackfillFailure,
    BackfillResult,
    DifficultyBackfill,
)
from reading_recommender.ranker.difficulty import (
    DifficultyEstimator,
    frequency_rank_to_score,
    sentence_length_to_score,
)
from reading_recommender.ranker.diversity import DiversitySelector
from reading_recommender.ranker.engine import RecommendationEngine
from reading_recommender.ranker.metrics import RankerMetrics
from reading_recommender.ranker.models import (
    Candidate,
    CandidateKind,
    CefrLevel,
    Recommendation,
    ScoredCandidate,
    UserLevel,
)
from reading_recommender.ranker.novelty import VocabularyNoveltyScorer
from reading_recommender.ranker.topic_affinity import TopicAffinityScorer
from reading_recommender.ranker.user_level import UserLevelEstimator


__all__ = [
    "BackfillFailure",
    "BackfillResult",
    "Candidate",
    "CandidateAggregator",
    "CandidateKind",
    "CefrLevel",
    "DifficultyBackfill",
    "DifficultyEstimator",
    "DiversitySelector",
    "RankerMetrics",
    "Recommendation",
    "RecommendationEngine",
    "ScoredCandidate",
    "TopicAffinityScorer",
    "UserLevel",
    "UserLevelEstimator",
    "VocabularyNoveltyScorer",
    "build_candidates_pure",
    "catalog_score_pure",
    "discovered_match_score_pure",
    "frequency_rank_to_score",
    "sentence_length_to_score",
]
