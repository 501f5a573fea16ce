"""Constants for the ranker module."""

# Neutral difficulty when no frequency or sentence data is available
NEUTRAL_DIFFICULTY: float = 5.0

# Difficulty score bounds
MIN_DIFFICULTY: float = 0.0
MAX_DIFFICULTY: float = 10.0

# Share of vocabulary rarity vs. sentence length in the combined difficulty
VOCABULARY_DIFFICULTY_WEIGHT: float = 0.7
READABILITY_DIFFICULTY_WEIGHT: float = 0.3

# Frequency rank -> vocabulary score: (upper rank bound, base score, rank offset).
# score = base + (rank - offset) / RANK_SCORE_DIVISOR; above the last bound -> 10.
RANK_SCORE_BANDS: list[tuple[int, float, int]] = [
    (1000, 0.0, 0),
    (2000, 2.0, 1000),
    (3500, 4.0, 2000),
    (5000, 7.0, 3500),
]
RANK_SCORE_DIVISOR: float = 500.0

# Average words per sentence -> readability score: (exclusive upper bound, score)
SENTENCE_LENGTH_BANDS: list[tuple[float, float]] = [
    (10.0, 0.0),
    (15.0, 3.0),
    (20.0, 5.0),
    (25.0, 7.0),
]
LONG_SENTENCE_SCORE: float = 10.0

# Average reviewed-word rank -> (CEFR, base level, rank offset, divisor)
LEVEL_BANDS: list[tuple[int, str, float, int, float]] = [
    (1000, "A1", 1.0, 0, 1000.0),
    (2000, "A2", 2.0, 1000, 1000.0),
    (3500, "B1", 3.5, 2000, 1500.0),
    (5000, "B2", 5.0, 3500, 1500.0),
    (10000, "C1", 7.0, 5000, 5000.0),
]
MAX_LEVEL_NUMERIC: float = 9.0
MIN_USER_LEVEL: float = 1.0
MAX_USER_LEVEL: float = 10.0

# Per-word novelty contributions
NOVELTY_UNSEEN: float = 1.0
NOVELTY_SEEN_FEW: float = 0.5
NOVELTY_UNDER_REVIEW: float = 0.2
NOVELTY_FAMILIAR: float = 0.0

# Discovered-article match: |D - L| -> level match score
LEVEL_GAP_BANDS: list[tuple[float, float]] = [
    (0.5, 1.0),
    (1.0, 0.8),
    (2.0, 0.5),
    (3.0, 0.2),
]

# Neutral term used when a signal cannot be computed
NEUTRAL_SIGNAL: float = 0.5

# Half-width of the difficulty window around the user's level
LEVEL_WINDOW: float = 2.0
