"""Reading recommendation and difficulty scoring engine for language learners."""

__version__ = "0.1.0"
