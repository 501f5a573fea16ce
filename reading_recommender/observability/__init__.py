"""Observability module for structured logging."""

from reading_recommender.observability.logging import (
    bind_user_context,
    clear_user_context,
    configure_logging,
    get_logger,
)


__all__ = [
    "bind_user_context",
    "clear_user_context",
    "configure_logging",
    "get_logger",
]
