"""Command-line interface."""

from reading_recommender.cli.main import cli, main


__all__ = ["cli", "main"]
