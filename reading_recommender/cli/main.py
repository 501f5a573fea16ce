"""CLI commands for the reading recommender."""

import json
import logging
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import structlog

from reading_recommender import __version__
from reading_recommender.config.loader import ConfigValidationError, load_config
from reading_recommender.config.schemas import RecommenderConfig
from reading_recommender.fetch.metrics import FetchMetrics
from reading_recommender.fetch.title import HttpTitleFetcher
from reading_recommender.observability.logging import configure_logging
from reading_recommender.ranker.backfill import DifficultyBackfill
from reading_recommender.ranker.difficulty import DifficultyEstimator
from reading_recommender.ranker.engine import RecommendationEngine
from reading_recommender.ranker.metrics import RankerMetrics
from reading_recommender.ranker.user_level import UserLevelEstimator
from reading_recommender.settings import get_settings
from reading_recommender.store.store import SqliteStore


logger = structlog.get_logger()


@dataclass
class CommonOptions:
    """Options shared by every command."""

    db_path: Path
    config: RecommenderConfig
    run_id: str
    cache_ttl_seconds: int


def _common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the database, config, and logging options to a command."""
    options = [
        click.option(
            "--db",
            "db_path",
            type=click.Path(path_type=Path),
            default=None,
            help="Path to SQLite database (default: RECOMMENDER_DATABASE_PATH).",
        ),
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, path_type=Path),
            default=None,
            help="Path to recommender.yaml (default: built-in settings).",
        ),
        click.option(
            "--json-logs/--console-logs",
            default=None,
            help="Log as JSON or human-readable console output.",
        ),
        click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _setup(
    db_path: Path | None,
    config_path: Path | None,
    json_logs: bool | None,
    verbose: bool,
) -> CommonOptions:
    """Configure logging and resolve settings, exiting on invalid config."""
    settings = get_settings()
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    configure_logging(
        level=level,
        json_format=settings.json_logs if json_logs is None else json_logs,
    )

    try:
        config = load_config(config_path or settings.config_path)
    except ConfigValidationError as e:
        click.echo(f"Configuration validation failed: {e.file_path}", err=True)
        for error in e.errors:
            location = error["location"] or "<root>"
            click.echo(f"  - {location}: {error['message']}", err=True)
        sys.exit(1)

    return CommonOptions(
        db_path=db_path or settings.database_path,
        config=config,
        run_id=str(uuid.uuid4()),
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )


def _echo_json(payload: object) -> None:
    click.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Reading recommendation and difficulty scoring CLI."""


@cli.command()
@click.option("--user", "user_id", required=True, type=int, help="Learner ID.")
@click.option("--limit", default=10, show_default=True, type=click.IntRange(min=1))
@click.option(
    "--fetch-titles/--no-fetch-titles",
    default=True,
    help="Look up missing titles over HTTP (default: true).",
)
@_common_options
def recommend(  # noqa: PLR0913
    user_id: int,
    limit: int,
    fetch_titles: bool,
    db_path: Path | None,
    config_path: Path | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Print ranked recommendations for a learner as JSON."""
    options = _setup(db_path, config_path, json_logs, verbose)
    fetcher = HttpTitleFetcher(options.config.title_fetch) if fetch_titles else None

    with SqliteStore(options.db_path, run_id=options.run_id) as store:
        engine = RecommendationEngine.from_store(
            store,
            title_fetcher=fetcher,
            config=options.config,
            cache_ttl_seconds=options.cache_ttl_seconds,
            run_id=options.run_id,
        )
        recommendations = engine.recommend(user_id, limit)

    logger.info(
        "recommend_metrics",
        component="cli",
        run_id=options.run_id,
        ranker=RankerMetrics.get_instance().to_dict(),
        fetch=FetchMetrics.get_instance().to_dict(),
    )
    _echo_json([r.model_dump() for r in recommendations])


@cli.command("for-level")
@click.option("--user", "user_id", required=True, type=int, help="Learner ID.")
@click.option("--limit", default=5, show_default=True, type=click.IntRange(min=1))
@_common_options
def for_level(
    user_id: int,
    limit: int,
    db_path: Path | None,
    config_path: Path | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Print discovered articles near the learner's level as JSON."""
    options = _setup(db_path, config_path, json_logs, verbose)

    with SqliteStore(options.db_path, run_id=options.run_id) as store:
        engine = RecommendationEngine.from_store(
            store, config=options.config, run_id=options.run_id
        )
        recommendations = engine.recommend_for_level(user_id, limit)

    _echo_json([r.model_dump() for r in recommendations])


@cli.command()
@click.option("--user", "user_id", required=True, type=int, help="Learner ID.")
@_common_options
def level(
    user_id: int,
    db_path: Path | None,
    config_path: Path | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Print a learner's estimated CEFR level as JSON."""
    options = _setup(db_path, config_path, json_logs, verbose)

    with SqliteStore(options.db_path, run_id=options.run_id) as store:
        user_level = UserLevelEstimator(store).estimate(user_id)

    _echo_json({"user_id": user_id, **user_level.to_dict()})


@cli.command()
@click.option(
    "--kind",
    type=click.Choice(["catalog", "discovered", "all"]),
    default="all",
    show_default=True,
    help="Which articles to recompute.",
)
@_common_options
def backfill(
    kind: str,
    db_path: Path | None,
    config_path: Path | None,
    json_logs: bool | None,
    verbose: bool,
) -> None:
    """Recompute stored difficulty scores and print a summary as JSON.

    Exits with status 1 if any article failed.
    """
    options = _setup(db_path, config_path, json_logs, verbose)

    with SqliteStore(options.db_path, run_id=options.run_id) as store:
        sweep = DifficultyBackfill(
            catalog=store,
            discovery=store,
            estimator=DifficultyEstimator(store, store, store),
            default_language=options.config.default_language,
            run_id=options.run_id,
        )
        results = []
        if kind in ("catalog", "all"):
            results.append(sweep.refresh_catalog())
        if kind in ("discovered", "all"):
            results.append(sweep.refresh_discovered())

    _echo_json([r.to_dict() for r in results])
    if any(r.failed for r in results):
        sys.exit(1)


def main() -> None:
    """Entry point for the console script."""
    cli()


if __name__ == "__main__":
    main()
