"""YAML configuration loader with validation."""

import hashlib
from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from reading_recommender.config.schemas import RecommenderConfig


logger = structlog.get_logger()


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed validation.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Validation failed for {file_path}: {len(errors)} errors")


def _format_errors(exc: ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into location/message pairs."""
    return [
        {
            "location": ".".join(str(part) for part in err["loc"]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]


def load_config(path: Path | None) -> RecommenderConfig:
    """Load and validate the recommender configuration.

    Args:
        path: Path to a YAML file, or None for defaults.

    Returns:
        Validated RecommenderConfig.

    Raises:
        ConfigValidationError: If the file is unreadable or invalid.
    """
    if path is None:
        return RecommenderConfig()

    log = logger.bind(component="config", file_path=str(path))

    try:
        content = path.read_bytes()
    except OSError as e:
        raise ConfigValidationError(
            [{"location": "", "message": f"Cannot read file: {e}"}], str(path)
        ) from e

    checksum = hashlib.sha256(content).hexdigest()

    try:
        data = yaml.safe_load(content.decode("utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigValidationError(
            [{"location": "", "message": f"Invalid YAML: {e}"}], str(path)
        ) from e

    if not isinstance(data, dict):
        raise ConfigValidationError(
            [{"location": "", "message": "Top-level YAML value must be a mapping"}],
            str(path),
        )

    try:
        config = RecommenderConfig.model_validate(data)
    except ValidationError as e:
        errors = _format_errors(e)
        log.error("config_validation_failed", error_count=len(errors))
        raise ConfigValidationError(errors, str(path)) from e

    log.info("config_loaded", file_sha256=checksum)
    return config
