"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RECOMMENDER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    database_path: Path = Field(default=Path("data/recommender.sqlite"))
    config_path: Path | None = Field(default=None)
    cache_ttl_seconds: int = Field(default=300, ge=0)
    json_logs: bool = Field(default=True)
    log_level: str = Field(default="INFO")


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
