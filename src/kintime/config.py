"""
Settings loaded from environment variables using pydantic-settings.
"""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the row codec and the command line interface."""

    model_config = SettingsConfigDict(
        env_prefix="KINTIME_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    # Joins multi-valued cells (who, source_ids) in record tables. Never legal in an id.
    list_delimiter: str = ";"

    # Forecast defaults and the limits the CLI enforces
    default_simulations: int = 1000
    max_simulations: int = 100_000
    max_generations: int = 100
    default_seed: int = 0

    log_level: str = "WARNING"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
