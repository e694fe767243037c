"""Configuration for the HTTP request worker."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkerConfig(BaseSettings):
    """Worker settings loaded from environment variables (and an optional .env file)."""

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    HTTP_TIMEOUT_SECONDS: int = Field(default=30, ge=1, le=300)
    OUTCOME_QUEUE_SIZE: int = Field(default=100, ge=1)
    LOG_LEVEL: str = 'INFO'
    LOG_JSON: bool = False


@lru_cache
def get_config() -> WorkerConfig:
    """Cached config singleton."""
    return WorkerConfig()
