from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from . import gazetteers
from ._utils import resolve_env_file_path


class Settings(BaseSettings):
    """Payee classification service configuration."""

    log_level: str = "INFO"

    # Local job store (SQLite by default, any async SQLAlchemy URL works)
    database_url: str = "sqlite+aiosqlite:///./payee_ml.db"
    database_echo: bool = False

    # Inference endpoint (OpenAI-compatible)
    inference_base_url: str = "https://api.openai.com/v1"
    inference_api_key: SecretStr | None = None
    inference_model: str = "gpt-4o-mini"
    inference_timeout: float = 20.0
    status_timeout: float = 30.0

    # Tier thresholds
    ai_threshold: int = Field(default=80, ge=0, le=100)
    use_consensus: bool = True
    consensus_runs: int = Field(default=3, ge=1, le=7)
    max_concurrency: int = Field(default=10, ge=1)

    # Deduplication
    dedup_enabled: bool = True
    similarity_threshold: float = Field(default=0.85, ge=0.0, le=1.0)

    # Keyword exclusion (JSON list in the environment, [] disables it)
    exclusion_keywords: list[str] = Field(
        default_factory=lambda: list(gazetteers.EXCLUSION_KEYWORDS)
    )

    # Session cache
    cache_ttl_seconds: float = 86400.0
    cache_max_entries: int = 1000

    # Retry/backoff
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = 1.0
    retry_jitter: float = Field(default=0.2, ge=0.0, lt=1.0)
    rate_limit_floor: float = 10.0
    rate_limit_base_delay: float = 5.0
    rate_limit_max_delay: float = 60.0

    # Batch jobs
    poll_interval: float = 60.0
    poll_max_interval: float = 600.0
    completion_window: str = "24h"

    model_config = SettingsConfigDict(
        env_file=resolve_env_file_path(),
        env_file_encoding="utf-8",
        env_prefix="PAYEE_ML_",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
