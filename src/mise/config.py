"""
Mise - Configuration and settings.

Settings come from MISE_* environment variables or a local .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class MiseSettings(BaseSettings):
    """
    Application settings.

    Everything has a default so the CLI runs without a .env file;
    provider credentials normally live in the persistence store.
    """

    model_config = SettingsConfigDict(
        env_prefix="MISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    locale: Literal["en", "es"] = "en"

    # Provider defaults
    default_provider: str = "openrouter"
    api_key: str | None = None  # Fallback when no key is saved for the provider
    model: str | None = None

    # Local persistence
    data_dir: Path = Path.home() / ".mise"

    # Observability
    log_prompts: bool = False
    log_sessions: bool = False

    # Auto-retry (seconds)
    max_auto_retries: int = 3  # 0 = unbounded
    network_retry_delay: float = 3.0
    rate_limit_retry_delay: float = 5.0
    provider_retry_base: float = 2.0
    provider_retry_max: float = 30.0

    @property
    def store_path(self) -> Path:
        return self.data_dir / "store.json"


@lru_cache
def get_settings() -> MiseSettings:
    """Get cached settings instance."""
    return MiseSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: MiseSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
