"""
config.py — itrcore settings.

Usage:
    from itrcore.config import settings
    print(settings.storage_backend)

Every setting can be overridden with an ITR_-prefixed environment variable
(ITR_STORAGE_BACKEND=redis, ITR_AUTOSAVE_DELAY_MS=2000, ...) or a .env file.
"""
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ITR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore any extra env vars
    )

    # --- Record store ---
    storage_key: str = "itr-data"
    autosave_delay_ms: int = 5000

    # --- Persistence substrate ---
    storage_backend: Literal["memory", "file", "redis"] = "file"
    storage_dir: str = ".itr"
    redis_url: str = "redis://localhost:6379"
    redis_ttl_seconds: Optional[int] = None   # None → no expiry

    # --- Application ---
    debug: bool = False

    @property
    def autosave_delay_seconds(self) -> float:
        return self.autosave_delay_ms / 1000


# Module-level singleton — import this throughout the codebase
settings = Settings()
