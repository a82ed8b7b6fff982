"""Application configuration loaded from environment variables."""

from __future__ import annotations

import functools

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Feedcast backend settings.

    Every field has a default, so the service starts with an empty
    environment. Values can be overridden via environment variables or a
    ``.env`` file.
    """

    database_url: str = "sqlite:///feedcast.db"
    cors_origins: str = "*"
    room_name: str = "main-room"
    send_timeout_seconds: float = 2.0
    submission_ttl_days: int = 30
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8787

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@functools.lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance (singleton)."""
    return Settings()
