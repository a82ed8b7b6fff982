"""Tests for feedcast.config -- Settings class and get_settings() singleton."""

from __future__ import annotations

import pytest

from feedcast.config import Settings, get_settings

ENV_KEYS = [
    "DATABASE_URL",
    "CORS_ORIGINS",
    "ROOM_NAME",
    "SEND_TIMEOUT_SECONDS",
    "SUBMISSION_TTL_DAYS",
    "LOG_LEVEL",
    "HOST",
    "PORT",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestDefaults:
    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.database_url == "sqlite:///feedcast.db"
        assert settings.cors_origins == "*"
        assert settings.room_name == "main-room"
        assert settings.send_timeout_seconds == 2.0
        assert settings.submission_ttl_days == 30
        assert settings.log_level == "INFO"


class TestOverrides:
    def test_env_overrides(self, clean_env):
        clean_env.setenv("ROOM_NAME", "lobby")
        clean_env.setenv("SEND_TIMEOUT_SECONDS", "0.25")
        clean_env.setenv("SUBMISSION_TTL_DAYS", "7")
        settings = Settings(_env_file=None)
        assert settings.room_name == "lobby"
        assert settings.send_timeout_seconds == 0.25
        assert settings.submission_ttl_days == 7


class TestSingleton:
    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()

    def test_cache_clear_rereads_env(self, clean_env):
        get_settings.cache_clear()
        clean_env.setenv("ROOM_NAME", "other-room")
        try:
            assert get_settings().room_name == "other-room"
        finally:
            get_settings.cache_clear()
