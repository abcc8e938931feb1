"""Tests for pg-spine settings."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from pgspine.core.config import PgSpineSettings, clear_settings_cache, get_settings
from pgspine.core.config.settings import DEFAULT_CREDENTIALS_FILE


class TestDefaults:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        settings = PgSpineSettings()
        assert settings.appsettings_path == Path("appsettings.json")
        assert settings.credentials_path == Path.home() / DEFAULT_CREDENTIALS_FILE
        assert settings.retry.max_attempts == 3
        assert settings.retry.initial_delay_ms == 500
        assert settings.profile.operation_timeout == 120
        assert settings.probe_timeout == 5.0
        assert settings.log_level == "INFO"
        assert settings.log_format == "console"


class TestEnvironment:
    def test_nested_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PGSPINE_RETRY__MAX_ATTEMPTS", "5")
        monkeypatch.setenv("PGSPINE_PROFILE__POOL_MAX", "40")
        monkeypatch.setenv("PGSPINE_LOG_FORMAT", "json")
        settings = PgSpineSettings()
        assert settings.retry.max_attempts == 5
        assert settings.retry.delay_cap_ms == 5000
        assert settings.profile.pool_max == 40
        assert settings.log_format == "json"

    def test_invalid_value_rejected(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("PGSPINE_RETRY__MAX_ATTEMPTS", "0")
        with pytest.raises(ValidationError):
            PgSpineSettings()

    def test_env_file(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("PGSPINE_PROBE_TIMEOUT=2.5\n", encoding="utf-8")
        settings = get_settings(env_file=env_file)
        assert settings.probe_timeout == 2.5


class TestCache:
    def test_cached_until_cleared(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        first = get_settings()
        assert get_settings() is first
        assert get_settings(_force_reload=True) is not first

        cached = get_settings()
        clear_settings_cache()
        assert get_settings() is not cached
