"""Tests for RetrySettings and the settings cache."""

import pytest
from pydantic import ValidationError

from manifail.core.settings import RetrySettings, clear_settings_cache, get_settings


class TestRetrySettings:
    def test_defaults(self):
        settings = RetrySettings()
        assert settings.default_delays == ()
        assert settings.max_retries is None
        assert settings.log_level == "INFO"
        assert settings.log_json is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("MANIFAIL_DEFAULT_DELAYS", "[0.1, 0.2]")
        monkeypatch.setenv("MANIFAIL_MAX_RETRIES", "3")
        monkeypatch.setenv("MANIFAIL_LOG_JSON", "true")
        settings = RetrySettings()
        assert settings.default_delays == (0.1, 0.2)
        assert settings.max_retries == 3
        assert settings.log_json is True

    def test_from_dotenv(self, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("MANIFAIL_MAX_RETRIES=7\n")
        monkeypatch.chdir(tmp_path)
        assert RetrySettings().max_retries == 7

    def test_negative_delay_rejected(self, monkeypatch):
        monkeypatch.setenv("MANIFAIL_DEFAULT_DELAYS", "[-1]")
        with pytest.raises(ValidationError):
            RetrySettings()

    def test_negative_cap_rejected(self):
        with pytest.raises(ValidationError):
            RetrySettings(max_retries=-1)

    def test_unknown_keys_ignored(self, monkeypatch):
        monkeypatch.setenv("MANIFAIL_SOMETHING_ELSE", "x")
        RetrySettings()


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("MANIFAIL_MAX_RETRIES", "2")
        assert get_settings().max_retries is None
        reloaded = get_settings(_force_reload=True)
        assert reloaded is not first
        assert reloaded.max_retries == 2

    def test_clear_cache(self, monkeypatch):
        get_settings()
        monkeypatch.setenv("MANIFAIL_MAX_RETRIES", "5")
        clear_settings_cache()
        assert get_settings().max_retries == 5
