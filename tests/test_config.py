"""
Unit Tests for Leave Portal settings.
"""

import pytest

from leave_portal.core.config import LeaveSettings, load_settings
from leave_portal.core.exceptions import ConfigurationError


class TestLeaveSettings:
    """Tests for LeaveSettings."""

    def test_defaults(self, settings):
        assert settings.port == 3000
        assert settings.query_rate_limit == 50
        assert settings.query_rate_window_seconds == 600
        assert settings.append_rate_limit == 10
        assert settings.slowdown_delay_after == 10
        assert settings.slowdown_delay_step_seconds == 0.5
        assert settings.slowdown_max_delay_seconds == 5.0
        assert settings.captcha_enabled is False
        assert settings.allowed_origins == []
        assert settings.allowed_regions == []

    def test_secret_is_hidden(self, settings):
        assert "test-jwt-secret" not in repr(settings)

    def test_csv_lists(self, settings_factory):
        settings = settings_factory(
            LEAVE_ALLOWED_ORIGINS="https://a.example, https://b.example,,",
            LEAVE_ALLOWED_REGIONS="sa, ae ,kw",
        )
        assert settings.allowed_origins == ["https://a.example", "https://b.example"]
        assert settings.allowed_regions == ["SA", "AE", "KW"]

    def test_port_alias(self, settings_factory, monkeypatch):
        monkeypatch.delenv("LEAVE_PORT", raising=False)
        assert settings_factory(PORT="8080").port == 8080

    def test_captcha_enabled_with_secret(self, settings_factory):
        assert settings_factory(LEAVE_RECAPTCHA_SECRET_KEY="abc").captcha_enabled is True


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_missing_secret(self, mock_env_vars, monkeypatch):
        monkeypatch.delenv("LEAVE_JWT_SECRET_KEY")
        with pytest.raises(ConfigurationError, match="LEAVE_JWT_SECRET_KEY"):
            load_settings(_env_file=None)

    def test_short_secret(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("LEAVE_JWT_SECRET_KEY", "too-short")
        with pytest.raises(ConfigurationError):
            load_settings(_env_file=None)

    def test_invalid_number(self, mock_env_vars, monkeypatch):
        monkeypatch.setenv("LEAVE_QUERY_RATE_LIMIT", "0")
        with pytest.raises(ConfigurationError):
            load_settings(_env_file=None)

    def test_valid_environment(self, mock_env_vars):
        settings = load_settings(_env_file=None)
        assert isinstance(settings, LeaveSettings)
        assert settings.log_level == "DEBUG"
