"""Tests for config.py: environment-driven settings."""

from __future__ import annotations

import pytest

from rmx.config import Config, load_config
from rmx.core.constants import API_BASE_URL
from rmx.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("RMX_API_BASE_URL", "RMX_STALE_TIME_SECONDS", "RMX_RETRY_ATTEMPTS", "RMX_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestConfig:
    def test_defaults(self):
        config = load_config()
        assert config.api_base_url == API_BASE_URL
        assert config.stale_time_seconds == 300
        assert config.retry_attempts == 2
        assert config.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("RMX_STALE_TIME_SECONDS", "15")
        monkeypatch.setenv("RMX_RETRY_ATTEMPTS", "0")
        monkeypatch.setenv("RMX_API_BASE_URL", "http://localhost:8080/api")
        config = load_config()
        assert config.stale_time_seconds == 15
        assert config.retry_attempts == 0
        assert config.api_base_url == "http://localhost:8080/api"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("RMX_LOG_LEVEL=DEBUG\n", encoding="utf-8")
        assert load_config().log_level == "DEBUG"

    def test_invalid_value_raises_configuration_error(self, monkeypatch):
        monkeypatch.setenv("RMX_RETRY_ATTEMPTS", "-1")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_field_names_accepted(self):
        assert Config(retry_attempts=5).retry_attempts == 5
