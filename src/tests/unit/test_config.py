"""Tests for configuration module.

Testing approach:
- Use direct constructor arguments where possible
- Use monkeypatch for environment-driven settings
"""

import os

import pytest

from harbourmaster.config import DockerConfig, HarbourmasterConfig, LoggingConfig, get_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove HARBOURMASTER_ env vars to ensure clean test environment."""
    for key in list(os.environ.keys()):
        if key.startswith("HARBOURMASTER_"):
            monkeypatch.delenv(key, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


class TestDockerConfig:
    def test_default_values(self):
        config = DockerConfig()
        assert config.host == "unix:///var/run/docker.sock"
        assert config.api_timeout == 30.0
        assert config.image_pull_timeout == 600.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("HARBOURMASTER_DOCKER_HOST", "tcp://127.0.0.1:2375")
        monkeypatch.setenv("HARBOURMASTER_DOCKER_API_TIMEOUT", "5")

        config = DockerConfig()

        assert config.host == "tcp://127.0.0.1:2375"
        assert config.api_timeout == 5.0


class TestLoggingConfig:
    def test_default_values(self):
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "text"
        assert config.service_name == "harbourmaster"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("HARBOURMASTER_LOGGING_FORMAT", "json")
        assert LoggingConfig().format == "json"


class TestHarbourmasterConfig:
    def test_aggregates_sub_configs(self):
        config = HarbourmasterConfig()
        assert isinstance(config.docker, DockerConfig)
        assert isinstance(config.logging, LoggingConfig)

    def test_get_config_is_cached(self):
        assert get_config() is get_config()
