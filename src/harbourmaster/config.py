"""Harbourmaster configuration using pydantic-settings.

Configuration hierarchy:
- DockerConfig: Engine API connection and transport timeouts
- LoggingConfig: Logging behavior
- HarbourmasterConfig: Main config aggregating all sub-configs

Environment variable prefix: HARBOURMASTER_
Example: HARBOURMASTER_DOCKER_HOST=tcp://127.0.0.1:2375
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DockerConfig(BaseSettings):
    """Docker Engine API connection settings.

    Timeouts belong to the transport. The orchestration pipeline itself
    never imposes one.
    """

    model_config = SettingsConfigDict(env_prefix="HARBOURMASTER_DOCKER_")

    host: str = Field(
        default="unix:///var/run/docker.sock",
        description="Docker daemon socket or TCP address",
    )
    api_timeout: float = Field(default=30.0, description="Docker API call timeout (seconds)")
    image_pull_timeout: float = Field(default=600.0, description="Image pull timeout (seconds)")


class LoggingConfig(BaseSettings):
    """Logging configuration.

    Supports both text and JSON formats:
    - text: Human-readable for local test runs
    - json: Structured logging for CI log aggregation
    """

    model_config = SettingsConfigDict(env_prefix="HARBOURMASTER_LOGGING_")

    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="text", description="Log format (text, json)")
    service_name: str = Field(default="harbourmaster", description="Service identifier in logs")


class HarbourmasterConfig(BaseSettings):
    """Main configuration aggregating all sub-configs.

    Environment variable prefix: HARBOURMASTER_
    Sub-configs use their own prefixes (HARBOURMASTER_DOCKER_, HARBOURMASTER_LOGGING_)
    """

    model_config = SettingsConfigDict(
        env_prefix="HARBOURMASTER_",
        env_nested_delimiter="__",
    )

    docker: DockerConfig = Field(default_factory=DockerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_config() -> HarbourmasterConfig:
    """Get cached configuration singleton."""
    return HarbourmasterConfig()
