"""Configuration and logging infrastructure for CronLens."""

from cronlens.infrastructure.config import (
    ConfigError,
    ConfigProfile,
    ConfigSource,
    ConfigSourceError,
    EnvConfigSource,
    FileConfigSource,
    SearchSettings,
    build_profile,
    get_config,
    load_config,
    reset_config,
)
from cronlens.infrastructure.logging import (
    JSONFormatter,
    LogLevel,
    configure_logging,
    reset_logging,
)

__all__ = [
    # Config
    "ConfigError",
    "ConfigProfile",
    "ConfigSource",
    "ConfigSourceError",
    "EnvConfigSource",
    "FileConfigSource",
    "SearchSettings",
    "build_profile",
    "get_config",
    "load_config",
    "reset_config",
    # Logging
    "JSONFormatter",
    "LogLevel",
    "configure_logging",
    "reset_logging",
]
