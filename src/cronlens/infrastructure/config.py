"""Configuration management for CronLens.

Settings are merged from an optional configuration file and environment
variables, later sources overriding earlier ones.

Architecture:
    ConfigSource[] (ordered by priority)
         |
         +---> FileConfigSource (YAML, JSON, TOML)
         +---> EnvConfigSource (environment variables)
         |
         v
    ConfigProfile (typed access)

Environment variables use the ``CRONLENS`` prefix and ``__`` between
nesting levels:

    CRONLENS__SEARCH__COUNT=10
    CRONLENS__LOGGING__LEVEL=debug

Usage:
    >>> from cronlens.infrastructure.config import load_config
    >>>
    >>> config = load_config(config_path="cronlens.yaml")
    >>> config.get_int("search.count", default=5)
    >>> settings = SearchSettings.from_profile(config)
"""

from __future__ import annotations

import json
import os
import threading
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from cronlens.scheduling.evaluator import DEFAULT_DEBOUNCE_SECONDS
from cronlens.scheduling.search import (
    DEFAULT_COUNT,
    DEFAULT_MAX_ITERATIONS,
    TIMESTAMP_FORMAT,
)

ENV_PREFIX = "CRONLENS"
ENV_SEPARATOR = "__"

DEFAULTS: dict[str, Any] = {
    "search": {
        "count": DEFAULT_COUNT,
        "max_iterations": DEFAULT_MAX_ITERATIONS,
    },
    "evaluator": {
        "debounce_seconds": DEFAULT_DEBOUNCE_SECONDS,
    },
    "output": {
        "timestamp_format": TIMESTAMP_FORMAT,
    },
    "logging": {
        "level": "WARNING",
        "format": "text",
    },
}


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(Exception):
    """Base configuration error."""

    pass


class ConfigSourceError(ConfigError):
    """A configuration source could not be read."""

    pass


# =============================================================================
# Configuration Sources
# =============================================================================


class ConfigSource(ABC):
    """Abstract base class for configuration sources.

    Sources with a higher priority are merged later and win.
    """

    def __init__(self, priority: int = 0) -> None:
        self._priority = priority

    @property
    def priority(self) -> int:
        return self._priority

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load configuration from source.

        Returns:
            Dictionary of configuration values.
        """
        pass


class EnvConfigSource(ConfigSource):
    """Environment variable configuration source.

    Example:
        CRONLENS__SEARCH__MAX_ITERATIONS=20000

        Will produce:
        {"search": {"max_iterations": 20000}}
    """

    def __init__(
        self,
        prefix: str = ENV_PREFIX,
        separator: str = ENV_SEPARATOR,
        priority: int = 100,
        environ: dict[str, str] | None = None,
    ) -> None:
        """Initialize environment source.

        Args:
            prefix: Environment variable prefix.
            separator: Separator for nested keys.
            priority: Source priority.
            environ: Mapping to read instead of ``os.environ``.
        """
        super().__init__(priority)
        self._prefix = prefix
        self._separator = separator
        self._environ = environ

    def load(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        prefix = f"{self._prefix}{self._separator}"
        environ = os.environ if self._environ is None else self._environ

        for key, value in environ.items():
            if not key.startswith(prefix):
                continue
            parts = key[len(prefix):].lower().split(self._separator)

            current = result
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = self._parse_value(value)

        return result

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        lowered = value.lower()
        if lowered in ("true", "yes", "on"):
            return True
        if lowered in ("false", "no", "off"):
            return False
        if lowered in ("null", "none", ""):
            return None

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("[", "{")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value


class FileConfigSource(ConfigSource):
    """File-based configuration source.

    Supports YAML, JSON, and TOML formats, chosen by file extension.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        required: bool = False,
        priority: int = 50,
    ) -> None:
        """Initialize file source.

        Args:
            path: Path to configuration file.
            required: Raise error if file not found.
            priority: Source priority.
        """
        super().__init__(priority)
        self._path = Path(path)
        self._required = required

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, Any]:
        if not self._path.exists():
            if self._required:
                raise ConfigSourceError(f"Configuration file not found: {self._path}")
            return {}

        content = self._path.read_text(encoding="utf-8")
        suffix = self._path.suffix.lower()

        try:
            if suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            elif suffix == ".json":
                data = json.loads(content)
            elif suffix == ".toml":
                data = tomllib.loads(content)
            else:
                raise ConfigSourceError(f"Unsupported file format: {suffix}")
        except (yaml.YAMLError, json.JSONDecodeError, tomllib.TOMLDecodeError) as e:
            raise ConfigSourceError(f"Failed to load config {self._path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigSourceError(
                f"Configuration file {self._path} must contain a mapping"
            )
        return data


# =============================================================================
# Configuration Profile
# =============================================================================


class ConfigProfile:
    """Typed configuration access.

    Example:
        >>> profile = ConfigProfile({"search": {"count": 3}})
        >>> profile.get_int("search.count", default=5)
        3
    """

    def __init__(self, config: dict[str, Any]) -> None:
        self._config = config

    def get(
        self,
        key: str,
        default: Any = None,
        *,
        required: bool = False,
    ) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key (dot-separated for nesting).
            default: Default value if not found.
            required: Raise error if not found.
        """
        value = self._get_nested(key)

        if value is None:
            if required:
                raise ConfigError(f"Required configuration '{key}' not found")
            return default
        return value

    def get_str(self, key: str, default: str = "") -> str:
        value = self.get(key, default)
        return str(value) if value is not None else default

    def get_int(self, key: str, default: int = 0) -> int:
        value = self.get(key, default)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, float) and not value.is_integer():
            raise ConfigError(f"Configuration '{key}' must be an integer, got {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Configuration '{key}' must be an integer, got {value!r}")

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Configuration '{key}' must be a number, got {value!r}")

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ("true", "yes", "1", "on")
        return bool(value)

    def _get_nested(self, key: str) -> Any:
        current: Any = self._config
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None
        return current

    def to_dict(self) -> dict[str, Any]:
        return _merge({}, self._config)

    def __contains__(self, key: str) -> bool:
        return self._get_nested(key) is not None


@dataclass(frozen=True)
class SearchSettings:
    """Engine settings resolved from a profile."""

    count: int = DEFAULT_COUNT
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    timestamp_format: str = TIMESTAMP_FORMAT

    @classmethod
    def from_profile(cls, profile: ConfigProfile) -> "SearchSettings":
        settings = cls(
            count=profile.get_int("search.count", DEFAULT_COUNT),
            max_iterations=profile.get_int("search.max_iterations", DEFAULT_MAX_ITERATIONS),
            debounce_seconds=profile.get_float(
                "evaluator.debounce_seconds", DEFAULT_DEBOUNCE_SECONDS
            ),
            timestamp_format=profile.get_str("output.timestamp_format", TIMESTAMP_FORMAT),
        )
        if settings.count < 1:
            raise ConfigError(f"search.count must be at least 1, got {settings.count}")
        if settings.max_iterations < 1:
            raise ConfigError(
                f"search.max_iterations must be at least 1, got {settings.max_iterations}"
            )
        if settings.debounce_seconds < 0:
            raise ConfigError(
                f"evaluator.debounce_seconds must not be negative, got {settings.debounce_seconds}"
            )
        return settings


# =============================================================================
# Global Configuration
# =============================================================================

_global_profile: ConfigProfile | None = None
_lock = threading.Lock()


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        elif isinstance(value, dict):
            merged[key] = _merge({}, value)
        else:
            merged[key] = value
    return merged


def build_profile(sources: list[ConfigSource]) -> ConfigProfile:
    """Merge defaults and sources (lowest priority first) into a profile."""
    config = _merge({}, DEFAULTS)
    for source in sorted(sources, key=lambda s: s.priority):
        config = _merge(config, source.load())
    return ConfigProfile(config)


def load_config(
    *,
    config_path: str | Path | None = None,
    env_prefix: str = ENV_PREFIX,
) -> ConfigProfile:
    """Load configuration and make it the global profile.

    Args:
        config_path: Optional configuration file; it must exist when given.
        env_prefix: Environment variable prefix.

    Returns:
        ConfigProfile instance.
    """
    global _global_profile

    sources: list[ConfigSource] = [EnvConfigSource(prefix=env_prefix, priority=100)]
    if config_path is not None:
        sources.append(FileConfigSource(config_path, required=True, priority=50))

    profile = build_profile(sources)
    with _lock:
        _global_profile = profile
    return profile


def get_config() -> ConfigProfile:
    """Get the global configuration, loading it on first use."""
    with _lock:
        profile = _global_profile
    if profile is None:
        return load_config()
    return profile


def reset_config() -> None:
    global _global_profile

    with _lock:
        _global_profile = None
