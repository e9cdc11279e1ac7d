"""Configuration loader for the lockgraph command line.

Reads settings from an optional JSON file and the environment. Recognised
keys are ``log_level`` (a logging level name), ``output`` (``json`` or
``summary``) and ``fail_on_conflicts`` (boolean). Missing keys keep their
defaults.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

CONFIG_PATH_ENV_VAR = "LOCKGRAPH_CONFIG"
LOG_LEVEL_ENV_VAR = "LOCKGRAPH_LOG_LEVEL"

OUTPUT_FORMATS = ("json", "summary")
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_OUTPUT = "json"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be loaded or is invalid."""


@dataclass(slots=True, frozen=True)
class Settings:
    """Top-level settings container."""

    log_level: str = DEFAULT_LOG_LEVEL
    output: str = DEFAULT_OUTPUT
    fail_on_conflicts: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        """Create Settings from a dictionary, validating known fields."""
        unknown = set(data) - {"log_level", "output", "fail_on_conflicts"}
        if unknown:
            raise ConfigError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")

        log_level = data.get("log_level", DEFAULT_LOG_LEVEL)
        if not isinstance(log_level, str) or not _is_level(log_level):
            raise ConfigError(f"Invalid 'log_level' value: {log_level!r}")

        output = data.get("output", DEFAULT_OUTPUT)
        if output not in OUTPUT_FORMATS:
            raise ConfigError(
                f"Invalid 'output' value: {output!r} (expected one of {', '.join(OUTPUT_FORMATS)})"
            )

        fail_on_conflicts = data.get("fail_on_conflicts", False)
        if not isinstance(fail_on_conflicts, bool):
            raise ConfigError("Invalid 'fail_on_conflicts' field (must be boolean)")

        return cls(
            log_level=log_level.upper(),
            output=output,
            fail_on_conflicts=fail_on_conflicts,
        )

    @property
    def level(self) -> int:
        return logging.getLevelName(self.log_level)


def _is_level(name: str) -> bool:
    return isinstance(logging.getLevelName(name.upper()), int)


def _resolve_config_path(path: Path | str | None = None) -> Path | None:
    """Resolve the configuration file path.

    Priority:
    1. Explicit path argument
    2. LOCKGRAPH_CONFIG environment variable
    3. No file (defaults only)
    """
    if path is not None:
        return Path(path)

    env_path = os.environ.get(CONFIG_PATH_ENV_VAR)
    if env_path:
        return Path(env_path)

    return None


def load_settings(path: Path | str | None = None) -> Settings:
    """Load and validate settings.

    Args:
        path: Optional path to a JSON config file. If not provided, uses the
            LOCKGRAPH_CONFIG env var, or defaults when that is unset.

    Returns:
        A Settings object; LOCKGRAPH_LOG_LEVEL overrides the file's log level.

    Raises:
        ConfigError: If the file cannot be read or contains invalid data.
    """
    settings = Settings()
    config_path = _resolve_config_path(path)

    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        try:
            content = config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Failed to read configuration file: {exc}") from exc

        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in configuration file: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object")

        settings = Settings.from_dict(data)

    env_level = os.environ.get(LOG_LEVEL_ENV_VAR, "").strip()
    if env_level:
        if not _is_level(env_level):
            raise ConfigError(f"Invalid {LOG_LEVEL_ENV_VAR} value: {env_level!r}")
        settings = replace(settings, log_level=env_level.upper())

    return settings
