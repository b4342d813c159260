"""Configuration management for the validation engine.

Settings come from YAML files and ``DCFORM_*`` environment variables and
are converted into a typed ValidationSettings struct. Files may hold the
settings at the top level or under a ``validation:`` section.
"""

import logging
import os
from pathlib import Path
from typing import Any

import msgspec
import yaml

from dcform.core.fields import (
    ABSTRACT_MAX_LENGTH,
    DEFAULT_DEBOUNCE_MS,
    DOI_DEBOUNCE_MS,
    LENGTH_WARNING_RATIO,
    MAX_DATES,
    MAX_TITLES,
    MIN_YEAR,
    TITLE_MAX_LENGTH,
)
from dcform.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "DCFORM_"


class ValidationSettings(msgspec.Struct, frozen=True, kw_only=True):
    """Tunable limits for rule factories and the debounce scheduler."""

    title_max_length: int = TITLE_MAX_LENGTH
    abstract_max_length: int = ABSTRACT_MAX_LENGTH
    length_warning_ratio: float = LENGTH_WARNING_RATIO
    min_year: int = MIN_YEAR
    max_year: int | None = None
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    doi_debounce_ms: int = DOI_DEBOUNCE_MS
    max_titles: int = MAX_TITLES
    max_dates: int = MAX_DATES

    def __post_init__(self):
        """Validate value ranges."""
        if not 0 < self.length_warning_ratio <= 1:
            raise ValueError("length_warning_ratio must be in (0, 1]")
        if self.debounce_ms < 0 or self.doi_debounce_ms < 0:
            raise ValueError("debounce intervals must not be negative")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "ValidationSettings":
        """Convert a configuration mapping, ignoring unknown keys.

        Raises:
            ConfigError: If a value has the wrong type or range.
        """
        section = data.get("validation", data)
        if not isinstance(section, dict):
            raise ConfigError("'validation' section must be a mapping")

        known = {k: v for k, v in section.items() if k in cls.__struct_fields__}
        try:
            return msgspec.convert(known, cls, strict=False)
        except (msgspec.ValidationError, ValueError) as e:
            raise ConfigError(f"Invalid validation settings: {e}") from e


DEFAULT_SETTINGS = ValidationSettings()


class Config:
    """YAML configuration file handling."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}", str(path)) from e
        except OSError as e:
            raise ConfigError(f"Error reading config file: {e}", str(path)) from e

        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping", str(path))
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the configuration file paths in precedence order."""
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        return [
            xdg_config_home / "dcform" / "config.yaml",
            Path(".dcform.yaml"),
            Path("dcform.yaml"),
        ]

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def env_overrides() -> dict[str, Any]:
    """Collect ``DCFORM_<SETTING>`` environment overrides.

    Values stay strings; ValidationSettings converts them.
    """
    overrides = {}
    for name in ValidationSettings.__struct_fields__:
        value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    return {"validation": overrides} if overrides else {}


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    An explicit ``path`` must exist and parse; default locations are
    skipped when missing.
    """
    config: dict[str, Any] = {}

    paths = [path] if path else Config.get_config_paths()
    for candidate in paths:
        if candidate.exists():
            logger.debug("Loading configuration from %s", candidate)
            file_config = Config.from_file(candidate)
            if "validation" not in file_config:
                file_config = {"validation": file_config}
            config = Config.merge_configs(config, file_config)
        elif path:
            raise ConfigError("Config file not found", str(path))

    return Config.merge_configs(config, env_overrides())


def load_settings(path: Path | None = None) -> ValidationSettings:
    """Load ValidationSettings from configuration sources."""
    return ValidationSettings.from_mapping(load_config(path))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
