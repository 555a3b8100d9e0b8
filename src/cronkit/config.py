"""Configuration management for Cronkit."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CRONKIT_DIR = Path.home() / ".cronkit"
CONFIG_FILE = CRONKIT_DIR / "config.yaml"

ENV_OVERRIDES = {
    "CRONKIT_LOCALE": "locale",
    "CRONKIT_MAX_RUNS_PER_DAY": "max_runs_per_day",
}


class ConfigError(Exception):
    """Error loading or validating configuration."""


class CheckSettings(BaseModel):
    """Settings for the ``check`` command and the Validator."""

    locale: str = Field(default="en", min_length=1, description="Symbol locale")
    enable_frequency: bool = Field(
        default=True, description="Report redundant steps and excessive runs"
    )
    max_runs_per_day: int = Field(
        default=1000, ge=1, description="Runs per day above which a warning is reported"
    )
    enable_hygiene: bool = Field(default=False, description="Report command hygiene issues")
    warn_on_overlap: bool = Field(default=False, description="Report overlapping jobs")
    overlap_window_minutes: int = Field(
        default=1440, ge=1, description="Overlap analysis window in minutes"
    )


def _read_check_section(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}

    if not isinstance(config, dict):
        return {}
    section = config.get("check")
    return dict(section) if isinstance(section, dict) else {}


def load_settings(path: Path | None = None) -> CheckSettings:
    """Load check settings.

    Values come from, in increasing priority:
    1. Built-in defaults
    2. The ``check:`` section of the config file (~/.cronkit/config.yaml)
    3. CRONKIT_LOCALE / CRONKIT_MAX_RUNS_PER_DAY environment variables

    Args:
        path: Config file to read instead of the default location.

    Returns:
        Validated settings.

    Raises:
        ConfigError: If a value is present but invalid.
    """
    data = _read_check_section(path or CONFIG_FILE)

    for env_var, key in ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            data[key] = value

    try:
        return CheckSettings.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in e.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from e
