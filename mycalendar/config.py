"""
Configuration management.

Settings come from (later wins):
1. built-in defaults
2. $MYCALENDAR_HOME/config.json (default: ~/.mycalendar/config.json)
3. environment variables (MYCALENDAR_DEFAULT_CALENDAR, MYCALENDAR_TIMEZONE,
   MYCALENDAR_REJECT_CONFLICTS, MYCALENDAR_LOG_LEVEL)

A missing or corrupted config file never stops the application; the
defaults are used instead.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}

_ENV_OVERRIDES = {
    "MYCALENDAR_DEFAULT_CALENDAR": "default_calendar",
    "MYCALENDAR_TIMEZONE": "default_timezone",
    "MYCALENDAR_REJECT_CONFLICTS": "reject_conflicts",
    "MYCALENDAR_LOG_LEVEL": "log_level",
}


@dataclass
class Config:
    """MyCalendar configuration."""

    default_calendar: str = "Default"
    default_timezone: str = "America/New_York"
    # True: overlapping events are declined. False: they are added with a warning.
    reject_conflicts: bool = True
    log_level: str = "WARNING"


def _default_config_path() -> Path:
    """
    Return the default location of config.json.

    A function instead of a constant so tests can point MYCALENDAR_HOME elsewhere.
    """
    home = os.environ.get("MYCALENDAR_HOME")
    base_dir = Path(home).expanduser() if home else Path.home() / ".mycalendar"
    return base_dir / "config.json"


def _coerce(name: str, value: Any) -> Any:
    if name == "reject_conflicts":
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE_VALUES
    return str(value).strip()


def _apply(config: Config, values: Mapping[str, Any]) -> None:
    known = {f.name for f in fields(Config)}
    for key, value in values.items():
        if key not in known:
            logger.debug("Ignoring unknown config key %r", key)
            continue
        if value is None:
            continue
        setattr(config, key, _coerce(key, value))


def load_config(path: str | Path | None = None, environ: Mapping[str, str] | None = None) -> Config:
    """
    Load configuration from a JSON file and the environment.
    """
    config_path = Path(path) if path is not None else _default_config_path()
    env = os.environ if environ is None else environ
    config = Config()

    if config_path.exists():
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _apply(config, data)
            else:
                logger.warning("Config file %s does not contain a JSON object, using defaults", config_path)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Could not read config file %s: %s", config_path, e)

    _apply(config, {attr: env[var] for var, attr in _ENV_OVERRIDES.items() if var in env})
    return config
