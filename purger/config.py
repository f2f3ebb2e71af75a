"""Purge configuration.

The configuration lives under the ``accesslog.purge`` namespace of a YAML
settings file.  Keys may be written in camelCase (``executeOnStartup``),
snake_case or kebab-case.  Anything left out falls back to :data:`DEFAULTS`.

An invalid configuration raises :class:`PurgeConfigError`; hosts are expected
to let it propagate so the process does not start with a broken purge setup.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from purger.units import TimeUnit

log = logging.getLogger(__name__)

CONFIG_PATH = Path(os.getenv("PURGE_CONFIG", "purge.yml"))

ALLOWED_UNITS = frozenset(
    {TimeUnit.SECONDS, TimeUnit.MINUTES, TimeUnit.HOURS, TimeUnit.DAYS}
)

DEFAULTS: Dict[str, Any] = {
    "enabled": False,
    "execute_on_startup": False,
    "execution_interval": 24,
    "execution_interval_unit": TimeUnit.HOURS,
    "max_history": 30,
    "max_history_unit": TimeUnit.DAYS,
}

# normalized key -> field name
_KEYS = {name.replace("_", ""): name for name in DEFAULTS}


class PurgeConfigError(ValueError):
    """Raised when the purge configuration is invalid."""


@dataclass(frozen=True)
class PurgeConfig:
    enabled: bool = False
    execute_on_startup: bool = False
    execution_interval: int = 24
    execution_interval_unit: TimeUnit = TimeUnit.HOURS
    max_history: int = 30
    max_history_unit: TimeUnit = TimeUnit.DAYS

    @property
    def execution_interval_seconds(self) -> float:
        return self.execution_interval_unit.to_seconds(self.execution_interval)


def validate_config(config: PurgeConfig) -> PurgeConfig:
    """Check ``config`` and return it unchanged, or raise PurgeConfigError."""
    if not config.execution_interval > 0:
        raise PurgeConfigError("'executionInterval' must be greater than 0")
    if not config.max_history > 0:
        raise PurgeConfigError("'maxHistory' must be greater than 0")
    if config.execution_interval_unit not in ALLOWED_UNITS:
        raise PurgeConfigError(
            "'executionIntervalUnit' must be one of the following units: "
            "SECONDS, MINUTES, HOURS, DAYS"
        )
    if config.max_history_unit not in ALLOWED_UNITS:
        raise PurgeConfigError(
            "'maxHistoryUnit' must be one of the following units: "
            "SECONDS, MINUTES, HOURS, DAYS"
        )
    return config


def normalize_key(key: str) -> str:
    return str(key).replace("-", "").replace("_", "").lower()


def to_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("true", "yes", "on", "1"):
        return True
    if text in ("false", "no", "off", "0"):
        return False
    raise PurgeConfigError(f"'{key}' must be a boolean, got {value!r}")


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise PurgeConfigError(f"'{key}' must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise PurgeConfigError(f"'{key}' must be an integer, got {value!r}") from None


def _to_unit(key: str, value: Any) -> TimeUnit:
    try:
        return TimeUnit.parse(value)
    except ValueError as e:
        raise PurgeConfigError(f"'{key}': {e}") from None


_CONVERTERS = {
    "enabled": to_bool,
    "execute_on_startup": to_bool,
    "execution_interval": _to_int,
    "execution_interval_unit": _to_unit,
    "max_history": _to_int,
    "max_history_unit": _to_unit,
}


def config_from_mapping(data: Optional[Mapping[str, Any]]) -> PurgeConfig:
    """Build and validate a PurgeConfig from an ``accesslog.purge`` mapping."""
    values = dict(DEFAULTS)
    for key, value in (data or {}).items():
        field = _KEYS.get(normalize_key(key))
        if field is None:
            log.warning("Ignoring unknown purge setting %r", key)
            continue
        values[field] = _CONVERTERS[field](key, value)
    return validate_config(PurgeConfig(**values))


def load_settings(path: Union[str, Path, None] = None) -> Dict[str, Any]:
    """Read the whole YAML settings file; a missing file gives ``{}``."""
    path = Path(path) if path is not None else CONFIG_PATH
    if not path.exists():
        log.info("No settings file at %s, using defaults", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            settings = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise PurgeConfigError(f"Failed to load {path}: {e}") from e
    if not isinstance(settings, dict):
        raise PurgeConfigError(f"{path} must contain a mapping at the top level")
    log.info("Loaded settings from %s", path)
    return settings


def section(settings: Mapping[str, Any], *names: str) -> Any:
    """Walk nested mappings by name, matching keys loosely. Returns None if absent."""
    node: Any = settings
    for name in names:
        if not isinstance(node, Mapping):
            return None
        wanted = normalize_key(name)
        node = next(
            (v for k, v in node.items() if normalize_key(k) == wanted), None
        )
    return node


def config_from_settings(settings: Mapping[str, Any]) -> PurgeConfig:
    data = section(settings, "accesslog", "purge")
    if data is not None and not isinstance(data, Mapping):
        raise PurgeConfigError("'accesslog.purge' must be a mapping")
    config = config_from_mapping(data)
    log.info("Purge config: %s", config)
    return config


def load_config(path: Union[str, Path, None] = None) -> PurgeConfig:
    return config_from_settings(load_settings(path))
