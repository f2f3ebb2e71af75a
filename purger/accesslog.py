from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

from purger.config import PurgeConfigError, to_bool, normalize_key, section
from purger.pattern import current_log_file_name

DEFAULT_DIR = "logs"
DEFAULT_PREFIX = "access_log."
DEFAULT_SUFFIX = "log"


@dataclass(frozen=True)
class AccessLogDescriptor:
    """Where an access log lives and how its files are named."""

    directory: Path = field(default_factory=lambda: Path(DEFAULT_DIR))
    prefix: str = DEFAULT_PREFIX
    suffix: str = DEFAULT_SUFFIX
    enabled: bool = False

    def __post_init__(self):
        object.__setattr__(self, "directory", Path(self.directory))

    @property
    def current_log_file_name(self) -> str:
        return current_log_file_name(self.prefix, self.suffix)


def descriptor_from_mapping(data: Optional[Mapping[str, Any]]) -> AccessLogDescriptor:
    values = {}
    for key, value in (data or {}).items():
        norm = normalize_key(key)
        if norm in ("dir", "directory"):
            values["directory"] = Path(str(value))
        elif norm in ("prefix", "suffix"):
            values[norm] = "" if value is None else str(value)
        elif norm == "enabled":
            values["enabled"] = to_bool(key, value)
    return AccessLogDescriptor(**values)


def descriptors_from_settings(settings: Mapping[str, Any]) -> List[AccessLogDescriptor]:
    """Read ``server.accesslog``, which may be one mapping or a list of them."""
    node = section(settings, "server", "accesslog")
    if node is None:
        return []
    if isinstance(node, Mapping):
        node = [node]
    if not isinstance(node, list) or not all(isinstance(n, Mapping) for n in node):
        raise PurgeConfigError("'server.accesslog' must be a mapping or a list of mappings")
    return [descriptor_from_mapping(n) for n in node]
