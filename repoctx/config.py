"""Configuration loading for repoctx (.repoctx.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".repoctx.yml"

DEFAULT_STORE_DIR = ".repoctx"
DEFAULT_EXCERPT_LINES = 40
DEFAULT_WHERE_USED_LIMIT = 5
DEFAULT_WHERE_USED_INCLUDE = (
    "*.py",
    "*.js",
    "*.jsx",
    "*.ts",
    "*.tsx",
    "*.mjs",
    "*.cjs",
)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DiffConfig:
    """Change summary settings."""

    excerpt_lines: int = DEFAULT_EXCERPT_LINES
    top: Optional[int] = None


@dataclass
class WhereUsedConfig:
    """Settings for the best-effort "used in" reference scan."""

    enabled: bool = True
    limit: int = DEFAULT_WHERE_USED_LIMIT
    include: List[str] = field(default_factory=lambda: list(DEFAULT_WHERE_USED_INCLUDE))
    exclude_dirs: List[str] = field(default_factory=list)


@dataclass
class RepoctxConfig:
    """Represents the settings defined in .repoctx.yml."""

    root: Path
    store_dir: str = DEFAULT_STORE_DIR
    diff: DiffConfig = field(default_factory=DiffConfig)
    where_used: WhereUsedConfig = field(default_factory=WhereUsedConfig)

    @property
    def store_path(self) -> Path:
        return self.root / self.store_dir


def load_config(config_path: Path) -> RepoctxConfig:
    """Load configuration from a repository root or an explicit config file."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RepoctxConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    store_dir = _as_str(data.get("store_dir")) or DEFAULT_STORE_DIR

    diff = DiffConfig()
    diff_data = _as_dict(data.get("diff"))
    if diff_data:
        excerpt_lines = _as_int(diff_data.get("excerpt_lines"))
        if excerpt_lines is not None and excerpt_lines > 0:
            diff.excerpt_lines = excerpt_lines
        top = _as_int(diff_data.get("top"))
        if top is not None and top > 0:
            diff.top = top

    where_used = WhereUsedConfig()
    where_used_data = _as_dict(data.get("where_used"))
    if where_used_data:
        enabled = _as_bool(where_used_data.get("enabled"))
        if enabled is not None:
            where_used.enabled = enabled
        limit = _as_int(where_used_data.get("limit"))
        if limit is not None and limit >= 0:
            where_used.limit = limit
        if "include" in where_used_data:
            where_used.include = _as_str_list(where_used_data.get("include"))
        where_used.exclude_dirs = _as_str_list(where_used_data.get("exclude_dirs"))

    return RepoctxConfig(root=root, store_dir=store_dir, diff=diff, where_used=where_used)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DiffConfig",
    "RepoctxConfig",
    "WhereUsedConfig",
    "load_config",
]
