"""Configuration loading for rsloc (.rsloc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .analyzers.stats import parse_file_size
from .stores import ACCUMULATOR_KINDS

CONFIG_FILENAME = ".rsloc.yml"

OUTPUT_FORMATS = ("text", "json")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class RslocConfig:
    """Settings defined in .rsloc.yml."""

    root: Path
    max_file_size: Optional[int] = None
    workers: Optional[int] = None
    accumulator: str = "file"
    output: str = "text"
    follow_links: bool = True
    exclude_paths: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> RslocConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return RslocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = RslocConfig(root=root)
    if data.get("max_file_size") is not None:
        config.max_file_size = _as_size(data["max_file_size"])
    if data.get("workers") is not None:
        config.workers = _as_positive_int(data["workers"], "workers")
    if data.get("accumulator") is not None:
        config.accumulator = _as_choice(data["accumulator"], "accumulator", ACCUMULATOR_KINDS)
    if data.get("output") is not None:
        config.output = _as_choice(data["output"], "output", OUTPUT_FORMATS)
    if data.get("follow_links") is not None:
        config.follow_links = _as_bool(data["follow_links"], "follow_links")
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix in {".yml", ".yaml"}:
        return config_path.resolve()
    return (config_path.parent / CONFIG_FILENAME).resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_size(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError("max_file_size must be a byte count or a size such as '10MB'")
    if isinstance(value, int):
        if value < 0:
            raise ConfigError("max_file_size cannot be negative")
        return value
    if isinstance(value, (str, float)):
        try:
            return parse_file_size(str(value))
        except ValueError as exc:
            raise ConfigError(f"Invalid max_file_size: {exc}") from exc
    raise ConfigError("max_file_size must be a byte count or a size such as '10MB'")


def _as_positive_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{key} must be a positive integer")
    return value


def _as_choice(value: Any, key: str, choices: Sequence[str]) -> str:
    text = str(value).strip().lower()
    if text not in choices:
        raise ConfigError(f"{key} must be one of: {', '.join(choices)}")
    return text


def _as_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    raise ConfigError(f"{key} must be a boolean")


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    raise ConfigError("exclude_paths must be a list of patterns")


__all__ = ["CONFIG_FILENAME", "ConfigError", "OUTPUT_FORMATS", "RslocConfig", "load_config"]
