"""CLI configuration helpers for options persistence."""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Dict, Union

ConfigValue = Union[str, int]

_DEFAULT_ENTRY_LABEL = "start"
_DEFAULT_LOG_LEVEL = "WARNING"
_DEFAULT_TEXT_WIDTH = 72
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "scenescript"
        return Path.home() / "scenescript"
    return Path.home() / ".config" / "scenescript"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def default_config() -> Dict[str, ConfigValue]:
    return {
        "entry_label": _DEFAULT_ENTRY_LABEL,
        "log_level": _DEFAULT_LOG_LEVEL,
        "text_width": _DEFAULT_TEXT_WIDTH,
    }


def _normalize_entry_label(value: object) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return _DEFAULT_ENTRY_LABEL


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def _normalize_text_width(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return _DEFAULT_TEXT_WIDTH


def normalize_config(raw: Dict[str, object]) -> Dict[str, ConfigValue]:
    """Return a config with every key present and every value valid."""
    return {
        "entry_label": _normalize_entry_label(raw.get("entry_label")),
        "log_level": _normalize_log_level(raw.get("log_level")),
        "text_width": _normalize_text_width(raw.get("text_width")),
    }


def load_config(path: Path | None = None) -> Dict[str, ConfigValue]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return default_config()
    except Exception:
        return default_config()
    if not isinstance(raw, dict):
        return default_config()
    return normalize_config(raw)


def save_config(config: Dict[str, ConfigValue], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = normalize_config(dict(config))
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
