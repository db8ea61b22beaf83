"""Low-level file helpers for scripts and manifests."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import DataLoadError


def read_text(path: Path) -> str:
    """Read a UTF-8 text file and raise DataLoadError on failure."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DataLoadError(f"File not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Unable to read file: {path}") from exc


def load_json(path: Path) -> object:
    """Load JSON from disk and raise DataLoadError on failure."""
    text = read_text(path)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Invalid JSON in {path}: {exc}") from exc
