"""Helpers for resolving bundled data locations."""
from __future__ import annotations

from pathlib import Path

DEFAULT_SCRIPT_NAME = "welcome.rpy"
DEFAULT_MANIFEST_NAME = "manifest.json"


def get_repo_root() -> Path:
    """Return the repository root."""
    return Path(__file__).resolve().parents[3]


def get_data_path(base_path: Path | str | None = None) -> Path:
    """Return the directory holding bundled scripts and assets."""
    if base_path is not None:
        return Path(base_path)
    return get_repo_root() / "data"


def get_default_script_path(base_path: Path | str | None = None) -> Path:
    """Return the bundled sample script."""
    return get_data_path(base_path) / "scripts" / DEFAULT_SCRIPT_NAME


def get_default_manifest_path(base_path: Path | str | None = None) -> Path:
    """Return the bundled asset manifest."""
    return get_data_path(base_path) / "assets" / DEFAULT_MANIFEST_NAME
