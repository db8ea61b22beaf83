"""Data layer utilities for loading scripts and asset manifests."""

from .errors import DataError, DataLoadError, DataValidationError
from .paths import get_data_path, get_default_manifest_path, get_default_script_path, get_repo_root
from .script_loader import load_program, load_script

__all__ = [
    "DataError",
    "DataLoadError",
    "DataValidationError",
    "get_data_path",
    "get_default_manifest_path",
    "get_default_script_path",
    "get_repo_root",
    "load_program",
    "load_script",
]
