"""Base repository implementation for JSON manifest data."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Generic, TypeVar

from scenescript.data.errors import DataValidationError
from scenescript.data.json_loader import load_json

T = TypeVar("T")


class RepositoryBase(Generic[T]):
    """Common caching and loading behavior for repositories."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)
        self._definitions: Dict[str, T] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load_raw(self) -> dict[str, object]:
        raw = load_json(self._path)
        if not isinstance(raw, dict):
            raise DataValidationError(f"Expected top-level object in {self._path}")
        return raw

    def _build(self, raw: dict[str, object]) -> Dict[str, T]:
        """Convert a raw dict into typed entries."""
        raise NotImplementedError

    def _ensure_loaded(self) -> Dict[str, T]:
        if self._definitions is None:
            self._definitions = self._build(self._load_raw())
        return self._definitions

    def get(self, def_id: str) -> T:
        """Return an entry by id."""
        definitions = self._ensure_loaded()
        try:
            return definitions[def_id]
        except KeyError as exc:
            raise KeyError(def_id) from exc

    def all(self) -> list[T]:
        """Return all entries sorted deterministically by id."""
        definitions = self._ensure_loaded()
        return [definitions[key] for key in sorted(definitions.keys())]

    @staticmethod
    def _require_mapping(value: object, context: str) -> dict[str, object]:
        if not isinstance(value, dict):
            raise DataValidationError(f"{context} must be an object/dict.")
        return value

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str) or not value:
            raise DataValidationError(f"{context} must be a non-empty string.")
        return value
