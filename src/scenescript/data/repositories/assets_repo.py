"""Repository for the asset manifest used by scene, show and play lookups."""
from __future__ import annotations

from pathlib import Path
from typing import Dict

from scenescript.data.errors import DataValidationError
from scenescript.data.paths import get_default_manifest_path
from scenescript.data.repositories.base import RepositoryBase
from scenescript.domain.assets import AssetHandle

ASSET_TYPES = ("images", "audio")


class AssetRepository(RepositoryBase[AssetHandle]):
    """Loads `{name: {"type": ..., "path": ...}}` manifests and resolves references.

    Relative asset paths are resolved against the manifest's directory.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        super().__init__(path if path is not None else get_default_manifest_path())

    def _build(self, raw: dict[str, object]) -> Dict[str, AssetHandle]:
        assets: Dict[str, AssetHandle] = {}
        for name, payload in raw.items():
            entry = self._require_mapping(payload, f"asset '{name}'")
            asset_type = self._require_str(entry.get("type"), f"asset '{name}' type")
            if asset_type not in ASSET_TYPES:
                raise DataValidationError(f"asset '{name}' type must be one of {', '.join(ASSET_TYPES)}.")
            raw_path = Path(self._require_str(entry.get("path"), f"asset '{name}' path"))
            if not raw_path.is_absolute():
                raw_path = self.path.parent / raw_path
            assets[name] = AssetHandle(name=name, type=asset_type, path=str(raw_path))
        return assets

    def resolve(self, ref: str, asset_type: str | None = None) -> AssetHandle | None:
        """Return the asset for a script reference, or None when nothing matches.

        Only assets of `asset_type` are considered when it is given. An exact
        case-insensitive name match wins; otherwise the first asset (by name)
        whose name contains the reference is used.
        """
        needle = ref.strip().lower()
        if not needle:
            return None
        candidates = [asset for asset in self.all() if asset_type is None or asset.type == asset_type]
        for asset in candidates:
            if asset.name.lower() == needle:
                return asset
        for asset in candidates:
            if needle in asset.name.lower():
                return asset
        return None

    __call__ = resolve
