"""Asset handles returned by asset lookups."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class AssetHandle:
    """Displayable media resolved from a symbolic name."""

    name: str
    type: str
    path: str
