"""Repository exports."""

from .assets_repo import AssetRepository
from .base import RepositoryBase

__all__ = ["AssetRepository", "RepositoryBase"]
