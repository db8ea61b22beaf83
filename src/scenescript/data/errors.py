"""Exceptions raised while loading scripts and asset manifests."""


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when a script or manifest file is missing or unreadable."""


class DataValidationError(DataError):
    """Raised when manifest content fails structural validation."""
