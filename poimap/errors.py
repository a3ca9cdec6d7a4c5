"""Error kinds raised by the map core and its providers."""
from __future__ import annotations


class PoiMapError(Exception):
    """Base class for poimap errors."""


class PoiNotFound(PoiMapError):
    """An operation referenced a POI id that is not in the store."""

    def __init__(self, poi_id):
        super().__init__(f"POI {poi_id!r} not found")
        self.poi_id = poi_id


class ProviderError(PoiMapError):
    """A search or geolocation provider failed.

    ``retryable`` tells the UI whether offering a retry makes sense.
    """

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


class PermissionDenied(ProviderError):
    """The user (or platform) refused access to the device location."""

    def __init__(self, message: str = "Location permission denied"):
        super().__init__(message, retryable=True)


class InvalidFix(PoiMapError, ValueError):
    """A geolocation fix carried a malformed coordinate or accuracy."""
