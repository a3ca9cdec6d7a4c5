"""
Provider capabilities consumed by the map core.

The controllers only see these interfaces; whether a real HTTP service or
a mock is wired in is decided in :mod:`poimap.app`.

Provider calls are blocking.  The controllers run them on worker threads
and hand the outcome back to the UI thread.
"""
from __future__ import annotations

import abc
import math
from dataclasses import dataclass
from typing import List, Optional

from ..errors import InvalidFix
from ..geo.poi import Coordinate, PointOfInterest, is_valid_latlng


@dataclass(frozen=True)
class SearchResult:
    """One geocoding hit."""
    name: str
    address: str
    coordinate: Coordinate


@dataclass(frozen=True)
class Fix:
    """Raw position fix as reported by a geolocation provider.

    Values are unchecked here; :meth:`validated` is applied by the
    geolocation controller before the fix is trusted.
    """
    lat: float
    lng: float
    accuracy: Optional[float] = None    # radius in metres

    def validated(self) -> "Fix":
        if not is_valid_latlng(self.lat, self.lng):
            raise InvalidFix(f"invalid fix coordinate ({self.lat!r}, {self.lng!r})")
        if self.accuracy is not None:
            try:
                acc = float(self.accuracy)
            except (TypeError, ValueError):
                raise InvalidFix(f"invalid fix accuracy {self.accuracy!r}") from None
            if not math.isfinite(acc) or acc < 0:
                raise InvalidFix(f"invalid fix accuracy {self.accuracy!r}")
        return self

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.lat, self.lng)


class PoiSource(abc.ABC):
    """Supplies the POI collection."""

    @abc.abstractmethod
    def load_pois(self) -> List[PointOfInterest]:
        ...


class SearchProvider(abc.ABC):
    """Free-text location search."""

    @abc.abstractmethod
    def search(self, query: str) -> List[SearchResult]:
        """Return matches for *query*; raise ProviderError on failure."""


class GeolocationProvider(abc.ABC):
    """Device position lookup."""

    @abc.abstractmethod
    def request_fix(self) -> Fix:
        """Return a fix; raise PermissionDenied or ProviderError on failure."""
