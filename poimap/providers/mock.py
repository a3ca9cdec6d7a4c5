"""
Simulated providers for demos and offline use.

They mirror the behaviour of a network-less prototype: a short delay,
then fabricated results around central Amsterdam.
"""
from __future__ import annotations

import logging
import random
import time
from typing import List, Optional

from ..errors import PermissionDenied
from ..geo.poi import Coordinate
from .base import Fix, GeolocationProvider, SearchProvider, SearchResult

log = logging.getLogger(__name__)

AMSTERDAM = Coordinate(52.3676, 4.9041)
AMSTERDAM_CENTER = Coordinate(52.3702, 4.8952)


class MockSearchProvider(SearchProvider):
    """Returns two canned results named after the query."""

    def __init__(self, delay_s: float = 0.8):
        self._delay_s = delay_s

    def search(self, query: str) -> List[SearchResult]:
        if self._delay_s > 0:
            time.sleep(self._delay_s)
        return [
            SearchResult(query, "Amsterdam, Netherlands", AMSTERDAM),
            SearchResult(f"{query} Center", "City Center, Amsterdam", AMSTERDAM_CENTER),
        ]


class MockGeolocationProvider(GeolocationProvider):
    """Fix jittered ±0.005° around Amsterdam with 10–59 m accuracy."""

    def __init__(
        self,
        delay_s: float = 1.0,
        deny: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self._delay_s = delay_s
        self._deny = deny
        self._rng = rng or random.Random()

    def request_fix(self) -> Fix:
        if self._delay_s > 0:
            time.sleep(self._delay_s)
        if self._deny:
            raise PermissionDenied()
        fix = Fix(
            lat=AMSTERDAM.lat + (self._rng.random() - 0.5) * 0.01,
            lng=AMSTERDAM.lng + (self._rng.random() - 0.5) * 0.01,
            accuracy=float(self._rng.randint(10, 59)),
        )
        log.debug("Mock fix %.5f, %.5f ±%.0f m", fix.lat, fix.lng, fix.accuracy)
        return fix
