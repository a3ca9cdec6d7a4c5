"""
OpenStreetMap Nominatim search client.

https://nominatim.org/release-docs/latest/api/Search/

Nominatim's usage policy requires an identifying User-Agent and at most
one request per second; the search controller's single-flight behaviour
keeps interactive use well under that.

Usage
-----
    provider = NominatimSearchProvider(user_agent="poimap/0.1 (me@example.org)")
    results = provider.search("Rijksmuseum")
"""
from __future__ import annotations

import logging
from typing import List, Optional

import requests

from ..errors import ProviderError
from ..geo.poi import Coordinate, is_valid_latlng
from . import fetch_with_retry
from .base import SearchProvider, SearchResult

log = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


def _parse_place(place: dict) -> Optional[SearchResult]:
    """Parse one Nominatim JSON hit into a SearchResult."""
    try:
        lat = float(place["lat"])
        lng = float(place["lon"])
    except (KeyError, TypeError, ValueError) as exc:
        log.debug("Failed to parse Nominatim place: %s", exc)
        return None
    if not is_valid_latlng(lat, lng):
        return None
    display = place.get("display_name", "") or ""
    name = place.get("name") or display.split(",")[0].strip() or display
    address = display[len(name):].lstrip(", ") if display.startswith(name) else display
    return SearchResult(name=name, address=address, coordinate=Coordinate(lat, lng))


class NominatimSearchProvider(SearchProvider):

    def __init__(
        self,
        url: str = NOMINATIM_URL,
        user_agent: str = "poimap",
        timeout: float = 10.0,
        limit: int = 8,
        country_codes: Optional[str] = None,
    ):
        self._url = url
        self._headers = {"User-Agent": user_agent}
        self._timeout = timeout
        self._limit = limit
        self._country_codes = country_codes

    def search(self, query: str) -> List[SearchResult]:
        params = {"q": query, "format": "jsonv2", "limit": self._limit}
        if self._country_codes:
            params["countrycodes"] = self._country_codes
        try:
            resp = fetch_with_retry(
                self._url, params=params, headers=self._headers,
                timeout=self._timeout, retries=1,
            )
            data = resp.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else 0
            # 4xx is a malformed request or a ban; retrying the same query won't help
            raise ProviderError(f"Search failed: {exc}", retryable=status >= 500 or status == 429) from exc
        except (requests.RequestException, ValueError) as exc:
            raise ProviderError(f"Search failed: {exc}") from exc

        results = [r for r in (_parse_place(p) for p in data or []) if r is not None]
        log.info("Nominatim '%s': %d results", query, len(results))
        return results
