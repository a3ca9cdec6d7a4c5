"""
IP-based geolocation client (ip-api.com JSON endpoint).

Desktop hosts rarely have a GNSS receiver, so the position is estimated
from the public IP address.  The estimate is city-level; the fix carries
a configurable accuracy radius to reflect that.

http://ip-api.com/docs/api:json
"""
from __future__ import annotations

import logging

import requests

from ..errors import PermissionDenied, ProviderError
from . import fetch_with_retry
from .base import Fix, GeolocationProvider

log = logging.getLogger(__name__)

IP_API_URL = "http://ip-api.com/json/"


class IpGeolocationProvider(GeolocationProvider):

    def __init__(
        self,
        url: str = IP_API_URL,
        accuracy_m: float = 5000.0,
        timeout: float = 10.0,
        enabled: bool = True,
    ):
        self._url = url
        self._accuracy_m = accuracy_m
        self._timeout = timeout
        self._enabled = enabled

    def request_fix(self) -> Fix:
        if not self._enabled:
            raise PermissionDenied("Location lookup disabled in configuration")
        try:
            resp = fetch_with_retry(self._url, timeout=self._timeout, retries=1)
            data = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise ProviderError(f"Location lookup failed: {exc}") from exc

        if data.get("status") != "success":
            raise ProviderError(
                f"Location lookup failed: {data.get('message', 'unknown error')}"
            )
        log.info("IP location: %s, %s", data.get("city", "?"), data.get("country", "?"))
        return Fix(lat=data.get("lat"), lng=data.get("lon"), accuracy=self._accuracy_m)
