"""
Runtime configuration.

Values come from (lowest to highest precedence) the dataclass defaults,
a JSON file, and command-line flags applied by :mod:`poimap.app`.  The
JSON file is taken from the explicit path or the ``POIMAP_CONFIG``
environment variable.

Example file
------------
    {
      "initial_center": {"lat": 52.3676, "lng": 4.9041},
      "initial_zoom": 13,
      "search_provider": "nominatim",
      "user_agent": "poimap/0.1 (ops@example.org)"
    }
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

from .geo.poi import Coordinate

log = logging.getLogger(__name__)

CONFIG_ENV = "POIMAP_CONFIG"

SEARCH_PROVIDERS = ("mock", "nominatim")
GEOLOCATION_PROVIDERS = ("mock", "ip")

ZOOM_FLOOR = 1
ZOOM_CEILING = 20


@dataclass
class MapConfig:
    initial_center: Coordinate = field(default_factory=lambda: Coordinate(52.3676, 4.9041))
    initial_zoom: int = 13
    min_zoom: int = 1
    max_zoom: int = 20
    focus_zoom: int = 15            # zoom floor when focusing a POI or result

    search_provider: str = "mock"
    geolocation_provider: str = "mock"
    poi_file: Optional[Path] = None  # None → bundled Amsterdam sample

    nominatim_url: str = "https://nominatim.openstreetmap.org/search"
    ip_geolocation_url: str = "http://ip-api.com/json/"
    user_agent: str = "poimap/0.1"
    http_timeout_s: float = 10.0
    share_base_url: str = "https://poimap.local/"

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not ZOOM_FLOOR <= self.min_zoom <= self.max_zoom <= ZOOM_CEILING:
            raise ValueError(f"bad zoom bounds [{self.min_zoom}, {self.max_zoom}]")
        if not self.min_zoom <= self.focus_zoom <= self.max_zoom:
            raise ValueError(f"focus zoom {self.focus_zoom} outside [{self.min_zoom}, {self.max_zoom}]")
        if self.search_provider not in SEARCH_PROVIDERS:
            raise ValueError(f"unknown search provider {self.search_provider!r}")
        if self.geolocation_provider not in GEOLOCATION_PROVIDERS:
            raise ValueError(f"unknown geolocation provider {self.geolocation_provider!r}")


def config_from_dict(raw: Dict[str, Any]) -> MapConfig:
    """Build a MapConfig from a JSON-style dict; unknown keys raise KeyError."""
    known = {f.name for f in fields(MapConfig)}
    unknown = set(raw) - known
    if unknown:
        raise KeyError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    values = dict(raw)
    if "initial_center" in values:
        c = values["initial_center"]
        values["initial_center"] = Coordinate(float(c["lat"]), float(c["lng"]))
    if values.get("poi_file"):
        values["poi_file"] = Path(values["poi_file"])
    return MapConfig(**values)


def load_config(path: Optional[Path] = None) -> MapConfig:
    """Load configuration from *path*, ``$POIMAP_CONFIG``, or defaults."""
    if path is None and os.environ.get(CONFIG_ENV):
        path = Path(os.environ[CONFIG_ENV])
    if path is None:
        return MapConfig()
    with Path(path).open("r", encoding="utf-8") as f:
        raw = json.load(f)
    cfg = config_from_dict(raw)
    log.info("Config loaded from %s", path)
    return cfg
