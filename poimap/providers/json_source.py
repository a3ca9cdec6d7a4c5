"""
JSON file POI source.

File format: a list of objects, or ``{"pois": [...]}``, each with ``id``,
``name``, ``category``, ``position: {lat, lng}`` and optional ``rating``,
``description``, ``image``, ``favorite``, ``visited``.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from ..geo.poi import PointOfInterest
from .base import PoiSource

log = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_POI_FILE = DATA_DIR / "amsterdam_pois.json"


class JsonPoiSource(PoiSource):

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else DEFAULT_POI_FILE

    def load_pois(self) -> List[PointOfInterest]:
        with self._path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
        if isinstance(raw, dict):
            raw = raw.get("pois", [])
        pois = []
        for entry in raw:
            try:
                pois.append(PointOfInterest.from_dict(entry))
            except (KeyError, TypeError, ValueError) as exc:
                log.warning("Skipping malformed POI in %s: %s", self._path.name, exc)
        log.info("Loaded %d POIs from %s", len(pois), self._path)
        return pois
