"""
Authoritative in-memory collection of POIs.

The store keeps the source order of the last loaded collection.  Flag
mutations replace the stored (frozen) POI with an updated copy, so any
snapshot handed out earlier keeps the values it was taken with.

Usage
-----
    store = PoiStore()
    store.load(source.load_pois())
    store.toggle_favorite(1)
    store.mark_visited(1)
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Hashable, Iterable, Iterator, List, Optional

from ..errors import PoiNotFound
from ..geo.poi import PointOfInterest

log = logging.getLogger(__name__)


class PoiStore:
    """POI collection keyed by id.

    Not thread-safe: only the UI thread touches it.
    """

    def __init__(self, pois: Optional[Iterable[PointOfInterest]] = None):
        self._pois: Dict[Hashable, PointOfInterest] = {}
        if pois is not None:
            self.load(pois)

    def load(self, pois: Iterable[PointOfInterest]) -> None:
        """Replace the whole collection.

        Raises ValueError on duplicate ids; the previous contents are kept
        in that case.
        """
        fresh: Dict[Hashable, PointOfInterest] = {}
        for poi in pois:
            if poi.id in fresh:
                raise ValueError(f"duplicate POI id {poi.id!r}")
            fresh[poi.id] = poi
        self._pois = fresh
        log.info("PoiStore loaded %d POIs", len(fresh))

    def get(self, poi_id: Hashable) -> Optional[PointOfInterest]:
        return self._pois.get(poi_id)

    def all(self) -> List[PointOfInterest]:
        return list(self._pois.values())

    def toggle_favorite(self, poi_id: Hashable) -> PointOfInterest:
        poi = self._require(poi_id)
        updated = dataclasses.replace(poi, favorite=not poi.favorite)
        self._pois[poi_id] = updated
        log.debug("POI %r favorite=%s", poi_id, updated.favorite)
        return updated

    def mark_visited(self, poi_id: Hashable) -> PointOfInterest:
        poi = self._require(poi_id)
        if poi.visited:
            return poi
        updated = dataclasses.replace(poi, visited=True)
        self._pois[poi_id] = updated
        log.debug("POI %r marked visited", poi_id)
        return updated

    def _require(self, poi_id: Hashable) -> PointOfInterest:
        try:
            return self._pois[poi_id]
        except KeyError:
            raise PoiNotFound(poi_id) from None

    def __contains__(self, poi_id: object) -> bool:
        return poi_id in self._pois

    def __len__(self) -> int:
        return len(self._pois)

    def __iter__(self) -> Iterator[PointOfInterest]:
        return iter(list(self._pois.values()))
