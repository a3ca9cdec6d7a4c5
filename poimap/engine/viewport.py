"""
Viewport engine — owns the map view and coordinates the controllers.

The engine sits between the controllers and the presentation layer.  It:

1. Owns the viewport (center, zoom, map type), the panel flags and the
   visible category set.
2. Is the only writer of center / zoom: selection, search and
   geolocation ask for a recenter through signals, all routed into
   :meth:`ViewportEngine.recenter`; the last request applied wins.
3. Publishes an immutable :class:`MapSnapshot` (markers re-projected for
   the current viewport) after every state change.

Usage
-----
    engine = ViewportEngine(PoiStore(), MockSearchProvider(), MockGeolocationProvider())
    engine.snapshot_changed.connect(view.show_snapshot)
    engine.load_pois(JsonPoiSource().load_pois())
    engine.zoom_in()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Hashable, Iterable, Optional, Tuple

from PyQt5 import QtCore

from ..config import MapConfig
from ..controllers import Spawner
from ..controllers.geolocation import GeolocationController, GeolocationState
from ..controllers.search import SearchController, SearchState
from ..controllers.selection import SelectionController
from ..errors import PoiNotFound
from ..geo.poi import Category, Coordinate, PointOfInterest
from ..geo.projection import ScreenPoint, project, project_many
from ..providers.base import GeolocationProvider, PoiSource, SearchProvider, SearchResult
from ..store.filters import ALL_CATEGORIES, toggle_category, visible_pois
from ..store.poi_store import PoiStore

log = logging.getLogger(__name__)


class MapType(str, Enum):
    ROADMAP = "roadmap"
    SATELLITE = "satellite"

    def toggled(self) -> "MapType":
        return MapType.SATELLITE if self is MapType.ROADMAP else MapType.ROADMAP


class Panel(str, Enum):
    SEARCH = "search"
    FILTERS = "filters"
    POI_LIST = "poi_list"


@dataclass(frozen=True)
class Viewport:
    center: Coordinate
    zoom: int
    map_type: MapType = MapType.ROADMAP


@dataclass(frozen=True)
class Marker:
    """A visible POI with its screen position."""
    poi: PointOfInterest
    position: ScreenPoint
    selected: bool = False


@dataclass(frozen=True)
class MapSnapshot:
    """Everything the presentation layer needs to draw one frame."""
    viewport: Viewport
    markers: Tuple[Marker, ...]
    selection: Optional[PointOfInterest]
    open_panels: FrozenSet[Panel]
    visible_categories: FrozenSet[Category]
    search: SearchState
    geolocation: GeolocationState
    location_position: Optional[ScreenPoint] = None

    @property
    def visible_pois(self) -> Tuple[PointOfInterest, ...]:
        return tuple(m.poi for m in self.markers)

    def is_open(self, panel: Panel) -> bool:
        return panel in self.open_panels

    @property
    def summary(self) -> str:
        return f"Zoom: {self.viewport.zoom} | {len(self.markers)} POIs"


class ViewportEngine(QtCore.QObject):
    """Single owner of map state; routes user intents to controllers.

    Signals
    -------
    snapshot_changed(object)
        Emitted with a fresh MapSnapshot after every state change.
    """

    snapshot_changed = QtCore.pyqtSignal(object)

    def __init__(
        self,
        store: PoiStore,
        search_provider: SearchProvider,
        geolocation_provider: GeolocationProvider,
        config: Optional[MapConfig] = None,
        spawn: Optional[Spawner] = None,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self._config = config or MapConfig()
        cfg = self._config
        self._store = store
        self._viewport = Viewport(
            center=cfg.initial_center,
            zoom=self._clamp_zoom(cfg.initial_zoom),
        )
        self._open_panels: FrozenSet[Panel] = frozenset()
        self._visible_categories: FrozenSet[Category] = ALL_CATEGORIES

        self._selection = SelectionController(store, focus_zoom=cfg.focus_zoom, parent=self)
        self._search = SearchController(search_provider, spawn=spawn, parent=self)
        self._geolocation = GeolocationController(geolocation_provider, spawn=spawn, parent=self)

        self._selection.recenter_requested.connect(self.recenter)
        self._geolocation.recenter_requested.connect(self.recenter)
        self._search.result_selected.connect(self._on_search_result)
        self._selection.changed.connect(self._publish)
        self._search.changed.connect(self._publish)
        self._geolocation.changed.connect(self._publish)

        self._snapshot = self._build_snapshot()

    # ── Read side ────────────────────────────────────────────────────

    @property
    def config(self) -> MapConfig:
        return self._config

    @property
    def store(self) -> PoiStore:
        return self._store

    @property
    def selection(self) -> SelectionController:
        return self._selection

    @property
    def search(self) -> SearchController:
        return self._search

    @property
    def geolocation(self) -> GeolocationController:
        return self._geolocation

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    def snapshot(self) -> MapSnapshot:
        return self._snapshot

    # ── Data ─────────────────────────────────────────────────────────

    def load_pois(self, pois: Iterable[PointOfInterest]) -> None:
        self._store.load(pois)
        self._publish()

    def load_from(self, source: PoiSource) -> None:
        self.load_pois(source.load_pois())

    # ── Viewport ─────────────────────────────────────────────────────

    def recenter(self, coordinate: Coordinate, min_zoom: Optional[int] = None) -> None:
        """Move the view to *coordinate*, raising zoom to *min_zoom* if given."""
        self._apply_recenter(coordinate, min_zoom)
        self._publish()

    def zoom_by(self, delta: int) -> None:
        zoom = self._clamp_zoom(self._viewport.zoom + delta)
        if zoom == self._viewport.zoom:
            return
        self._viewport = Viewport(self._viewport.center, zoom, self._viewport.map_type)
        self._publish()

    def zoom_in(self) -> None:
        self.zoom_by(1)

    def zoom_out(self) -> None:
        self.zoom_by(-1)

    def pan(self, d_lat: float, d_lng: float) -> None:
        """Shift the center by a lat/lng delta (clamped to valid ranges)."""
        c = self._viewport.center
        center = Coordinate(
            max(-90.0, min(90.0, c.lat + d_lat)),
            max(-180.0, min(180.0, c.lng + d_lng)),
        )
        self._viewport = Viewport(center, self._viewport.zoom, self._viewport.map_type)
        self._publish()

    def toggle_map_type(self) -> None:
        vp = self._viewport
        self._viewport = Viewport(vp.center, vp.zoom, vp.map_type.toggled())
        log.info("Map type: %s", self._viewport.map_type.value)
        self._publish()

    # ── Panels & filters ─────────────────────────────────────────────

    def toggle_panel(self, panel: Panel) -> None:
        self.set_panel(panel, panel not in self._open_panels)

    def set_panel(self, panel: Panel, is_open: bool) -> None:
        if is_open:
            self._open_panels = self._open_panels | {panel}
        else:
            self._open_panels = self._open_panels - {panel}
        self._publish()

    def toggle_category(self, category: Category) -> None:
        self._visible_categories = toggle_category(self._visible_categories, category)
        self._publish()

    # ── POIs ─────────────────────────────────────────────────────────

    def select_poi(self, poi_id: Hashable) -> None:
        poi = self._store.get(poi_id)
        if poi is None:
            log.warning("Cannot select POI %r: not found", poi_id)
            return
        self._selection.select(poi)

    def deselect(self) -> None:
        self._selection.deselect()

    def toggle_favorite(self, poi_id: Hashable) -> Optional[PointOfInterest]:
        try:
            poi = self._store.toggle_favorite(poi_id)
        except PoiNotFound as exc:
            log.warning("toggle_favorite ignored: %s", exc)
            return None
        self._publish()
        return poi

    def mark_visited(self, poi_id: Hashable) -> Optional[PointOfInterest]:
        try:
            poi = self._store.mark_visited(poi_id)
        except PoiNotFound as exc:
            log.warning("mark_visited ignored: %s", exc)
            return None
        self._publish()
        return poi

    # ── Search & location ────────────────────────────────────────────

    def submit_search(self, query: str) -> bool:
        return self._search.submit(query)

    def select_search_result(self, result: SearchResult) -> None:
        self._search.select_result(result)

    def cancel_search(self) -> bool:
        return self._search.cancel()

    def retry_search(self) -> bool:
        return self._search.retry()

    def request_location(self) -> bool:
        return self._geolocation.request_location()

    def revoke_location(self) -> None:
        self._geolocation.revoke()

    # ── Internals ────────────────────────────────────────────────────

    def _on_search_result(self, result: SearchResult) -> None:
        self._apply_recenter(result.coordinate, self._config.focus_zoom)
        self._open_panels = self._open_panels - {Panel.SEARCH}
        self._publish()

    def _apply_recenter(self, coordinate: Coordinate, min_zoom: Optional[int]) -> None:
        zoom = self._viewport.zoom
        if min_zoom is not None:
            zoom = self._clamp_zoom(max(zoom, min_zoom))
        self._viewport = Viewport(coordinate, zoom, self._viewport.map_type)
        log.debug("Recentered on %s (zoom %d)", coordinate, zoom)

    def _clamp_zoom(self, zoom: int) -> int:
        return max(self._config.min_zoom, min(self._config.max_zoom, int(zoom)))

    def _publish(self, *_args) -> None:
        self._snapshot = self._build_snapshot()
        self.snapshot_changed.emit(self._snapshot)

    def _build_snapshot(self) -> MapSnapshot:
        vp = self._viewport
        selected = self._selection.current_selection()
        selected_id = selected.id if selected is not None else None

        pois = visible_pois(self._store, self._visible_categories)
        xy = project_many(
            [(p.coordinate.lat, p.coordinate.lng) for p in pois], vp.center, vp.zoom
        )
        markers = tuple(
            Marker(poi, ScreenPoint(float(x), float(y)), poi.id == selected_id)
            for poi, (x, y) in zip(pois, xy)
        )

        geo = self._geolocation.state
        location_pos = None
        if geo.last_fix is not None:
            location_pos = project(geo.last_fix.coordinate, vp.center, vp.zoom)

        return MapSnapshot(
            viewport=vp,
            markers=markers,
            selection=selected,
            open_panels=self._open_panels,
            visible_categories=self._visible_categories,
            search=self._search.state,
            geolocation=geo,
            location_position=location_pos,
        )
