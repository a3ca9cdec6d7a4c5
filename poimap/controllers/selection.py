"""
Selection controller — at most one focused POI.

States are ``Unselected`` (``selected_id is None``) and ``Selected(id)``.
Selecting asks the viewport engine to recenter on the POI and raise the
zoom to at least the focus level.  A selection whose POI has disappeared
from the store is dropped lazily, the next time it is read.
"""
from __future__ import annotations

import logging
from typing import Hashable, Optional

from PyQt5 import QtCore

from ..geo.poi import PointOfInterest
from ..store.poi_store import PoiStore

log = logging.getLogger(__name__)


class SelectionController(QtCore.QObject):
    """Tracks the focused POI.

    Signals
    -------
    changed(object)
        Emitted with the new selected id (or None).
    recenter_requested(object, object)
        Emitted with (Coordinate, min_zoom) when a POI is selected.
    """

    changed = QtCore.pyqtSignal(object)
    recenter_requested = QtCore.pyqtSignal(object, object)

    def __init__(
        self,
        store: PoiStore,
        focus_zoom: int = 15,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self._store = store
        self._focus_zoom = focus_zoom
        self._selected_id: Optional[Hashable] = None

    @property
    def selected_id(self) -> Optional[Hashable]:
        return self._selected_id

    def select(self, poi: PointOfInterest) -> None:
        self._selected_id = poi.id
        log.info("Selected POI %r (%s)", poi.id, poi.name)
        self.recenter_requested.emit(poi.coordinate, self._focus_zoom)
        self.changed.emit(poi.id)

    def deselect(self) -> None:
        if self._selected_id is None:
            return
        log.info("Deselected POI %r", self._selected_id)
        self._selected_id = None
        self.changed.emit(None)

    def current_selection(self) -> Optional[PointOfInterest]:
        """Resolve the selection against the store.

        A dangling id (POI no longer stored) resets the controller to
        unselected and returns None.
        """
        if self._selected_id is None:
            return None
        poi = self._store.get(self._selected_id)
        if poi is None:
            log.info("Selected POI %r no longer exists; clearing selection",
                     self._selected_id)
            self._selected_id = None
        return poi
