"""
POI map widget — QGraphicsScene-based host view for the viewport engine.

Renders a MapSnapshot as:
  - Map surface (light grid for roadmap, dark for satellite)
  - Category-coloured POI markers with favorite / visited badges
  - Current location dot with accuracy ring
  - Zoom / locate / map-type controls
  - Search, category filter and POI list panels (toggled from a toolbar)
  - Info panel for the selected POI (Favorite, Mark Visited, Share)

The widget never changes map state itself: every user action is an
engine operation, and the display is rebuilt from the next snapshot.
"""
from __future__ import annotations

import logging
from typing import Dict, Hashable, Optional

from PyQt5 import QtCore, QtGui, QtWidgets

from ..controllers.geolocation import Permission
from ..controllers.search import SearchStatus
from ..engine.viewport import MapSnapshot, MapType, Marker, Panel, ViewportEngine
from ..geo.poi import CATEGORY_STYLE, Category
from ..geo.projection import accuracy_ring_px, world_size

log = logging.getLogger(__name__)

_MARKER_PX = 32
_PAN_STEP_PX = 100
_GRID_PX = 50


class MarkerItem(QtWidgets.QGraphicsObject):
    """One POI marker: coloured disc, category glyph, flag badges."""

    clicked = QtCore.pyqtSignal(object)  # poi id

    def __init__(self, marker: Marker):
        super().__init__()
        self.marker = marker
        poi = marker.poi
        scale = 1.25 if marker.selected else 1.0
        self._size = _MARKER_PX * scale
        self.setPos(marker.position.x, marker.position.y)
        self.setZValue(20 if marker.selected else 10)
        self.setAcceptHoverEvents(True)
        self.setCursor(QtCore.Qt.PointingHandCursor)
        self.setToolTip(f"{poi.name} - {poi.style.label}\n★ {poi.rating}")

    def boundingRect(self) -> QtCore.QRectF:
        s = self._size + 8
        return QtCore.QRectF(-s / 2, -s / 2, s, s)

    def paint(self, painter: QtGui.QPainter, option, widget=None) -> None:
        poi = self.marker.poi
        s = self._size
        r = QtCore.QRectF(-s / 2, -s / 2, s, s)
        painter.setRenderHint(QtGui.QPainter.Antialiasing)

        # Selection ring
        if self.marker.selected:
            pen = QtGui.QPen(QtGui.QColor(255, 255, 255, 160))
            pen.setWidthF(4.0)
            painter.setPen(pen)
        else:
            painter.setPen(QtGui.QPen(QtGui.QColor(255, 255, 255), 1.5))
        painter.setBrush(QtGui.QColor(poi.style.color))
        painter.drawEllipse(r)

        painter.setPen(QtGui.QColor(255, 255, 255))
        font = painter.font()
        font.setBold(True)
        font.setPointSizeF(max(6.0, s * 0.3))
        painter.setFont(font)
        painter.drawText(r, QtCore.Qt.AlignCenter, poi.style.glyph)

        badge = s * 0.35
        if poi.favorite:
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(QtGui.QColor("#ef4444"))
            painter.drawEllipse(QtCore.QRectF(r.right() - badge * 0.7, r.top() - badge * 0.3,
                                              badge, badge))
        if poi.visited:
            painter.setPen(QtCore.Qt.NoPen)
            painter.setBrush(QtGui.QColor("#22c55e"))
            painter.drawEllipse(QtCore.QRectF(r.right() - badge * 0.7, r.bottom() - badge * 0.7,
                                              badge, badge))

    def mousePressEvent(self, event):
        self.clicked.emit(self.marker.poi.id)
        event.accept()


class LocationItem(QtWidgets.QGraphicsItem):
    """Current-location dot with its accuracy ring."""

    def __init__(self, ring_px: float):
        super().__init__()
        self._ring = ring_px
        self.setZValue(30)

    def boundingRect(self) -> QtCore.QRectF:
        r = max(self._ring, 10.0)
        return QtCore.QRectF(-r, -r, 2 * r, 2 * r)

    def paint(self, painter: QtGui.QPainter, option, widget=None) -> None:
        painter.setRenderHint(QtGui.QPainter.Antialiasing)
        if self._ring > 0:
            painter.setPen(QtGui.QPen(QtGui.QColor(147, 197, 253, 120), 2.0))
            painter.setBrush(QtGui.QColor(147, 197, 253, 40))
            painter.drawEllipse(QtCore.QPointF(0, 0), self._ring, self._ring)
        painter.setPen(QtGui.QPen(QtGui.QColor(255, 255, 255), 2.0))
        painter.setBrush(QtGui.QColor("#3b82f6"))
        painter.drawEllipse(QtCore.QPointF(0, 0), 8, 8)


class MapView(QtWidgets.QGraphicsView):
    """Graphics view forwarding wheel / arrow keys to the engine."""

    def __init__(self, engine: ViewportEngine, scene: QtWidgets.QGraphicsScene, parent=None):
        super().__init__(scene, parent)
        self._engine = engine
        self._map_type = MapType.ROADMAP
        self.setRenderHint(QtGui.QPainter.Antialiasing)
        self.setHorizontalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self.setVerticalScrollBarPolicy(QtCore.Qt.ScrollBarAlwaysOff)
        self.setFocusPolicy(QtCore.Qt.StrongFocus)

    def set_map_type(self, map_type: MapType) -> None:
        self._map_type = map_type
        self.viewport().update()

    def drawBackground(self, painter: QtGui.QPainter, rect: QtCore.QRectF) -> None:
        if self._map_type is MapType.SATELLITE:
            painter.fillRect(rect, QtGui.QColor(28, 38, 30))
            line = QtGui.QColor(255, 255, 255, 20)
        else:
            painter.fillRect(rect, QtGui.QColor(226, 238, 232))
            line = QtGui.QColor(0, 0, 0, 25)
        painter.setPen(QtGui.QPen(line, 1.0))
        left = int(rect.left()) - int(rect.left()) % _GRID_PX
        top = int(rect.top()) - int(rect.top()) % _GRID_PX
        x = left
        while x < rect.right():
            painter.drawLine(QtCore.QLineF(x, rect.top(), x, rect.bottom()))
            x += _GRID_PX
        y = top
        while y < rect.bottom():
            painter.drawLine(QtCore.QLineF(rect.left(), y, rect.right(), y))
            y += _GRID_PX

    def wheelEvent(self, event):
        if event.angleDelta().y() > 0:
            self._engine.zoom_in()
        else:
            self._engine.zoom_out()
        event.accept()

    def keyPressEvent(self, event):
        zoom = self._engine.viewport.zoom
        step = _PAN_STEP_PX * 360.0 / world_size(zoom)
        key = event.key()
        if key == QtCore.Qt.Key_Left:
            self._engine.pan(0.0, -step)
        elif key == QtCore.Qt.Key_Right:
            self._engine.pan(0.0, step)
        elif key == QtCore.Qt.Key_Up:
            self._engine.pan(step, 0.0)
        elif key == QtCore.Qt.Key_Down:
            self._engine.pan(-step, 0.0)
        elif key in (QtCore.Qt.Key_Plus, QtCore.Qt.Key_Equal):
            self._engine.zoom_in()
        elif key == QtCore.Qt.Key_Minus:
            self._engine.zoom_out()
        elif key == QtCore.Qt.Key_Escape:
            self._engine.deselect()
        else:
            super().keyPressEvent(event)
            return
        event.accept()


class PoiMapWidget(QtWidgets.QWidget):
    """Interactive POI map bound to a ViewportEngine."""

    def __init__(
        self,
        engine: ViewportEngine,
        share_base_url: str = "https://poimap.local/",
        parent: Optional[QtWidgets.QWidget] = None,
    ):
        super().__init__(parent)
        self._engine = engine
        self._share_base_url = share_base_url
        self._marker_items: Dict[Hashable, MarkerItem] = {}
        self._location_item: Optional[LocationItem] = None

        self._scene = QtWidgets.QGraphicsScene(self)
        self._scene.setSceneRect(-2000, -2000, 4000, 4000)
        self._view = MapView(engine, self._scene, self)

        # ── Controls ──
        self._btn_zoom_in = QtWidgets.QPushButton("+")
        self._btn_zoom_out = QtWidgets.QPushButton("−")
        self._btn_locate = QtWidgets.QPushButton("Locate")
        self._btn_map_type = QtWidgets.QPushButton("Satellite")
        self._btn_zoom_in.clicked.connect(engine.zoom_in)
        self._btn_zoom_out.clicked.connect(engine.zoom_out)
        self._btn_locate.clicked.connect(engine.request_location)
        self._btn_map_type.clicked.connect(engine.toggle_map_type)

        controls = QtWidgets.QHBoxLayout()
        for b in (self._btn_zoom_in, self._btn_zoom_out, self._btn_locate, self._btn_map_type):
            controls.addWidget(b)

        # ── Panel toggles ──
        self._panel_buttons: Dict[Panel, QtWidgets.QPushButton] = {}
        toolbar = QtWidgets.QHBoxLayout()
        for panel, label in ((Panel.SEARCH, "Search"),
                             (Panel.FILTERS, "Filters"),
                             (Panel.POI_LIST, "List")):
            btn = QtWidgets.QPushButton(label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked, p=panel: engine.toggle_panel(p))
            toolbar.addWidget(btn)
            self._panel_buttons[panel] = btn

        # ── Search panel ──
        self._search_box = QtWidgets.QGroupBox("Search")
        self._search_edit = QtWidgets.QLineEdit()
        self._search_edit.setPlaceholderText("Search locations, addresses...")
        self._search_edit.returnPressed.connect(
            lambda: engine.submit_search(self._search_edit.text())
        )
        self._search_status = QtWidgets.QLabel("")
        self._btn_retry = QtWidgets.QPushButton("Retry")
        self._btn_retry.clicked.connect(engine.retry_search)
        self._search_results = QtWidgets.QListWidget()
        self._search_results.itemClicked.connect(self._on_result_clicked)
        sl = QtWidgets.QVBoxLayout(self._search_box)
        sl.addWidget(self._search_edit)
        sl.addWidget(self._search_status)
        sl.addWidget(self._btn_retry)
        sl.addWidget(self._search_results)

        # ── Filter panel ──
        self._filter_box = QtWidgets.QGroupBox("Filter Categories")
        self._category_buttons: Dict[Category, QtWidgets.QPushButton] = {}
        fl = QtWidgets.QGridLayout(self._filter_box)
        for i, category in enumerate(Category):
            style = CATEGORY_STYLE[category]
            btn = QtWidgets.QPushButton(style.label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked, c=category: engine.toggle_category(c))
            fl.addWidget(btn, i // 2, i % 2)
            self._category_buttons[category] = btn

        # ── POI list ──
        self._list_box = QtWidgets.QGroupBox("Points of Interest")
        self._poi_list = QtWidgets.QListWidget()
        self._poi_list.itemClicked.connect(
            lambda item: self._defer(engine.select_poi, item.data(QtCore.Qt.UserRole))
        )
        QtWidgets.QVBoxLayout(self._list_box).addWidget(self._poi_list)

        # ── Info panel ──
        self._info_box = QtWidgets.QGroupBox("")
        self._info_label = QtWidgets.QLabel("")
        self._info_label.setWordWrap(True)
        self._btn_favorite = QtWidgets.QPushButton("Favorite")
        self._btn_visited = QtWidgets.QPushButton("Mark Visited")
        self._btn_share = QtWidgets.QPushButton("Share")
        self._btn_close = QtWidgets.QPushButton("Close")
        self._btn_favorite.clicked.connect(self._on_favorite)
        self._btn_visited.clicked.connect(self._on_visited)
        self._btn_share.clicked.connect(self._on_share)
        self._btn_close.clicked.connect(engine.deselect)
        il = QtWidgets.QVBoxLayout(self._info_box)
        il.addWidget(self._info_label)
        ib = QtWidgets.QHBoxLayout()
        for b in (self._btn_favorite, self._btn_visited, self._btn_share, self._btn_close):
            ib.addWidget(b)
        il.addLayout(ib)

        # ── Status ──
        self._status_label = QtWidgets.QLabel("")
        self._location_label = QtWidgets.QLabel("")

        side = QtWidgets.QVBoxLayout()
        side.addLayout(controls)
        side.addLayout(toolbar)
        side.addWidget(self._search_box)
        side.addWidget(self._filter_box)
        side.addWidget(self._list_box)
        side.addWidget(self._info_box)
        side.addStretch(1)
        side.addWidget(self._location_label)
        side.addWidget(self._status_label)

        layout = QtWidgets.QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self._view, 1)
        side_widget = QtWidgets.QWidget()
        side_widget.setLayout(side)
        side_widget.setFixedWidth(320)
        layout.addWidget(side_widget)

        engine.snapshot_changed.connect(self.show_snapshot)
        self.show_snapshot(engine.snapshot())

    # ── Rendering ─────────────────────────────────────────────────────

    @property
    def marker_items(self) -> Dict[Hashable, MarkerItem]:
        return dict(self._marker_items)

    def show_snapshot(self, snap: MapSnapshot) -> None:
        self._render_map(snap)
        self._render_controls(snap)
        self._render_search(snap)
        self._render_filters(snap)
        self._render_list(snap)
        self._render_info(snap)

    def _render_map(self, snap: MapSnapshot) -> None:
        for item in self._marker_items.values():
            self._scene.removeItem(item)
        self._marker_items.clear()
        if self._location_item is not None:
            self._scene.removeItem(self._location_item)
            self._location_item = None

        for marker in snap.markers:
            item = MarkerItem(marker)
            item.clicked.connect(lambda poi_id: self._defer(self._engine.select_poi, poi_id))
            self._scene.addItem(item)
            self._marker_items[marker.poi.id] = item

        fix = snap.geolocation.last_fix
        if fix is not None and snap.location_position is not None:
            ring = accuracy_ring_px(fix.accuracy) if fix.accuracy else 0.0
            self._location_item = LocationItem(ring)
            self._location_item.setPos(snap.location_position.x, snap.location_position.y)
            self._scene.addItem(self._location_item)

        self._view.set_map_type(snap.viewport.map_type)
        self._view.centerOn(0.0, 0.0)

    def _render_controls(self, snap: MapSnapshot) -> None:
        vp = snap.viewport
        self._btn_zoom_in.setEnabled(vp.zoom < self._engine_max_zoom())
        self._btn_zoom_out.setEnabled(vp.zoom > self._engine_min_zoom())
        self._btn_map_type.setText(
            "Satellite" if vp.map_type is MapType.ROADMAP else "Roadmap"
        )
        geo = snap.geolocation
        self._btn_locate.setEnabled(not geo.loading)
        self._btn_locate.setText("Locating..." if geo.loading else "Locate")
        if geo.permission is Permission.GRANTED:
            self._location_label.setText("Location enabled")
        elif geo.permission is Permission.DENIED:
            self._location_label.setText(f"Location unavailable: {geo.error or 'denied'}")
        else:
            self._location_label.setText("")
        self._status_label.setText(snap.summary)
        for panel, btn in self._panel_buttons.items():
            btn.setChecked(snap.is_open(panel))

    def _render_search(self, snap: MapSnapshot) -> None:
        self._search_box.setVisible(snap.is_open(Panel.SEARCH))
        s = snap.search
        if s.status is SearchStatus.IN_FLIGHT:
            self._search_status.setText("Searching...")
        elif s.status is SearchStatus.ERROR:
            self._search_status.setText(f"Search failed: {s.error}")
        elif s.status is SearchStatus.READY and not s.results:
            self._search_status.setText("No results")
        else:
            self._search_status.setText("")
        self._btn_retry.setVisible(s.status is SearchStatus.ERROR and s.retryable)
        self._search_results.clear()
        for result in s.results:
            item = QtWidgets.QListWidgetItem(f"{result.name}\n{result.address}")
            item.setData(QtCore.Qt.UserRole, result)
            self._search_results.addItem(item)

    def _render_filters(self, snap: MapSnapshot) -> None:
        self._filter_box.setVisible(snap.is_open(Panel.FILTERS))
        for category, btn in self._category_buttons.items():
            btn.setChecked(category in snap.visible_categories)

    def _render_list(self, snap: MapSnapshot) -> None:
        self._list_box.setVisible(snap.is_open(Panel.POI_LIST))
        self._poi_list.clear()
        for marker in snap.markers:
            poi = marker.poi
            flags = ("♥ " if poi.favorite else "") + ("✓" if poi.visited else "")
            item = QtWidgets.QListWidgetItem(
                f"{poi.name}\n{poi.style.label} • ★ {poi.rating}  {flags}".rstrip()
            )
            item.setData(QtCore.Qt.UserRole, poi.id)
            item.setForeground(QtGui.QColor(poi.style.color))
            self._poi_list.addItem(item)
            if marker.selected:
                item.setSelected(True)

    def _render_info(self, snap: MapSnapshot) -> None:
        poi = snap.selection
        self._info_box.setVisible(poi is not None)
        if poi is None:
            return
        self._info_box.setTitle(poi.name)
        badges = poi.style.label + ("  •  Visited" if poi.visited else "")
        self._info_label.setText(f"★ {poi.rating}\n{poi.description}\n{badges}")
        self._btn_favorite.setText("Favorited" if poi.favorite else "Favorite")
        self._btn_visited.setVisible(not poi.visited)

    def _engine_min_zoom(self) -> int:
        return self._engine.config.min_zoom

    def _engine_max_zoom(self) -> int:
        return self._engine.config.max_zoom

    # ── Event handlers ────────────────────────────────────────────────

    @staticmethod
    def _defer(fn, *args) -> None:
        """Run *fn* on the next event-loop pass.

        Clicks on markers and list rows rebuild the very items that were
        clicked, which must not happen inside the item's own handler.
        """
        QtCore.QTimer.singleShot(0, lambda: fn(*args))

    def _on_result_clicked(self, item: QtWidgets.QListWidgetItem) -> None:
        result = item.data(QtCore.Qt.UserRole)
        if result is not None:
            self._defer(self._engine.select_search_result, result)

    def _on_favorite(self) -> None:
        poi = self._engine.snapshot().selection
        if poi is not None:
            self._engine.toggle_favorite(poi.id)

    def _on_visited(self) -> None:
        poi = self._engine.snapshot().selection
        if poi is not None:
            self._engine.mark_visited(poi.id)

    def _on_share(self) -> None:
        poi = self._engine.snapshot().selection
        if poi is None:
            return
        text = f"{poi.share_text()}\n{poi.share_link(self._share_base_url)}"
        QtWidgets.QApplication.clipboard().setText(text)
        log.info("Copied share link for POI %r", poi.id)
