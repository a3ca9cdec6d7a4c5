"""
Selection controller tests.
"""
from poimap.controllers.selection import SelectionController
from tests.conftest import make_poi


class TestSelect:

    def test_select_sets_id_and_requests_recenter(self, store):
        sel = SelectionController(store, focus_zoom=15)
        recenters, changes = [], []
        sel.recenter_requested.connect(lambda c, z: recenters.append((c, z)))
        sel.changed.connect(changes.append)

        poi = store.get(2)
        sel.select(poi)

        assert sel.selected_id == 2
        assert sel.current_selection() == poi
        assert recenters == [(poi.coordinate, 15)]
        assert changes == [2]

    def test_deselect(self, store):
        sel = SelectionController(store)
        sel.select(store.get(1))
        changes = []
        sel.changed.connect(changes.append)
        sel.deselect()
        assert sel.current_selection() is None
        assert changes == [None]

    def test_deselect_when_unselected_is_silent(self, store):
        sel = SelectionController(store)
        changes = []
        sel.changed.connect(changes.append)
        sel.deselect()
        assert changes == []


class TestDanglingSelection:

    def test_removed_poi_resolves_to_unselected(self, store):
        sel = SelectionController(store)
        sel.select(store.get(3))
        store.load([make_poi(1), make_poi(2)])
        assert sel.current_selection() is None
        assert sel.selected_id is None

    def test_current_selection_reflects_updated_flags(self, store):
        sel = SelectionController(store)
        sel.select(store.get(3))
        store.toggle_favorite(3)
        assert sel.current_selection().favorite is True
