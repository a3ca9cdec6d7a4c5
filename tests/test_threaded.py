"""
Real worker-thread round trips through the Qt event loop.
"""
import time

from poimap.controllers.geolocation import GeolocationController, Permission
from poimap.controllers.search import SearchController, SearchStatus
from poimap.providers.mock import MockGeolocationProvider, MockSearchProvider


def _wait_until(qapp, predicate, timeout_s=5.0):
    deadline = time.monotonic() + timeout_s
    while not predicate():
        if time.monotonic() > deadline:
            return False
        qapp.processEvents()
        time.sleep(0.01)
    return True


class TestWorkerThreads:

    def test_search_completes_on_ui_thread(self, qapp):
        controller = SearchController(MockSearchProvider(delay_s=0))
        assert controller.submit("Dam")
        assert _wait_until(qapp, lambda: controller.state.status is SearchStatus.READY)
        assert [r.name for r in controller.state.results] == ["Dam", "Dam Center"]

    def test_location_completes_on_ui_thread(self, qapp):
        controller = GeolocationController(MockGeolocationProvider(delay_s=0))
        assert controller.request_location()
        assert _wait_until(qapp, lambda: controller.state.permission is Permission.GRANTED)
        assert controller.state.last_fix is not None
