"""
Shared fixtures: a session QApplication on the offscreen platform,
deterministic job queue for provider calls, and fake providers.
"""
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5 import QtWidgets

from poimap.errors import ProviderError
from poimap.geo.poi import Category, Coordinate, PointOfInterest
from poimap.providers.base import Fix, GeolocationProvider, SearchProvider, SearchResult
from poimap.store.poi_store import PoiStore


@pytest.fixture(scope="session")
def qapp():
    app = QtWidgets.QApplication.instance() or QtWidgets.QApplication([])
    yield app


@pytest.fixture(autouse=True)
def _qt(qapp):
    return qapp


class JobQueue:
    """Spawner that parks provider jobs until the test runs them.

    Jobs run on the test (UI) thread, so completions are applied
    synchronously and in exactly the order the test chooses.
    """

    def __init__(self):
        self.jobs = []

    def __call__(self, job, name):
        self.jobs.append((name, job))

    def __len__(self):
        return len(self.jobs)

    def run(self, index=0):
        _name, job = self.jobs.pop(index)
        job()

    def run_all(self):
        while self.jobs:
            self.run(0)


class FakeSearchProvider(SearchProvider):
    def __init__(self, fail_with=None):
        self.queries = []
        self.fail_with = fail_with

    def search(self, query):
        self.queries.append(query)
        if self.fail_with is not None:
            raise self.fail_with
        return [
            SearchResult(f"{query} A", "Somewhere 1", Coordinate(52.0, 4.0)),
            SearchResult(f"{query} B", "Somewhere 2", Coordinate(52.1, 4.1)),
        ]


class FakeGeolocationProvider(GeolocationProvider):
    """Returns (or raises) the queued outcomes in order."""

    def __init__(self, *outcomes):
        self.calls = 0
        self.outcomes = list(outcomes) or [Fix(52.37, 4.90, 25.0)]

    def request_fix(self):
        self.calls += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_poi(poi_id, category=Category.PARK, lat=52.3579, lng=4.8686, **kw):
    return PointOfInterest(
        id=poi_id,
        name=kw.pop("name", f"POI {poi_id}"),
        category=category,
        coordinate=Coordinate(lat, lng),
        rating=kw.pop("rating", 4.0),
        **kw,
    )


@pytest.fixture
def jobs():
    return JobQueue()


@pytest.fixture
def sample_pois():
    return [
        make_poi(1, Category.ATTRACTION, 52.3752, 4.8840, name="Anne Frank House", favorite=True),
        make_poi(2, Category.PARK, 52.3579, 4.8686, name="Vondelpark", visited=True),
        make_poi(3, Category.RESTAURANT, 52.3702, 4.8952, name="Café Central"),
        make_poi(4, Category.ACCOMMODATION, 52.3505, 4.8995, name="Hotel Okura", favorite=True),
        make_poi(5, Category.SHOPPING, 52.3738, 4.8910, name="De Bijenkorf"),
    ]


@pytest.fixture
def store(sample_pois):
    return PoiStore(sample_pois)


@pytest.fixture
def search_provider():
    return FakeSearchProvider()


@pytest.fixture
def geo_provider():
    return FakeGeolocationProvider()


@pytest.fixture
def failing_search_provider():
    return FakeSearchProvider(fail_with=ProviderError("service unavailable"))
