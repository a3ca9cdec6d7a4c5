"""
Geolocation controller tests — state machine, single flight, invalid fixes.
"""
import math

import pytest

from poimap.controllers.geolocation import GeolocationController, Permission
from poimap.errors import PermissionDenied, ProviderError
from poimap.geo.poi import Coordinate
from poimap.providers.base import Fix
from tests.conftest import FakeGeolocationProvider


def _controller(provider, jobs):
    ticks = iter(range(1000, 2000))
    return GeolocationController(provider, spawn=jobs, clock=lambda: float(next(ticks)))


class TestRequestLocation:

    def test_uses_injected_spawner_even_when_empty(self, geo_provider, jobs):
        controller = _controller(geo_provider, jobs)
        assert controller.request_location()
        assert len(jobs) == 1
        assert geo_provider.calls == 0
        jobs.run()
        assert geo_provider.calls == 1

    def test_success_records_fix_and_recenters(self, geo_provider, jobs):
        geo = _controller(geo_provider, jobs)
        recenters = []
        geo.recenter_requested.connect(lambda c, z: recenters.append((c, z)))

        assert geo.request_location() is True
        assert geo.state.permission is Permission.REQUESTED
        assert geo.state.loading

        jobs.run()
        state = geo.state
        assert state.permission is Permission.GRANTED
        assert state.last_fix.coordinate == Coordinate(52.37, 4.90)
        assert state.last_fix.accuracy == 25.0
        assert len(state.history) == 1
        assert recenters == [(Coordinate(52.37, 4.90), None)]

    def test_second_call_while_requesting_is_noop(self, geo_provider, jobs):
        geo = _controller(geo_provider, jobs)
        assert geo.request_location() is True
        assert geo.request_location() is False
        jobs.run_all()
        assert geo_provider.calls == 1

    def test_refresh_from_granted_appends_history(self, jobs):
        provider = FakeGeolocationProvider(Fix(1.0, 1.0, 5.0), Fix(2.0, 2.0, 6.0))
        geo = _controller(provider, jobs)
        geo.request_location()
        jobs.run()
        geo.request_location()
        jobs.run()
        history = geo.history
        assert [f.coordinate.lat for f in history] == [1.0, 2.0]
        assert history[0].timestamp < history[1].timestamp
        assert geo.state.last_fix == history[-1]

    def test_fix_without_accuracy_accepted(self, jobs):
        geo = _controller(FakeGeolocationProvider(Fix(1.0, 1.0, None)), jobs)
        geo.request_location()
        jobs.run()
        assert geo.state.permission is Permission.GRANTED
        assert geo.state.last_fix.accuracy is None


class TestDenial:

    def test_permission_denied(self, jobs):
        geo = _controller(FakeGeolocationProvider(PermissionDenied()), jobs)
        geo.request_location()
        jobs.run()
        assert geo.state.permission is Permission.DENIED
        assert geo.state.error

    def test_provider_failure_moves_to_denied_and_can_retry(self, jobs):
        provider = FakeGeolocationProvider(ProviderError("timeout"), Fix(3.0, 3.0, 10.0))
        geo = _controller(provider, jobs)
        geo.request_location()
        jobs.run()
        assert geo.state.permission is Permission.DENIED

        assert geo.request_location() is True
        jobs.run()
        assert geo.state.permission is Permission.GRANTED
        assert geo.state.error is None

    def test_revoke_ignores_late_success(self, geo_provider, jobs):
        geo = _controller(geo_provider, jobs)
        recenters = []
        geo.recenter_requested.connect(lambda c, z: recenters.append(c))
        geo.request_location()
        geo.revoke()
        jobs.run()
        assert geo.state.permission is Permission.DENIED
        assert geo.state.last_fix is None
        assert recenters == []


class TestInvalidFix:

    @pytest.mark.parametrize("bad", [
        Fix(52.0, 4.0, -1.0),
        Fix(52.0, 4.0, math.nan),
        Fix(52.0, 4.0, math.inf),
        Fix(95.0, 4.0, 10.0),
        Fix(math.nan, 4.0, 10.0),
    ])
    def test_rejected_fix_keeps_prior_fix(self, bad, jobs):
        provider = FakeGeolocationProvider(Fix(1.0, 1.0, 5.0), bad)
        geo = _controller(provider, jobs)
        geo.request_location()
        jobs.run()
        good = geo.state.last_fix

        geo.request_location()
        jobs.run()
        state = geo.state
        assert state.permission is Permission.GRANTED
        assert state.last_fix == good
        assert len(state.history) == 1

    def test_rejected_first_fix_returns_to_not_requested(self, jobs):
        geo = _controller(FakeGeolocationProvider(Fix(0.0, 0.0, -5.0)), jobs)
        geo.request_location()
        jobs.run()
        assert geo.state.permission is Permission.NOT_REQUESTED
        assert geo.state.last_fix is None

    def test_non_fix_result_rejected(self, jobs):
        geo = _controller(FakeGeolocationProvider({"lat": 1, "lng": 2}), jobs)
        geo.request_location()
        jobs.run()
        assert geo.state.last_fix is None
