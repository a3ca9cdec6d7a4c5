"""
Geolocation controller — permission and position-fix state machine.

    NOT_REQUESTED ──request──▶ REQUESTED ──fix──▶ GRANTED ──request──▶ …
                                   │
                                   └──denied / error──▶ DENIED ──request──▶ …

Only one provider call is outstanding at a time: ``request_location()``
while REQUESTED is a no-op.  Each request carries a token; revoking the
permission invalidates it so that a late success is ignored.

Fixes with an out-of-range coordinate or a negative / non-finite
accuracy are rejected and the controller falls back to the state it had
before the request (keeping its previous fix).
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from PyQt5 import QtCore

from ..errors import InvalidFix, PermissionDenied, ProviderError
from ..geo.poi import Coordinate
from ..providers.base import Fix, GeolocationProvider
from . import Spawner, spawn_thread

log = logging.getLogger(__name__)


class Permission(str, Enum):
    NOT_REQUESTED = "not_requested"
    REQUESTED = "requested"
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class LocationFix:
    """An accepted position fix."""
    coordinate: Coordinate
    accuracy: Optional[float]   # metres
    timestamp: float            # epoch seconds at acceptance


@dataclass(frozen=True)
class GeolocationState:
    """Immutable view of the geolocation session."""
    permission: Permission = Permission.NOT_REQUESTED
    last_fix: Optional[LocationFix] = None
    history: Tuple[LocationFix, ...] = ()
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.permission is Permission.REQUESTED


class GeolocationController(QtCore.QObject):
    """Acquires position fixes from a GeolocationProvider.

    Signals
    -------
    changed(object)
        Emitted with the new GeolocationState.
    recenter_requested(object, object)
        Emitted with (Coordinate, None) after an accepted fix.
    """

    changed = QtCore.pyqtSignal(object)
    recenter_requested = QtCore.pyqtSignal(object, object)

    # token, fix (Fix | None), error (ProviderError | None)
    _finished = QtCore.pyqtSignal(int, object, object)

    def __init__(
        self,
        provider: GeolocationProvider,
        spawn: Optional[Spawner] = None,
        clock: Callable[[], float] = time.time,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self._provider = provider
        self._spawn = spawn if spawn is not None else spawn_thread
        self._clock = clock

        self._permission = Permission.NOT_REQUESTED
        self._prior_permission = Permission.NOT_REQUESTED
        self._last_fix: Optional[LocationFix] = None
        self._history: List[LocationFix] = []
        self._error: Optional[str] = None
        self._token = 0

        self._finished.connect(self._on_finished)

    @property
    def state(self) -> GeolocationState:
        return GeolocationState(
            permission=self._permission,
            last_fix=self._last_fix,
            history=tuple(self._history),
            error=self._error,
        )

    @property
    def history(self) -> Tuple[LocationFix, ...]:
        return tuple(self._history)

    # ── Operations ───────────────────────────────────────────────────

    def request_location(self) -> bool:
        """Ask the provider for a fix.

        Returns False if a request is already in flight.
        """
        if self._permission is Permission.REQUESTED:
            log.debug("Location request already in flight; ignoring")
            return False
        self._prior_permission = self._permission
        self._permission = Permission.REQUESTED
        self._error = None
        self._token += 1
        token = self._token
        log.info("Requesting location (request #%d)", token)
        self._emit_changed()
        self._spawn(lambda: self._run(token), "geolocate")
        return True

    def revoke(self) -> None:
        """Permission withdrawn by the user or platform."""
        self._token += 1
        self._permission = Permission.DENIED
        self._error = "Location permission revoked"
        log.info("Location permission revoked")
        self._emit_changed()

    # ── Worker side ──────────────────────────────────────────────────

    def _run(self, token: int) -> None:
        """Call the provider (worker thread) and hand the outcome back."""
        try:
            fix = self._provider.request_fix()
        except ProviderError as exc:
            self._finished.emit(token, None, exc)
            return
        except Exception as exc:
            log.error("Geolocation provider error: %s", exc)
            self._finished.emit(token, None, ProviderError(str(exc)))
            return
        self._finished.emit(token, fix, None)

    @QtCore.pyqtSlot(int, object, object)
    def _on_finished(self, token: int, fix, error) -> None:
        if token != self._token:
            log.debug("Ignoring late location result #%d (current #%d)",
                      token, self._token)
            return

        if error is not None:
            self._permission = Permission.DENIED
            self._error = str(error)
            if isinstance(error, PermissionDenied):
                log.warning("Location permission denied")
            else:
                log.warning("Location lookup failed: %s", error)
            self._emit_changed()
            return

        try:
            if not isinstance(fix, Fix):
                raise InvalidFix(f"provider returned {type(fix).__name__}, not a Fix")
            fix.validated()
        except InvalidFix as exc:
            log.warning("Rejected location fix: %s", exc)
            self._permission = self._prior_permission
            self._emit_changed()
            return

        accepted = LocationFix(
            coordinate=fix.coordinate,
            accuracy=float(fix.accuracy) if fix.accuracy is not None else None,
            timestamp=self._clock(),
        )
        self._last_fix = accepted
        self._history.append(accepted)
        self._permission = Permission.GRANTED
        log.info("Location fix %s (±%s m)", accepted.coordinate,
                 "?" if accepted.accuracy is None else f"{accepted.accuracy:.0f}")
        self._emit_changed()
        self.recenter_requested.emit(accepted.coordinate, None)

    def _emit_changed(self) -> None:
        self.changed.emit(self.state)
