"""
Search controller — single-flight free-text location search.

Data flow
─────────
  submit(query)
    → generation += 1, status IN_FLIGHT
    → provider.search(query)     (worker thread)
    → _finished(generation, …)   (queued back onto the UI thread)
    → applied only if generation is still the latest

Later submissions supersede earlier ones; superseded responses are
dropped when they arrive, so a slow old search can never overwrite the
results of a newer one.

Usage
-----
    search = SearchController(MockSearchProvider())
    search.changed.connect(render)
    search.submit("Rijksmuseum")
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from PyQt5 import QtCore

from ..errors import ProviderError
from ..providers.base import SearchProvider, SearchResult
from . import Spawner, spawn_thread

log = logging.getLogger(__name__)


class SearchStatus(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class SearchState:
    """Immutable view of the search session."""
    generation: int = 0
    query: str = ""
    results: Tuple[SearchResult, ...] = ()
    status: SearchStatus = SearchStatus.IDLE
    error: Optional[str] = None
    retryable: bool = False

    @property
    def loading(self) -> bool:
        return self.status is SearchStatus.IN_FLIGHT


class SearchController(QtCore.QObject):
    """Runs provider searches and keeps only the latest answer.

    Signals
    -------
    changed(object)
        Emitted with the new SearchState.
    result_selected(object)
        Emitted with the SearchResult the user picked.
    """

    changed = QtCore.pyqtSignal(object)
    result_selected = QtCore.pyqtSignal(object)

    # generation, results (list | None), error (ProviderError | None)
    _finished = QtCore.pyqtSignal(int, object, object)

    def __init__(
        self,
        provider: SearchProvider,
        spawn: Optional[Spawner] = None,
        parent: Optional[QtCore.QObject] = None,
    ):
        super().__init__(parent)
        self._provider = provider
        self._spawn = spawn if spawn is not None else spawn_thread
        self._state = SearchState()
        self._finished.connect(self._on_finished)

    @property
    def state(self) -> SearchState:
        return self._state

    # ── Operations ───────────────────────────────────────────────────

    def submit(self, query: str) -> bool:
        """Start a search for *query*.

        Returns False (and does nothing) for a blank query.
        """
        if not query or not query.strip():
            return False
        generation = self._state.generation + 1
        self._set_state(SearchState(
            generation=generation,
            query=query,
            status=SearchStatus.IN_FLIGHT,
        ))
        log.info("Search #%d submitted: %r", generation, query)
        self._spawn(lambda: self._run(generation, query.strip()), "search")
        return True

    def select_result(self, result: SearchResult) -> None:
        """Accept *result*: clear the list and abandon any pending search."""
        self._set_state(SearchState(
            generation=self._state.generation + 1,
            query=self._state.query,
        ))
        log.info("Search result chosen: %s (%s)", result.name, result.coordinate)
        self.result_selected.emit(result)

    def cancel(self) -> bool:
        """Abandon the in-flight search, if any."""
        if not self._state.loading:
            return False
        self._set_state(replace(
            self._state,
            generation=self._state.generation + 1,
            status=SearchStatus.IDLE,
        ))
        log.info("Search cancelled")
        return True

    def retry(self) -> bool:
        """Resubmit the last query after a retryable failure."""
        if self._state.status is not SearchStatus.ERROR or not self._state.retryable:
            return False
        return self.submit(self._state.query)

    # ── Worker side ──────────────────────────────────────────────────

    def _run(self, generation: int, query: str) -> None:
        """Call the provider (worker thread) and hand the outcome back."""
        try:
            results: List[SearchResult] = list(self._provider.search(query))
        except ProviderError as exc:
            log.warning("Search #%d failed: %s", generation, exc)
            self._finished.emit(generation, None, exc)
            return
        except Exception as exc:
            log.error("Search provider error: %s", exc)
            self._finished.emit(generation, None, ProviderError(str(exc)))
            return
        self._finished.emit(generation, results, None)

    @QtCore.pyqtSlot(int, object, object)
    def _on_finished(self, generation: int, results, error) -> None:
        if generation != self._state.generation:
            log.debug("Discarding stale search #%d (current #%d)",
                      generation, self._state.generation)
            return
        if error is not None:
            self._set_state(replace(
                self._state,
                status=SearchStatus.ERROR,
                results=(),
                error=str(error),
                retryable=getattr(error, "retryable", True),
            ))
            return
        self._set_state(replace(
            self._state,
            status=SearchStatus.READY,
            results=tuple(results),
            error=None,
            retryable=False,
        ))
        log.info("Search #%d: %d results", generation, len(results))

    def _set_state(self, state: SearchState) -> None:
        self._state = state
        self.changed.emit(state)
