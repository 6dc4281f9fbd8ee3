"""Debounced write-through to a shared store with a local cache fallback.

Every save lands in the local cache at once; the shared store only receives
the latest state after ``debounce_seconds`` of quiet. Writes are
last-write-wins: a newer save cancels a pending one, and a state pushed by
another session replaces the local state wholesale. Concurrent edits from two
sessions are not merged; whichever writes last wins.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable

from endorsement_tracker.config import SETTINGS
from endorsement_tracker.domain.repositories import PersistedState, StateRepository
from endorsement_tracker.errors import SyncUnavailable

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], "threading.Timer"]


def _start_timer(interval: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    timer.start()
    return timer


class SyncedStateStore:
    def __init__(
        self,
        remote: StateRepository,
        local: StateRepository,
        debounce_seconds: float | None = None,
        timer_factory: TimerFactory = _start_timer,
    ) -> None:
        self._remote = remote
        self._local = local
        self._debounce = SETTINGS.debounce_seconds if debounce_seconds is None else debounce_seconds
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer = None
        self._pending: PersistedState | None = None
        self.degraded = False

    def load(self) -> PersistedState | None:
        try:
            state = self._remote.load()
        except SyncUnavailable as exc:
            logger.warning("Shared store unavailable, using local cache: %s", exc)
            self.degraded = True
            return self._local.load()
        self.degraded = False
        if state is None:
            return self._local.load()
        self._local.save(state)
        return state

    def schedule_save(self, state: PersistedState) -> None:
        self._local.save(state)
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = state
            self._timer = self._timer_factory(self._debounce, self.flush)

    def flush(self) -> bool:
        """Push the pending state to the shared store. Returns False when degraded."""
        with self._lock:
            state = self._pending
            self._pending = None
            self._timer = None
        if state is None:
            return not self.degraded
        try:
            self._remote.save(state)
        except SyncUnavailable as exc:
            logger.warning("Shared store unavailable, changes kept locally: %s", exc)
            self.degraded = True
            return False
        self.degraded = False
        return True

    def apply_remote(self, state: PersistedState) -> PersistedState:
        """Accept a change pushed by another session; it replaces local state."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None
        self._local.save(state)
        return state

    def close(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
        self.flush()
