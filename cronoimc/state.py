"""Shared application state for the local Tkinter UI."""
from __future__ import annotations

import threading
from dataclasses import replace
from typing import Callable, List, Optional, Tuple

from cronoimc.models import MeasurementRecord, MeasurementState, TimerState, ValidationError

LapList = Tuple[int, ...]


class AppState:
    """Thread-safe state container shared across UI screens/widgets."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._timer_state = TimerState()
        self._laps: LapList = ()
        self._measurement_state = MeasurementState()
        self._timer_listeners: List[Callable[[TimerState], None]] = []
        self._lap_listeners: List[Callable[[LapList], None]] = []
        self._measurement_listeners: List[Callable[[MeasurementState], None]] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe_timer(self, callback: Callable[[TimerState], None]) -> Callable[[], None]:
        """Register a callback notified whenever the stopwatch state changes."""

        with self._lock:
            snapshot = self._timer_state
        return self._subscribe(self._timer_listeners, callback, snapshot)

    def subscribe_laps(self, callback: Callable[[LapList], None]) -> Callable[[], None]:
        """Register a callback notified whenever the lap list changes."""

        with self._lock:
            snapshot = self._laps
        return self._subscribe(self._lap_listeners, callback, snapshot)

    def subscribe_measurement(
        self, callback: Callable[[MeasurementState], None]
    ) -> Callable[[], None]:
        """Register a callback notified whenever the BMI screen state changes."""

        with self._lock:
            snapshot = self._measurement_state
        return self._subscribe(self._measurement_listeners, callback, snapshot)

    def _subscribe(self, listeners: list, callback: Callable, snapshot: object) -> Callable[[], None]:
        with self._lock:
            listeners.append(callback)

        callback(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                if callback in listeners:
                    listeners.remove(callback)

        return unsubscribe

    @staticmethod
    def _notify(listeners: list, snapshot: object) -> None:
        for listener in list(listeners):
            try:
                listener(snapshot)
            except Exception:
                # Subscribers should never break the state flow.
                continue

    # ------------------------------------------------------------------
    # Stopwatch
    # ------------------------------------------------------------------
    def get_timer_state(self) -> TimerState:
        with self._lock:
            return self._timer_state

    def set_running(self, running: bool) -> TimerState:
        with self._lock:
            if self._timer_state.running == running:
                return self._timer_state
            self._timer_state = replace(self._timer_state, running=running)
            snapshot = self._timer_state

        self._notify(self._timer_listeners, snapshot)
        return snapshot

    def add_elapsed(self, increment_ms: int) -> TimerState:
        """Advance the elapsed time of a running stopwatch."""

        with self._lock:
            state = self._timer_state
            if not state.running:
                return state
            self._timer_state = replace(state, elapsed_ms=state.elapsed_ms + max(0, int(increment_ms)))
            snapshot = self._timer_state

        self._notify(self._timer_listeners, snapshot)
        return snapshot

    def reset_timer(self) -> None:
        with self._lock:
            self._timer_state = TimerState()
            snapshot = self._timer_state

        self._notify(self._timer_listeners, snapshot)

    # ------------------------------------------------------------------
    # Laps
    # ------------------------------------------------------------------
    def get_laps(self) -> LapList:
        with self._lock:
            return self._laps

    def prepend_lap(self, elapsed_ms: int) -> LapList:
        with self._lock:
            self._laps = (int(elapsed_ms),) + self._laps
            snapshot = self._laps

        self._notify(self._lap_listeners, snapshot)
        return snapshot

    def clear_laps(self) -> None:
        with self._lock:
            if not self._laps:
                return
            self._laps = ()

        self._notify(self._lap_listeners, ())

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------
    def get_measurement_state(self) -> MeasurementState:
        with self._lock:
            return self._measurement_state

    def update_measurement(
        self,
        *,
        weight_text: Optional[str] = None,
        height_text: Optional[str] = None,
    ) -> None:
        """Mirror the raw text of the input fields."""

        changes = {}
        if weight_text is not None:
            changes["weight_text"] = weight_text
        if height_text is not None:
            changes["height_text"] = height_text
        self._replace_measurement(**changes)

    def set_measurement_result(self, record: MeasurementRecord) -> None:
        self._replace_measurement(result=record, error=None)

    def set_measurement_error(self, error: Optional[ValidationError]) -> None:
        self._replace_measurement(error=error)

    def clear_measurement(self) -> None:
        with self._lock:
            self._measurement_state = MeasurementState()
            snapshot = self._measurement_state

        self._notify(self._measurement_listeners, snapshot)

    def _replace_measurement(self, **changes: object) -> None:
        with self._lock:
            updated = replace(self._measurement_state, **changes)
            if updated == self._measurement_state:
                return
            self._measurement_state = updated
            snapshot = updated

        self._notify(self._measurement_listeners, snapshot)


__all__ = ["AppState", "LapList"]
