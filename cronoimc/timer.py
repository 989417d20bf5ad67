"""Stopwatch engine and lap recorder driven by a Tk-style scheduler."""
from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable, List, Optional, Protocol, Tuple

from cronoimc.models import TimerState
from cronoimc.state import AppState, LapList

LOGGER = logging.getLogger(__name__)

DEFAULT_TICK_MS = 10


class Scheduler(Protocol):
    """Subset of ``tk.Misc`` used to schedule the stopwatch tick."""

    def after(self, ms: int, func: Callable[[], None]) -> Any:  # pragma: no cover - protocol
        ...

    def after_cancel(self, id: Any) -> None:  # pragma: no cover - protocol
        ...


def format_elapsed(elapsed_ms: int) -> str:
    """Render milliseconds as ``MM:SS.cc``."""

    value = max(0, int(elapsed_ms))
    minutes = value // 60000
    seconds = (value % 60000) // 1000
    centiseconds = (value % 1000) // 10
    return f"{minutes:02d}:{seconds:02d}.{centiseconds:02d}"


class LapRecorder:
    """Keeps the split times of the current stopwatch session, newest first."""

    def __init__(self, state: AppState) -> None:
        self._state = state

    def record_lap(self) -> bool:
        timer_state = self._state.get_timer_state()
        if not timer_state.running:
            return False
        self._state.prepend_lap(timer_state.elapsed_ms)
        LOGGER.debug("LapRecorder.record_lap: split at %s ms", timer_state.elapsed_ms)
        return True

    def clear(self) -> None:
        self._state.clear_laps()

    @property
    def laps(self) -> LapList:
        return self._state.get_laps()

    def numbered(self) -> List[Tuple[int, int]]:
        """Return ``(lap_number, elapsed_ms)`` rows, newest lap first."""

        laps = self._state.get_laps()
        total = len(laps)
        return [(total - index, elapsed) for index, elapsed in enumerate(laps)]


class TimerEngine:
    """Stopwatch state machine adding a fixed increment per scheduled tick."""

    def __init__(
        self,
        scheduler: Scheduler,
        state: AppState,
        laps: LapRecorder,
        *,
        tick_ms: int = DEFAULT_TICK_MS,
    ) -> None:
        self._scheduler = scheduler
        self._state = state
        self._laps = laps
        self._tick_ms = max(1, int(tick_ms))
        self._timer_job: Optional[Any] = None
        self._generation = 0

    @property
    def state(self) -> TimerState:
        return self._state.get_timer_state()

    @property
    def tick_ms(self) -> int:
        return self._tick_ms

    def start(self) -> None:
        if self._state.get_timer_state().running:
            return
        self._generation += 1
        self._state.set_running(True)
        LOGGER.debug("TimerEngine.start: running from %s ms", self.state.elapsed_ms)
        self._schedule_tick()

    def stop(self) -> None:
        if not self._state.get_timer_state().running:
            return
        self._cancel_job()
        self._state.set_running(False)
        LOGGER.debug("TimerEngine.stop: stopped at %s ms", self.state.elapsed_ms)

    def toggle(self) -> None:
        if self._state.get_timer_state().running:
            self.stop()
        else:
            self.start()

    def reset(self) -> None:
        self._cancel_job()
        self._state.reset_timer()
        self._laps.clear()
        LOGGER.debug("TimerEngine.reset: stopwatch cleared")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _tick(self, generation: int) -> None:
        if generation != self._generation or not self._state.get_timer_state().running:
            # Stale callback from a cancelled run.
            return
        self._timer_job = None
        self._state.add_elapsed(self._tick_ms)
        self._schedule_tick()

    def _schedule_tick(self) -> None:
        callback = partial(self._tick, self._generation)
        try:
            self._timer_job = self._scheduler.after(self._tick_ms, callback)
        except Exception as exc:
            LOGGER.warning("TimerEngine._schedule_tick: after() failed (%s), retrying", exc)
            try:
                self._timer_job = self._scheduler.after(self._tick_ms, callback)
            except Exception as retry_exc:
                LOGGER.error("TimerEngine._schedule_tick: retry of after() failed (%s)", retry_exc)
                self._timer_job = None

    def _cancel_job(self) -> None:
        # Any tick already queued by the scheduler belongs to the old run now.
        self._generation += 1
        if self._timer_job is not None:
            try:
                self._scheduler.after_cancel(self._timer_job)
            except Exception:  # pragma: no cover - Tk may raise if already cancelled
                LOGGER.debug("TimerEngine._cancel_job: after_cancel() ignored")
            self._timer_job = None


__all__ = ["DEFAULT_TICK_MS", "LapRecorder", "Scheduler", "TimerEngine", "format_elapsed"]
