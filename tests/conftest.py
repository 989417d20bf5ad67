import sys
from pathlib import Path
from typing import Callable, Dict, Tuple

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cronoimc.state import AppState  # noqa: E402
from cronoimc.timer import LapRecorder, TimerEngine  # noqa: E402


class FakeScheduler:
    """Deterministic stand-in for ``tk.Misc.after``/``after_cancel``."""

    def __init__(self) -> None:
        self.now = 0
        self._next_id = 1
        self.pending: Dict[str, Tuple[int, Callable[[], None]]] = {}
        self.cancelled = []

    def after(self, ms: int, func: Callable[[], None]) -> str:
        job_id = f"after#{self._next_id}"
        self._next_id += 1
        self.pending[job_id] = (self.now + ms, func)
        return job_id

    def after_cancel(self, job_id: str) -> None:
        self.cancelled.append(job_id)
        self.pending.pop(job_id, None)

    def advance(self, ms: int) -> None:
        target = self.now + ms
        while True:
            due = [(when, job_id) for job_id, (when, _) in self.pending.items() if when <= target]
            if not due:
                break
            when, job_id = min(due)
            _, func = self.pending.pop(job_id)
            self.now = when
            func()
        self.now = target


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def app_state() -> AppState:
    return AppState()


@pytest.fixture
def laps(app_state: AppState) -> LapRecorder:
    return LapRecorder(app_state)


@pytest.fixture
def engine(scheduler: FakeScheduler, app_state: AppState, laps: LapRecorder) -> TimerEngine:
    return TimerEngine(scheduler, app_state, laps)
