"""Main Tkinter application wiring screens and services."""
from __future__ import annotations

import logging
import tkinter as tk
from pathlib import Path
from tkinter import ttk
from typing import Optional

from cronoimc.config import AppConfig, load_config
from cronoimc.measurement import MeasurementCalculator
from cronoimc.state import AppState
from cronoimc.storage import FileSlotBackend, PersistenceStore
from cronoimc.timer import LapRecorder, TimerEngine
from cronoimc.ui.screens import BMIScreen, StopwatchScreen

LOGGER = logging.getLogger(__name__)


def setup_logging(log_dir: Path, level: str = "INFO") -> logging.Logger:
    """Attach a file handler to the package logger once."""

    logger = logging.getLogger("cronoimc")
    if not logger.handlers:
        logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            handler: logging.Handler = logging.FileHandler(log_dir / "app.log")
        except OSError:
            handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(handler)
    return logger


class CronoApp(tk.Tk):
    """Tk application hosting the stopwatch and BMI calculator screens."""

    def __init__(
        self,
        *,
        config: Optional[AppConfig] = None,
        store: Optional[PersistenceStore] = None,
        app_state: Optional[AppState] = None,
    ) -> None:
        super().__init__()
        self.title("Stopwatch & BMI")
        self.geometry("480x640")

        self.config_values = config or load_config()
        self.state_manager = app_state or AppState()
        self.store = store or PersistenceStore(
            FileSlotBackend(self.config_values.data_dir),
            key=self.config_values.storage_key,
        )
        self.laps = LapRecorder(self.state_manager)
        self.timer_engine = TimerEngine(
            self,
            self.state_manager,
            self.laps,
            tick_ms=self.config_values.tick_ms,
        )
        self.calculator = MeasurementCalculator(self.state_manager, self.store)
        # The saved result must be in place before the BMI screen first renders.
        self.calculator.seed(self.store.load())

        self._screens: dict[str, ttk.Frame] = {}
        self._build_ui()
        self.protocol("WM_DELETE_WINDOW", self.close)
        self.show_stopwatch()

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------
    def show_stopwatch(self) -> None:
        self._show_screen("stopwatch")

    def show_bmi(self) -> None:
        self._show_screen("bmi")

    def close(self) -> None:
        self.timer_engine.stop()
        self.destroy()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _build_ui(self) -> None:
        container = ttk.Frame(self)
        container.pack(fill="both", expand=True)

        nav = ttk.Frame(container)
        nav.pack(fill="x", padx=16, pady=(16, 0))

        ttk.Button(nav, text="Stopwatch", command=self.show_stopwatch).pack(side=tk.LEFT, padx=(0, 8))
        ttk.Button(nav, text="BMI", command=self.show_bmi).pack(side=tk.LEFT)

        content = ttk.Frame(container)
        content.pack(fill="both", expand=True, padx=16, pady=16)
        content.grid_rowconfigure(0, weight=1)
        content.grid_columnconfigure(0, weight=1)

        stopwatch = StopwatchScreen(content, self.state_manager, self.timer_engine, self.laps)
        bmi = BMIScreen(content, self.state_manager, self.calculator)

        self._screens["stopwatch"] = stopwatch
        self._screens["bmi"] = bmi

        stopwatch.grid(row=0, column=0, sticky="nsew")
        bmi.grid(row=0, column=0, sticky="nsew")

    def _show_screen(self, name: str) -> None:
        screen = self._screens.get(name)
        if screen is None:
            raise KeyError(f"Unknown screen: {name}")
        screen.tkraise()


def main() -> None:
    config = load_config()
    setup_logging(config.log_dir, config.log_level)
    LOGGER.info("Starting cronoimc (data dir %s)", config.data_dir)
    app = CronoApp(config=config)
    app.mainloop()


__all__ = ["CronoApp", "main", "setup_logging"]
