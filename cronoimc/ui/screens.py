"""Screens used by the local Tkinter application."""
from __future__ import annotations

from typing import Callable, Optional

import tkinter as tk
from tkinter import messagebox, ttk

from cronoimc.measurement import ERROR_MESSAGES, MeasurementCalculator
from cronoimc.models import BMICategory, MeasurementState, TimerState
from cronoimc.state import AppState, LapList
from cronoimc.timer import LapRecorder, TimerEngine, format_elapsed

CATEGORY_COLOURS = {
    BMICategory.UNDERWEIGHT: "#3498db",
    BMICategory.NORMAL: "#27ae60",
    BMICategory.OVERWEIGHT: "#f39c12",
    BMICategory.OBESE: "#e74c3c",
}


class StopwatchScreen(ttk.Frame):
    """Elapsed time, Reset/Start/Lap buttons and the lap list."""

    def __init__(
        self,
        parent: tk.Misc,
        state: AppState,
        engine: TimerEngine,
        laps: LapRecorder,
    ) -> None:
        super().__init__(parent, padding=24)
        self._state = state
        self._engine = engine
        self._laps = laps

        self._build()
        self._timer_subscription = self._state.subscribe_timer(self._on_timer_state)
        self._lap_subscription = self._state.subscribe_laps(self._on_laps)
        self.bind("<Destroy>", self._on_destroy)

    def _build(self) -> None:
        title = ttk.Label(self, text="Stopwatch", font=("Segoe UI", 22, "bold"))
        title.pack()

        self._time_label = ttk.Label(self, text=format_elapsed(0), font=("Segoe UI", 56))
        self._time_label.pack(pady=(24, 24))

        buttons = ttk.Frame(self)
        buttons.pack(pady=(0, 16))
        ttk.Button(buttons, text="Reset", command=self._engine.reset).grid(column=0, row=0, padx=8)
        self._toggle_button = ttk.Button(buttons, text="Start", command=self._engine.toggle)
        self._toggle_button.grid(column=1, row=0, padx=8)
        self._lap_button = ttk.Button(buttons, text="Lap", command=self._laps.record_lap)
        self._lap_button.grid(column=2, row=0, padx=8)
        self._lap_button.state(["disabled"])

        self._laps_title = ttk.Label(self, text="Lap Times", font=("Segoe UI", 14, "bold"))
        self._lap_list = tk.Listbox(self, height=8, font=("Segoe UI", 12), activestyle="none")

    # ------------------------------------------------------------------
    # State handling
    # ------------------------------------------------------------------
    def _on_timer_state(self, timer_state: TimerState) -> None:
        self.after(0, lambda: self._render_timer(timer_state))

    def _on_laps(self, laps: LapList) -> None:
        self.after(0, self._render_laps)

    def _render_timer(self, timer_state: TimerState) -> None:
        self._time_label.configure(text=format_elapsed(timer_state.elapsed_ms))
        if timer_state.running:
            self._toggle_button.configure(text="Stop")
            self._lap_button.state(["!disabled"])
        else:
            self._toggle_button.configure(text="Start")
            self._lap_button.state(["disabled"])

    def _render_laps(self) -> None:
        rows = self._laps.numbered()
        self._lap_list.delete(0, tk.END)
        if not rows:
            self._laps_title.pack_forget()
            self._lap_list.pack_forget()
            return
        if not self._lap_list.winfo_manager():
            self._laps_title.pack(pady=(8, 8))
            self._lap_list.pack(fill="both", expand=True)
        for number, elapsed in rows:
            self._lap_list.insert(tk.END, f"Lap {number}    {format_elapsed(elapsed)}")

    def _on_destroy(self, _event: tk.Event) -> None:
        for unsubscribe in (self._timer_subscription, self._lap_subscription):
            if unsubscribe is not None:
                unsubscribe()
        self._timer_subscription = None
        self._lap_subscription = None


class BMIScreen(ttk.Frame):
    """Weight/height form with the result card of the last calculation."""

    def __init__(
        self,
        parent: tk.Misc,
        state: AppState,
        calculator: MeasurementCalculator,
    ) -> None:
        super().__init__(parent, padding=24)
        self._state = state
        self._calculator = calculator
        self._weight_var = tk.StringVar()
        self._height_var = tk.StringVar()
        self._weight_var.trace_add("write", lambda *_args: self._calculator.set_weight(self._weight_var.get()))
        self._height_var.trace_add("write", lambda *_args: self._calculator.set_height(self._height_var.get()))
        self._alert_open = False

        self._build()
        self._subscription: Optional[Callable[[], None]] = self._state.subscribe_measurement(self._on_measurement)
        self.bind("<Destroy>", self._on_destroy)

    def _build(self) -> None:
        title = ttk.Label(self, text="BMI Calculator", font=("Segoe UI", 22, "bold"))
        title.grid(column=0, row=0, columnspan=2, sticky="w")

        ttk.Label(self, text="Weight (kg)").grid(column=0, row=1, sticky="w", pady=(16, 4))
        ttk.Entry(self, textvariable=self._weight_var, width=12).grid(column=1, row=1, sticky="w", pady=(16, 4))
        ttk.Label(self, text="Height (cm)").grid(column=0, row=2, sticky="w", pady=4)
        ttk.Entry(self, textvariable=self._height_var, width=12).grid(column=1, row=2, sticky="w", pady=4)

        actions = ttk.Frame(self)
        actions.grid(column=0, row=3, columnspan=2, sticky="w", pady=(16, 16))
        ttk.Button(actions, text="Calculate BMI", command=self._calculator.calculate).grid(column=0, row=0, padx=(0, 8))
        ttk.Button(actions, text="Clear All", command=self._calculator.clear).grid(column=1, row=0)

        self._result_frame = ttk.LabelFrame(self, text="Your Result", padding=12)
        self._bmi_label = ttk.Label(self._result_frame, font=("Segoe UI", 32, "bold"))
        self._bmi_label.pack(anchor="w")
        self._category_label = ttk.Label(self._result_frame, font=("Segoe UI", 16, "bold"))
        self._category_label.pack(anchor="w")
        self._details_label = ttk.Label(self._result_frame, foreground="#6b7280")
        self._details_label.pack(anchor="w", pady=(6, 0))

    # ------------------------------------------------------------------
    # State handling
    # ------------------------------------------------------------------
    def _on_measurement(self, _measurement: MeasurementState) -> None:
        # Render the latest state; queued snapshots may lag behind typing.
        self.after(0, lambda: self._render(self._state.get_measurement_state()))

    def _render(self, measurement: MeasurementState) -> None:
        if self._weight_var.get() != measurement.weight_text:
            self._weight_var.set(measurement.weight_text)
        if self._height_var.get() != measurement.height_text:
            self._height_var.set(measurement.height_text)

        record = measurement.result
        if record is None:
            self._result_frame.grid_forget()
        else:
            colour = CATEGORY_COLOURS.get(record.category, "")
            self._bmi_label.configure(text=f"{record.bmi:.2f}", foreground=colour)
            self._category_label.configure(text=record.category.value, foreground=colour)
            self._details_label.configure(
                text=f"{record.weight_kg} kg, {record.height_cm} cm ({record.timestamp[:10]})"
            )
            self._result_frame.grid(column=0, row=4, columnspan=2, sticky="ew")

        if measurement.error is not None and not self._alert_open:
            self._alert_open = True
            try:
                messagebox.showerror("Invalid input", ERROR_MESSAGES[measurement.error], parent=self)
            finally:
                self._alert_open = False
                self._calculator.dismiss_error()

    def _on_destroy(self, _event: tk.Event) -> None:
        if self._subscription is not None:
            self._subscription()
            self._subscription = None


__all__ = ["BMIScreen", "CATEGORY_COLOURS", "StopwatchScreen"]
