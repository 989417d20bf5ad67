"""Stopwatch and BMI calculator desktop package."""

from .models import BMICategory, MeasurementRecord, MeasurementState, TimerState, ValidationError
from .state import AppState

__all__ = [
    "AppState",
    "BMICategory",
    "MeasurementRecord",
    "MeasurementState",
    "TimerState",
    "ValidationError",
]
