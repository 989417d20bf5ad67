"""Value objects shared by the stopwatch and the BMI calculator."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BMICategory(str, Enum):
    """WHO-style BMI bands shown on the result card."""

    UNDERWEIGHT = "Underweight"
    NORMAL = "Normal"
    OVERWEIGHT = "Overweight"
    OBESE = "Obese"


class ValidationError(str, Enum):
    """Reasons a weight/height pair is rejected before calculating."""

    MISSING_INPUT = "MissingInput"
    NOT_A_NUMBER = "NotANumber"
    NON_POSITIVE = "NonPositive"
    HEIGHT_OUT_OF_RANGE = "HeightOutOfRange"
    WEIGHT_OUT_OF_RANGE = "WeightOutOfRange"


@dataclass(frozen=True)
class TimerState:
    """Represents the status of the stopwatch."""

    elapsed_ms: int = 0
    running: bool = False


@dataclass(frozen=True)
class MeasurementRecord:
    """Result of the last successful BMI calculation."""

    bmi: float
    category: BMICategory
    weight_kg: str
    height_cm: str
    timestamp: str


@dataclass(frozen=True)
class MeasurementState:
    """Input fields, current result and pending error of the BMI screen."""

    weight_text: str = ""
    height_text: str = ""
    result: Optional[MeasurementRecord] = None
    error: Optional[ValidationError] = None


__all__ = [
    "BMICategory",
    "MeasurementRecord",
    "MeasurementState",
    "TimerState",
    "ValidationError",
]
