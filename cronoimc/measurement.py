"""BMI validation, formula and classification.

The module level functions are pure; :class:`MeasurementCalculator` wires them
to the shared :class:`~cronoimc.state.AppState` and the persistence slot.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional

from cronoimc.models import BMICategory, MeasurementRecord, ValidationError
from cronoimc.state import AppState
from cronoimc.storage import PersistenceStore

LOGGER = logging.getLogger(__name__)

MIN_HEIGHT_CM = 50.0
MAX_HEIGHT_CM = 300.0
MIN_WEIGHT_KG = 20.0
MAX_WEIGHT_KG = 500.0

UNDERWEIGHT_LIMIT = 18.5
OVERWEIGHT_FROM = 25.0
OBESE_FROM = 30.0

_DECIMAL_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

ERROR_MESSAGES: Dict[ValidationError, str] = {
    ValidationError.MISSING_INPUT: "Please enter both weight and height.",
    ValidationError.NOT_A_NUMBER: "Please enter valid numbers for weight and height.",
    ValidationError.NON_POSITIVE: "Weight and height must be greater than zero.",
    ValidationError.HEIGHT_OUT_OF_RANGE: "Please enter a realistic height (50-300 cm).",
    ValidationError.WEIGHT_OUT_OF_RANGE: "Please enter a realistic weight (20-500 kg).",
}


class MeasurementInputError(ValueError):
    """Raised by :func:`validate` with the first rule the input breaks."""

    def __init__(self, code: ValidationError) -> None:
        super().__init__(ERROR_MESSAGES[code])
        self.code = code


@dataclass(frozen=True)
class ValidatedInput:
    weight_kg: float
    height_cm: float
    weight_text: str
    height_text: str


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_decimal(text: str) -> Optional[float]:
    candidate = text.replace(",", ".")
    if not _DECIMAL_RE.match(candidate):
        return None
    value = float(candidate)
    if not math.isfinite(value):
        return None
    return value


def validate(weight_raw: str, height_raw: str) -> ValidatedInput:
    """Check the raw text of both fields; the first failing rule wins."""

    weight_text = (weight_raw or "").strip()
    height_text = (height_raw or "").strip()
    if not weight_text or not height_text:
        raise MeasurementInputError(ValidationError.MISSING_INPUT)

    weight = _parse_decimal(weight_text)
    height = _parse_decimal(height_text)
    if weight is None or height is None:
        raise MeasurementInputError(ValidationError.NOT_A_NUMBER)

    if weight <= 0 or height <= 0:
        raise MeasurementInputError(ValidationError.NON_POSITIVE)

    if not MIN_HEIGHT_CM <= height <= MAX_HEIGHT_CM:
        raise MeasurementInputError(ValidationError.HEIGHT_OUT_OF_RANGE)

    if not MIN_WEIGHT_KG <= weight <= MAX_WEIGHT_KG:
        raise MeasurementInputError(ValidationError.WEIGHT_OUT_OF_RANGE)

    return ValidatedInput(
        weight_kg=weight,
        height_cm=height,
        weight_text=weight_text,
        height_text=height_text,
    )


def round_bmi(value: float) -> float:
    """Round to two decimals, halves away from zero."""

    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def classify(bmi: float) -> BMICategory:
    if bmi < UNDERWEIGHT_LIMIT:
        return BMICategory.UNDERWEIGHT
    if bmi < OVERWEIGHT_FROM:
        return BMICategory.NORMAL
    if bmi < OBESE_FROM:
        return BMICategory.OVERWEIGHT
    return BMICategory.OBESE


def compute(
    weight_kg: float,
    height_cm: float,
    *,
    weight_text: Optional[str] = None,
    height_text: Optional[str] = None,
    now: Optional[str] = None,
) -> MeasurementRecord:
    """Build the record for an already validated weight/height pair.

    The BMI is rounded before it is classified so the category always agrees
    with the value shown to the user.
    """

    height_m = height_cm / 100
    bmi = round_bmi(weight_kg / (height_m ** 2))
    return MeasurementRecord(
        bmi=bmi,
        category=classify(bmi),
        weight_kg=weight_text if weight_text is not None else f"{weight_kg:g}",
        height_cm=height_text if height_text is not None else f"{height_cm:g}",
        timestamp=now or utc_now_iso(),
    )


class MeasurementCalculator:
    """Handles the BMI screen intents."""

    def __init__(self, state: AppState, store: PersistenceStore) -> None:
        self._state = state
        self._store = store

    def set_weight(self, text: str) -> None:
        self._state.update_measurement(weight_text=text)

    def set_height(self, text: str) -> None:
        self._state.update_measurement(height_text=text)

    def calculate(self) -> Optional[MeasurementRecord]:
        current = self._state.get_measurement_state()
        try:
            validated = validate(current.weight_text, current.height_text)
        except MeasurementInputError as exc:
            LOGGER.info("MeasurementCalculator.calculate: rejected input (%s)", exc.code.value)
            self._state.set_measurement_error(exc.code)
            return None

        record = compute(
            validated.weight_kg,
            validated.height_cm,
            weight_text=validated.weight_text,
            height_text=validated.height_text,
        )
        self._state.set_measurement_result(record)
        LOGGER.debug("MeasurementCalculator.calculate: BMI %.2f (%s)", record.bmi, record.category.value)
        self._store.save(record)
        return record

    def clear(self) -> None:
        """Empty the screen; the saved record stays in storage."""

        self._state.clear_measurement()

    def dismiss_error(self) -> None:
        self._state.set_measurement_error(None)

    def seed(self, record: Optional[MeasurementRecord]) -> None:
        if record is None:
            return
        self._state.update_measurement(weight_text=record.weight_kg, height_text=record.height_cm)
        self._state.set_measurement_result(record)


__all__ = [
    "ERROR_MESSAGES",
    "MeasurementCalculator",
    "MeasurementInputError",
    "ValidatedInput",
    "classify",
    "compute",
    "round_bmi",
    "validate",
]
