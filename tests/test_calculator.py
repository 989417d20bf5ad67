import pytest

from cronoimc.measurement import MeasurementCalculator
from cronoimc.models import BMICategory, MeasurementRecord, MeasurementState, ValidationError
from cronoimc.storage import MemorySlotBackend, PersistenceStore


class RecordingStore(PersistenceStore):
    """Writes synchronously so tests can inspect the slot immediately."""

    def __init__(self) -> None:
        super().__init__(MemorySlotBackend())
        self.saved = []

    def save(self, record):
        self.saved.append(record)
        self.write(record)


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def calculator(app_state, store) -> MeasurementCalculator:
    return MeasurementCalculator(app_state, store)


def test_successful_calculation_updates_state_and_saves(calculator, app_state, store) -> None:
    calculator.set_weight("60")
    calculator.set_height("180")

    record = calculator.calculate()

    assert record is not None
    assert record.bmi == 18.52
    assert record.category is BMICategory.NORMAL
    assert app_state.get_measurement_state().result == record
    assert store.saved == [record]
    assert store.read() == record


def test_invalid_input_sets_error_and_mutates_nothing_else(calculator, app_state, store) -> None:
    calculator.set_weight("60")
    calculator.set_height("180")
    first = calculator.calculate()

    calculator.set_weight("abc")
    assert calculator.calculate() is None

    state = app_state.get_measurement_state()
    assert state.error is ValidationError.NOT_A_NUMBER
    assert state.result == first
    assert store.saved == [first]


def test_dismiss_error_keeps_inputs(calculator, app_state) -> None:
    calculator.set_weight("")
    calculator.set_height("170")
    calculator.calculate()

    calculator.dismiss_error()

    assert app_state.get_measurement_state() == MeasurementState(weight_text="", height_text="170")


def test_success_clears_pending_error(calculator, app_state) -> None:
    calculator.set_weight("1000")
    calculator.set_height("170")
    calculator.calculate()
    assert app_state.get_measurement_state().error is ValidationError.WEIGHT_OUT_OF_RANGE

    calculator.set_weight("100")
    calculator.calculate()

    assert app_state.get_measurement_state().error is None


def test_clear_resets_screen_but_keeps_saved_record(calculator, app_state, store) -> None:
    calculator.set_weight("100")
    calculator.set_height("180")
    record = calculator.calculate()

    calculator.clear()

    assert app_state.get_measurement_state() == MeasurementState()
    assert store.load() == record


def test_seed_restores_result_and_inputs(calculator, app_state) -> None:
    record = MeasurementRecord(
        bmi=25.0,
        category=BMICategory.OVERWEIGHT,
        weight_kg="81",
        height_cm="180",
        timestamp="2024-02-03T04:05:06+00:00",
    )

    calculator.seed(record)

    assert app_state.get_measurement_state() == MeasurementState(
        weight_text="81", height_text="180", result=record
    )


def test_seed_without_record_is_noop(calculator, app_state) -> None:
    calculator.seed(None)

    assert app_state.get_measurement_state() == MeasurementState()


def test_listeners_are_notified_and_failures_ignored(calculator, app_state) -> None:
    received = []

    def broken(_state):
        raise RuntimeError("widget gone")

    app_state.subscribe_measurement(lambda s: received.append(s))
    app_state._measurement_listeners.append(broken)
    calculator.set_weight("70")
    calculator.set_weight("70")

    assert [s.weight_text for s in received] == ["", "70"]
