"""Single-slot persistence for the last BMI result."""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaError

from cronoimc.models import BMICategory, MeasurementRecord

LOGGER = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "last_bmi_result"


class PersistenceError(Exception):
    """Base exception for storage errors."""


class PersistenceWriteFailure(PersistenceError):
    """Raised when the record cannot be written to its slot."""


class PersistenceReadFailure(PersistenceError):
    """Raised when the slot exists but cannot be read or decoded."""


class StoredMeasurement(BaseModel):
    """On-disk schema of the saved record."""

    model_config = ConfigDict(extra="ignore")

    bmi: float
    category: BMICategory
    weight: str
    height: str
    timestamp: str

    @classmethod
    def from_record(cls, record: MeasurementRecord) -> "StoredMeasurement":
        return cls(
            bmi=record.bmi,
            category=record.category,
            weight=record.weight_kg,
            height=record.height_cm,
            timestamp=record.timestamp,
        )

    def to_record(self) -> MeasurementRecord:
        return MeasurementRecord(
            bmi=self.bmi,
            category=self.category,
            weight_kg=self.weight,
            height_cm=self.height,
            timestamp=self.timestamp,
        )


class SlotBackend(Protocol):
    """Key/value capability holding text blobs."""

    def read(self, key: str) -> Optional[str]:  # pragma: no cover - protocol definition only
        ...

    def write(self, key: str, value: str) -> None:  # pragma: no cover - protocol definition only
        ...


class MemorySlotBackend:
    """Volatile backend, useful for tests and previews."""

    def __init__(self) -> None:
        self._slots: Dict[str, str] = {}
        self._lock = threading.Lock()

    def read(self, key: str) -> Optional[str]:
        with self._lock:
            return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        with self._lock:
            self._slots[key] = value


class FileSlotBackend:
    """Stores each slot as ``<key>.json`` inside ``directory``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)
        self._lock = threading.Lock()

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        with self._lock:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
            tmp_path = Path(tmp_name)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_path, path)
            finally:
                if tmp_path.exists():
                    try:
                        tmp_path.unlink()
                    except OSError:
                        pass


class PersistenceStore:
    """Holds at most one :class:`MeasurementRecord` under a named slot.

    ``write``/``read`` report failures through :class:`PersistenceError`.
    ``save``/``load`` are the best-effort variants used by the UI: a failed
    save is logged and dropped, a failed load behaves like an empty slot.
    """

    def __init__(self, backend: SlotBackend, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._backend = backend
        self.key = key

    def write(self, record: MeasurementRecord) -> None:
        payload = StoredMeasurement.from_record(record).model_dump(mode="json")
        try:
            self._backend.write(self.key, json.dumps(payload, ensure_ascii=False))
        except OSError as exc:
            raise PersistenceWriteFailure(f"Could not write slot {self.key!r}: {exc}") from exc

    def read(self) -> Optional[MeasurementRecord]:
        try:
            raw = self._backend.read(self.key)
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceReadFailure(f"Could not read slot {self.key!r}: {exc}") from exc
        if raw is None:
            return None

        try:
            data = json.loads(raw)
            return StoredMeasurement.model_validate(data).to_record()
        except (ValueError, SchemaError) as exc:
            raise PersistenceReadFailure(f"Corrupt data in slot {self.key!r}: {exc}") from exc

    def save(self, record: MeasurementRecord) -> threading.Thread:
        """Write ``record`` on a background thread and return the worker."""

        def worker() -> None:
            try:
                self.write(record)
            except PersistenceWriteFailure as exc:
                LOGGER.warning("PersistenceStore.save: %s", exc)
            else:
                LOGGER.debug("PersistenceStore.save: stored BMI %.2f", record.bmi)

        thread = threading.Thread(target=worker, name="cronoimc-save", daemon=True)
        thread.start()
        return thread

    def load(self) -> Optional[MeasurementRecord]:
        try:
            record = self.read()
        except PersistenceReadFailure as exc:
            LOGGER.warning("PersistenceStore.load: %s", exc)
            return None
        if record is not None:
            LOGGER.info("Restored last BMI result from %s", record.timestamp)
        return record


__all__ = [
    "DEFAULT_STORAGE_KEY",
    "FileSlotBackend",
    "MemorySlotBackend",
    "PersistenceError",
    "PersistenceReadFailure",
    "PersistenceStore",
    "PersistenceWriteFailure",
    "SlotBackend",
    "StoredMeasurement",
]
