"""
JSON persistence for the three collections.

Each collection is a JSON list in its own file under the data directory.
Writes go through a temporary file and ``os.replace`` so a crash mid-save
never leaves a half-written file behind. Reads either produce a complete,
consistent snapshot or raise ``PersistenceError``.
"""

import json
import logging
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Union

from pydantic import ValidationError as SchemaError

from clinic_booking.errors import ClinicError, PersistenceError
from clinic_booking.models import Patient, Service, Slot
from clinic_booking.schemas.records import Snapshot

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class DataType(str, Enum):
    """The three persisted collections and their file names."""

    PATIENTS = "patients"
    SERVICES = "services"
    SLOTS = "slots"

    @property
    def file_name(self) -> str:
        return f"{self.value}.json"


def load_snapshot(data_dir: PathLike) -> Snapshot:
    """Read all three collections from ``data_dir``.

    A directory holding none of the files is a fresh install and yields an
    empty snapshot. A partial set of files, unreadable or malformed JSON, or
    records that break the booking invariants raise ``PersistenceError``.
    """
    directory = Path(data_dir)
    paths = {data_type: directory / data_type.file_name for data_type in DataType}
    present = [path for path in paths.values() if path.exists()]
    if not present:
        logger.info("No saved data in %s, starting empty", directory)
        return Snapshot()
    if len(present) != len(paths):
        missing = sorted(p.name for p in paths.values() if not p.exists())
        raise PersistenceError(f"Saved data in {directory} is incomplete, missing: {', '.join(missing)}")

    raw: dict[str, object] = {}
    for data_type, path in paths.items():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw[data_type.value] = json.load(f)
        # ValueError covers JSONDecodeError and UnicodeDecodeError.
        except (OSError, ValueError) as e:
            raise PersistenceError(f"We were unable to load data from the file {path}: {e}") from e

    try:
        snapshot = Snapshot.model_validate(raw)
    except SchemaError as e:
        raise PersistenceError(f"The files in {directory} are corrupted: {e}") from e

    _check_integrity(snapshot)
    logger.debug(
        "Loaded %d patients, %d services, %d slots from %s",
        len(snapshot.patients), len(snapshot.services), len(snapshot.slots), directory,
    )
    return snapshot


def save_snapshot(data_dir: PathLike, snapshot: Snapshot) -> None:
    """Write all three collections to ``data_dir``, creating it if needed."""
    directory = Path(data_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for data_type in DataType:
            records = getattr(snapshot, data_type.value)
            payload = [record.model_dump(mode="json") for record in records]
            _write_json_atomic(directory / data_type.file_name, payload)
    except OSError as e:
        raise PersistenceError(f"We were unable to save data to {directory}: {e}") from e
    logger.debug("Saved snapshot to %s", directory)


def to_entities(snapshot: Snapshot) -> tuple[list[Patient], list[Service], list[Slot]]:
    """Rebuild entities, running every field validator on the way in."""
    try:
        patients = [record.to_entity() for record in snapshot.patients]
        services = [record.to_entity() for record in snapshot.services]
    except ClinicError as e:
        raise PersistenceError(f"Saved data contains an invalid record: {e}") from e
    slots = [record.to_entity() for record in snapshot.slots]
    return patients, services, slots


def _check_integrity(snapshot: Snapshot) -> None:
    """Reject snapshots that violate the invariants the stores rely on."""
    patient_ids = _unique_ids("patient", [p.id for p in snapshot.patients])
    service_ids = _unique_ids("service", [s.id for s in snapshot.services])
    _unique_ids("slot", [s.id for s in snapshot.slots])
    caps = {s.id: s.max_slots_per_day for s in snapshot.services}

    cells: set[tuple] = set()
    patient_times: set[tuple] = set()
    per_day: dict[tuple, int] = {}
    for slot in snapshot.slots:
        if slot.service_id not in service_ids:
            raise PersistenceError(f"Slot {slot.id} references unknown service {slot.service_id}")
        if slot.patient_id not in patient_ids:
            raise PersistenceError(f"Slot {slot.id} references unknown patient {slot.patient_id}")
        # No date is passed, so bookings already in the past still load.
        problem = Slot.validate_time(slot.time)
        if problem:
            raise PersistenceError(f"Slot {slot.id} has an invalid time: {problem}")

        cell = (slot.service_id, slot.date, slot.time)
        if cell in cells:
            raise PersistenceError(f"Slot {slot.id} duplicates an existing booking")
        cells.add(cell)

        patient_time = (slot.patient_id, slot.date, slot.time)
        if patient_time in patient_times:
            raise PersistenceError(f"Slot {slot.id} double-books patient {slot.patient_id}")
        patient_times.add(patient_time)

        day_key = (slot.service_id, slot.date)
        per_day[day_key] = per_day.get(day_key, 0) + 1
        if per_day[day_key] > caps[slot.service_id]:
            raise PersistenceError(f"Slot {slot.id} exceeds the daily cap of service {slot.service_id}")


def _unique_ids(kind: str, ids: list[str]) -> set[str]:
    unique = set(ids)
    if len(unique) != len(ids):
        raise PersistenceError(f"Saved data contains duplicate {kind} IDs")
    return unique


def _write_json_atomic(path: Path, payload: object) -> None:
    folder = path.parent
    with tempfile.NamedTemporaryFile(
        "w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp"
    ) as tf:
        json.dump(payload, tf, ensure_ascii=False, indent=2)
        tmp_name = tf.name
    os.replace(tmp_name, path)
