"""
The clinic: the three stores wired together with a clock and a data directory.

Usage:
    clinic = Clinic()
    clinic.load()
    service = clinic.services.add(Service("Generic", 20, 100))
    clinic.slots.book_at("2026-03-17", "09:00", service.id, "11111111111")
    clinic.save()
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from clinic_booking.config import settings
from clinic_booking.errors import PersistenceError
from clinic_booking.persistence import PathLike, load_snapshot, save_snapshot, to_entities
from clinic_booking.schemas.records import PatientRecord, ServiceRecord, SlotRecord, Snapshot
from clinic_booking.stores.patients import PatientStore
from clinic_booking.stores.services import ServiceStore
from clinic_booking.stores.slots import Clock, SlotStore

logger = logging.getLogger(__name__)

DiagnosticSink = Callable[[str], None]


class Clinic:
    """Owns the patient, service and slot stores and their persistence."""

    def __init__(
        self,
        clock: Clock = datetime.now,
        data_dir: Optional[PathLike] = None,
        on_diagnostic: Optional[DiagnosticSink] = None,
    ) -> None:
        self.patients = PatientStore()
        self.services = ServiceStore()
        self.slots = SlotStore(self.patients, self.services, clock=clock)
        self.data_dir = Path(data_dir if data_dir is not None else settings.storage.data_dir)
        self.on_diagnostic = on_diagnostic

    def snapshot(self) -> Snapshot:
        return Snapshot(
            patients=[PatientRecord.from_entity(p) for p in self.patients.get_all()],
            services=[ServiceRecord.from_entity(s) for s in self.services.get_all()],
            slots=[SlotRecord.from_entity(s) for s in self.slots.all()],
        )

    def clear(self) -> None:
        self.slots.clear()
        self.services.clear()
        self.patients.clear()

    def load(self) -> bool:
        """Replace the stores' contents with the saved data.

        On any failure all three stores are left empty and the problem is
        reported once through the diagnostic sink. Never raises.
        """
        self.clear()
        try:
            patients, services, slots = to_entities(load_snapshot(self.data_dir))
        except PersistenceError as e:
            self._report(str(e))
            return False

        self.patients.bulk_add(patients)
        self.services.bulk_add(services)
        self.slots.restore(slots)
        logger.info(
            "Loaded %d patients, %d services and %d bookings",
            len(self.patients), len(self.services), len(self.slots),
        )
        return True

    def save(self) -> bool:
        """Write the three stores to the data directory. Never raises."""
        try:
            save_snapshot(self.data_dir, self.snapshot())
        except PersistenceError as e:
            self._report(str(e))
            return False
        logger.info("Saved clinic data to %s", self.data_dir)
        return True

    def _report(self, message: str) -> None:
        logger.warning(message)
        if self.on_diagnostic is not None:
            self.on_diagnostic(message)
