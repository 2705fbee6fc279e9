"""
Patient store: patients keyed by id.

Deleting or rekeying a patient cascades into the bound slot store so no
booking is left pointing at a missing patient.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from clinic_booking.errors import DuplicateKeyError, NotFoundError
from clinic_booking.models.patient import Patient, Residency
from clinic_booking.utils import normalize_digits

if TYPE_CHECKING:
    from clinic_booking.stores.slots import SlotStore

logger = logging.getLogger(__name__)


class PatientStore:
    """Keyed collection of patients, listed in id order."""

    def __init__(self) -> None:
        self._patients: dict[str, Patient] = {}
        self.slots: Optional["SlotStore"] = None

    def __len__(self) -> int:
        return len(self._patients)

    def __contains__(self, patient_id: object) -> bool:
        return patient_id in self._patients

    # --- Queries ---

    def get_by_id(self, patient_id: Optional[str]) -> Optional[Patient]:
        if patient_id is None:
            return None
        return self._patients.get(patient_id)

    def get_by_name(self, name: Optional[str]) -> list[Patient]:
        """Case-insensitive substring search over patient names."""
        if not name or not name.strip():
            return []
        needle = name.strip().lower()
        return [p for p in self.get_all() if needle in p.name.lower()]

    def get_by_residency(self, residency: Optional[Residency]) -> list[Patient]:
        if residency is None:
            return []
        return [p for p in self.get_all() if p.residency == residency]

    def get_all_ids(self) -> list[str]:
        return sorted(self._patients)

    def get_all(self) -> list[Patient]:
        return [self._patients[pid] for pid in sorted(self._patients)]

    # --- Adders ---

    def add(self, patient: Patient) -> Patient:
        if patient.id in self._patients:
            raise DuplicateKeyError(f"A patient with ID {patient.id} already exists!")
        self._patients[patient.id] = patient
        logger.debug("Patient added: %s", patient.id)
        return patient

    def bulk_add(self, patients: Iterable[Patient]) -> list[Patient]:
        """Add several patients, all or nothing.

        Every id is checked against the store and the rest of the batch
        before any patient is inserted.
        """
        batch = list(patients)
        seen: set[str] = set()
        for patient in batch:
            if patient.id in self._patients or patient.id in seen:
                raise DuplicateKeyError(f"The patient with ID {patient.id} is already in the list!")
            seen.add(patient.id)
        for patient in batch:
            self._patients[patient.id] = patient
        logger.debug("Added %d patients", len(batch))
        return batch

    # --- Updaters ---

    def replace(self, patient_id: str, patient: Patient) -> Patient:
        """Overwrite name and residency under ``patient_id``.

        The key never changes here; it must still be a valid id for the new
        residency. Use ``rekey`` to change the id.
        """
        current = self._require(patient_id)
        Patient.validate_id(patient_id, patient.residency, raise_error=True)
        current.name = patient.name
        current.residency = patient.residency
        logger.debug("Patient replaced: %s", patient_id)
        return current

    def rekey(self, old_id: str, new_id: str) -> Patient:
        """Move a patient to a new id and re-point its bookings."""
        patient = self._require(old_id)
        new_id = normalize_digits(new_id)
        if new_id == old_id:
            return patient
        Patient.validate_id(new_id, patient.residency, raise_error=True)
        if new_id in self._patients:
            raise DuplicateKeyError(f"A patient with ID {new_id} already exists!")

        del self._patients[old_id]
        patient.id = new_id
        self._patients[new_id] = patient
        if self.slots is not None:
            self.slots.reassign_patient(old_id, new_id)
        logger.info("Patient rekeyed: %s -> %s", old_id, new_id)
        return patient

    def update_name(self, patient_id: str, name: str) -> Patient:
        patient = self._require(patient_id)
        Patient.validate_name(name, raise_error=True)
        patient.name = name
        return patient

    def update_residency(
        self, patient_id: str, residency: Residency, new_id: Optional[str] = None
    ) -> Patient:
        """Change residency, rekeying in the same call when ``new_id`` is given.

        QIDs and visa numbers differ in length, so switching residency
        normally needs a new id as well. Both are validated before either
        is applied.
        """
        patient = self._require(patient_id)
        residency = Residency(residency)
        target_id = normalize_digits(new_id) if new_id is not None else patient_id
        Patient.validate_id(target_id, residency, raise_error=True)
        if target_id != patient_id and target_id in self._patients:
            raise DuplicateKeyError(f"A patient with ID {target_id} already exists!")

        patient.residency = residency
        if target_id != patient_id:
            self.rekey(patient_id, target_id)
        return patient

    # --- Deleters ---

    def delete(self, patient_id: str) -> Patient:
        """Remove a patient and cancel every booking it holds."""
        patient = self._require(patient_id)
        del self._patients[patient_id]
        if self.slots is not None:
            self.slots.cancel_by_patient(patient_id)
        logger.info("Patient deleted: %s", patient_id)
        return patient

    def clear(self) -> None:
        self._patients.clear()

    def _require(self, patient_id: str) -> Patient:
        patient = self.get_by_id(patient_id)
        if patient is None:
            raise NotFoundError(f"The patient with ID {patient_id} cannot be found!")
        return patient
