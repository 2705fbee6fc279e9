"""Patient entity and its field validators."""

import re
from dataclasses import dataclass
from enum import Enum

from clinic_booking.errors import InvalidPatientIdError, InvalidPatientNameError

RESIDENT_ID_LENGTH = 11
VISITOR_ID_LENGTH = 12
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 255


class Residency(str, Enum):
    """Residents are identified by QID, visitors by visa number."""

    RESIDENT = "resident"
    VISITOR = "visitor"


@dataclass
class Patient:
    """
    A registered patient.

    ``id`` is a QID for residents and a visa number for visitors. It is only
    changed through ``PatientStore.rekey``; the other fields only through the
    store's updaters.
    """

    id: str
    name: str
    residency: Residency

    def __post_init__(self) -> None:
        self.residency = Residency(self.residency)
        self.validate_name(self.name, raise_error=True)
        self.validate_id(self.id, self.residency, raise_error=True)

    @property
    def id_label(self) -> str:
        return "QID" if self.residency == Residency.RESIDENT else "Visa Number"

    def __str__(self) -> str:
        status = "Resident" if self.residency == Residency.RESIDENT else "Visitor"
        return f"{self.id_label}: {self.id}, Name: {self.name}, Residency Status: {status}"

    @staticmethod
    def validate_id(patient_id: str, residency: Residency, raise_error: bool = False) -> str:
        """Check a QID (11 digits) or visa number (12 digits).

        Returns an empty string when valid, otherwise the diagnostic. With
        ``raise_error`` the diagnostic is raised as ``InvalidPatientIdError``.
        """
        message = ""
        if not patient_id or not patient_id.strip():
            message = "Patient ID cannot be empty!"
        elif not re.fullmatch(r"\d+", patient_id):
            message = "Patient ID should only contain numbers!"
        elif residency == Residency.RESIDENT and len(patient_id) != RESIDENT_ID_LENGTH:
            message = (
                f"Patient ID is not a valid QID, it should have exactly "
                f"{RESIDENT_ID_LENGTH} digits!"
            )
        elif residency == Residency.VISITOR and len(patient_id) != VISITOR_ID_LENGTH:
            message = (
                f"Patient ID is not a valid Visa number, it should have exactly "
                f"{VISITOR_ID_LENGTH} digits!"
            )

        if message and raise_error:
            raise InvalidPatientIdError(message)
        return message

    @staticmethod
    def validate_name(name: str, raise_error: bool = False) -> str:
        """Check a display name: 3 to 255 characters and no digits."""
        message = ""
        if not name or not name.strip():
            message = "Patient name cannot be empty!"
        elif not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH:
            message = (
                "Patient name is either too short or too long, please keep it "
                f"between {MIN_NAME_LENGTH} and {MAX_NAME_LENGTH} characters long!"
            )
        elif re.search(r"\d", name):
            message = "Patient name cannot contain numbers!"

        if message and raise_error:
            raise InvalidPatientNameError(message)
        return message
