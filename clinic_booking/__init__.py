from clinic_booking.clinic import Clinic
from clinic_booking.errors import (
    BookingRejected,
    ClinicError,
    DuplicateKeyError,
    NotFoundError,
    PersistenceError,
    RejectionReason,
)
from clinic_booking.models import Patient, Residency, Service, Slot

__all__ = [
    "Clinic",
    "Patient", "Residency", "Service", "Slot",
    "ClinicError", "BookingRejected", "RejectionReason",
    "DuplicateKeyError", "NotFoundError", "PersistenceError",
]
