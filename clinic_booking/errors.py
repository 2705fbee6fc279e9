"""Typed errors raised by the entity validators, stores and persistence."""

from enum import Enum


class ClinicError(Exception):
    """Base class for every error the booking engine raises."""


class ValidationError(ClinicError, ValueError):
    """A field value failed its validator."""


class InvalidPatientIdError(ValidationError):
    pass


class InvalidPatientNameError(ValidationError):
    pass


class InvalidServiceTitleError(ValidationError):
    pass


class InvalidServiceMaxSlotsError(ValidationError):
    pass


class InvalidServicePriceError(ValidationError):
    pass


class InvalidSlotDateError(ValidationError):
    pass


class InvalidSlotTimeError(ValidationError):
    pass


class DuplicateKeyError(ClinicError):
    """Raised when adding or rekeying onto an identifier already in a store."""


class NotFoundError(ClinicError, LookupError):
    """Raised by write operations that target a missing identifier."""


class RejectionReason(str, Enum):
    """Why a booking was refused."""

    SLOT_TAKEN = "slot_taken"
    PATIENT_DOUBLE_BOOKED = "patient_double_booked"
    SERVICE_DAILY_CAP_REACHED = "service_daily_cap_reached"
    INVALID_DATE = "invalid_date"
    INVALID_TIME = "invalid_time"


class BookingRejected(ClinicError):
    """Raised when a booking fails one of the scheduling rules."""

    def __init__(self, reason: RejectionReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message

    def __repr__(self) -> str:
        return f"BookingRejected({self.reason.value!r}, {self.message!r})"


class PersistenceError(ClinicError):
    """Raised when the stored collections cannot be read or written."""
