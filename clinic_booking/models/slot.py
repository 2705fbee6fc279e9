"""
Slot entity and the temporal validators used by booking.

A slot is a (service, date, time) cell of the booking grid. Only booked
slots are stored; available slots are built on the fly and carry neither an
id nor a patient. Slots reference their service and patient by id, and the
stores resolve those ids lazily.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional

from clinic_booking.config import settings
from clinic_booking.errors import InvalidSlotDateError, InvalidSlotTimeError
from clinic_booking.time_grid import is_on_grid, is_past

# Dates back to yesterday pass the date-only check; the combined date/time
# check still rejects anything already started.
PAST_DATE_TOLERANCE = timedelta(days=1)


def generate_slot_id() -> str:
    return f"SL-{uuid.uuid4().hex[:12].upper()}"


@dataclass
class Slot:
    """A cell of the booking grid, booked when a patient is allocated."""

    date: date
    time: time
    service_id: str
    patient_id: Optional[str] = None
    booked: bool = False
    id: Optional[str] = field(default=None, compare=False)

    @classmethod
    def available(cls, day: date, start: time, service_id: str) -> "Slot":
        """Build an unbooked slot for the given grid cell."""
        return cls(date=day, time=start, service_id=service_id)

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.time)

    @property
    def key(self) -> tuple[str, date, time]:
        return (self.service_id, self.date, self.time)

    def __str__(self) -> str:
        status = "Booked" if self.booked else "Available"
        return (
            f"ID: {self.id or '-'}, Time Slot: {self.starts_at:%Y-%m-%d %H:%M}, "
            f"Status: {status}, Service: {self.service_id}, "
            f"Patient: {self.patient_id or 'None'}"
        )

    @staticmethod
    def validate_date(
        day: date,
        start: Optional[time] = None,
        now: Optional[datetime] = None,
        raise_error: bool = False,
    ) -> str:
        """Check that ``day`` is not in the past.

        On its own the check tolerates yesterday. When ``start`` is given,
        a date before today whose start has already passed is rejected too.
        """
        now = now or datetime.now()
        message = ""
        if day is None:
            message = "Starting date is required!"
        elif day < now.date() - PAST_DATE_TOLERANCE:
            message = "Starting date must not be in the past!"
        elif start is not None and day < now.date() and is_past(day, start, now):
            message = "Starting date and time must not be in the past!"

        if message and raise_error:
            raise InvalidSlotDateError(message)
        return message

    @staticmethod
    def validate_time(
        start: time,
        day: Optional[date] = None,
        now: Optional[datetime] = None,
        raise_error: bool = False,
    ) -> str:
        """Check operating hours, grid alignment and, given a date, the past."""
        clinic = settings.clinic
        message = ""
        if start is None:
            message = "Starting time is required!"
        elif start < clinic.opening_time:
            message = f"Starting time cannot be before {clinic.opening_time:%H:%M}!"
        elif start > clinic.closing_time:
            message = f"Starting time cannot be after {clinic.closing_time:%H:%M}!"
        elif not is_on_grid(start):
            message = (
                f"Starting time must be within {clinic.slot_duration_minutes} "
                "minute intervals!"
            )
        elif day is not None and is_past(day, start, now or datetime.now()):
            message = "Starting time must not be in the past!"

        if message and raise_error:
            raise InvalidSlotTimeError(message)
        return message

    @classmethod
    def validate_date_time(
        cls,
        day: date,
        start: time,
        now: Optional[datetime] = None,
        raise_error: bool = False,
    ) -> str:
        """Run the date check, then the time check; first diagnostic wins."""
        now = now or datetime.now()
        return cls.validate_date(day, start, now, raise_error) or cls.validate_time(
            start, day, now, raise_error
        )
