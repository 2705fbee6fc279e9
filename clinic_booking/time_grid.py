"""
The daily booking grid.

Every bookable start time lies on a fixed step from opening time up to and
including closing time. With the default configuration that is 28 entries,
07:00 through 20:30 every 30 minutes.
"""

from datetime import date, datetime, time, timedelta
from typing import Optional

from clinic_booking.config import settings


def time_grid(day: Optional[date] = None) -> list[time]:
    """Return the ordered list of legal start times.

    The content does not depend on ``day``; callers pair the result with the
    date when materializing slots and filter out started times themselves.
    """
    clinic = settings.clinic
    anchor = datetime.combine(day or date.min, clinic.opening_time)
    step = timedelta(minutes=clinic.slot_duration_minutes)
    return [(anchor + step * i).time() for i in range(clinic.grid_length)]


def is_on_grid(value: time) -> bool:
    """True when ``value`` is one of the grid's start times."""
    clinic = settings.clinic
    if value.second or value.microsecond:
        return False
    if not clinic.opening_time <= value <= clinic.closing_time:
        return False
    offset = (value.hour * 60 + value.minute) - (
        clinic.opening_time.hour * 60 + clinic.opening_time.minute
    )
    return offset % clinic.slot_duration_minutes == 0


def is_past(day: date, value: time, now: datetime) -> bool:
    """True when the start (day, value) is strictly before ``now``."""
    return datetime.combine(day, value) < now


def has_started(day: date, value: time, now: datetime) -> bool:
    """True when the start (day, value) is at or before ``now``."""
    return datetime.combine(day, value) <= now
