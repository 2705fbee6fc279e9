"""Argument normalization shared by the stores and the entry point."""

import re
from datetime import date, datetime, time
from typing import Optional, Union

DateLike = Union[date, str]
TimeLike = Union[time, str]


def normalize_digits(value: str) -> str:
    """Strip spaces, dashes and other separators typed into an identifier.

    Letters are kept so the validator can still report them.

    Examples:
        >>> normalize_digits("123 4567 8901")
        '12345678901'
        >>> normalize_digits(" 1234-5678-9012 ")
        '123456789012'
    """
    return re.sub(r"[\s\-./()]", "", value.strip())


def parse_date(value: Optional[DateLike]) -> Optional[date]:
    """Accept a ``date`` or a ``YYYY-MM-DD`` string. ``None`` passes through."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def parse_time(value: Optional[TimeLike]) -> Optional[time]:
    """Accept a ``time`` or an ``HH:MM`` string. ``None`` passes through."""
    if value is None or isinstance(value, time):
        return value
    return datetime.strptime(value.strip(), "%H:%M").time()


def query_date(value: Optional[DateLike]) -> Optional[date]:
    """Like ``parse_date`` but a malformed string yields ``None``.

    Used on lookup paths, where an unparseable key simply matches nothing.
    Write paths use ``parse_date`` and let the ``ValueError`` through.
    """
    try:
        return parse_date(value)
    except ValueError:
        return None


def query_time(value: Optional[TimeLike]) -> Optional[time]:
    """Like ``parse_time`` but a malformed string yields ``None``."""
    try:
        return parse_time(value)
    except ValueError:
        return None
