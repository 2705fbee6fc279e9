"""Service entity and its field validators."""

import math
import uuid
from dataclasses import dataclass, field

from clinic_booking.config import settings
from clinic_booking.errors import (
    InvalidServiceMaxSlotsError,
    InvalidServicePriceError,
    InvalidServiceTitleError,
)


def generate_service_id() -> str:
    return f"SV-{uuid.uuid4().hex[:12].upper()}"


@dataclass(eq=False)
class Service:
    """
    A bookable service offered by the clinic.

    The id is generated once and never derived from the mutable fields, so
    edits to title, cap or price need no re-indexing. Two services compare
    equal when title, daily cap and price match; display order is by title
    then price.
    """

    title: str
    max_slots_per_day: int
    price_per_slot: float
    id: str = field(default_factory=generate_service_id)

    def __post_init__(self) -> None:
        self.validate_title(self.title, raise_error=True)
        self.validate_max_slots(self.max_slots_per_day, raise_error=True)
        self.validate_price(self.price_per_slot, raise_error=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Service):
            return NotImplemented
        return (
            self.title == other.title
            and self.max_slots_per_day == other.max_slots_per_day
            and self.price_per_slot == other.price_per_slot
        )

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: "Service") -> bool:
        if not isinstance(other, Service):
            return NotImplemented
        return self.sort_key < other.sort_key

    @property
    def sort_key(self) -> tuple[str, float]:
        return (self.title, self.price_per_slot)

    def __str__(self) -> str:
        return (
            f"ID: {self.id}, Title: {self.title}, "
            f"Maximum Slots: {self.max_slots_per_day}, "
            f"Price per Slot: QAR {self.price_per_slot:.2f}"
        )

    @staticmethod
    def validate_title(title: str, raise_error: bool = False) -> str:
        message = ""
        if not title or not title.strip():
            message = "Service title cannot be empty!"
        if message and raise_error:
            raise InvalidServiceTitleError(message)
        return message

    @staticmethod
    def validate_max_slots(max_slots: int, raise_error: bool = False) -> str:
        """Check the daily cap against zero and the clinic-wide maximum."""
        message = ""
        if isinstance(max_slots, bool) or not isinstance(max_slots, int):
            message = "Maximum number of slots must be a whole number!"
        elif max_slots < 0:
            message = "Maximum number of slots cannot be negative!"
        elif max_slots > settings.clinic.max_slots_per_day:
            message = (
                "Maximum number of slots cannot be above the clinic's limit of "
                f"{settings.clinic.max_slots_per_day}!"
            )
        if message and raise_error:
            raise InvalidServiceMaxSlotsError(message)
        return message

    @staticmethod
    def validate_price(price: float, raise_error: bool = False) -> str:
        message = ""
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            message = "Price per slot must be a number!"
        elif not math.isfinite(price):
            message = "Price per slot must be a finite number!"
        elif price < 0:
            message = "Price per slot cannot be negative!"
        if message and raise_error:
            raise InvalidServicePriceError(message)
        return message
