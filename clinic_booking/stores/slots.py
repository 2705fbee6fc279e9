"""
Slot store: the booking engine.

Booked slots live in a three-level index ``service id -> date -> time``.
Every query walks only the levels its arguments pin down and returns
slots ordered by date, then time, then the service's position in the
service store.

Usage:
    slots = SlotStore(patients, services, clock=datetime.now)
    slot = slots.book_at("2026-03-17", "09:00", service.id, "11111111111")
    slots.update_time(slot.id, "10:30")
    slots.cancel(slot.id)
"""

import logging
from datetime import date, datetime, time
from typing import Callable, Iterable, Iterator, Optional

from clinic_booking.errors import (
    BookingRejected,
    ClinicError,
    InvalidSlotDateError,
    InvalidSlotTimeError,
    NotFoundError,
    RejectionReason,
)
from clinic_booking.models.service import Service
from clinic_booking.models.slot import Slot, generate_slot_id
from clinic_booking.stores.patients import PatientStore
from clinic_booking.stores.services import ServiceStore
from clinic_booking.time_grid import has_started, time_grid
from clinic_booking.utils import (
    DateLike,
    TimeLike,
    normalize_digits,
    parse_date,
    parse_time,
    query_date,
    query_time,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
SlotIndex = dict[str, dict[date, dict[time, Slot]]]


class SlotStore:
    """
    Booked slots indexed by service, date and time.

    Binds itself to the patient and service stores on construction so that
    deleting or rekeying either entity cascades into the bookings.
    """

    def __init__(
        self,
        patients: PatientStore,
        services: ServiceStore,
        clock: Clock = datetime.now,
    ) -> None:
        self._slots: SlotIndex = {}
        self.patients = patients
        self.services = services
        self.clock = clock
        patients.slots = self
        services.slots = self

    def __len__(self) -> int:
        return sum(1 for _ in self._iter_all())

    # --- Available slots ---

    def available_on(self, day: Optional[DateLike], service_id: Optional[str] = None) -> list[Slot]:
        """Derive the free cells for ``day``.

        Covers every service in insertion order, or only ``service_id`` when
        given. Times that have already started are left out, and a date that
        fails the date check yields nothing.
        """
        day = query_date(day)
        if day is None:
            return []
        now = self.clock()
        if Slot.validate_date(day, now=now):
            return []

        if service_id is None:
            service_ids = self.services.get_all_ids()
        elif service_id in self.services:
            service_ids = [service_id]
        else:
            return []

        grid = time_grid(day)
        free: list[Slot] = []
        for sid in service_ids:
            taken = self._slots.get(sid, {}).get(day, {})
            for start in grid:
                if start in taken or has_started(day, start, now):
                    continue
                free.append(Slot.available(day, start, sid))
        return free

    # --- Booking ---

    def book(self, slot: Slot, patient_id: str) -> Slot:
        """Book ``slot`` for ``patient_id`` and store it.

        Referenced service and patient must exist. The scheduling rules are
        then checked in order and the first failure is raised as
        ``BookingRejected``: date and time, free cell, patient free at that
        time, service daily cap.
        """
        self._validate_booking(slot, patient_id)

        slot.patient_id = patient_id
        slot.booked = True
        slot.id = slot.id or generate_slot_id()
        self._insert(slot)
        logger.info(
            "Slot booked: %s for %s on %s at %s (%s)",
            slot.id, patient_id, slot.date, slot.time.strftime("%H:%M"), slot.service_id,
        )
        return slot

    def book_at(
        self, day: DateLike, start: TimeLike, service_id: str, patient_id: str
    ) -> Slot:
        """Book by (date, time, service, patient); dates and times may be ISO strings."""
        slot = Slot.available(parse_date(day), parse_time(start), service_id)
        return self.book(slot, normalize_digits(patient_id))

    def check_booking(self, slot: Slot, patient_id: str) -> str:
        """Report mode of ``book``: the first diagnostic, or an empty string."""
        try:
            self._validate_booking(slot, patient_id)
        except (BookingRejected, NotFoundError) as e:
            return str(e)
        return ""

    def _validate_booking(self, slot: Slot, patient_id: str) -> None:
        service = self._require_service(slot.service_id)
        if patient_id not in self.patients:
            raise NotFoundError(f"The patient with ID {patient_id} cannot be found!")

        now = self.clock()
        try:
            Slot.validate_date(slot.date, slot.time, now, raise_error=True)
        except InvalidSlotDateError as e:
            raise BookingRejected(RejectionReason.INVALID_DATE, str(e)) from e
        try:
            Slot.validate_time(slot.time, slot.date, now, raise_error=True)
        except InvalidSlotTimeError as e:
            raise BookingRejected(RejectionReason.INVALID_TIME, str(e)) from e

        if self.by_date_time_service(slot.date, slot.time, service.id) is not None:
            raise BookingRejected(RejectionReason.SLOT_TAKEN, "This slot is unavailable!")

        if self.by_date_time_patient(slot.date, slot.time, patient_id) is not None:
            raise BookingRejected(
                RejectionReason.PATIENT_DOUBLE_BOOKED,
                "You cannot book 2 slots at the same date and time!",
            )

        if self.count_on(slot.date, service.id) >= service.max_slots_per_day:
            raise BookingRejected(
                RejectionReason.SERVICE_DAILY_CAP_REACHED,
                f"{service.title} has reached the maximum number of bookings for the day!",
            )

    # --- Updates ---

    def update(self, slot_id: str, new_slot: Slot) -> Slot:
        """Move a booking to the date, time, service and patient of ``new_slot``.

        A missing patient on ``new_slot`` keeps the current one.
        """
        original = self._require(slot_id)
        return self._rebook(
            original,
            day=new_slot.date,
            start=new_slot.time,
            service_id=new_slot.service_id,
            patient_id=new_slot.patient_id,
        )

    def update_date(self, slot_id: str, new_date: DateLike) -> Slot:
        return self._rebook(self._require(slot_id), day=parse_date(new_date))

    def update_time(self, slot_id: str, new_time: TimeLike) -> Slot:
        return self._rebook(self._require(slot_id), start=parse_time(new_time))

    def update_service(self, slot_id: str, new_service_id: str) -> Slot:
        return self._rebook(self._require(slot_id), service_id=new_service_id)

    def update_patient(self, slot_id: str, new_patient_id: str) -> Slot:
        return self._rebook(self._require(slot_id), patient_id=normalize_digits(new_patient_id))

    def _rebook(
        self,
        original: Slot,
        *,
        day: Optional[date] = None,
        start: Optional[time] = None,
        service_id: Optional[str] = None,
        patient_id: Optional[str] = None,
    ) -> Slot:
        """Cancel ``original`` and book its replacement under the same id.

        If the replacement is rejected the original goes back into its cell
        untouched and the error propagates.
        """
        replacement = Slot(
            date=original.date if day is None else day,
            time=original.time if start is None else start,
            service_id=original.service_id if service_id is None else service_id,
            id=original.id,
        )
        target_patient = original.patient_id if patient_id is None else patient_id

        self._remove(original)
        try:
            updated = self.book(replacement, target_patient)
        except ClinicError:
            self._insert(original)
            raise
        logger.info("Slot updated: %s", updated.id)
        return updated

    # --- Cancellation ---

    def cancel(self, slot_id: str) -> Slot:
        slot = self._require(slot_id)
        self._remove(slot)
        logger.info("Slot cancelled: %s", slot_id)
        return slot

    def cancel_many(self, slot_ids: Iterable[str]) -> list[Slot]:
        """Cancel several bookings; every id must exist before any is removed."""
        targets = [self._require(sid) for sid in slot_ids]
        for slot in targets:
            self._remove(slot)
        return targets

    def cancel_by_date(self, day: Optional[DateLike]) -> list[Slot]:
        return self._remove_all(self.by_date(day))

    def cancel_by_time(self, start: Optional[TimeLike]) -> list[Slot]:
        return self._remove_all(self.by_time(start))

    def cancel_by_service(self, service_id: Optional[str]) -> list[Slot]:
        if service_id is None:
            return []
        removed = self.by_service(service_id)
        self._slots.pop(service_id, None)
        if removed:
            logger.info("Cancelled %d slots for service %s", len(removed), service_id)
        return removed

    def cancel_by_patient(self, patient_id: Optional[str]) -> list[Slot]:
        return self._remove_all(self.by_patient(patient_id))

    def cancel_at(
        self,
        day: Optional[DateLike],
        start: Optional[TimeLike],
        service_id: Optional[str] = None,
        patient_id: Optional[str] = None,
    ) -> list[Slot]:
        """Cancel bookings at (date, time), optionally narrowed by service and/or patient."""
        day, start = query_date(day), query_time(start)
        if day is None or start is None:
            return []
        return self._remove_all(
            self._select(service_id=service_id, day=day, start=start, patient_id=patient_id)
        )

    # --- Cascades ---

    def reassign_patient(self, old_id: str, new_id: str) -> int:
        """Point every booking held by ``old_id`` at ``new_id``."""
        moved = 0
        for slot in self._iter_all():
            if slot.patient_id == old_id:
                slot.patient_id = new_id
                moved += 1
        return moved

    def reassign_service(self, old_id: str, new_id: str) -> int:
        """Move the sub-index of ``old_id`` under ``new_id``."""
        dates = self._slots.pop(old_id, None)
        if dates is None:
            return 0
        self._slots[new_id] = dates
        moved = 0
        for times in dates.values():
            for slot in times.values():
                slot.service_id = new_id
                moved += 1
        return moved

    # --- Queries ---

    def by_id(self, slot_id: Optional[str]) -> Optional[Slot]:
        if slot_id is None:
            return None
        for slot in self._iter_all():
            if slot.id == slot_id:
                return slot
        return None

    def all(self) -> list[Slot]:
        return self._select()

    def by_date(self, day: Optional[DateLike]) -> list[Slot]:
        day = query_date(day)
        return [] if day is None else self._select(day=day)

    def by_time(self, start: Optional[TimeLike]) -> list[Slot]:
        start = query_time(start)
        return [] if start is None else self._select(start=start)

    def by_service(self, service_id: Optional[str]) -> list[Slot]:
        return [] if service_id is None else self._select(service_id=service_id)

    def by_patient(self, patient_id: Optional[str]) -> list[Slot]:
        return [] if patient_id is None else self._select(patient_id=patient_id)

    def by_date_time(self, day: Optional[DateLike], start: Optional[TimeLike]) -> list[Slot]:
        day, start = query_date(day), query_time(start)
        if day is None or start is None:
            return []
        return self._select(day=day, start=start)

    def by_date_service(self, day: Optional[DateLike], service_id: Optional[str]) -> list[Slot]:
        day = query_date(day)
        if day is None or service_id is None:
            return []
        return self._select(service_id=service_id, day=day)

    def by_date_patient(self, day: Optional[DateLike], patient_id: Optional[str]) -> list[Slot]:
        day = query_date(day)
        if day is None or patient_id is None:
            return []
        return self._select(day=day, patient_id=patient_id)

    def by_time_service(self, start: Optional[TimeLike], service_id: Optional[str]) -> list[Slot]:
        start = query_time(start)
        if start is None or service_id is None:
            return []
        return self._select(service_id=service_id, start=start)

    def by_time_patient(self, start: Optional[TimeLike], patient_id: Optional[str]) -> list[Slot]:
        start = query_time(start)
        if start is None or patient_id is None:
            return []
        return self._select(start=start, patient_id=patient_id)

    def by_service_patient(self, service_id: Optional[str], patient_id: Optional[str]) -> list[Slot]:
        if service_id is None or patient_id is None:
            return []
        return self._select(service_id=service_id, patient_id=patient_id)

    def by_date_service_patient(
        self, day: Optional[DateLike], service_id: Optional[str], patient_id: Optional[str]
    ) -> list[Slot]:
        day = query_date(day)
        if day is None or service_id is None or patient_id is None:
            return []
        return self._select(service_id=service_id, day=day, patient_id=patient_id)

    def by_time_service_patient(
        self, start: Optional[TimeLike], service_id: Optional[str], patient_id: Optional[str]
    ) -> list[Slot]:
        start = query_time(start)
        if start is None or service_id is None or patient_id is None:
            return []
        return self._select(service_id=service_id, start=start, patient_id=patient_id)

    def by_date_time_service(
        self, day: Optional[DateLike], start: Optional[TimeLike], service_id: Optional[str]
    ) -> Optional[Slot]:
        day, start = query_date(day), query_time(start)
        if day is None or start is None or service_id is None:
            return None
        return self._slots.get(service_id, {}).get(day, {}).get(start)

    def by_date_time_patient(
        self, day: Optional[DateLike], start: Optional[TimeLike], patient_id: Optional[str]
    ) -> Optional[Slot]:
        day, start = query_date(day), query_time(start)
        if day is None or start is None or patient_id is None:
            return None
        matches = self._select(day=day, start=start, patient_id=patient_id)
        return matches[0] if matches else None

    def count_on(self, day: date, service_id: str) -> int:
        """Number of bookings a service holds on ``day``."""
        return len(self._slots.get(service_id, {}).get(day, {}))

    def max_daily_count(self, service_id: str) -> int:
        """Largest number of bookings the service holds on any single day."""
        dates = self._slots.get(service_id, {})
        return max((len(times) for times in dates.values()), default=0)

    # --- Persistence hooks ---

    def clear(self) -> None:
        self._slots.clear()

    def restore(self, slots: Iterable[Slot]) -> None:
        """Insert previously validated bookings without re-running the rules."""
        for slot in slots:
            self._insert(slot)

    # --- Internals ---

    def _select(
        self,
        *,
        service_id: Optional[str] = None,
        day: Optional[date] = None,
        start: Optional[time] = None,
        patient_id: Optional[str] = None,
    ) -> list[Slot]:
        """Collect slots matching every given key; ``None`` means any."""
        if service_id is not None:
            branches = [self._slots.get(service_id, {})]
        else:
            branches = list(self._slots.values())

        found: list[Slot] = []
        for dates in branches:
            day_maps = [dates.get(day, {})] if day is not None else dates.values()
            for times in day_maps:
                if start is not None:
                    cells = [times[start]] if start in times else []
                else:
                    cells = times.values()
                found.extend(
                    s for s in cells if patient_id is None or s.patient_id == patient_id
                )
        return self._ordered(found)

    def _ordered(self, slots: list[Slot]) -> list[Slot]:
        position = self.services.position
        return sorted(slots, key=lambda s: (s.date, s.time, position(s.service_id)))

    def _iter_all(self) -> Iterator[Slot]:
        for dates in self._slots.values():
            for times in dates.values():
                yield from times.values()

    def _insert(self, slot: Slot) -> None:
        self._slots.setdefault(slot.service_id, {}).setdefault(slot.date, {})[slot.time] = slot

    def _remove(self, slot: Slot) -> None:
        self._slots.get(slot.service_id, {}).get(slot.date, {}).pop(slot.time, None)

    def _remove_all(self, slots: list[Slot]) -> list[Slot]:
        for slot in slots:
            self._remove(slot)
        if slots:
            logger.info("Cancelled %d slots", len(slots))
        return slots

    def _require(self, slot_id: str) -> Slot:
        slot = self.by_id(slot_id)
        if slot is None:
            raise NotFoundError(f"The slot with ID {slot_id} cannot be found!")
        return slot

    def _require_service(self, service_id: str) -> Service:
        service = self.services.get_by_id(service_id)
        if service is None:
            raise NotFoundError(f"The service with ID {service_id} cannot be found!")
        return service
