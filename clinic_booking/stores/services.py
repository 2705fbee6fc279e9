"""
Service store: services keyed by their generated id.

Insertion order is kept; it is the order in which availability is listed.
Deleting or rekeying a service cascades into the bound slot store.
"""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from clinic_booking.errors import (
    DuplicateKeyError,
    InvalidServiceMaxSlotsError,
    NotFoundError,
    ValidationError,
)
from clinic_booking.models.service import Service

if TYPE_CHECKING:
    from clinic_booking.stores.slots import SlotStore

logger = logging.getLogger(__name__)


class ServiceStore:
    """Keyed collection of services in insertion order."""

    def __init__(self) -> None:
        self._services: dict[str, Service] = {}
        self.slots: Optional["SlotStore"] = None

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._services

    # --- Queries ---

    def get_by_id(self, service_id: Optional[str]) -> Optional[Service]:
        if service_id is None:
            return None
        return self._services.get(service_id)

    def get_by_title(self, title: Optional[str]) -> list[Service]:
        """Case-insensitive substring search over titles."""
        if not title or not title.strip():
            return []
        needle = title.strip().lower()
        return [s for s in self._services.values() if needle in s.title.lower()]

    def get_all_ids(self) -> list[str]:
        return list(self._services)

    def get_all(self) -> list[Service]:
        return list(self._services.values())

    def get_all_sorted(self) -> list[Service]:
        """Services in display order: title, then price."""
        return sorted(self._services.values(), key=lambda s: s.sort_key)

    def position(self, service_id: str) -> int:
        """Insertion rank of a service; unknown ids sort last."""
        for index, sid in enumerate(self._services):
            if sid == service_id:
                return index
        return len(self._services)

    # --- Adders ---

    def add(self, service: Service) -> Service:
        if service.id in self._services:
            raise DuplicateKeyError(f"A service with ID {service.id} already exists!")
        self._services[service.id] = service
        logger.debug("Service added: %s (%s)", service.id, service.title)
        return service

    def bulk_add(self, services: Iterable[Service]) -> list[Service]:
        """Add several services, all or nothing."""
        batch = list(services)
        seen: set[str] = set()
        for service in batch:
            if service.id in self._services or service.id in seen:
                raise DuplicateKeyError(f"The service with ID {service.id} is already in the list!")
            seen.add(service.id)
        for service in batch:
            self._services[service.id] = service
        logger.debug("Added %d services", len(batch))
        return batch

    # --- Updaters ---

    def replace(self, service_id: str, service: Service) -> Service:
        """Overwrite title, cap and price under ``service_id``; the key is kept."""
        current = self._require(service_id)
        self._check_cap_fits_bookings(service_id, service.max_slots_per_day)
        current.title = service.title
        current.max_slots_per_day = service.max_slots_per_day
        current.price_per_slot = service.price_per_slot
        return current

    def rekey(self, old_id: str, new_id: str) -> Service:
        """Move a service to a new id and re-point its bookings."""
        service = self._require(old_id)
        if new_id == old_id:
            return service
        if not new_id or not new_id.strip():
            raise ValidationError("Service ID cannot be empty!")
        if new_id in self._services:
            raise DuplicateKeyError(f"A service with ID {new_id} already exists!")

        # Rebuild to keep the service at its original position.
        self._services = {
            (new_id if sid == old_id else sid): value for sid, value in self._services.items()
        }
        service.id = new_id
        if self.slots is not None:
            self.slots.reassign_service(old_id, new_id)
        logger.info("Service rekeyed: %s -> %s", old_id, new_id)
        return service

    def update_title(self, service_id: str, title: str) -> Service:
        service = self._require(service_id)
        Service.validate_title(title, raise_error=True)
        service.title = title
        return service

    def update_max_slots(self, service_id: str, max_slots: int) -> Service:
        """Change the daily cap; it may not drop below an existing day's bookings."""
        service = self._require(service_id)
        Service.validate_max_slots(max_slots, raise_error=True)
        self._check_cap_fits_bookings(service_id, max_slots)
        service.max_slots_per_day = max_slots
        return service

    def update_price(self, service_id: str, price: float) -> Service:
        service = self._require(service_id)
        Service.validate_price(price, raise_error=True)
        service.price_per_slot = price
        return service

    # --- Deleters ---

    def delete(self, service_id: str) -> Service:
        """Remove a service and cancel all of its bookings."""
        service = self._require(service_id)
        del self._services[service_id]
        if self.slots is not None:
            self.slots.cancel_by_service(service_id)
        logger.info("Service deleted: %s (%s)", service_id, service.title)
        return service

    def clear(self) -> None:
        self._services.clear()

    def _require(self, service_id: str) -> Service:
        service = self.get_by_id(service_id)
        if service is None:
            raise NotFoundError(f"The service with ID {service_id} cannot be found!")
        return service

    def _check_cap_fits_bookings(self, service_id: str, max_slots: int) -> None:
        if self.slots is None:
            return
        busiest = self.slots.max_daily_count(service_id)
        if max_slots < busiest:
            raise InvalidServiceMaxSlotsError(
                f"Maximum number of slots cannot be below the {busiest} bookings "
                "already made on a single day!"
            )
