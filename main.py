"""
Clinic booking entry point.

Loads saved data, optionally seeds an example catalogue, prints the free
slots for a date and saves on exit. Nothing is saved when the stored data
could not be loaded, so a damaged directory is never overwritten.

Usage:
    python main.py --seed
    python main.py --date 2026-03-17 --service Generic
    python main.py --data-dir /tmp/clinic --verbose
"""

import argparse
import logging
import sys
from datetime import date, timedelta
from typing import Optional

from clinic_booking import Clinic, ClinicError, Patient, Residency, Service
from clinic_booking.config import settings
from clinic_booking.utils import parse_date

logger = logging.getLogger(__name__)

EXAMPLE_SERVICES = [
    ("Procedure", 15, 50),
    ("Generic", 20, 100),
    ("Specialized", 10, 150),
    ("Operation", 5, 1000),
]

EXAMPLE_PATIENTS = [
    ("68475684579", "Muhammad Putra", Residency.RESIDENT),
    ("12345678901", "Ahmad Chowdhury", Residency.RESIDENT),
    ("987654321098", "Grafael Karilwurara", Residency.VISITOR),
]


def seed_example_data(clinic: Clinic, day: date) -> None:
    """Add the example catalogue and a few bookings on ``day``."""
    services = clinic.services.bulk_add(Service(*row) for row in EXAMPLE_SERVICES)
    patients = clinic.patients.bulk_add(Patient(*row) for row in EXAMPLE_PATIENTS)

    operation = services[-1]
    free = clinic.slots.available_on(day, operation.id)
    for slot, patient in zip(free, patients):
        try:
            clinic.slots.book(slot, patient.id)
        except ClinicError as e:
            logger.warning("Could not book example slot: %s", e)
    logger.info("Seeded %d services and %d patients", len(services), len(patients))


def print_availability(clinic: Clinic, day: date, service_title: Optional[str]) -> int:
    if service_title:
        matches = clinic.services.get_by_title(service_title)
        if not matches:
            print(f"No service matches '{service_title}'.")
            return 1
        service_ids = [s.id for s in matches]
    else:
        service_ids = clinic.services.get_all_ids()

    print(f"{settings.clinic.name} - availability on {day.isoformat()}")
    for sid in service_ids:
        service = clinic.services.get_by_id(sid)
        free = clinic.slots.available_on(day, sid)
        booked = clinic.slots.count_on(day, sid)
        times = ", ".join(s.time.strftime("%H:%M") for s in free) or "none"
        print(f"  {service.title} ({booked}/{service.max_slots_per_day} booked): {times}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Clinic booking engine.")
    parser.add_argument(
        "--data-dir",
        type=str,
        default=settings.storage.data_dir,
        help="Directory holding patients.json, services.json and slots.json.",
    )
    parser.add_argument(
        "--date",
        type=str,
        default=None,
        help="Date to list availability for, YYYY-MM-DD (default: tomorrow).",
    )
    parser.add_argument(
        "--service",
        type=str,
        default=None,
        help="Only list services whose title contains this text.",
    )
    parser.add_argument(
        "--seed",
        action="store_true",
        help="Add the example catalogue when no data has been saved yet.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging output.",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    day = parse_date(args.date) if args.date else date.today() + timedelta(days=1)

    clinic = Clinic(data_dir=args.data_dir, on_diagnostic=lambda msg: print(msg, file=sys.stderr))
    loaded = clinic.load()
    if not loaded:
        # Leave the unreadable files in place for the user to repair.
        logger.warning("Saved data in %s was not loaded; changes will not be saved", args.data_dir)
    elif args.seed and not len(clinic.services):
        seed_example_data(clinic, day)

    try:
        return print_availability(clinic, day, args.service)
    finally:
        if loaded:
            clinic.save()


if __name__ == "__main__":
    sys.exit(main())
