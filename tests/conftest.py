"""Shared test fixtures and helpers."""

from datetime import date, datetime, time

import pytest

from clinic_booking.clinic import Clinic
from clinic_booking.models import Patient, Residency, Service

# Monday morning; every scenario runs against this fixed clock.
NOW = datetime(2026, 3, 16, 8, 15)
TODAY = NOW.date()
TOMORROW = date(2026, 3, 17)
YESTERDAY = date(2026, 3, 15)
NINE = time(9, 0)


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def clinic(tmp_path):
    return Clinic(clock=fixed_clock, data_dir=tmp_path / "data")


@pytest.fixture
def patients(clinic):
    return clinic.patients.bulk_add([
        make_patient("11111111111", "Alice Hamad"),
        make_patient("33333333333", "Bilal Nasser"),
        make_patient("444444444444", "Chloe Martin", Residency.VISITOR),
    ])


@pytest.fixture
def service(clinic):
    return clinic.services.add(Service("Generic", 2, 100))


@pytest.fixture
def second_service(clinic):
    return clinic.services.add(Service("Specialized", 10, 150))


def make_patient(
    patient_id: str = "11111111111",
    name: str = "Alice Hamad",
    residency: Residency = Residency.RESIDENT,
) -> Patient:
    """Helper to create a Patient with sensible defaults."""
    return Patient(id=patient_id, name=name, residency=residency)
