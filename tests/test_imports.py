"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

from tests.conftest import TOMORROW


class TestPackageImports:
    def test_top_level_reexports(self):
        from clinic_booking import (
            BookingRejected, Clinic, ClinicError, Patient, Residency, Service, Slot,
        )
        assert issubclass(BookingRejected, ClinicError)
        assert Residency.VISITOR == "visitor"
        assert callable(Clinic)
        assert Patient and Service and Slot

    def test_import_stores(self):
        from clinic_booking.stores import PatientStore, ServiceStore, SlotStore
        patients, services = PatientStore(), ServiceStore()
        slots = SlotStore(patients, services)
        assert patients.slots is slots
        assert services.slots is slots

    def test_import_schemas(self):
        from clinic_booking.schemas.records import Snapshot
        assert Snapshot().is_empty()

    def test_import_persistence(self):
        from clinic_booking.persistence import DataType
        assert [d.file_name for d in DataType] == [
            "patients.json", "services.json", "slots.json",
        ]

    def test_errors_are_builtin_compatible(self):
        from clinic_booking.errors import InvalidSlotTimeError, NotFoundError
        assert issubclass(InvalidSlotTimeError, ValueError)
        assert issubclass(NotFoundError, LookupError)


class TestConfigImport:
    def test_import_config(self):
        from clinic_booking.config import settings
        assert settings.clinic.name
        assert settings.clinic.grid_length >= 1
        assert settings.storage.data_dir


class TestEntryPoint:
    def test_seed_example_data(self, clinic):
        from main import EXAMPLE_SERVICES, seed_example_data
        seed_example_data(clinic, TOMORROW)
        assert len(clinic.services) == len(EXAMPLE_SERVICES)
        operation = clinic.services.get_by_title("Operation")[0]
        assert clinic.slots.count_on(TOMORROW, operation.id) == 3

    def test_print_availability(self, clinic, service, capsys):
        from main import print_availability
        assert print_availability(clinic, TOMORROW, "gen") == 0
        out = capsys.readouterr().out
        assert "Generic (0/2 booked): 07:00, 07:30" in out

    def test_failed_load_does_not_overwrite_files(self, tmp_path, capsys):
        import main
        data_dir = tmp_path / "data"
        assert main.main(["--data-dir", str(data_dir), "--seed"]) == 0
        patients_file = data_dir / "patients.json"
        saved = patients_file.read_text(encoding="utf-8")

        (data_dir / "services.json").unlink()
        assert main.main(["--data-dir", str(data_dir)]) == 0
        assert patients_file.read_text(encoding="utf-8") == saved
        assert not (data_dir / "services.json").exists()
        assert "missing: services.json" in capsys.readouterr().err

    def test_print_availability_unknown_service(self, clinic, service, capsys):
        from main import print_availability
        assert print_availability(clinic, TOMORROW, "dental") == 1
        assert "No service matches" in capsys.readouterr().out
