"""Tests for saving and loading the three collections."""

import json

import pytest

from clinic_booking.clinic import Clinic
from clinic_booking.errors import PersistenceError
from clinic_booking.persistence import DataType, load_snapshot, save_snapshot
from clinic_booking.schemas.records import Snapshot
from tests.conftest import NINE, TOMORROW, YESTERDAY, fixed_clock


@pytest.fixture
def booked(clinic, patients, service, second_service):
    """A clinic holding two bookings, saved to its data directory."""
    clinic.slots.book_at(TOMORROW, NINE, service.id, "11111111111")
    clinic.slots.book_at(TOMORROW, "10:00", second_service.id, "444444444444")
    assert clinic.save()
    return clinic


def _reload(clinic, diagnostics=None) -> Clinic:
    fresh = Clinic(
        clock=fixed_clock,
        data_dir=clinic.data_dir,
        on_diagnostic=None if diagnostics is None else diagnostics.append,
    )
    fresh.load()
    return fresh


def _rewrite(clinic, data_type: DataType, payload) -> None:
    path = clinic.data_dir / data_type.file_name
    path.write_text(json.dumps(payload), encoding="utf-8")


def _read(clinic, data_type: DataType) -> list:
    path = clinic.data_dir / data_type.file_name
    return json.loads(path.read_text(encoding="utf-8"))


class TestRoundTrip:
    def test_save_writes_three_files(self, booked):
        for data_type in DataType:
            assert (booked.data_dir / data_type.file_name).exists()

    def test_reload_restores_everything(self, booked):
        fresh = _reload(booked)
        assert fresh.snapshot() == booked.snapshot()

    def test_reload_keeps_service_order_and_ids(self, booked):
        fresh = _reload(booked)
        assert fresh.services.get_all_ids() == booked.services.get_all_ids()
        slot = booked.slots.all()[0]
        assert fresh.slots.by_id(slot.id) == slot

    def test_reloaded_bookings_still_enforce_rules(self, booked, service):
        fresh = _reload(booked)
        assert fresh.slots.check_booking(
            fresh.slots.available_on(TOMORROW, service.id)[0], "11111111111"
        ) == ""
        assert fresh.slots.by_date_time_service(TOMORROW, NINE, service.id).booked

    def test_slot_file_format(self, booked):
        records = _read(booked, DataType.SLOTS)
        assert {r["time"] for r in records} == {"09:00:00", "10:00:00"}
        assert all(r["date"] == "2026-03-17" for r in records)

    def test_past_bookings_survive_reload(self, booked, service):
        records = _read(booked, DataType.SLOTS)
        records[0]["date"] = YESTERDAY.isoformat()
        _rewrite(booked, DataType.SLOTS, records)
        fresh = _reload(booked)
        assert len(fresh.slots.by_date(YESTERDAY)) == 1

    def test_fresh_directory_loads_empty(self, clinic):
        assert clinic.load() is True
        assert len(clinic.patients) == 0
        assert load_snapshot(clinic.data_dir).is_empty()


class TestLoadFailures:
    def _assert_reset(self, booked):
        diagnostics = []
        fresh = _reload(booked, diagnostics)
        assert len(fresh.patients) == 0
        assert len(fresh.services) == 0
        assert len(fresh.slots) == 0
        assert len(diagnostics) == 1
        return diagnostics[0]

    def test_malformed_json(self, booked):
        (booked.data_dir / DataType.PATIENTS.file_name).write_text("{not json", encoding="utf-8")
        assert "unable to load" in self._assert_reset(booked)

    def test_missing_file(self, booked):
        (booked.data_dir / DataType.SERVICES.file_name).unlink()
        assert "services.json" in self._assert_reset(booked)

    def test_wrong_shape(self, booked):
        _rewrite(booked, DataType.SERVICES, [{"id": "SV-1", "title": "No cap"}])
        assert "corrupted" in self._assert_reset(booked)

    def test_invalid_patient_record(self, booked):
        records = _read(booked, DataType.PATIENTS)
        records[0]["name"] = "R2D2"
        _rewrite(booked, DataType.PATIENTS, records)
        assert "invalid record" in self._assert_reset(booked)

    def test_dangling_patient_reference(self, booked):
        records = _read(booked, DataType.SLOTS)
        records[0]["patient_id"] = "99999999999"
        _rewrite(booked, DataType.SLOTS, records)
        assert "unknown patient" in self._assert_reset(booked)

    def test_duplicate_booking_cell(self, booked):
        records = _read(booked, DataType.SLOTS)
        clone = dict(records[0], id="SL-CLONE")
        _rewrite(booked, DataType.SLOTS, records + [clone])
        self._assert_reset(booked)

    def test_exceeding_daily_cap(self, booked, service):
        records = _read(booked, DataType.SLOTS)
        extra = [
            {"id": f"SL-X{i}", "date": "2026-03-18", "time": f"{9 + i:02d}:00",
             "service_id": service.id, "patient_id": "33333333333"}
            for i in range(3)
        ]
        _rewrite(booked, DataType.SLOTS, records + extra)
        assert "daily cap" in self._assert_reset(booked)

    def test_undecodable_bytes(self, booked):
        (booked.data_dir / DataType.PATIENTS.file_name).write_bytes(b"[\xff\xfe]")
        assert "unable to load" in self._assert_reset(booked)

    @pytest.mark.parametrize("bad_time", ["23:17:00", "09:15:00", "06:30:00", "21:00:00"])
    def test_slot_time_off_grid_or_out_of_hours(self, booked, bad_time):
        records = _read(booked, DataType.SLOTS)
        records[0]["time"] = bad_time
        _rewrite(booked, DataType.SLOTS, records)
        assert "invalid time" in self._assert_reset(booked)

    def test_load_replaces_in_memory_state(self, booked):
        _rewrite(booked, DataType.PATIENTS, "oops")
        assert booked.load() is False
        assert len(booked.patients) == 0


class TestSaveFailures:
    def test_unwritable_directory_returns_false(self, tmp_path, patients, clinic):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        diagnostics = []
        clinic.data_dir = blocker / "data"
        clinic.on_diagnostic = diagnostics.append
        assert clinic.save() is False
        assert len(diagnostics) == 1

    def test_save_snapshot_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(PersistenceError):
            save_snapshot(blocker, Snapshot())

    def test_no_temp_files_left(self, booked):
        assert not list(booked.data_dir.glob("*.tmp"))
