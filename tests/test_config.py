"""Tests for configuration loading and validation."""

from datetime import time

import pytest

from clinic_booking.config import (
    AppConfig,
    ClinicConfig,
    StorageConfig,
    _safe_int,
    _safe_time,
    _validate_config,
)


def _config(**clinic_overrides) -> AppConfig:
    return AppConfig(clinic=ClinicConfig(**clinic_overrides))


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_default_grid(self):
        clinic = ClinicConfig()
        assert clinic.opening_time == time(7, 0)
        assert clinic.closing_time == time(20, 30)
        assert clinic.grid_length == 28

    def test_opening_after_closing(self):
        with pytest.raises(ValueError, match="CLINIC_OPENING_TIME"):
            _validate_config(_config(opening_time=time(21, 0)))

    def test_zero_slot_duration(self):
        with pytest.raises(ValueError, match="SLOT_DURATION_MINUTES"):
            _validate_config(_config(slot_duration_minutes=0))

    def test_duration_must_divide_opening_hours(self):
        with pytest.raises(ValueError, match="evenly divide"):
            _validate_config(_config(slot_duration_minutes=40))

    def test_daily_cap_above_grid(self):
        with pytest.raises(ValueError, match="MAX_SLOTS_PER_DAY"):
            _validate_config(_config(max_slots_per_day=29))

    def test_daily_cap_zero(self):
        with pytest.raises(ValueError, match="MAX_SLOTS_PER_DAY"):
            _validate_config(_config(max_slots_per_day=0))

    def test_hourly_grid(self):
        config = _config(
            opening_time=time(8, 0),
            closing_time=time(17, 0),
            slot_duration_minutes=60,
            max_slots_per_day=10,
        )
        _validate_config(config)
        assert config.clinic.grid_length == 10

    def test_empty_data_dir(self):
        config = AppConfig(storage=StorageConfig(data_dir="  "))
        with pytest.raises(ValueError, match="CLINIC_DATA_DIR"):
            _validate_config(config)


class TestEnvParsing:
    def test_safe_int_reads_env(self, monkeypatch):
        monkeypatch.setenv("SLOT_DURATION_MINUTES", "15")
        assert _safe_int("SLOT_DURATION_MINUTES", "30") == 15

    def test_safe_int_default(self, monkeypatch):
        monkeypatch.delenv("SLOT_DURATION_MINUTES", raising=False)
        assert _safe_int("SLOT_DURATION_MINUTES", "30") == 30

    def test_safe_int_bad_value(self, monkeypatch):
        monkeypatch.setenv("MAX_SLOTS_PER_DAY", "many")
        with pytest.raises(ValueError, match="MAX_SLOTS_PER_DAY"):
            _safe_int("MAX_SLOTS_PER_DAY", "28")

    def test_safe_time_reads_env(self, monkeypatch):
        monkeypatch.setenv("CLINIC_OPENING_TIME", " 08:30 ")
        assert _safe_time("CLINIC_OPENING_TIME", "07:00") == time(8, 30)

    def test_safe_time_bad_value(self, monkeypatch):
        monkeypatch.setenv("CLINIC_CLOSING_TIME", "8pm")
        with pytest.raises(ValueError, match="CLINIC_CLOSING_TIME"):
            _safe_time("CLINIC_CLOSING_TIME", "20:30")
