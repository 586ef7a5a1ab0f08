"""Tests for SoundingService, quantity figures and settings."""

from __future__ import annotations

from datetime import date

import pytest

from bunkerwatch_app.config.settings import Settings
from bunkerwatch_app.models import InterpolationType, SoundingLogEntry, SoundingQuery
from bunkerwatch_app.services.calibration_import import parse_data_package
from bunkerwatch_app.services.interpolation import CalibrationConfigError, OutOfRangeError
from bunkerwatch_app.services.quantity import build_sounding_report, compute_mass_t, percent_full
from bunkerwatch_app.services.sounding_service import InMemoryCalibrationSource, SoundingService


@pytest.fixture
def service(sample_package):
    package = parse_data_package(sample_package)
    return SoundingService(InMemoryCalibrationSource(package.sounding_tables, package.heel_tables))


class TestSoundingService:
    def test_calculate(self, service):
        res = service.calculate(SoundingQuery(7, 150.0, 0.0))
        assert res.final_volume == pytest.approx(60.0)
        assert res.main_interpolation.type is InterpolationType.ULLAGE_ONLY

    def test_compartment_without_heel_table(self, service):
        res = service.calculate(SoundingQuery(8, 25.0, 0.0, heel=1.0))
        assert res.final_volume == pytest.approx(20.0)
        assert res.has_heel_warning

    def test_unknown_compartment(self, service):
        with pytest.raises(CalibrationConfigError, match="compartment 42"):
            service.calculate(SoundingQuery(42, 10.0, 0.0))

    def test_out_of_range_propagates(self, service):
        with pytest.raises(OutOfRangeError):
            service.calculate(SoundingQuery(7, 250.0, 0.0))

    def test_zero_sound_setting(self, sounding_record):
        from bunkerwatch_app.services.calibration_import import sounding_table_from_records

        table = sounding_table_from_records(1, [sounding_record(0.0, 5.0, sound=1), sounding_record(10.0, 0.0, sound=0)])
        source = InMemoryCalibrationSource({1: table})
        query = SoundingQuery(1, 8.0, 0.0)
        # 1 -> 0 at 80 % of the bracket is 0.2, rounded to 0
        assert SoundingService(source).calculate(query).sound is None
        assert SoundingService(source, zero_sound_is_missing=False).calculate(query).sound == 0

    def test_log_entry(self, service):
        entry = service.log_entry(
            SoundingQuery(7, 150.0, 0.0), compartment_name="HFO 1P", fuel_grade="HFO", density_t_per_m3=0.9
        )
        assert entry.compartment_id == 7
        assert entry.calculated_mt == pytest.approx(54.0)
        assert entry.id is None

    def test_log_entry_keeps_text_compartment_id(self, sounding_table):
        service = SoundingService(InMemoryCalibrationSource({"HFO-1P": sounding_table}))
        entry = service.log_entry(SoundingQuery("HFO-1P", 150.0, 0.0), fuel_grade="HFO", density_t_per_m3=1.0)
        assert entry.compartment_id == "HFO-1P"
        assert entry.calculated_mt == pytest.approx(60.0)


class TestQuantity:
    def test_mass(self):
        assert compute_mass_t(100.0, 0.95) == pytest.approx(95.0)
        assert compute_mass_t(100.0, None) is None
        assert compute_mass_t(100.0, 0.0) is None

    def test_percent_full(self):
        assert percent_full(30.0, 120.0) == pytest.approx(25.0)
        assert percent_full(30.0, 0.0) is None
        assert percent_full(30.0, None) is None

    def test_report_totals(self, service):
        entries = [
            service.log_entry(SoundingQuery(7, 150.0, 0.0), fuel_grade="HFO", density_t_per_m3=0.9),
            service.log_entry(SoundingQuery(7, 100.0, 0.0), fuel_grade="HFO", density_t_per_m3=1.0),
            service.log_entry(SoundingQuery(8, 0.0, 0.0), fuel_grade="MGO", density_t_per_m3=0.85),
            service.log_entry(SoundingQuery(8, 50.0, 0.0), fuel_grade="", density_t_per_m3=0.85),
            service.log_entry(SoundingQuery(8, 50.0, 0.0), fuel_grade="MGO"),
        ]
        report = build_sounding_report("MV Test Bunker", entries, trim=0.0, report_date=date(2026, 3, 1))
        assert report.total_tanks == 5
        assert report.totals_mt_by_grade["HFO"] == pytest.approx(54.0 + 50.0)
        assert report.totals_mt_by_grade["MGO"] == pytest.approx(30.0 * 0.85)
        assert report.grand_total_mt == pytest.approx(104.0 + 25.5)

    def test_report_recomputes_mass(self):
        entry = SoundingLogEntry(compartment_id=1, fuel_grade="HFO", calculated_mt=999.0)
        report = build_sounding_report("X", [entry], trim=0.0)
        assert entry.calculated_mt is None
        assert report.grand_total_mt == 0.0
        assert report.report_date == date.today()


class TestSettings:
    def test_default_uses_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BUNKERWATCH_DATA_DIR", str(tmp_path / "data"))
        monkeypatch.setenv("BUNKERWATCH_ZERO_SOUND_IS_MISSING", "false")
        settings = Settings.default()
        assert settings.data_dir == tmp_path / "data"
        assert settings.data_dir.is_dir()
        assert settings.db_path == tmp_path / "data" / "bunkerwatch.db"
        assert settings.zero_sound_is_missing is False

    def test_zero_sound_default(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BUNKERWATCH_DATA_DIR", str(tmp_path))
        monkeypatch.delenv("BUNKERWATCH_ZERO_SOUND_IS_MISSING", raising=False)
        assert Settings.default().zero_sound_is_missing is True
