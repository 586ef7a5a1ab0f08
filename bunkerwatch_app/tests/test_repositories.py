"""Tests for the calibration and sounding log repositories."""

from __future__ import annotations

from datetime import timedelta

import pytest

from bunkerwatch_app.models import Compartment, InterpolationType, SoundingLogEntry, SoundingQuery, Vessel
from bunkerwatch_app.repositories import CalibrationRepository, SoundingLogRepository, session_scope
from bunkerwatch_app.repositories.database import init_database
from bunkerwatch_app.services.sounding_service import SoundingService


@pytest.fixture
def calibration_repo(db_session):
    repo = CalibrationRepository(db_session)
    vessel = repo.create_vessel(Vessel(name="MV Test Bunker", imo_number="9876543"))
    repo.create_compartment(Compartment(id=7, vessel_id=vessel.id, name="HFO 1P", capacity_m3=120.0))
    return repo


class TestCalibrationRepository:
    def test_vessel_and_compartments(self, calibration_repo):
        vessels = calibration_repo.list_vessels()
        assert len(vessels) == 1
        assert vessels[0].imo_number == "9876543"
        compartments = calibration_repo.list_compartments(vessels[0].id)
        assert [c.name for c in compartments] == ["HFO 1P"]
        assert calibration_repo.get_compartment(7).capacity_m3 == 120.0
        assert calibration_repo.get_compartment(99) is None

    def test_compartment_requires_vessel(self, db_session):
        with pytest.raises(ValueError):
            CalibrationRepository(db_session).create_compartment(Compartment(name="Orphan"))

    def test_save_and_load_tables(self, calibration_repo, sounding_table, heel_table):
        calibration_repo.save_tables(7, sounding_table, heel_table)

        loaded = calibration_repo.sounding_table(7)
        assert loaded.ullages == (100.0, 200.0)
        assert loaded.rows[0].values == sounding_table.rows[0].values
        assert loaded.rows[0].sound == 81
        assert loaded.rows[1].lcg == 12.0
        assert calibration_repo.heel_table(7).ullages == (50.0, 250.0)

    def test_missing_tables(self, calibration_repo):
        assert calibration_repo.sounding_table(7) is None
        assert calibration_repo.heel_table(7) is None

    def test_save_replaces_rows(self, calibration_repo, sounding_table, heel_table, sounding_record):
        from bunkerwatch_app.services.calibration_import import sounding_table_from_records

        calibration_repo.save_tables(7, sounding_table, heel_table)
        replacement = sounding_table_from_records(7, [sounding_record(10.0, 1.0), sounding_record(20.0, 2.0)])
        calibration_repo.save_tables(7, replacement)

        assert calibration_repo.sounding_table(7).ullages == (10.0, 20.0)
        assert calibration_repo.heel_table(7) is None

    def test_repository_as_calibration_source(self, calibration_repo, sounding_table, heel_table):
        calibration_repo.save_tables(7, sounding_table, heel_table)
        res = SoundingService(calibration_repo).calculate(SoundingQuery(7, 150.0, 0.0, 1.25))
        assert res.final_volume == pytest.approx(61.875)
        assert res.heel_interpolation.type is InterpolationType.BILINEAR


class TestSoundingLogRepository:
    def test_create_and_list(self, calibration_repo, db_session, sounding_table, heel_table):
        calibration_repo.save_tables(7, sounding_table, heel_table)
        service = SoundingService(calibration_repo)
        entry = service.log_entry(
            SoundingQuery(7, 150.0, 0.25, 5.0),
            compartment_name="HFO 1P",
            fuel_grade="HFO",
            density_t_per_m3=0.95,
            session_id="R1",
        )
        logs = SoundingLogRepository(db_session)
        created = logs.create(entry)
        assert created.id is not None

        (loaded,) = logs.list_for_session("R1")
        assert loaded.fuel_grade == "HFO"
        assert loaded.calculated_mt == pytest.approx(62.0 * 0.95)
        assert loaded.result == entry.result
        assert loaded.result.has_heel_warning
        assert loaded.result.main_interpolation.bounds == {"ullage": (100.0, 200.0), "trim": (0.0, 0.5)}
        assert len(logs.list_for_compartment(7)) == 1

        logs.delete(created.id)
        assert logs.list_for_session("R1") == []

    def test_recorded_at_stays_utc(self, calibration_repo, db_session, sounding_table):
        calibration_repo.save_tables(7, sounding_table)
        entry = SoundingService(calibration_repo).log_entry(SoundingQuery(7, 100.0, 0.0), session_id="R2")
        logs = SoundingLogRepository(db_session)
        logs.create(entry)

        (loaded,) = logs.list_for_session("R2")
        assert loaded.recorded_at.tzinfo is not None
        assert loaded.recorded_at.utcoffset() == timedelta(0)
        assert loaded.recorded_at == entry.recorded_at
        assert sorted([entry.recorded_at, loaded.recorded_at]) == [entry.recorded_at, loaded.recorded_at]

    def test_create_requires_result(self, db_session):
        with pytest.raises(ValueError):
            SoundingLogRepository(db_session).create(SoundingLogEntry(compartment_id=7))


class TestSessionScope:
    def test_rollback_on_error(self, temp_db):
        factory = init_database(temp_db)
        with pytest.raises(RuntimeError):
            with session_scope(factory) as db:
                CalibrationRepository(db).create_vessel(Vessel(name="Kept"))
                raise RuntimeError("boom")
        with session_scope(factory) as db:
            # create_vessel commits, so the row survives the failed unit of work
            assert [v.name for v in CalibrationRepository(db).list_vessels()] == ["Kept"]
        factory.kw["bind"].dispose()
