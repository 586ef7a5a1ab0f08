"""Pytest configuration and fixtures."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path

import pytest

# Ensure project root is on path when running tests
_project_root = Path(__file__).resolve().parents[2]
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from bunkerwatch_app.config.axes import HEEL_AXIS, TRIM_AXIS
from bunkerwatch_app.repositories.database import init_database
from bunkerwatch_app.services.calibration_import import heel_table_from_records, sounding_table_from_records


@pytest.fixture
def temp_db():
    """Create a temporary SQLite database and return its path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass


@pytest.fixture
def db_session(temp_db):
    """Provide a database session with initialized schema."""
    SessionLocal = init_database(temp_db)
    session = SessionLocal()
    try:
        yield session
    finally:
        engine = session.get_bind()
        session.close()
        engine.dispose()


@pytest.fixture
def sounding_record():
    """
    Factory for one sounding row dict. Volume is linear in trim:
    base + 8 m³ per metre of trim, so trim 0.0 -> base and trim 0.5 -> base + 4.
    """
    def _make(ullage, base, sound=None, lcg=0.0):
        record = {"ullage": ullage, "sound": sound, "lcg": lcg, "tcg": 0.0, "vcg": 1.0, "iy": 100.0}
        record.update({p.column: base + 8.0 * p.value for p in TRIM_AXIS})
        return record

    return _make


@pytest.fixture
def heel_record():
    """Factory for one heel correction row dict: correction = per_deg * heel."""
    def _make(ullage, per_deg):
        record = {"ullage": ullage}
        record.update({p.column: per_deg * p.value for p in HEEL_AXIS})
        return record

    return _make


@pytest.fixture
def sounding_table(sounding_record):
    """Compartment 7: ullage 100 -> 50 m³ / sound 81, ullage 200 -> 70 m³ / sound 60 at even keel."""
    return sounding_table_from_records(
        7,
        [
            sounding_record(100.0, 50.0, sound=81, lcg=10.0),
            sounding_record(200.0, 70.0, sound=60, lcg=12.0),
        ],
    )


@pytest.fixture
def heel_table(heel_record):
    """Heel table for compartment 7 on its own ullage set (50 and 250 cm)."""
    return heel_table_from_records(7, [heel_record(50.0, 2.0), heel_record(250.0, 1.0)])


@pytest.fixture
def sample_package(sounding_record, heel_record):
    """Offline data package for one vessel with two compartments (only 7 has heel data)."""
    return {
        "vessel_id": 3,
        "vessel_name": "MV Test Bunker",
        "imo_number": "9876543",
        "package_version": 2,
        "compartments": [
            {"compartment_id": 7, "vessel_id": 3, "compartment_name": "HFO 1P", "capacity": 120.0},
            {"compartment_id": 8, "vessel_id": 3, "compartment_name": "MGO 2S", "capacity": "80,5"},
        ],
        "calibration_data": {
            "7": {
                "main_sounding": [
                    sounding_record(200.0, 70.0, sound=60, lcg=12.0),
                    sounding_record(100.0, 50.0, sound=81, lcg=10.0),
                ],
                "heel_correction": [heel_record(50.0, 2.0), heel_record(250.0, 1.0)],
            },
            "8": {
                "main_sounding": [
                    sounding_record(0.0, 30.0, sound=120),
                    sounding_record(50.0, 10.0, sound=70),
                ],
                "heel_correction": [],
            },
        },
    }
