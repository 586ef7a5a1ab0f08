"""Tests for data package parsing and CSV/Excel calibration import."""

from __future__ import annotations

import pandas as pd
import pytest

from bunkerwatch_app.config.axes import HEEL_LEVELS_DEG, TRIM_COLUMNS, TRIM_LEVELS_M
from bunkerwatch_app.services.calibration_import import (
    heel_table_from_records,
    parse_data_package,
    read_calibration_file,
    sounding_table_from_records,
    table_row_counts,
)
from bunkerwatch_app.services.interpolation import CalibrationConfigError


class TestRecords:
    def test_rows_sorted_by_ullage(self, sounding_record):
        table = sounding_table_from_records(
            1, [sounding_record(300.0, 10.0), sounding_record(100.0, 30.0), sounding_record(200.0, 20.0)]
        )
        assert table.ullages == (100.0, 200.0, 300.0)

    def test_textual_values(self, sounding_record):
        record = sounding_record("150", 0.0, sound="70.5", lcg="1,25")
        record["trim_0_0"] = "45,5"
        table = sounding_table_from_records(1, [record])
        row = table.rows[0]
        assert row.ullage == 150.0
        assert row.values["trim_0_0"] == 45.5
        assert row.sound == 71
        assert row.lcg == 1.25

    def test_rows_without_ullage_skipped(self, sounding_record):
        table = sounding_table_from_records(1, [sounding_record(None, 10.0), sounding_record(100.0, 20.0)])
        assert table.ullages == (100.0,)

    def test_missing_hydrostatics_default_to_zero(self, sounding_record):
        record = sounding_record(100.0, 20.0)
        for key in ("lcg", "tcg", "vcg", "iy"):
            record.pop(key)
        row = sounding_table_from_records(1, [record]).rows[0]
        assert (row.lcg, row.tcg, row.vcg, row.iy) == (0.0, 0.0, 0.0, 0.0)
        assert row.sound is None

    def test_duplicate_ullage(self, sounding_record):
        with pytest.raises(CalibrationConfigError, match="duplicate ullage 100"):
            sounding_table_from_records(1, [sounding_record(100.0, 10.0), sounding_record(100.0, 11.0)])

    def test_missing_trim_value(self, sounding_record):
        record = sounding_record(100.0, 10.0)
        record["trim_plus_4_0"] = None
        with pytest.raises(CalibrationConfigError, match="trim_plus_4_0"):
            sounding_table_from_records(1, [record])

    def test_non_numeric_value(self, sounding_record):
        with pytest.raises(CalibrationConfigError):
            sounding_table_from_records(1, [sounding_record("abc", 10.0)])

    def test_empty_heel_table_is_none(self):
        assert heel_table_from_records(1, []) is None


class TestDataPackage:
    def test_parse(self, sample_package):
        package = parse_data_package(sample_package)
        assert package.vessel.id == 3
        assert package.vessel.name == "MV Test Bunker"
        assert package.package_version == 2
        assert [c.id for c in package.compartments] == [7, 8]
        assert package.compartments[1].capacity_m3 == 80.5
        assert set(package.sounding_tables) == {7, 8}
        assert package.sounding_tables[7].ullages == (100.0, 200.0)
        assert set(package.heel_tables) == {7}
        assert table_row_counts(package) == (4, 2)

    def test_empty_package(self):
        package = parse_data_package({"vessel_name": "Empty"})
        assert package.vessel.id is None
        assert package.compartments == []
        assert package.sounding_tables == {}


class TestReadCalibrationFile:
    def test_csv_canonical_headers(self, tmp_path, sounding_record):
        df = pd.DataFrame([sounding_record(200.0, 70.0, sound=60), sounding_record(100.0, 50.0, sound=81)])
        path = tmp_path / "tank7.csv"
        df.to_csv(path, index=False)

        table = read_calibration_file(path, 7)
        assert table.compartment_id == 7
        assert table.ullages == (100.0, 200.0)
        assert table.rows[0].values["trim_plus_0_5"] == pytest.approx(54.0)
        assert table.rows[0].sound == 81

    def test_excel_header_aliases(self, tmp_path):
        rows = []
        for ullage, base in ((100.0, 50.0), (200.0, 70.0)):
            row = {"Ullage (cm)": ullage, "Sound (cm)": 10.0, "LCG (m)": 5.0, "KG": 2.0}
            row.update({f"Trim {v:g}": base + v for v in TRIM_LEVELS_M})
            rows.append(row)
        path = tmp_path / "tank7.xlsx"
        pd.DataFrame(rows).to_excel(path, index=False, engine="openpyxl")

        table = read_calibration_file(path, 7)
        row = table.rows[1]
        assert row.values["trim_minus_1_5"] == pytest.approx(68.5)
        assert row.values["trim_0_0"] == pytest.approx(70.0)
        assert row.lcg == 5.0
        assert row.vcg == 2.0
        assert set(row.values) == set(TRIM_COLUMNS)

    def test_heel_file(self, tmp_path):
        rows = []
        for ullage in (50.0, 250.0):
            row = {"ullage": ullage}
            row.update({f"Heel {v:g}": v * 2.0 for v in HEEL_LEVELS_DEG})
            rows.append(row)
        path = tmp_path / "tank7_heel.xlsx"
        pd.DataFrame(rows).to_excel(path, index=False, engine="openpyxl")

        table = read_calibration_file(path, 7, kind="heel")
        assert table.ullages == (50.0, 250.0)
        assert table.rows[0].values["heel_plus_1_5"] == pytest.approx(3.0)

    def test_missing_columns(self, tmp_path):
        path = tmp_path / "bad.csv"
        pd.DataFrame([{"ullage": 1.0, "trim_0_0": 2.0}]).to_csv(path, index=False)
        with pytest.raises(CalibrationConfigError, match="Missing columns"):
            read_calibration_file(path, 7)

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "table.txt"
        path.write_text("ullage\n1\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Unsupported format"):
            read_calibration_file(path, 7)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_calibration_file(tmp_path / "nope.csv", 7)
