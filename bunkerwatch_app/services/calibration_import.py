"""
Build calibration tables from data packages and tabular files (CSV / Excel).

This is the boundary where textual values become numbers: the evaluation code
only ever receives validated, sorted, deduplicated tables.

Data package layout (offline vessel package):
    {"vessel_id", "vessel_name", "imo_number", "package_version",
     "compartments": [{"compartment_id", "vessel_id", "compartment_name", "capacity"}],
     "calibration_data": {"<compartment_id>": {"main_sounding": [...], "heel_correction": [...]}}}

Tabular files hold one table per file; header names are flexible
(e.g. "Ullage (cm)", "Trim 0.5", "VTr=-1.5", "Heel -2", "HC.1.5").
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

import numpy as np
import pandas as pd

from bunkerwatch_app.config.axes import AUXILIARY_COLUMNS, HEEL_AXIS, HEEL_COLUMNS, TRIM_AXIS, TRIM_COLUMNS
from bunkerwatch_app.models import (
    CalibrationTable,
    Compartment,
    HeelCorrectionRow,
    HeelCorrectionTable,
    SoundingRow,
    Vessel,
)
from bunkerwatch_app.services.interpolation import CalibrationConfigError, round_half_up

logger = logging.getLogger(__name__)

_ULLAGE_ALIASES = ("ullage", "ullage (cm)", "ullage(cm)", "ullage cm", "ullage_cm", "ull", "ull (cm)")
_SOUND_ALIASES = ("sound", "sound (cm)", "sound(cm)", "sounding", "sounding (cm)", "snd")
_AUX_ALIASES = {
    "lcg": ("lcg", "lcg (m)", "lcg(m)", "lcg m"),
    "tcg": ("tcg", "tcg (m)", "tcg(m)", "tcg m"),
    "vcg": ("vcg", "vcg (m)", "vcg(m)", "vcg m", "kg", "kg (m)"),
    "iy": ("iy", "i_y", "iy (m4)", "iy(m4)", "iy m4", "fsm iy"),
}
_TRIM_HEADER = re.compile(r"^(?:trim|vtr|tr)\s*[=:.]?\s*([+-]?\d+(?:\.\d+)?)\s*m?$")
_HEEL_HEADER = re.compile(r"^(?:heel|hc|hl)\s*[=:.]?\s*([+-]?\d+(?:\.\d+)?)\s*(?:deg|°)?$")

_TRIM_BY_VALUE = {p.value: p.column for p in TRIM_AXIS}
_HEEL_BY_VALUE = {p.value: p.column for p in HEEL_AXIS}


@dataclass(slots=True)
class DataPackage:
    """A vessel's calibration dataset, parsed and validated."""
    vessel: Vessel
    compartments: List[Compartment] = field(default_factory=list)
    sounding_tables: Dict[int, CalibrationTable] = field(default_factory=dict)
    heel_tables: Dict[int, HeelCorrectionTable] = field(default_factory=dict)
    package_version: int | None = None


def _to_float(val: Any) -> float | None:
    """Convert value to float; None for NaN, None, empty string. Accepts decimal commas."""
    if val is None:
        return None
    if isinstance(val, str):
        s = val.strip().replace(",", ".")
        if not s:
            return None
        try:
            val = float(s)
        except ValueError:
            raise CalibrationConfigError(f"Value {val!r} is not numeric") from None
    try:
        number = float(val)
    except (TypeError, ValueError):
        raise CalibrationConfigError(f"Value {val!r} is not numeric") from None
    if math.isnan(number):
        return None
    if math.isinf(number):
        raise CalibrationConfigError(f"Value {val!r} is not finite")
    return number


def _required(record: Mapping[str, Any], column: str, ullage: float, table_name: str) -> float:
    value = _to_float(record.get(column))
    if value is None:
        raise CalibrationConfigError(
            f"{table_name.capitalize()} row at ullage {ullage} is missing a value for {column}"
        )
    return value


def _record_ullage(record: Mapping[str, Any], table_name: str) -> float | None:
    ullage = _to_float(record.get("ullage"))
    if ullage is None:
        logger.warning("Skipping %s row without ullage: %s", table_name, dict(record))
    return ullage


def _check_unique(rows: List, compartment_id: int | str, table_name: str) -> None:
    ullages = np.array([r.ullage for r in rows], dtype=float)
    duplicated = ullages[1:][np.diff(ullages) <= 0]
    if duplicated.size:
        raise CalibrationConfigError(
            f"Compartment {compartment_id} {table_name} table has duplicate ullage {duplicated[0]:g}"
        )


def sounding_table_from_records(
    compartment_id: int | str,
    records: Iterable[Mapping[str, Any]],
) -> CalibrationTable:
    """
    Build a sounding table from row dicts holding `ullage`, every trim column,
    and optional `sound`, `lcg`, `tcg`, `vcg`, `iy` (missing hydrostatics read as 0).
    """
    rows: List[SoundingRow] = []
    for record in records:
        ullage = _record_ullage(record, "sounding")
        if ullage is None:
            continue
        values = {c: _required(record, c, ullage, "sounding") for c in TRIM_COLUMNS}
        sound = _to_float(record.get("sound"))
        aux = {c: _to_float(record.get(c)) or 0.0 for c in AUXILIARY_COLUMNS}
        rows.append(
            SoundingRow(
                ullage=ullage,
                values=values,
                sound=None if sound is None else round_half_up(sound),
                **aux,
            )
        )
    rows.sort(key=lambda r: r.ullage)
    _check_unique(rows, compartment_id, "sounding")
    return CalibrationTable(compartment_id=compartment_id, rows=rows)


def heel_table_from_records(
    compartment_id: int | str,
    records: Iterable[Mapping[str, Any]],
) -> HeelCorrectionTable | None:
    """Build a heel correction table; None when there are no rows (compartment has no heel data)."""
    rows: List[HeelCorrectionRow] = []
    for record in records:
        ullage = _record_ullage(record, "heel correction")
        if ullage is None:
            continue
        values = {c: _required(record, c, ullage, "heel correction") for c in HEEL_COLUMNS}
        rows.append(HeelCorrectionRow(ullage=ullage, values=values))
    if not rows:
        return None
    rows.sort(key=lambda r: r.ullage)
    _check_unique(rows, compartment_id, "heel correction")
    return HeelCorrectionTable(compartment_id=compartment_id, rows=rows)


def parse_data_package(package: Mapping[str, Any]) -> DataPackage:
    """Parse an offline vessel data package into domain objects and immutable tables."""
    vessel_id = package.get("vessel_id")
    vessel = Vessel(
        id=int(vessel_id) if vessel_id is not None else None,
        name=str(package.get("vessel_name") or ""),
        imo_number=str(package.get("imo_number") or ""),
    )
    compartments = [
        Compartment(
            id=int(c["compartment_id"]),
            vessel_id=int(c["vessel_id"]) if c.get("vessel_id") is not None else vessel.id,
            name=str(c.get("compartment_name") or ""),
            capacity_m3=_to_float(c.get("capacity")) or 0.0,
        )
        for c in package.get("compartments") or []
    ]

    result = DataPackage(vessel=vessel, compartments=compartments, package_version=package.get("package_version"))
    for key, data in (package.get("calibration_data") or {}).items():
        compartment_id = int(key)
        result.sounding_tables[compartment_id] = sounding_table_from_records(
            compartment_id, data.get("main_sounding") or []
        )
        heel = heel_table_from_records(compartment_id, data.get("heel_correction") or [])
        if heel is not None:
            result.heel_tables[compartment_id] = heel

    logger.info(
        "Parsed data package for %s: %d compartments, %d sounding tables, %d heel tables",
        vessel.name, len(compartments), len(result.sounding_tables), len(result.heel_tables),
    )
    return result


def _normalize_key(raw: Any) -> str:
    key = str(raw).lower().replace("\n", " ").replace("\r", " ").replace("\t", " ")
    return re.sub(r"\s+", " ", key).strip()


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename columns to canonical names (ullage, sound, lcg, ..., trim_*/heel_* columns)."""
    canonical = set(TRIM_COLUMNS) | set(HEEL_COLUMNS) | set(AUXILIARY_COLUMNS)
    rename = {}
    for c in df.columns:
        key = _normalize_key(c)
        if key in canonical:
            rename[c] = key
        elif key in _ULLAGE_ALIASES:
            rename[c] = "ullage"
        elif key in _SOUND_ALIASES:
            rename[c] = "sound"
        else:
            for name, aliases in _AUX_ALIASES.items():
                if key in aliases:
                    rename[c] = name
                    break
            else:
                trim = _TRIM_HEADER.match(key)
                heel = _HEEL_HEADER.match(key)
                if trim and float(trim.group(1)) in _TRIM_BY_VALUE:
                    rename[c] = _TRIM_BY_VALUE[float(trim.group(1))]
                elif heel and float(heel.group(1)) in _HEEL_BY_VALUE:
                    rename[c] = _HEEL_BY_VALUE[float(heel.group(1))]
    return df.rename(columns=rename)


def _read_frame(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xls"):
        return pd.read_excel(path, engine="openpyxl")
    if suffix == ".csv":
        # separator sniffed: naval architects' exports use both "," and ";"
        return pd.read_csv(path, sep=None, engine="python")
    raise ValueError(f"Unsupported format: {path.suffix}. Use .xlsx or .csv.")


def read_calibration_file(
    file_path: str | Path,
    compartment_id: int | str,
    kind: str = "sounding",
) -> CalibrationTable | HeelCorrectionTable | None:
    """
    Read one sounding (`kind="sounding"`) or heel correction (`kind="heel"`)
    table from a CSV or Excel file.
    """
    if kind not in ("sounding", "heel"):
        raise ValueError(f"Unknown table kind: {kind}")
    df = _normalize_columns(_read_frame(Path(file_path)))

    required = {"ullage"} | set(TRIM_COLUMNS if kind == "sounding" else HEEL_COLUMNS)
    missing = required - set(df.columns)
    if missing:
        raise CalibrationConfigError(
            f"Missing columns: {sorted(missing)}. Found: {list(df.columns)}"
        )

    records = df.to_dict(orient="records")
    if kind == "sounding":
        return sounding_table_from_records(compartment_id, records)
    return heel_table_from_records(compartment_id, records)


def table_row_counts(package: DataPackage) -> Tuple[int, int]:
    """(sounding rows, heel correction rows) across all compartments of a package."""
    main = sum(len(t.rows) for t in package.sounding_tables.values())
    heel = sum(len(t.rows) for t in package.heel_tables.values())
    return main, heel
