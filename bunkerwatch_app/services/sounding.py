"""
Sounding table evaluation: ullage + trim (+ heel) -> volume, sound and CoG.

The sounding and heel correction tables share one evaluation scheme: resolve
the attitude value on its fixed axis, resolve the ullage among the table's
rows, then interpolate linearly along whichever axes were bracketed (attitude
first, then ullage).
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence, Tuple

from bunkerwatch_app.config.axes import HEEL_AXIS, TRIM_AXIS, AxisPoint
from bunkerwatch_app.models import (
    CalibrationTable,
    HeelCorrectionEvaluation,
    HeelCorrectionRow,
    HeelCorrectionTable,
    Interpolation,
    InterpolationType,
    SoundingEvaluation,
    SoundingResult,
    SoundingRow,
)
from bunkerwatch_app.services.interpolation import (
    AxisBracket,
    AxisExact,
    CalibrationConfigError,
    SoundingError,
    UllageBracket,
    UllageExact,
    linear_interpolate,
    resolve_axis,
    resolve_ullage,
    round_half_up,
)

logger = logging.getLogger(__name__)

_Row = SoundingRow | HeelCorrectionRow
_Table = CalibrationTable | HeelCorrectionTable


def _column_value(row: _Row, column: str) -> float:
    try:
        return row.values[column]
    except KeyError:
        raise CalibrationConfigError(f"Row at ullage {row.ullage} has no value for column {column}") from None


def _value_at(row: _Row, hit: AxisExact | AxisBracket, axis_value: float) -> float:
    """Column value of `row` at the attitude, interpolating between bracketing columns."""
    if isinstance(hit, AxisExact):
        return _column_value(row, hit.point.column)
    return linear_interpolate(
        hit.lower.value, _column_value(row, hit.lower.column),
        hit.upper.value, _column_value(row, hit.upper.column),
        axis_value,
    )


def _single_row(table: _Table, ullage: float, table_name: str) -> _Row:
    rows = table.rows_at(ullage)
    if len(rows) != 1:
        raise CalibrationConfigError(
            f"Expected 1 {table_name} row at ullage {ullage}, found {len(rows)}"
        )
    return rows[0]


def _bracket_rows(table: _Table, bracket: UllageBracket, table_name: str) -> Tuple[_Row, _Row]:
    rows = table.rows_at(bracket.lower, bracket.upper)
    # unreachable after resolve_ullage on the same table; guards brackets built elsewhere
    if len(rows) != 2:
        raise CalibrationConfigError(
            f"Insufficient {table_name} data for interpolation between ullage "
            f"{bracket.lower} and {bracket.upper}: expected 2 rows, found {len(rows)}"
        )
    return rows[0], rows[1]


def _provenance(
    axis_hit: AxisExact | AxisBracket,
    ullage_hit: UllageExact | UllageBracket,
    axis_name: str,
    axis_only: InterpolationType,
) -> Interpolation:
    bounds = {}
    if isinstance(ullage_hit, UllageBracket):
        bounds["ullage"] = (ullage_hit.lower, ullage_hit.upper)
    if isinstance(axis_hit, AxisBracket):
        bounds[axis_name] = (axis_hit.lower.value, axis_hit.upper.value)

    if "ullage" in bounds and axis_name in bounds:
        kind = InterpolationType.BILINEAR
    elif "ullage" in bounds:
        kind = InterpolationType.ULLAGE_ONLY
    elif axis_name in bounds:
        kind = axis_only
    else:
        kind = InterpolationType.NONE
    return Interpolation(kind, bounds)


def _interpolate_sound(
    lower: int | None,
    upper: int | None,
    across_ullage: Callable[[float, float], float],
    zero_sound_is_missing: bool,
) -> int | None:
    """
    Depth-gauge reading between two rows, rounded half-up to an integer.

    With `zero_sound_is_missing` a missing row sound counts as 0 and a result
    of 0 is reported as None. Otherwise None is reported only when a source
    row has no sound.
    """
    if zero_sound_is_missing:
        rounded = round_half_up(across_ullage(float(lower or 0), float(upper or 0)))
        return rounded or None
    if lower is None or upper is None:
        return None
    return round_half_up(across_ullage(float(lower), float(upper)))


def _evaluate_grid(
    table: _Table,
    ullage: float,
    axis: Sequence[AxisPoint],
    axis_value: float,
    axis_name: str,
    table_name: str,
    axis_only: InterpolationType,
):
    axis_hit = resolve_axis(axis, axis_value, axis_name)
    ullage_hit = resolve_ullage(table.ullages, ullage, table_name)
    interpolation = _provenance(axis_hit, ullage_hit, axis_name, axis_only)
    if isinstance(ullage_hit, UllageExact):
        rows = (_single_row(table, ullage_hit.ullage, table_name),)
    else:
        rows = _bracket_rows(table, ullage_hit, table_name)
    return axis_hit, ullage_hit, rows, interpolation


def evaluate_sounding(
    table: CalibrationTable,
    ullage: float,
    trim: float,
    zero_sound_is_missing: bool = True,
) -> SoundingEvaluation:
    """
    Base volume and hydrostatics of a compartment at the given ullage and trim.

    Raises OutOfRangeError when trim or ullage falls outside the table and
    CalibrationConfigError when the table is empty or inconsistent.
    """
    trim_hit, ullage_hit, rows, interpolation = _evaluate_grid(
        table, ullage, TRIM_AXIS, trim, "trim", "sounding", InterpolationType.TRIM_ONLY
    )

    if isinstance(ullage_hit, UllageExact):
        (row,) = rows
        result = SoundingEvaluation(
            volume=_value_at(row, trim_hit, trim),
            sound=row.sound,
            ullage=row.ullage,
            lcg=row.lcg,
            tcg=row.tcg,
            vcg=row.vcg,
            iy=row.iy,
            interpolation=interpolation,
        )
    else:
        lower_row, upper_row = rows

        def across_ullage(y_lower: float, y_upper: float) -> float:
            return linear_interpolate(ullage_hit.lower, y_lower, ullage_hit.upper, y_upper, ullage)

        # hydrostatics have no trim dimension; only the volume sees the trim stage
        result = SoundingEvaluation(
            volume=across_ullage(_value_at(lower_row, trim_hit, trim), _value_at(upper_row, trim_hit, trim)),
            sound=_interpolate_sound(lower_row.sound, upper_row.sound, across_ullage, zero_sound_is_missing),
            ullage=ullage,
            lcg=across_ullage(lower_row.lcg, upper_row.lcg),
            tcg=across_ullage(lower_row.tcg, upper_row.tcg),
            vcg=across_ullage(lower_row.vcg, upper_row.vcg),
            iy=across_ullage(lower_row.iy, upper_row.iy),
            interpolation=interpolation,
        )

    logger.debug(
        "Compartment %s ullage=%s trim=%s -> %.3f m3 (%s)",
        table.compartment_id, ullage, trim, result.volume, interpolation.type.value,
    )
    return result


def evaluate_heel_correction(
    table: HeelCorrectionTable,
    ullage: float,
    heel: float,
) -> HeelCorrectionEvaluation:
    """Heel correction (m³) at the given ullage and heel, from the heel table's own ullage set."""
    heel_hit, ullage_hit, rows, interpolation = _evaluate_grid(
        table, ullage, HEEL_AXIS, heel, "heel", "heel correction", InterpolationType.HEEL_ONLY
    )
    if isinstance(ullage_hit, UllageExact):
        correction = _value_at(rows[0], heel_hit, heel)
    else:
        lower_row, upper_row = rows
        correction = linear_interpolate(
            ullage_hit.lower, _value_at(lower_row, heel_hit, heel),
            ullage_hit.upper, _value_at(upper_row, heel_hit, heel),
            ullage,
        )
    return HeelCorrectionEvaluation(heel_correction=correction, interpolation=interpolation)


def resolve_sounding(
    sounding_table: CalibrationTable,
    heel_table: HeelCorrectionTable | None,
    ullage: float,
    trim: float,
    heel: float | None = None,
    zero_sound_is_missing: bool = True,
) -> SoundingResult:
    """
    Final volume = base volume (sounding table) + heel correction (heel table).

    Sounding-stage errors propagate. A heel of None or 0 skips the heel stage.
    Heel-stage errors do not fail the query: the correction is 0 and the error
    is recorded in the heel provenance block.
    """
    base = evaluate_sounding(sounding_table, ullage, trim, zero_sound_is_missing)

    heel_correction = 0.0
    if heel is None or heel == 0:
        heel_interpolation = Interpolation(InterpolationType.NOT_APPLICABLE)
    else:
        try:
            if heel_table is None:
                raise CalibrationConfigError("No heel correction data found for this compartment")
            corrected = evaluate_heel_correction(heel_table, ullage, heel)
        except SoundingError as exc:
            logger.warning(
                "Heel correction skipped for compartment %s (heel=%s): %s",
                sounding_table.compartment_id, heel, exc.message,
            )
            heel_interpolation = Interpolation(InterpolationType.ERROR, error=exc.message)
        else:
            heel_correction = corrected.heel_correction
            heel_interpolation = corrected.interpolation

    return SoundingResult(
        base_volume=base.volume,
        heel_correction=heel_correction,
        final_volume=base.volume + heel_correction,
        sound=base.sound,
        ullage=base.ullage,
        trim=trim,
        heel=heel,
        lcg=base.lcg,
        tcg=base.tcg,
        vcg=base.vcg,
        iy=base.iy,
        main_interpolation=base.interpolation,
        heel_interpolation=heel_interpolation,
    )
