"""
Fixed calibration axes for sounding and heel correction tables.

Naval architects' tables carry one volume column per discrete trim (m) or
heel (deg) level. The levels are canonical constants so exact matches use
plain float equality.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class AxisPoint:
    """One discrete calibration level bound to its table column."""
    value: float
    column: str


def _column_name(prefix: str, value: float) -> str:
    # -1.5 -> "trim_minus_1_5", 0.0 -> "trim_0_0", 2.0 -> "trim_plus_2_0"
    magnitude = f"{abs(value):.1f}".replace(".", "_")
    if value < 0:
        return f"{prefix}_minus_{magnitude}"
    if value > 0:
        return f"{prefix}_plus_{magnitude}"
    return f"{prefix}_{magnitude}"


def _build_axis(prefix: str, values: Tuple[float, ...]) -> Tuple[AxisPoint, ...]:
    return tuple(AxisPoint(v, _column_name(prefix, v)) for v in values)


TRIM_LEVELS_M = (-4.0, -3.0, -2.0, -1.5, -1.0, -0.5, 0.0, 0.5, 1.0, 1.5, 2.0, 3.0, 4.0)
HEEL_LEVELS_DEG = (-3.0, -2.0, -1.5, -1.0, -0.5, 0.0, 0.5, 1.0, 1.5, 2.0, 3.0)

TRIM_AXIS: Tuple[AxisPoint, ...] = _build_axis("trim", TRIM_LEVELS_M)
HEEL_AXIS: Tuple[AxisPoint, ...] = _build_axis("heel", HEEL_LEVELS_DEG)

TRIM_COLUMNS: Tuple[str, ...] = tuple(p.column for p in TRIM_AXIS)
HEEL_COLUMNS: Tuple[str, ...] = tuple(p.column for p in HEEL_AXIS)

# Auxiliary hydrostatic attributes stored on each sounding row
AUXILIARY_COLUMNS: Tuple[str, ...] = ("lcg", "tcg", "vcg", "iy")

# Floating-point tolerance
EPS = 1e-9
