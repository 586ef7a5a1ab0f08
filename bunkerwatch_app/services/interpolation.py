"""
Bracket search and linear interpolation over calibration axes.

Trim and heel use fixed axes (config.axes); ullage uses whatever distinct
values a compartment's table holds. Both resolve to an exact match or an
enclosing bracket, and raise OutOfRangeError outside the covered domain.
There is no extrapolation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from bunkerwatch_app.config.axes import AxisPoint


class SoundingError(Exception):
    """Base class for errors raised while evaluating calibration tables."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class OutOfRangeError(SoundingError):
    """A trim, heel or ullage value lies outside the calibration data's domain."""

    def __init__(
        self,
        message: str,
        axis: str,
        bound: str | None = None,
        limit: float | None = None,
        value: float | None = None,
    ) -> None:
        self.axis = axis
        self.bound = bound
        self.limit = limit
        self.value = value
        super().__init__(message)


class CalibrationConfigError(SoundingError):
    """The calibration dataset contradicts its own invariants (empty, unsorted, wrong row count)."""


@dataclass(frozen=True, slots=True)
class AxisExact:
    point: AxisPoint


@dataclass(frozen=True, slots=True)
class AxisBracket:
    lower: AxisPoint
    upper: AxisPoint


@dataclass(frozen=True, slots=True)
class UllageExact:
    ullage: float


@dataclass(frozen=True, slots=True)
class UllageBracket:
    lower: float
    upper: float


def round_half_up(x: float) -> int:
    """Nearest integer, halves rounded towards +inf (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(x + 0.5))


def linear_interpolate(x1: float, y1: float, x2: float, y2: float, x: float) -> float:
    """y on the line through (x1, y1) and (x2, y2); y1 when x1 == x2."""
    if x1 == x2:
        return y1
    return y1 + (y2 - y1) * (x - x1) / (x2 - x1)


def _reject_nan(value: float, axis_name: str) -> None:
    if math.isnan(value):
        raise OutOfRangeError(f"{axis_name.capitalize()} {value} is not a number", axis=axis_name, value=value)


def resolve_axis(
    axis: Sequence[AxisPoint],
    value: float,
    axis_name: str = "trim",
) -> AxisExact | AxisBracket:
    """
    Locate `value` on a fixed calibration axis (sorted ascending).

    Returns AxisExact when `value` equals a level, AxisBracket for the
    adjacent levels enclosing it. Raises OutOfRangeError outside
    [axis[0].value, axis[-1].value].
    """
    _reject_nan(value, axis_name)
    for point in axis:
        if point.value == value:
            return AxisExact(point)

    for lower, upper in zip(axis, axis[1:]):
        if lower.value < value < upper.value:
            return AxisBracket(lower, upper)

    name = axis_name.capitalize()
    if value < axis[0].value:
        raise OutOfRangeError(
            f"{name} {value} is below minimum supported {axis_name} {axis[0].value}",
            axis=axis_name,
            bound="min",
            limit=axis[0].value,
            value=value,
        )
    raise OutOfRangeError(
        f"{name} {value} is above maximum supported {axis_name} {axis[-1].value}",
        axis=axis_name,
        bound="max",
        limit=axis[-1].value,
        value=value,
    )


def resolve_ullage(
    ullages: Sequence[float],
    value: float,
    table_name: str = "sounding",
) -> UllageExact | UllageBracket:
    """
    Locate `value` among a compartment's stored ullages.

    `ullages` must already be strictly increasing (sorted and deduplicated by
    the provisioning layer); a violation raises CalibrationConfigError rather
    than producing a wrong bracket.
    """
    if not ullages:
        raise CalibrationConfigError(f"No {table_name} calibration data found for this compartment")
    for previous, current in zip(ullages, ullages[1:]):
        if current <= previous:
            raise CalibrationConfigError(
                f"{table_name.capitalize()} ullages are not strictly increasing "
                f"({previous} followed by {current})"
            )

    _reject_nan(value, "ullage")
    if value in ullages:
        return UllageExact(value)

    for lower, upper in zip(ullages, ullages[1:]):
        if lower < value < upper:
            return UllageBracket(lower, upper)

    label = "ullage" if table_name == "sounding" else f"{table_name} ullage"
    if value < ullages[0]:
        raise OutOfRangeError(
            f"Ullage {value} is below minimum {label} {ullages[0]}",
            axis="ullage",
            bound="min",
            limit=ullages[0],
            value=value,
        )
    raise OutOfRangeError(
        f"Ullage {value} is above maximum {label} {ullages[-1]}",
        axis="ullage",
        bound="max",
        limit=ullages[-1],
        value=value,
    )
