"""
Sounding queries and results, including interpolation provenance.

Provenance records which interpolation mode produced a value and the
bracketing calibration levels consulted on each axis, so every reported
volume can be audited against the calibration tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple


class InterpolationType(Enum):
    NONE = "none"
    TRIM_ONLY = "trim_only"
    HEEL_ONLY = "heel_only"
    ULLAGE_ONLY = "ullage_only"
    BILINEAR = "bilinear"
    NOT_APPLICABLE = "not_applicable"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Interpolation:
    """Provenance block: mode used, bracket bounds per axis, heel-stage error if any."""
    type: InterpolationType
    bounds: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "bounds": {
                axis: {"lower": lower, "upper": upper}
                for axis, (lower, upper) in self.bounds.items()
            } or None,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "Interpolation":
        if not data:
            return cls(InterpolationType.NOT_APPLICABLE)
        bounds = {
            axis: (float(b["lower"]), float(b["upper"]))
            for axis, b in (data.get("bounds") or {}).items()
        }
        return cls(InterpolationType(data["type"]), bounds, data.get("error"))


@dataclass(frozen=True, slots=True)
class SoundingQuery:
    compartment_id: int | str
    ullage: float
    trim: float
    heel: float | None = None


@dataclass(frozen=True, slots=True)
class SoundingEvaluation:
    """Base volume and hydrostatics read from the sounding table."""
    volume: float
    sound: int | None
    ullage: float
    lcg: float
    tcg: float
    vcg: float
    iy: float
    interpolation: Interpolation


@dataclass(frozen=True, slots=True)
class HeelCorrectionEvaluation:
    heel_correction: float
    interpolation: Interpolation


@dataclass(frozen=True, slots=True)
class SoundingResult:
    """Composite result: base volume, heel correction and the corrected final volume."""
    base_volume: float
    heel_correction: float
    final_volume: float
    sound: int | None
    ullage: float
    trim: float
    heel: float | None
    lcg: float
    tcg: float
    vcg: float
    iy: float
    main_interpolation: Interpolation
    heel_interpolation: Interpolation

    @property
    def has_heel_warning(self) -> bool:
        """True when the heel stage failed and the result carries only the base volume."""
        return self.heel_interpolation.type is InterpolationType.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_volume": self.base_volume,
            "heel_correction": self.heel_correction,
            "final_volume": self.final_volume,
            "sound": self.sound,
            "ullage": self.ullage,
            "trim": self.trim,
            "heel": self.heel,
            "lcg": self.lcg,
            "tcg": self.tcg,
            "vcg": self.vcg,
            "iy": self.iy,
            "main_interpolation": self.main_interpolation.to_dict(),
            "heel_interpolation": self.heel_interpolation.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SoundingResult":
        """Rebuild a result serialized with to_dict(), provenance included."""
        return cls(
            base_volume=float(data["base_volume"]),
            heel_correction=float(data.get("heel_correction") or 0.0),
            final_volume=float(data["final_volume"]),
            sound=data.get("sound"),
            ullage=float(data["ullage"]),
            trim=float(data["trim"]),
            heel=data.get("heel"),
            lcg=float(data.get("lcg") or 0.0),
            tcg=float(data.get("tcg") or 0.0),
            vcg=float(data.get("vcg") or 0.0),
            iy=float(data.get("iy") or 0.0),
            main_interpolation=Interpolation.from_dict(data.get("main_interpolation")),
            heel_interpolation=Interpolation.from_dict(data.get("heel_interpolation")),
        )
