"""
Domain models for the bunkerwatch sounding tools.

These are pure Python/domain classes, separate from ORM mappings.
"""

from bunkerwatch_app.models.calibration import (
    CalibrationTable,
    HeelCorrectionRow,
    HeelCorrectionTable,
    SoundingRow,
)
from bunkerwatch_app.models.sounding import (
    HeelCorrectionEvaluation,
    Interpolation,
    InterpolationType,
    SoundingEvaluation,
    SoundingQuery,
    SoundingResult,
)
from bunkerwatch_app.models.report import SoundingLogEntry, SoundingReport
from bunkerwatch_app.models.vessel import Compartment, Vessel

__all__ = [
    "CalibrationTable",
    "HeelCorrectionRow",
    "HeelCorrectionTable",
    "SoundingRow",
    "HeelCorrectionEvaluation",
    "Interpolation",
    "InterpolationType",
    "SoundingEvaluation",
    "SoundingQuery",
    "SoundingResult",
    "SoundingLogEntry",
    "SoundingReport",
    "Compartment",
    "Vessel",
]
