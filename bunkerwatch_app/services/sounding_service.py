"""
Sounding calculations for a compartment, independent of where its tables live.

A calibration source supplies a compartment's immutable tables: the offline
data package held in memory, or the SQLAlchemy calibration repository. The
same interpolation code serves both.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Protocol

from bunkerwatch_app.models import (
    CalibrationTable,
    HeelCorrectionTable,
    SoundingLogEntry,
    SoundingQuery,
    SoundingResult,
)
from bunkerwatch_app.services.interpolation import CalibrationConfigError
from bunkerwatch_app.services.quantity import fill_entry_mass
from bunkerwatch_app.services.sounding import resolve_sounding

logger = logging.getLogger(__name__)


class CalibrationSource(Protocol):
    def sounding_table(self, compartment_id: int | str) -> Optional[CalibrationTable]:
        ...

    def heel_table(self, compartment_id: int | str) -> Optional[HeelCorrectionTable]:
        ...


class InMemoryCalibrationSource:
    """Calibration source over tables already loaded in memory (offline data package)."""

    def __init__(
        self,
        sounding_tables: Mapping[int | str, CalibrationTable],
        heel_tables: Mapping[int | str, HeelCorrectionTable] | None = None,
    ) -> None:
        self._sounding: Dict[int | str, CalibrationTable] = dict(sounding_tables)
        self._heel: Dict[int | str, HeelCorrectionTable] = dict(heel_tables or {})

    def sounding_table(self, compartment_id: int | str) -> Optional[CalibrationTable]:
        return self._sounding.get(compartment_id)

    def heel_table(self, compartment_id: int | str) -> Optional[HeelCorrectionTable]:
        return self._heel.get(compartment_id)


class SoundingService:
    def __init__(self, source: CalibrationSource, zero_sound_is_missing: bool = True) -> None:
        self._source = source
        self._zero_sound_is_missing = zero_sound_is_missing

    def calculate(self, query: SoundingQuery) -> SoundingResult:
        """
        Resolve a query against the compartment's tables.

        Raises CalibrationConfigError when the compartment has no sounding
        table, and propagates sounding-stage errors from resolve_sounding.
        """
        sounding_table = self._source.sounding_table(query.compartment_id)
        if sounding_table is None:
            raise CalibrationConfigError(f"No calibration data found for compartment {query.compartment_id}")
        heel_table = self._source.heel_table(query.compartment_id)

        result = resolve_sounding(
            sounding_table,
            heel_table,
            query.ullage,
            query.trim,
            query.heel,
            zero_sound_is_missing=self._zero_sound_is_missing,
        )
        logger.info(
            "Compartment %s: ullage=%s trim=%s heel=%s -> %.3f m3 (%s / %s)",
            query.compartment_id, query.ullage, query.trim, query.heel, result.final_volume,
            result.main_interpolation.type.value, result.heel_interpolation.type.value,
        )
        return result

    def log_entry(
        self,
        query: SoundingQuery,
        compartment_name: str = "",
        fuel_grade: str = "",
        density_t_per_m3: float | None = None,
        temperature_c: float | None = None,
        session_id: str | None = None,
    ) -> SoundingLogEntry:
        """Calculate and wrap the result with product data and mass for a sounding log."""
        entry = SoundingLogEntry(
            compartment_id=query.compartment_id,
            compartment_name=compartment_name,
            result=self.calculate(query),
            fuel_grade=fuel_grade,
            density_t_per_m3=density_t_per_m3,
            temperature_c=temperature_c,
            session_id=session_id,
        )
        return fill_entry_mass(entry)
