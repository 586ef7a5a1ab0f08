from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Dict, List

from bunkerwatch_app.models.sounding import SoundingResult


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class SoundingLogEntry:
    """One compartment reading in a sounding round: the result plus product data for mass."""
    id: int | None = None
    compartment_id: int | str | None = None
    compartment_name: str = ""
    result: SoundingResult | None = None
    fuel_grade: str = ""
    density_t_per_m3: float | None = None
    temperature_c: float | None = None
    calculated_mt: float | None = None
    session_id: str | None = None
    recorded_at: datetime = field(default_factory=_utcnow)


@dataclass(slots=True)
class SoundingReport:
    """Summary of a sounding round across compartments (totals per fuel grade)."""
    vessel_name: str = ""
    report_date: date | None = None
    trim: float = 0.0
    heel: float | None = None
    entries: List[SoundingLogEntry] = field(default_factory=list)
    totals_mt_by_grade: Dict[str, float] = field(default_factory=dict)
    grand_total_mt: float = 0.0

    @property
    def total_tanks(self) -> int:
        return len(self.entries)
