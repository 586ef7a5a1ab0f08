"""
Quantity figures derived from a sounding result: mass, fill percentage, round totals.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable

from bunkerwatch_app.config.axes import EPS
from bunkerwatch_app.models import SoundingLogEntry, SoundingReport


def compute_mass_t(volume_m3: float, density_t_per_m3: float | None) -> float | None:
    """Mass in tonnes; None when no usable density was entered."""
    if density_t_per_m3 is None or density_t_per_m3 <= 0.0:
        return None
    return volume_m3 * density_t_per_m3


def percent_full(volume_m3: float, capacity_m3: float | None) -> float | None:
    """Fill level as a percentage of the compartment's capacity."""
    if not capacity_m3 or capacity_m3 < EPS:
        return None
    return volume_m3 / capacity_m3 * 100.0


def fill_entry_mass(entry: SoundingLogEntry) -> SoundingLogEntry:
    """Set entry.calculated_mt from its result's final volume and density."""
    if entry.result is None:
        entry.calculated_mt = None
    else:
        entry.calculated_mt = compute_mass_t(entry.result.final_volume, entry.density_t_per_m3)
    return entry


def build_sounding_report(
    vessel_name: str,
    entries: Iterable[SoundingLogEntry],
    trim: float,
    heel: float | None = None,
    report_date: date | None = None,
) -> SoundingReport:
    """
    Aggregate a sounding round. Entries without a fuel grade or without a mass
    are listed but do not count towards the totals.
    """
    filled = [fill_entry_mass(e) for e in entries]
    totals: Dict[str, float] = {}
    for entry in filled:
        if not entry.fuel_grade or entry.calculated_mt is None:
            continue
        totals[entry.fuel_grade] = totals.get(entry.fuel_grade, 0.0) + entry.calculated_mt
    return SoundingReport(
        vessel_name=vessel_name,
        report_date=report_date or date.today(),
        trim=trim,
        heel=heel,
        entries=filled,
        totals_mt_by_grade=totals,
        grand_total_mt=sum(totals.values()),
    )
