"""
Simple text-based report builder for a sounding result or a sounding round.
"""

from __future__ import annotations

from bunkerwatch_app.models import Compartment, Interpolation, SoundingReport, SoundingResult
from bunkerwatch_app.services.quantity import compute_mass_t, percent_full


def _bounds_text(interp: Interpolation) -> str:
    if not interp.bounds:
        return interp.type.value
    parts = [f"{axis} {lower:g}..{upper:g}" for axis, (lower, upper) in interp.bounds.items()]
    return f"{interp.type.value} ({', '.join(parts)})"


def build_sounding_summary_text(
    result: SoundingResult,
    compartment: Compartment | None = None,
    density_t_per_m3: float | None = None,
) -> str:
    lines: list[str] = []
    if compartment is not None:
        lines.append(f"Compartment: {compartment.name} (ID: {compartment.id})")
    lines.append(f"Ullage: {result.ullage:g} cm")
    lines.append(f"Trim: {result.trim:g} m")
    lines.append(f"Heel: {'-' if result.heel is None else f'{result.heel:g} deg'}")
    lines.append("")
    lines.append(f"Base volume: {result.base_volume:.3f} m³")
    lines.append(f"Heel correction: {result.heel_correction:+.3f} m³")
    lines.append(f"Final volume: {result.final_volume:.3f} m³")
    lines.append(f"Sound: {'-' if result.sound is None else result.sound}")
    lines.append(f"LCG: {result.lcg:.3f} m  TCG: {result.tcg:.3f} m  VCG: {result.vcg:.3f} m")
    lines.append(f"Iy: {result.iy:.1f} m4")
    mass = compute_mass_t(result.final_volume, density_t_per_m3)
    if mass is not None:
        lines.append(f"Mass: {mass:.2f} t (density {density_t_per_m3:g} t/m³)")
    if compartment is not None:
        fill = percent_full(result.final_volume, compartment.capacity_m3)
        if fill is not None:
            lines.append(f"Fill: {fill:.1f} % of {compartment.capacity_m3:.1f} m³")
    lines.append("")
    lines.append(f"Sounding interpolation: {_bounds_text(result.main_interpolation)}")
    lines.append(f"Heel interpolation: {_bounds_text(result.heel_interpolation)}")
    if result.has_heel_warning:
        lines.append(f"WARNING: heel correction not applied: {result.heel_interpolation.error}")
    return "\n".join(lines)


def build_report_summary_text(report: SoundingReport) -> str:
    lines: list[str] = []
    lines.append(f"Vessel: {report.vessel_name}")
    lines.append(f"Date: {report.report_date.isoformat() if report.report_date else ''}")
    lines.append(f"Trim: {report.trim:g} m  Heel: {'-' if report.heel is None else f'{report.heel:g} deg'}")
    lines.append(f"Tanks sounded: {report.total_tanks}")
    lines.append("")
    for entry in report.entries:
        res = entry.result
        volume = f"{res.final_volume:.3f} m³" if res is not None else "-"
        mass = f"{entry.calculated_mt:.2f} t" if entry.calculated_mt is not None else "-"
        lines.append(f"{entry.compartment_name or entry.compartment_id}: {volume}  {mass}  {entry.fuel_grade}")
    lines.append("")
    for grade, total in sorted(report.totals_mt_by_grade.items()):
        lines.append(f"Total {grade}: {total:.2f} t")
    lines.append(f"Grand total: {report.grand_total_mt:.2f} t")
    return "\n".join(lines)
