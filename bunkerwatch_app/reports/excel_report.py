"""
Excel export for a sounding round.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill

from bunkerwatch_app.models import SoundingReport


def _style_header(ws) -> None:
    header_fill = PatternFill(fill_type="solid", fgColor="4472C4")
    header_font = Font(bold=True, color="FFFFFF")
    header_alignment = Alignment(horizontal="center", vertical="center")
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = header_alignment


def _soundings_frame(report: SoundingReport) -> pd.DataFrame:
    records = []
    for entry in report.entries:
        res = entry.result
        records.append(
            {
                "Compartment": entry.compartment_name or entry.compartment_id,
                "Fuel grade": entry.fuel_grade,
                "Ullage (cm)": res.ullage if res else None,
                "Base volume (m³)": res.base_volume if res else None,
                "Heel corr. (m³)": res.heel_correction if res else None,
                "Final volume (m³)": res.final_volume if res else None,
                "Density (t/m³)": entry.density_t_per_m3,
                "Mass (t)": entry.calculated_mt,
                "Interpolation": res.main_interpolation.type.value if res else "",
                "Heel interpolation": res.heel_interpolation.type.value if res else "",
                "Warning": (res.heel_interpolation.error or "") if res else "",
            }
        )
    return pd.DataFrame.from_records(records)


def export_report_to_excel(filepath: Path, report: SoundingReport) -> None:
    """Write the round to an .xlsx workbook: soundings sheet and totals sheet."""
    totals = pd.DataFrame(
        [{"Fuel grade": g, "Mass (t)": t} for g, t in sorted(report.totals_mt_by_grade.items())]
        + [{"Fuel grade": "Grand total", "Mass (t)": report.grand_total_mt}]
    )
    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        _soundings_frame(report).to_excel(writer, sheet_name="Soundings", index=False)
        totals.to_excel(writer, sheet_name="Totals", index=False)
        for ws in writer.book.worksheets:
            _style_header(ws)
            for column in ws.columns:
                ws.column_dimensions[column[0].column_letter].width = 18
