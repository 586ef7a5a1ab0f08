"""
PDF report generation for a sounding round.
"""

from __future__ import annotations

from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from bunkerwatch_app.models import SoundingReport


def _fmt(value: object, fmt: str) -> str:
    """Safely format numeric values for PDF tables."""
    if value is None:
        return ""
    try:
        return format(float(value), fmt)
    except (TypeError, ValueError):
        return str(value)


def _table_style() -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#4472C4")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.4, colors.grey),
            ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ]
    )


def export_report_to_pdf(filepath: Path, report: SoundingReport) -> None:
    """
    Generate a PDF for a sounding round: header, one line per compartment with
    its interpolation mode, and totals per fuel grade.
    """
    doc = SimpleDocTemplate(
        str(filepath),
        pagesize=landscape(A4),
        rightMargin=1.5 * cm,
        leftMargin=1.5 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.5 * cm,
    )
    doc.title = f"Sounding report {report.vessel_name}"
    styles = getSampleStyleSheet()

    story = [
        Paragraph(f"<b>Sounding report: {report.vessel_name}</b>", styles["Heading1"]),
        Paragraph(
            f"Date: {report.report_date.isoformat() if report.report_date else ''} &nbsp; "
            f"Trim: {_fmt(report.trim, '.2f')} m &nbsp; "
            f"Heel: {_fmt(report.heel, '.2f') or '-'} deg &nbsp; "
            f"Tanks: {report.total_tanks}",
            styles["Normal"],
        ),
        Spacer(1, 0.4 * cm),
    ]

    rows = [[
        "Compartment", "Grade", "Ullage (cm)", "Base (m³)", "Heel corr. (m³)",
        "Final (m³)", "Density", "Mass (t)", "Interpolation",
    ]]
    warnings = []
    for entry in report.entries:
        res = entry.result
        if res is None:
            continue
        rows.append([
            entry.compartment_name or str(entry.compartment_id),
            entry.fuel_grade,
            _fmt(res.ullage, ".1f"),
            _fmt(res.base_volume, ".3f"),
            _fmt(res.heel_correction, "+.3f"),
            _fmt(res.final_volume, ".3f"),
            _fmt(entry.density_t_per_m3, ".4f"),
            _fmt(entry.calculated_mt, ".2f"),
            f"{res.main_interpolation.type.value} / {res.heel_interpolation.type.value}",
        ])
        if res.has_heel_warning:
            warnings.append(f"{entry.compartment_name or entry.compartment_id}: {res.heel_interpolation.error}")
    table = Table(rows, repeatRows=1)
    table.setStyle(_table_style())
    story.append(table)
    story.append(Spacer(1, 0.4 * cm))

    totals = [["Fuel grade", "Mass (t)"]]
    totals += [[g, _fmt(t, ".2f")] for g, t in sorted(report.totals_mt_by_grade.items())]
    totals.append(["Grand total", _fmt(report.grand_total_mt, ".2f")])
    totals_table = Table(totals)
    totals_table.setStyle(_table_style())
    story.append(totals_table)

    if warnings:
        story.append(Spacer(1, 0.4 * cm))
        story.append(Paragraph("<b>Heel correction not applied</b>", styles["Heading3"]))
        for w in warnings:
            story.append(Paragraph(w, styles["Normal"]))

    doc.build(story)
