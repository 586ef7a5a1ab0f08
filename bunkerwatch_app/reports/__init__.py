"""
Reporting utilities (text/Excel/PDF) for sounding results.
"""

from bunkerwatch_app.reports.simple_text_report import build_report_summary_text, build_sounding_summary_text
from bunkerwatch_app.reports.excel_report import export_report_to_excel
from bunkerwatch_app.reports.pdf_report import export_report_to_pdf

__all__ = [
    "build_report_summary_text",
    "build_sounding_summary_text",
    "export_report_to_excel",
    "export_report_to_pdf",
]
