"""Report generation module."""

from .formatting import format_label, format_number, format_value, summary_lines
from .pdf_report import PDFReportGenerator, ReportRenderError, generate_report

__all__ = [
    "PDFReportGenerator",
    "ReportRenderError",
    "generate_report",
    "format_label",
    "format_number",
    "format_value",
    "summary_lines",
]
