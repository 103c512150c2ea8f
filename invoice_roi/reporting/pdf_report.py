"""
PDF Report Generator for invoice automation ROI simulations.

Generates a one-document report showing:
- Generation timestamp
- The simulation inputs
- The computed results
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from ..roi import ROIInputs, ROIResults
from .formatting import format_label, format_number, format_value

logger = logging.getLogger(__name__)

REPORT_TITLE = "Invoicing ROI Simulation Report"


class ReportRenderError(RuntimeError):
    """Raised when the PDF document cannot be produced."""


class PDFReportGenerator:
    """Generate PDF reports for ROI simulations."""

    MARGIN = 50
    LINE_HEIGHT = 16

    def __init__(self, pagesize=LETTER):
        self.pagesize = pagesize

    def generate(
        self,
        inputs: ROIInputs,
        results: ROIResults,
        output_path: Optional[Union[str, Path]] = None,
        generated_at: Optional[datetime] = None,
    ) -> bytes:
        """
        Generate PDF report from simulation inputs and results.

        Args:
            inputs: Validated simulation inputs
            results: Results computed from the inputs
            output_path: Optional path to save the PDF file
            generated_at: Timestamp printed on the report (default: now)

        Returns:
            PDF document bytes

        Raises:
            ReportRenderError: If reportlab fails to build the document
        """
        generated_at = generated_at or datetime.now()

        try:
            buffer = io.BytesIO()
            pdf = canvas.Canvas(buffer, pagesize=self.pagesize)
            pdf.setTitle(REPORT_TITLE)
            self._draw(pdf, inputs, results, generated_at)
            pdf.save()
            document = buffer.getvalue()
        except Exception as e:
            raise ReportRenderError(f"Failed to render PDF report: {e}") from e

        if output_path:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(document)

        logger.debug(f"Rendered PDF report ({len(document)} bytes)")
        return document

    def _draw(
        self,
        pdf: canvas.Canvas,
        inputs: ROIInputs,
        results: ROIResults,
        generated_at: datetime,
    ) -> None:
        width, height = self.pagesize
        y = height - self.MARGIN

        pdf.setFont("Helvetica-Bold", 24)
        pdf.drawCentredString(width / 2, y, REPORT_TITLE)
        y -= 2 * self.LINE_HEIGHT

        pdf.setFont("Helvetica", 12)
        pdf.drawString(self.MARGIN, y, f"Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}")
        y -= 2 * self.LINE_HEIGHT

        y = self._draw_section(
            pdf, y, "Inputs",
            [f"{format_label(k)}: {format_value(v)}" for k, v in inputs.to_dict().items()],
        )
        y -= self.LINE_HEIGHT
        self._draw_section(
            pdf, y, "Results",
            [f"{format_label(k)}: {format_number(v)}" for k, v in results.to_dict().items()],
        )

    def _draw_section(self, pdf: canvas.Canvas, y: float, heading: str, lines) -> float:
        y = self._ensure_space(pdf, y, 2)
        pdf.setFont("Helvetica-Bold", 16)
        pdf.drawString(self.MARGIN, y, heading)
        heading_width = pdf.stringWidth(heading, "Helvetica-Bold", 16)
        pdf.line(self.MARGIN, y - 2, self.MARGIN + heading_width, y - 2)
        y -= 1.5 * self.LINE_HEIGHT

        pdf.setFont("Helvetica", 12)
        for line in lines:
            y = self._ensure_space(pdf, y, 1)
            pdf.drawString(self.MARGIN, y, line)
            y -= self.LINE_HEIGHT
        return y

    def _ensure_space(self, pdf: canvas.Canvas, y: float, lines: int) -> float:
        """Start a new page if fewer than `lines` lines fit."""
        if y - lines * self.LINE_HEIGHT < self.MARGIN:
            pdf.showPage()
            pdf.setFont("Helvetica", 12)
            return self.pagesize[1] - self.MARGIN
        return y


def generate_report(
    inputs: ROIInputs,
    results: ROIResults,
    output_path: Optional[Union[str, Path]] = None,
) -> bytes:
    """
    Convenience function to render a report for one simulation.

    Returns:
        PDF document bytes
    """
    return PDFReportGenerator().generate(inputs, results, output_path)
