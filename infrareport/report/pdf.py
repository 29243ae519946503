"""PDF export for finished reports.

Renders a ReportData into a paginated A4 document with ReportLab's platypus
layout engine. Long sections flow onto additional pages automatically.
"""

import io
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import (
    Image as RLImage,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from infrareport.imaging import ImageHandle, decode_data_uri
from infrareport.report.formatters import render_description_lines
from infrareport.report.models import ReportData

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "Infrastructure-Completion-Report"
MAX_IMAGE_WIDTH = 8 * cm
MAX_IMAGE_HEIGHT = 8 * cm


def build_pdf_filename(now: Optional[datetime] = None) -> str:
    """Build the timestamped PDF filename.

    Args:
        now: Timestamp to use. Defaults to the current time.

    Returns:
        e.g. "Infrastructure-Completion-Report-2024-01-31T14-05-09.pdf"
    """
    now = now or datetime.now()
    return f"{FILENAME_PREFIX}-{now.strftime('%Y-%m-%dT%H-%M-%S')}.pdf"


def _plain_text(text: str) -> str:
    # The built-in Helvetica font has no rupee glyph
    return text.replace("₹", "Rs. ")


def _pdf_text(text: str) -> str:
    """Prepare text for a Paragraph, which parses inline markup."""
    return escape(_plain_text(text))


def _scaled_image(data: bytes) -> Optional[RLImage]:
    """Create a flowable that fits the image box, or None if undecodable."""
    try:
        width, height = ImageReader(io.BytesIO(data)).getSize()
    except Exception as e:
        logger.warning("Skipping image in PDF: %s", e)
        return None

    scale = min(MAX_IMAGE_WIDTH / width, MAX_IMAGE_HEIGHT / height)
    return RLImage(io.BytesIO(data), width=width * scale, height=height * scale)


def _repaired_image_bytes(ref: str) -> Optional[bytes]:
    try:
        mime, data = decode_data_uri(ref)
    except ValueError:
        return None
    # SVG placeholders cannot be embedded as raster images
    if not mime.startswith("image/") or mime == "image/svg+xml":
        return None
    return data


def render_pdf(
    report: ReportData,
    original: Optional[ImageHandle] = None,
    now: Optional[datetime] = None,
) -> bytes:
    """Render a report to PDF bytes.

    Args:
        report: The finished report.
        original: The uploaded "before" image, if available.
        now: Timestamp for the "Generated" caption. Defaults to the current time.

    Returns:
        The PDF document.
    """
    now = now or datetime.now()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
        title="Infrastructure Completion Report",
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Heading1"],
        fontSize=20,
        textColor=HexColor("#2563eb"),
        alignment=TA_CENTER,
        spaceAfter=16,
    )
    header_style = ParagraphStyle(
        "ReportHeader",
        parent=styles["Heading2"],
        fontSize=14,
        textColor=HexColor("#1f2937"),
        spaceBefore=12,
        spaceAfter=6,
    )
    normal_style = styles["Normal"]
    caption_style = ParagraphStyle(
        "Caption", parent=normal_style, fontSize=9, textColor=HexColor("#6b7280"), alignment=TA_CENTER
    )

    elements = [
        Paragraph("Infrastructure Completion Report", title_style),
        Paragraph(_pdf_text(f"Generated {now.strftime('%Y-%m-%d %H:%M')}"), caption_style),
        Spacer(1, 12),
    ]

    # Before / after
    before = _scaled_image(original.data) if original else None
    after_bytes = _repaired_image_bytes(report.repaired_image_url)
    after = _scaled_image(after_bytes) if after_bytes else None
    if before or after:
        elements.append(Paragraph("Before / After", header_style))
        row = [before or Paragraph("(not available)", caption_style),
               after or Paragraph("(visualization unavailable)", caption_style)]
        captions = [Paragraph("Current state", caption_style), Paragraph("Proposed completion", caption_style)]
        image_table = Table([row, captions], colWidths=[8.5 * cm, 8.5 * cm])
        image_table.setStyle(TableStyle([
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]))
        elements.append(image_table)

    elements.append(Paragraph("Repair Plan", header_style))
    for line in render_description_lines(report.repair_description, width=100):
        if line.strip():
            elements.append(Paragraph(_pdf_text(line), normal_style))

    cost = report.cost_estimation
    elements.append(Paragraph("Cost Estimation", header_style))
    cost_data = [
        ["Total", _plain_text(cost.total)],
        ["Materials", _plain_text(cost.breakdown.materials)],
        ["Labor", _plain_text(cost.breakdown.labor)],
        ["Permits", _plain_text(cost.breakdown.permits)],
        ["Safety equipment", _plain_text(cost.breakdown.safety_equipment)],
    ]
    cost_table = Table(cost_data, colWidths=[6 * cm, 10 * cm])
    cost_table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (0, -1), HexColor("#ecf0f1")),
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTNAME", (1, 0), (1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("GRID", (0, 0), (-1, -1), 1, HexColor("#bdc3c7")),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
    ]))
    elements.append(cost_table)

    elements.append(Paragraph("Timeline", header_style))
    elements.append(
        Paragraph(_pdf_text(f"Estimated duration: {report.timeline.estimated_duration}"), normal_style)
    )
    for phase in report.timeline.phases:
        elements.append(Paragraph(_pdf_text(f"• {phase}"), normal_style))

    doc.build(elements)
    return buffer.getvalue()


def export_pdf(
    report: ReportData,
    output_dir: Path,
    original: Optional[ImageHandle] = None,
    now: Optional[datetime] = None,
) -> Path:
    """Write the report as a timestamped PDF file.

    Args:
        report: The finished report.
        output_dir: Directory to write into (created if missing).
        original: The uploaded "before" image, if available.
        now: Timestamp for the filename and caption. Defaults to the current time.

    Returns:
        Path to the written PDF.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    now = now or datetime.now()
    path = output_dir / build_pdf_filename(now)
    path.write_bytes(render_pdf(report, original, now=now))
    return path
