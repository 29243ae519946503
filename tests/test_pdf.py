"""Tests for infrareport.report.pdf module."""

import base64
from datetime import datetime

import pytest

from infrareport.imaging import PLACEHOLDER_IMAGE_URI
from infrareport.llm.parsing import build_fallback_payload, parse_analysis
from infrareport.report import ReportData
from infrareport.report.pdf import build_pdf_filename, export_pdf, render_pdf


@pytest.fixture
def report(sample_analysis_response, png_bytes):
    payload = parse_analysis(sample_analysis_response)
    uri = "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")
    return ReportData.assemble(payload, uri)


class TestBuildPdfFilename:
    """Tests for build_pdf_filename function."""

    def test_timestamped_name(self):
        """Test the filename format."""
        name = build_pdf_filename(datetime(2024, 3, 5, 14, 7, 9))
        assert name == "Infrastructure-Completion-Report-2024-03-05T14-07-09.pdf"


class TestRenderPdf:
    """Tests for render_pdf function."""

    def test_produces_pdf(self, report, image_handle):
        """Test that a PDF document is produced with both images."""
        data = render_pdf(report, original=image_handle)
        assert data.startswith(b"%PDF")

    def test_placeholder_image_skipped(self, sample_analysis_response):
        """Test that the SVG placeholder does not break rendering."""
        payload = parse_analysis(sample_analysis_response)
        report = ReportData.assemble(payload, PLACEHOLDER_IMAGE_URI)

        assert render_pdf(report).startswith(b"%PDF")

    def test_fallback_report(self):
        """Test rendering a fallback report with markup-like raw text."""
        payload = build_fallback_payload("Crack <b>width</b> & depth unknown")
        report = ReportData.assemble(payload, PLACEHOLDER_IMAGE_URI)

        assert render_pdf(report).startswith(b"%PDF")


class TestExportPdf:
    """Tests for export_pdf function."""

    def test_writes_file(self, report, temp_dir):
        """Test that the PDF is written into the output directory."""
        path = export_pdf(report, temp_dir / "out", now=datetime(2024, 1, 2, 3, 4, 5))

        assert path == temp_dir / "out" / "Infrastructure-Completion-Report-2024-01-02T03-04-05.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_caption_uses_given_timestamp(self, mocker, report, temp_dir):
        """Test that the filename and the Generated caption share one timestamp."""
        render = mocker.patch("infrareport.report.pdf.render_pdf", return_value=b"%PDF-1.4")
        now = datetime(2024, 1, 2, 3, 4, 5)

        export_pdf(report, temp_dir / "out", now=now)

        render.assert_called_once_with(report, None, now=now)

    def test_default_timestamp_shared(self, mocker, report, temp_dir):
        """Test that one timestamp is taken when none is given."""
        render = mocker.patch("infrareport.report.pdf.render_pdf", return_value=b"%PDF-1.4")

        path = export_pdf(report, temp_dir / "out")

        caption_time = render.call_args.kwargs["now"]
        assert path.name == f"Infrastructure-Completion-Report-{caption_time.strftime('%Y-%m-%dT%H-%M-%S')}.pdf"
