"""Tests for infrareport.report package."""

import json

import pytest
from pydantic import ValidationError as SchemaError

from infrareport.llm.parsing import parse_analysis
from infrareport.report import ReportData, render_report, report_to_json
from infrareport.report.formatters import render_description_lines


@pytest.fixture
def report(sample_analysis_response):
    payload = parse_analysis(sample_analysis_response)
    return ReportData.assemble(payload, "data:image/png;base64,iVBORw0KGgo=")


class TestReportData:
    """Tests for ReportData model."""

    def test_assemble(self, report):
        """Test assembling from a parsed payload."""
        description = json.loads(report.repair_description)
        assert description["safety_measures"] == "Prop the slab before work begins."
        assert report.cost_estimation.breakdown.permits == "₹20,000 INR"
        assert report.timeline.phases == (
            "Phase 1: Propping",
            "Phase 2: Injection",
            "Phase 3: Wrapping",
        )

    def test_is_immutable(self, report):
        """Test that a finished report cannot be changed."""
        with pytest.raises(SchemaError):
            report.repaired_image_url = "other"

    def test_keeps_non_ascii(self, report):
        """Test that the rupee sign survives serialization."""
        assert "₹" in report_to_json(report)

    def test_numeric_figures_coerced(self, sample_analysis_dict):
        """Test that numeric cost and duration values are accepted as text."""
        data = sample_analysis_dict
        data["cost_estimation"]["total"] = 300000
        data["cost_estimation"]["breakdown"]["labor"] = 150000.5
        data["timeline"]["estimated_duration"] = 6

        payload = parse_analysis(json.dumps(data))

        assert payload.cost_estimation.total == "300000"
        assert payload.cost_estimation.breakdown.labor == "150000.5"
        assert payload.timeline.estimated_duration == "6"


class TestRenderReport:
    """Tests for render_report function."""

    def test_sections(self, report):
        """Test that every section is rendered."""
        text = render_report(report, original_source="beam.png")

        assert "Infrastructure Completion Report" in text
        assert "Before: beam.png" in text
        assert "<inline image/png" in text
        assert "Total:            ₹3,00,000 INR" in text
        assert "Estimated duration: 6 weeks" in text
        assert "  - Phase 2: Injection" in text

    def test_description_labels(self, report):
        """Test that description keys become labels."""
        lines = render_description_lines(report.repair_description, width=80)

        assert "Current State:" in lines
        assert "Completion Requirements:" in lines
        assert "  Epoxy injection" in lines

    def test_non_json_description(self):
        """Test that plain text is wrapped as-is."""
        lines = render_description_lines("just some words", width=80)
        assert lines == ["just some words"]


class TestReportToJson:
    """Tests for report_to_json function."""

    def test_round_trips(self, report):
        """Test that the JSON can be loaded back into a report."""
        assert ReportData.model_validate_json(report_to_json(report)) == report
