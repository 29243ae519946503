"""Tests for infrareport.llm.parsing module."""

import json

import pytest

from infrareport.exceptions import UpstreamFormatError
from infrareport.llm.parsing import (
    FALLBACK_COST_ESTIMATION,
    FALLBACK_TIMELINE,
    build_fallback_payload,
    extract_json_block,
    parse_analysis,
    parse_or_fallback,
)


class TestExtractJsonBlock:
    """Tests for extract_json_block function."""

    def test_plain_object(self):
        """Test a response that is only JSON."""
        assert extract_json_block('{"a": 1}') == '{"a": 1}'

    def test_markdown_fence(self):
        """Test a fenced block with surrounding prose."""
        text = 'Sure!\n```json\n{"a": {"b": 2}}\n```\nDone.'
        assert extract_json_block(text) == '{"a": {"b": 2}}'

    def test_braces_inside_strings(self):
        """Test that braces in string values do not end the block."""
        text = 'x {"note": "use } carefully {", "n": 1} y'
        assert json.loads(extract_json_block(text)) == {"note": "use } carefully {", "n": 1}

    def test_escaped_quotes(self):
        """Test that escaped quotes keep the scanner inside the string."""
        text = r'{"quote": "he said \"}\" twice"}'
        assert extract_json_block(text) == text

    def test_first_block_wins(self):
        """Test that only the first balanced block is returned."""
        assert extract_json_block('{"a": 1} and {"b": 2}') == '{"a": 1}'

    def test_no_block(self):
        """Test text without an object."""
        assert extract_json_block("no json here") is None

    def test_unbalanced_then_balanced(self):
        """Test that an unclosed brace is skipped."""
        assert extract_json_block('{ broken {"ok": true}') == '{"ok": true}'


class TestParseAnalysis:
    """Tests for parse_analysis function."""

    def test_valid_response(self, sample_analysis_response):
        """Test parsing a well-formed response."""
        payload = parse_analysis(sample_analysis_response)

        assert payload.cost_estimation.total == "₹3,00,000 INR"
        assert payload.timeline.estimated_duration == "6 weeks"
        assert payload.timeline.phases[0] == "Phase 1: Propping"
        assert payload.repair_description.completion_requirements == [
            "Epoxy injection",
            "Carbon fibre wrapping",
        ]

    def test_extra_description_keys_kept(self, sample_analysis_dict):
        """Test that unknown repair description keys are preserved."""
        sample_analysis_dict["repair_description"]["soil_condition"] = "Firm"
        payload = parse_analysis(json.dumps(sample_analysis_dict))

        assert "soil_condition" in payload.serialized_description()

    def test_no_block_raises(self):
        """Test a response with no JSON."""
        with pytest.raises(UpstreamFormatError):
            parse_analysis("The beam looks cracked.")

    def test_invalid_json_raises(self):
        """Test a balanced block that is not JSON."""
        with pytest.raises(UpstreamFormatError):
            parse_analysis("{not: json}")

    def test_deeply_nested_json_raises(self):
        """Test that nesting beyond the decoder's recursion limit is a format error."""
        raw = '{"a": ' + "[" * 100000 + "]" * 100000 + "}"
        with pytest.raises(UpstreamFormatError):
            parse_analysis(raw)

    def test_missing_fields_raises(self):
        """Test a block missing required sections."""
        with pytest.raises(UpstreamFormatError):
            parse_analysis('{"repair_description": {"current_state": "x"}}')


class TestFallback:
    """Tests for the fallback payload."""

    def test_current_state_is_raw_text(self):
        """Test that the raw response is preserved verbatim."""
        raw = "The beam shows a 2 mm crack.\nNo JSON, sorry."
        payload = build_fallback_payload(raw)

        assert payload.repair_description.current_state == raw
        assert payload.repair_description.completion_requirements == "See detailed analysis above"
        assert payload.cost_estimation == FALLBACK_COST_ESTIMATION
        assert payload.timeline == FALLBACK_TIMELINE

    def test_fallback_figures(self):
        """Test the placeholder figures."""
        assert FALLBACK_COST_ESTIMATION.total == "₹3,00,000 INR"
        assert FALLBACK_COST_ESTIMATION.breakdown.labor == "₹1,50,000 INR"
        assert FALLBACK_TIMELINE.estimated_duration == "3 months"
        assert len(FALLBACK_TIMELINE.phases) == 2


class TestParseOrFallback:
    """Tests for parse_or_fallback function."""

    def test_parsed(self, sample_analysis_response):
        """Test that a valid response is not replaced."""
        payload, used_fallback = parse_or_fallback(sample_analysis_response)
        assert not used_fallback
        assert payload.timeline.estimated_duration == "6 weeks"

    def test_falls_back(self):
        """Test degradation on an unstructured response."""
        payload, used_fallback = parse_or_fallback("free text only")
        assert used_fallback
        assert payload.repair_description.current_state == "free text only"

    def test_deeply_nested_falls_back(self):
        """Test that a pathologically nested object degrades instead of raising."""
        raw = '{"a": ' + "[" * 100000 + "]" * 100000 + "}"
        payload, used_fallback = parse_or_fallback(raw)
        assert used_fallback
        assert payload.repair_description.current_state == raw
