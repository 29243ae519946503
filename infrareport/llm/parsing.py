"""JSON parsing and validation utilities for analysis responses.

Contains functions for turning the raw analysis text into a report payload:
- extract_json_block: Find the first balanced {...} block in free text
- parse_analysis: Parse and validate the block into an AnalysisPayload
- build_fallback_payload: Deterministic payload preserving the raw text
- parse_or_fallback: parse_analysis, degrading to the fallback on failure
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError as SchemaError

from infrareport.exceptions import UpstreamFormatError
from infrareport.report.models import (
    AnalysisPayload,
    CostBreakdown,
    CostEstimation,
    RepairDescription,
    Timeline,
)

logger = logging.getLogger(__name__)

# Placeholder figures used when the response carries no usable structure
FALLBACK_COST_ESTIMATION = CostEstimation(
    total="₹3,00,000 INR",
    breakdown=CostBreakdown(
        materials="₹1,00,000 INR",
        labor="₹1,50,000 INR",
        permits="₹25,000 INR",
        safety_equipment="₹25,000 INR",
    ),
)

FALLBACK_TIMELINE = Timeline(
    estimated_duration="3 months",
    phases=(
        "Phase 1: Initial assessment and planning",
        "Phase 2: Construction and completion",
    ),
)


def extract_json_block(text: str) -> Optional[str]:
    """Return the first balanced JSON object embedded in text.

    Braces inside string literals (including escaped quotes) are ignored, so
    markdown fences and prose around the object do not matter.

    Args:
        text: The raw response text.

    Returns:
        The substring from the first "{" to its matching "}", or None.
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from this brace; try the next one
        start = text.find("{", start + 1)
    return None


def parse_analysis(raw_response: str) -> AnalysisPayload:
    """Parse the analysis response into a structured payload.

    Args:
        raw_response: The raw text response from the model.

    Returns:
        The validated AnalysisPayload.

    Raises:
        UpstreamFormatError: If no block is found, it is not valid JSON, or it
            does not match the expected schema.
    """
    block = extract_json_block(raw_response)
    if block is None:
        raise UpstreamFormatError("No JSON object found in analysis response")

    try:
        parsed = json.loads(block)
    except (json.JSONDecodeError, RecursionError) as e:
        raise UpstreamFormatError(f"Failed to parse analysis response as JSON: {e}")

    if not isinstance(parsed, dict):
        raise UpstreamFormatError("Analysis JSON is not an object")

    try:
        return AnalysisPayload.model_validate(parsed)
    except SchemaError as e:
        raise UpstreamFormatError(f"Analysis response does not match expected schema: {e}")


def build_fallback_payload(raw_response: str) -> AnalysisPayload:
    """Build the placeholder payload that keeps the raw analysis verbatim.

    Args:
        raw_response: The raw text response from the model.

    Returns:
        An AnalysisPayload with the raw text as the current state.
    """
    return AnalysisPayload(
        repair_description=RepairDescription(
            current_state=raw_response,
            completion_requirements="See detailed analysis above",
            safety_measures="Standard safety protocols apply",
            recommendations="Follow standard construction guidelines",
        ),
        cost_estimation=FALLBACK_COST_ESTIMATION,
        timeline=FALLBACK_TIMELINE,
    )


def parse_or_fallback(raw_response: str) -> tuple[AnalysisPayload, bool]:
    """Parse the analysis, degrading to the fallback payload on any format issue.

    Args:
        raw_response: The raw text response from the model.

    Returns:
        Tuple of (payload, used_fallback).
    """
    try:
        return parse_analysis(raw_response), False
    except UpstreamFormatError as e:
        logger.warning("Using fallback report: %s", e)
        return build_fallback_payload(raw_response), True
