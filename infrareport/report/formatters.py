"""Report formatting and rendering for the terminal."""

import json
import textwrap
from typing import Optional

from infrareport.report.models import ReportData

DEFAULT_WRAP_WIDTH = 80


def _section(title: str) -> list[str]:
    return ["", title, "-" * len(title)]


def _describe_image_ref(ref: str) -> str:
    """Shorten a data URI to something printable."""
    if ref.startswith("data:"):
        mime = ref[len("data:"):].split(";", 1)[0]
        return f"<inline {mime}, {len(ref)} chars>"
    return ref


def render_description_lines(description: str, width: int) -> list[str]:
    """Render the serialized repair description as labelled paragraphs.

    Falls back to the raw text when it is not a JSON object.
    """
    try:
        sections = json.loads(description)
    except json.JSONDecodeError:
        sections = None

    if not isinstance(sections, dict):
        return textwrap.wrap(description, width=width) or [description]

    lines = []
    for key, value in sections.items():
        label = key.replace("_", " ").title()
        lines.append(f"{label}:")
        items = value if isinstance(value, list) else [value]
        for item in items:
            text = str(item)
            for paragraph in text.splitlines() or [""]:
                wrapped = textwrap.wrap(
                    paragraph, width=width, initial_indent="  ", subsequent_indent="  "
                )
                lines.extend(wrapped or [""])
    return lines


def render_report(
    report: ReportData,
    original_source: Optional[str] = None,
    width: int = DEFAULT_WRAP_WIDTH,
) -> str:
    """Render a ReportData into a plain-text report.

    Args:
        report: The finished report.
        original_source: Where the "before" image came from, if known.
        width: Wrap width for paragraphs.

    Returns:
        The formatted report.
    """
    lines = ["Infrastructure Completion Report", "=" * 32]

    lines.extend(_section("Before / After"))
    if original_source:
        lines.append(f"  Before: {original_source}")
    lines.append(f"  After:  {_describe_image_ref(report.repaired_image_url)}")

    lines.extend(_section("Repair Plan"))
    lines.extend(render_description_lines(report.repair_description, width))

    cost = report.cost_estimation
    lines.extend(_section("Cost Estimation"))
    lines.append(f"  Total:            {cost.total}")
    lines.append(f"  Materials:        {cost.breakdown.materials}")
    lines.append(f"  Labor:            {cost.breakdown.labor}")
    lines.append(f"  Permits:          {cost.breakdown.permits}")
    lines.append(f"  Safety equipment: {cost.breakdown.safety_equipment}")

    lines.extend(_section("Timeline"))
    lines.append(f"  Estimated duration: {report.timeline.estimated_duration}")
    for phase in report.timeline.phases:
        lines.extend(
            textwrap.wrap(phase, width=width, initial_indent="  - ", subsequent_indent="    ")
        )

    return "\n".join(lines) + "\n"


def report_to_json(report: ReportData) -> str:
    """Serialize a ReportData as indented JSON."""
    return report.model_dump_json(indent=2)
