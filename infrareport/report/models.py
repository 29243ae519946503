"""Report data models.

Contains Pydantic models for the structured analysis and the final report:
- RepairDescription: The narrative part of the analysis
- CostBreakdown / CostEstimation: Cost figures as display strings
- Timeline: Duration and ordered phases
- AnalysisPayload: The structured block parsed from the analysis response
- ReportData: The immutable terminal artifact of one run
"""

import json

from pydantic import BaseModel, ConfigDict, Field


class RepairDescription(BaseModel):
    """Narrative sections of the structural analysis.

    Unknown keys returned by the model are preserved.
    """

    model_config = ConfigDict(extra="allow")

    current_state: str = ""
    completion_requirements: str | list[str] = ""
    safety_measures: str | list[str] = ""
    recommendations: str | list[str] = ""


class CostBreakdown(BaseModel):
    """Cost split by category. Values are display strings (e.g. "₹25,000 INR")."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    materials: str
    labor: str
    permits: str
    safety_equipment: str


class CostEstimation(BaseModel):
    """Total cost and its breakdown."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    total: str
    breakdown: CostBreakdown


class Timeline(BaseModel):
    """Estimated duration and ordered phases."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    estimated_duration: str
    phases: tuple[str, ...] = Field(default_factory=tuple)


class AnalysisPayload(BaseModel):
    """Structured block parsed from the analysis response."""

    repair_description: RepairDescription
    cost_estimation: CostEstimation
    timeline: Timeline

    def serialized_description(self) -> str:
        """Serialize the repair description as indented JSON text."""
        return json.dumps(self.repair_description.model_dump(), indent=2, ensure_ascii=False)


class ReportData(BaseModel):
    """The finished report. Immutable once assembled."""

    model_config = ConfigDict(frozen=True)

    repaired_image_url: str
    repair_description: str
    cost_estimation: CostEstimation
    timeline: Timeline

    @classmethod
    def assemble(cls, payload: AnalysisPayload, repaired_image_url: str) -> "ReportData":
        """Build a report from a parsed analysis and the visualization result."""
        return cls(
            repaired_image_url=repaired_image_url,
            repair_description=payload.serialized_description(),
            cost_estimation=payload.cost_estimation,
            timeline=payload.timeline,
        )
