"""Report models and presentation (terminal text, JSON and PDF)."""

from infrareport.report.models import (
    AnalysisPayload,
    CostBreakdown,
    CostEstimation,
    RepairDescription,
    ReportData,
    Timeline,
)
from infrareport.report.formatters import render_report, report_to_json


__all__ = [
    "AnalysisPayload",
    "CostBreakdown",
    "CostEstimation",
    "RepairDescription",
    "ReportData",
    "Timeline",
    "render_report",
    "report_to_json",
]
