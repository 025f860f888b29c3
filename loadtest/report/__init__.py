"""Report module."""

from .analysis import Analysis, analyze
from .renderer import OPERATION_ORDER, render_failures, render_report, report_json

__all__ = [
    "Analysis",
    "analyze",
    "OPERATION_ORDER",
    "render_failures",
    "render_report",
    "report_json",
]
