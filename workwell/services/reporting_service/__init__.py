"""Reporting Service: annual psychosocial work environment reports.

Components:
- reporter.py: LongitudinalReporter pooling a year of submissions
- summary.py: Markdown management summary with stable headings
- handler.py: Flask HTTP endpoints (/report/<year>, /report/<year>/summary)
"""

from .reporter import (
    LongitudinalReporter,
    Report,
    SectionAverage,
    Trend,
    RiskDistribution,
    OpenFeedback,
    year_bounds,
)
from .summary import render_management_summary, score_label

__all__ = [
    "LongitudinalReporter",
    "Report",
    "SectionAverage",
    "Trend",
    "RiskDistribution",
    "OpenFeedback",
    "year_bounds",
    "render_management_summary",
    "score_label",
]
