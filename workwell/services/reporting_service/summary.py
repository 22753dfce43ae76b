"""Management summary renderer.

Produces a markdown narrative of an annual report with stable headings,
so it can be embedded in larger documents such as the annual safety
plan. Rendering is deterministic: the same report always yields the
same text.
"""
from typing import List, Tuple

from workwell.shared.models import IncidentType

SCORE_LABELS: Tuple[Tuple[float, str], ...] = (
    (4.0, "Very good"),
    (3.5, "Good"),
    (3.0, "Satisfactory"),
    (2.5, "Fair"),
    (2.0, "Poor"),
)

INCIDENT_LABELS = {
    IncidentType.BULLYING: "Bullying",
    IncidentType.HARASSMENT: "Harassment",
    IncidentType.IMPROPER_PRESSURE: "Improper pressure",
    IncidentType.UNRESOLVED_CONFLICT: "Unresolved conflicts",
}

INCIDENT_WARNING = (
    "**IMPORTANT:** These issues require immediate follow-up by management "
    "together with the safety officer."
)


def score_label(score: float) -> str:
    """Human label for a 1-5 score."""
    for floor, label in SCORE_LABELS:
        if score >= floor:
            return label
    return "Very poor"


def assessment_for(overall_score: float) -> str:
    if overall_score >= 3.5:
        return (
            "The psychosocial work environment is assessed as satisfactory. "
            "Keep up the good work."
        )
    if overall_score >= 2.5:
        return (
            "The psychosocial work environment has areas for improvement "
            "that must be followed up."
        )
    return "The psychosocial work environment requires immediate follow-up and action."


def _signed(value: float) -> str:
    return f"{'+' if value > 0 else ''}{value:.2f}"


def render_management_summary(report) -> str:
    """Render a Report as markdown.

    Headings, in order: title, "Section Scores", "Critical incidents
    reported" (only when any were reported), "Main Concerns", "Actions",
    followed by the closing assessment line.
    """
    lines: List[str] = [
        f"# Psychosocial Work Environment {report.year}",
        "",
        f"**Total responses:** {report.total_responses}",
        f"**Overall score:** {report.overall_score:.2f}/5.0 ({score_label(report.overall_score)})",
        "",
    ]

    if report.trend is not None:
        direction = "improving" if report.trend.improving else "declining"
        lines.append(
            f"**Trend:** {_signed(report.trend.change)} from {report.year - 1} "
            f"({report.trend.previous_score:.2f}), {direction}"
        )
        lines.append("")

    lines.append("## Section Scores")
    for section in report.section_averages:
        line = (
            f"- {section.section}: {section.average:.2f} "
            f"({score_label(section.average)}, {section.response_count} answers)"
        )
        if section.trend is not None:
            line += f", {_signed(section.trend)} from last year"
        lines.append(line)
    lines.append("")

    total_critical = report.total_critical_incidents
    if total_critical > 0:
        lines.append(f"## Critical incidents reported: {total_critical}")
        for incident_type, label in INCIDENT_LABELS.items():
            count = report.critical_incident_counts.get(incident_type, 0)
            if count > 0:
                lines.append(f"- {label}: {count}")
        lines.append("")
        lines.append(INCIDENT_WARNING)
        lines.append("")

    lines.append("## Main Concerns")
    if report.top_concerns:
        lines.extend(f"- {concern}" for concern in report.top_concerns)
    else:
        lines.append("- No sections below the target level")
    lines.append("")

    lines.append("## Actions")
    lines.append(f"- Risk assessments created: {report.generated_risks_count}")
    lines.append(f"- Measures implemented: {report.implemented_measures_count}")
    lines.append("")

    lines.append(f"**Assessment:** {assessment_for(report.overall_score)}")
    return "\n".join(lines) + "\n"
