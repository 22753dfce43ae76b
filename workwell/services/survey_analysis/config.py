"""Survey analysis configuration: taxonomy, thresholds and canned advice.

The section taxonomy follows the standard psychosocial survey template
(workload, role clarity, social climate, leadership), in line with
ISO 45003 guidance on psychosocial risk.
"""
import os
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from workwell.shared.models import IncidentType, Recommendation, RiskLevel


@dataclass(frozen=True)
class AnalysisConfig:
    """Score cut-points used by the scorer and classifier.

    Boundaries are strict: an average equal to a cut-point falls in the
    better bucket (2.5 is MEDIUM, 3.5 is LOW).
    """
    high_risk_below: float = 2.5
    low_risk_from: float = 3.5
    critical_value_max: float = 2.0
    scale_min: float = 1.0
    scale_max: float = 5.0

    @classmethod
    def from_env(cls) -> "AnalysisConfig":
        """Create config from environment variables.

        Environment variables:
            HIGH_RISK_BELOW: Average below which a section is HIGH (default 2.5)
            LOW_RISK_FROM: Average from which a section is LOW (default 3.5)
            CRITICAL_VALUE_MAX: Highest answer counted as critical (default 2)
        """
        return cls(
            high_risk_below=float(os.getenv("HIGH_RISK_BELOW", "2.5")),
            low_risk_from=float(os.getenv("LOW_RISK_FROM", "3.5")),
            critical_value_max=float(os.getenv("CRITICAL_VALUE_MAX", "2")),
        )

    def level_for(self, average: float) -> RiskLevel:
        if average < self.high_risk_below:
            return RiskLevel.HIGH
        if average < self.low_risk_from:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


@dataclass(frozen=True)
class SectionDefinition:
    """A named section and the label substrings that select its questions."""
    name: str
    keywords: FrozenSet[str]


WORKLOAD = "Workload"
ROLE_AND_PREDICTABILITY = "Role & predictability"
SOCIAL_ENVIRONMENT = "Social environment"
LEADERSHIP_AND_SUPPORT = "Leadership & support"

# Order is output order
SECTION_TAXONOMY: Tuple[SectionDefinition, ...] = (
    SectionDefinition(WORKLOAD, frozenset({"workload", "time", "stress", "demand"})),
    SectionDefinition(
        ROLE_AND_PREDICTABILITY,
        frozenset({"expect", "responsib", "change", "predictab"}),
    ),
    SectionDefinition(
        SOCIAL_ENVIRONMENT,
        frozenset({"atmosphere", "respect", "includ", "collaborat"}),
    ),
    SectionDefinition(
        LEADERSHIP_AND_SUPPORT,
        frozenset({"support", "leader", "feedback", "conflict", "fair"}),
    ),
)

# Answer that means "did not happen"; anything else is a disclosure
NEVER = "Never"
OFTEN = "Often"
SOMETIMES = "Sometimes"

# (label keyword, incident type), evaluated in this order
INCIDENT_KEYWORDS: Tuple[Tuple[str, IncidentType], ...] = (
    ("bullying", IncidentType.BULLYING),
    ("harassment", IncidentType.HARASSMENT),
    ("pressure", IncidentType.IMPROPER_PRESSURE),
    ("conflict", IncidentType.UNRESOLVED_CONFLICT),
)

WORKING_WELL = (Recommendation("Area is working well - keep up the good work"),)

SECTION_RECOMMENDATIONS: Dict[Tuple[str, RiskLevel], Tuple[Recommendation, ...]] = {
    (WORKLOAD, RiskLevel.HIGH): (
        Recommendation("Hold a dialogue meeting on workload without delay"),
        Recommendation("Map and prioritise work tasks"),
        Recommendation("Assess the need for additional resources"),
    ),
    (WORKLOAD, RiskLevel.MEDIUM): (
        Recommendation("Follow up workload in the next employee review"),
        Recommendation("Keep a regular dialogue about workload"),
    ),
    (ROLE_AND_PREDICTABILITY, RiskLevel.HIGH): (
        Recommendation("Clarify expectations and areas of responsibility in writing"),
        Recommendation("Establish routines for communicating changes"),
        Recommendation("Carry out a role clarification exercise"),
    ),
    (ROLE_AND_PREDICTABILITY, RiskLevel.MEDIUM): (
        Recommendation("Follow up in employee reviews"),
        Recommendation("Improve the flow of information"),
    ),
    (SOCIAL_ENVIRONMENT, RiskLevel.HIGH): (
        Recommendation("Map the collaboration climate in the team", urgent=True),
        Recommendation("Consider external assistance from occupational health"),
        Recommendation("Put measures in place to improve collaboration and inclusion"),
    ),
    (SOCIAL_ENVIRONMENT, RiskLevel.MEDIUM): (
        Recommendation("Strengthen team-building activities"),
        Recommendation("Follow up during safety rounds"),
    ),
    (LEADERSHIP_AND_SUPPORT, RiskLevel.HIGH): (
        Recommendation("Leadership training in psychosocial work environment (required)"),
        Recommendation("Hold employee reviews focused on support"),
        Recommendation("Consider changes to management or organisation"),
    ),
    (LEADERSHIP_AND_SUPPORT, RiskLevel.MEDIUM): (
        Recommendation("Leadership development in feedback and support"),
        Recommendation("Regular employee reviews"),
    ),
}


def recommendations_for(section: str, level: RiskLevel) -> Tuple[Recommendation, ...]:
    """Canned recommendations for a section at a risk level."""
    if level == RiskLevel.LOW:
        return WORKING_WELL
    return SECTION_RECOMMENDATIONS.get((section, level), ())
