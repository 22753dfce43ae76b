"""Measure rule table for the remediation synthesizer.

Every rule whose condition holds contributes its measures; rules are not
mutually exclusive. The follow-up survey rule always fires, so a
synthesizer run never produces zero measures.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import FrozenSet, List, Sequence, Tuple

from workwell.shared.models import (
    CriticalIncident,
    IncidentType,
    RiskLevel,
    SectionScore,
)
from workwell.services.survey_analysis.config import (
    LEADERSHIP_AND_SUPPORT,
    WORKLOAD,
)


@dataclass(frozen=True)
class RemediationContext:
    """Inputs every rule may inspect."""
    sections: Tuple[SectionScore, ...]
    incidents: Tuple[CriticalIncident, ...]

    @property
    def high_risk_sections(self) -> List[SectionScore]:
        return [s for s in self.sections if s.risk_level == RiskLevel.HIGH]


@dataclass(frozen=True)
class MeasureDraft:
    """A measure before it is attached to a risk and persisted."""
    title: str
    description: str
    due_in_days: int


class MeasureRule(ABC):
    """One row of the measure rule table."""

    @abstractmethod
    def drafts(self, context: RemediationContext) -> List[MeasureDraft]:
        pass


@dataclass(frozen=True)
class IncidentRule(MeasureRule):
    """Fires once when any incident of the given types was reported."""
    incident_types: FrozenSet[IncidentType]
    title: str
    description: str
    due_in_days: int

    def drafts(self, context: RemediationContext) -> List[MeasureDraft]:
        if any(i.incident_type in self.incident_types for i in context.incidents):
            return [MeasureDraft(self.title, self.description, self.due_in_days)]
        return []


@dataclass(frozen=True)
class UrgentRecommendationRule(MeasureRule):
    """One measure per urgent recommendation of each HIGH section."""
    due_in_days: int

    def drafts(self, context: RemediationContext) -> List[MeasureDraft]:
        drafts = []
        for section in context.high_risk_sections:
            critical = "\n".join(f"- {label}" for label in section.critical_fields)
            for recommendation in section.recommendations:
                if not recommendation.urgent:
                    continue
                drafts.append(MeasureDraft(
                    title=f"{section.section}: {recommendation.text}",
                    description=(
                        f"The psychosocial survey identified high risk within {section.section}.\n\n"
                        f"Critical areas:\n{critical}\n\n"
                        f"Recommended action: {recommendation.text}"
                    ),
                    due_in_days=self.due_in_days,
                ))
        return drafts


@dataclass(frozen=True)
class HighSectionRule(MeasureRule):
    """Fires once when the named section is HIGH."""
    section: str
    title: str
    description: str
    due_in_days: int

    def drafts(self, context: RemediationContext) -> List[MeasureDraft]:
        if any(s.section == self.section for s in context.high_risk_sections):
            return [MeasureDraft(self.title, self.description, self.due_in_days)]
        return []


@dataclass(frozen=True)
class StandingRule(MeasureRule):
    """Fires on every run."""
    title: str
    description: str
    due_in_days: int

    def drafts(self, context: RemediationContext) -> List[MeasureDraft]:
        return [MeasureDraft(self.title, self.description, self.due_in_days)]


URGENT_HARASSMENT_TITLE = "URGENT: Handle bullying/harassment"
WORKLOAD_DIALOGUE_TITLE = "Dialogue meeting: Workload and prioritisation"
LEADERSHIP_TRAINING_TITLE = "Leadership training: Psychosocial work environment"
FOLLOW_UP_SURVEY_TITLE = "New psychosocial survey (follow-up)"

DEFAULT_MEASURE_RULES: Tuple[MeasureRule, ...] = (
    IncidentRule(
        incident_types=frozenset({IncidentType.BULLYING, IncidentType.HARASSMENT}),
        title=URGENT_HARASSMENT_TITLE,
        description=(
            "Reported cases of bullying or harassment require immediate follow-up "
            "under the Working Environment Act section 4-3.\n\n"
            "Steps:\n"
            "1. Inform the parties involved about the report\n"
            "2. Carry out an investigation\n"
            "3. Put the necessary measures in place\n"
            "4. Ensure follow-up and evaluation\n\n"
            "Consider external assistance (occupational health service, legal counsel)."
        ),
        due_in_days=7,
    ),
    UrgentRecommendationRule(due_in_days=14),
    HighSectionRule(
        section=WORKLOAD,
        title=WORKLOAD_DIALOGUE_TITLE,
        description=(
            "Hold a meeting with the employees concerned to:\n"
            "- Map the workload\n"
            "- Prioritise work tasks\n"
            "- Identify possible improvements\n"
            "- Assess the need for additional resources"
        ),
        due_in_days=14,
    ),
    HighSectionRule(
        section=LEADERSHIP_AND_SUPPORT,
        title=LEADERSHIP_TRAINING_TITLE,
        description=(
            "Required training for managers in:\n"
            "- Working Environment Act section 4-3 (psychosocial work environment)\n"
            "- Preventing stress and strain\n"
            "- Conflict handling\n"
            "- Supporting employees\n\n"
            "Consider an external course or occupational health assistance."
        ),
        due_in_days=30,
    ),
    StandingRule(
        title=FOLLOW_UP_SURVEY_TITLE,
        description=(
            "Carry out a new survey to evaluate the effect of the measures put in place.\n\n"
            "This ensures the systematic follow-up required by the internal control regulations."
        ),
        due_in_days=90,
    ),
)


def draft_measures(
    context: RemediationContext,
    rules: Sequence[MeasureRule] = DEFAULT_MEASURE_RULES,
) -> List[MeasureDraft]:
    """Apply every rule in table order."""
    drafts = []
    for rule in rules:
        drafts.extend(rule.drafts(context))
    return drafts
