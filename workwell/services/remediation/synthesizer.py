"""Remediation synthesizer - turns an actionable survey into a risk and measures.

Creates exactly one Risk per run, a rule-driven set of Measures, and
notifies the occupational health and safety role groups.

Runs are not deduplicated: synthesizing the same submission twice
creates two independent Risk+Measure sets. Risk and Measures are written
one at a time without a surrounding transaction.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple

from workwell.shared.database import MeasureStore, RiskStore, TenantDirectory
from workwell.shared.models import (
    CriticalIncident,
    Measure,
    MeasureCategory,
    MeasureStatus,
    Risk,
    RiskCategory,
    RiskLevel,
    RiskStatus,
    SectionScore,
    TenantRole,
    utc_now,
)
from workwell.services.survey_analysis.config import OFTEN, SOMETIMES
from .measure_rules import (
    DEFAULT_MEASURE_RULES,
    MeasureRule,
    RemediationContext,
    draft_measures,
)
from .notifier import NotificationDispatcher

logger = logging.getLogger(__name__)

RISK_TITLE = "Strained psychosocial work environment"
RISK_CONTEXT = "Psychosocial survey"
RISK_CONSEQUENCE = 4  # Serious: sick leave, reduced wellbeing

# Priority order for the default risk owner
OWNER_ROLES: Tuple[TenantRole, ...] = (
    TenantRole.SAFETY_OFFICER,
    TenantRole.OCCUPATIONAL_HEALTH,
    TenantRole.ADMIN,
)

NOTIFY_ROLES: Tuple[TenantRole, ...] = (
    TenantRole.OCCUPATIONAL_HEALTH,
    TenantRole.SAFETY_OFFICER,
)
NOTIFICATION_TITLE = "Psychosocial risk identified"

LEVEL_MARKERS = {
    RiskLevel.HIGH: "[HIGH]",
    RiskLevel.MEDIUM: "[MEDIUM]",
    RiskLevel.LOW: "[LOW]",
}


@dataclass(frozen=True)
class SynthesisResult:
    """What a synthesizer run persisted."""
    risk_id: str
    owner_id: Optional[str]
    likelihood: int
    measure_ids: Tuple[str, ...] = field(default_factory=tuple)
    measure_titles: Tuple[str, ...] = field(default_factory=tuple)
    notifications_sent: int = 0


class PartialPersistenceError(Exception):
    """The risk was created but a measure could not be stored.

    Records created before the failure are kept. The partial result and
    the underlying error are attached for the caller.
    """

    def __init__(self, result: SynthesisResult, cause: Exception):
        super().__init__(
            f"Risk {result.risk_id} created with {len(result.measure_ids)} measure(s) "
            f"before failure: {cause}"
        )
        self.result = result
        self.cause = cause


def calculate_likelihood(overall_score: float, incidents: Sequence[CriticalIncident]) -> int:
    """Likelihood 1-5 from incident frequency, else from the overall score."""
    frequencies = {i.frequency for i in incidents}
    if OFTEN in frequencies:
        return 5
    if SOMETIMES in frequencies:
        return 4
    if overall_score < 2.5:
        return 4
    if overall_score < 3.5:
        return 3
    return 2


def build_risk_description(
    sections: Sequence[SectionScore],
    incidents: Sequence[CriticalIncident],
    overall_score: float,
) -> str:
    """Markdown narrative stored on the risk record."""
    lines = [
        "**Psychosocial survey - automated analysis**",
        "",
        f"**Overall score:** {overall_score:.2f}/5",
        "",
    ]

    if incidents:
        lines.append("**CRITICAL CONDITIONS:**")
        for incident in incidents:
            lines.append(f"- {incident.incident_type.value}: {incident.frequency}")
        lines.append("")

    lines.append("**Section assessment:**")
    lines.append("")
    for section in sections:
        lines.append(
            f"{LEVEL_MARKERS[section.risk_level]} **{section.section}** ({section.average:.2f}/5)"
        )
        if section.critical_fields:
            lines.append("   Critical areas:")
            for label in section.critical_fields:
                lines.append(f"   - {label}")
        lines.append("")

    lines.append("**Consequence:**")
    lines.append(
        "Increased risk of sick leave, reduced wellbeing, health complaints "
        "and potentially high turnover."
    )
    lines.append("")
    lines.append("**Cause:**")
    high_risk_areas = [s.section for s in sections if s.risk_level == RiskLevel.HIGH]
    if high_risk_areas:
        lines.append(
            f"The survey shows significant challenges within: {', '.join(high_risk_areas)}."
        )

    return "\n".join(lines) + "\n"


def build_notification_message(
    sections: Sequence[SectionScore],
    incidents: Sequence[CriticalIncident],
) -> str:
    if incidents:
        types = ", ".join(i.incident_type.value for i in incidents)
        return (
            f"CRITICAL: The psychosocial survey shows serious conditions ({types}). "
            "Immediate follow-up required!"
        )

    areas = [s.section for s in sections if s.risk_level == RiskLevel.HIGH]
    if not areas:
        areas = [s.section for s in sections if s.risk_level == RiskLevel.MEDIUM]
    return (
        f"The psychosocial survey shows high risk within: {', '.join(areas)}. "
        "See the risk assessment and suggested measures."
    )


class RemediationSynthesizer:
    """Creates the risk, measures and notifications for one analysis."""

    def __init__(
        self,
        risk_store: RiskStore,
        measure_store: MeasureStore,
        directory: TenantDirectory,
        dispatcher: NotificationDispatcher,
        rules: Sequence[MeasureRule] = DEFAULT_MEASURE_RULES,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize synthesizer with its collaborators.

        Args:
            risk_store: Persistence for risks
            measure_store: Persistence for measures
            directory: Tenant role lookups for the risk owner
            dispatcher: Notification fan-out
            rules: Measure rule table
            clock: Source of "now" for due dates (injected for testing)
        """
        self.risk_store = risk_store
        self.measure_store = measure_store
        self.directory = directory
        self.dispatcher = dispatcher
        self.rules = tuple(rules)
        self.clock = clock

        logger.info("REMEDIATION_SYNTHESIZER_INITIALIZED", extra={"rule_count": len(self.rules)})

    def resolve_owner(self, tenant_id: str) -> Optional[str]:
        """First member holding a prioritized role, or None."""
        for role in OWNER_ROLES:
            user_id = self.directory.find_first_user_with_role(tenant_id, role)
            if user_id:
                return user_id

        logger.warning(
            "RISK_OWNER_NOT_FOUND",
            extra={"tenant_id": tenant_id, "roles": [r.value for r in OWNER_ROLES]}
        )
        return None

    def synthesize(
        self,
        tenant_id: str,
        sections: Sequence[SectionScore],
        incidents: Sequence[CriticalIncident],
        overall_score: float,
        requires_action: bool,
    ) -> SynthesisResult:
        """Persist a risk with its measures and notify the role groups.

        Args:
            tenant_id: Tenant owning the submission
            sections: Section scores of the submission
            incidents: Critical incidents of the submission
            overall_score: Mean of all section averages
            requires_action: Must be True

        Returns:
            SynthesisResult describing what was created

        Raises:
            ValueError: If called for a submission that needs no action
            PartialPersistenceError: If a measure could not be stored
        """
        if not requires_action:
            raise ValueError("Remediation requested for a submission that requires no action")

        now = self.clock()
        likelihood = calculate_likelihood(overall_score, incidents)
        owner_id = self.resolve_owner(tenant_id)

        risk = Risk(
            tenant_id=tenant_id,
            title=RISK_TITLE,
            category=RiskCategory.HEALTH,
            likelihood=likelihood,
            consequence=RISK_CONSEQUENCE,
            status=RiskStatus.OPEN,
            description=build_risk_description(sections, incidents, overall_score),
            owner_id=owner_id,
            context=RISK_CONTEXT,
            created_at=now,
        )
        risk_id = self.risk_store.create_risk(risk)

        logger.info(
            "WELLBEING_RISK_CREATED",
            extra={
                "risk_id": risk_id,
                "tenant_id": tenant_id,
                "likelihood": likelihood,
                "risk_score": risk.score,
                "has_owner": owner_id is not None,
            }
        )

        context = RemediationContext(sections=tuple(sections), incidents=tuple(incidents))
        measure_ids: List[str] = []
        measure_titles: List[str] = []
        failure: Optional[Exception] = None

        for draft in draft_measures(context, self.rules):
            measure = Measure(
                tenant_id=tenant_id,
                risk_id=risk_id,
                title=draft.title,
                description=draft.description,
                due_at=now + timedelta(days=draft.due_in_days),
                status=MeasureStatus.PENDING,
                category=MeasureCategory.PREVENTIVE,
                responsible_id=owner_id,
                created_at=now,
            )
            try:
                measure_ids.append(self.measure_store.create_measure(measure))
            except Exception as e:
                failure = e
                logger.critical(
                    "WELLBEING_MEASURE_PERSIST_FAILED",
                    extra={
                        "risk_id": risk_id,
                        "tenant_id": tenant_id,
                        "measure_title": draft.title,
                        "measures_created": len(measure_ids),
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                )
                break
            measure_titles.append(draft.title)

        sent = self.dispatcher.notify_roles(
            tenant_id,
            NOTIFY_ROLES,
            title=NOTIFICATION_TITLE,
            message=build_notification_message(sections, incidents),
            link=f"/dashboard/risks/{risk_id}",
        )

        result = SynthesisResult(
            risk_id=risk_id,
            owner_id=owner_id,
            likelihood=likelihood,
            measure_ids=tuple(measure_ids),
            measure_titles=tuple(measure_titles),
            notifications_sent=sent,
        )

        if failure is not None:
            raise PartialPersistenceError(result, failure) from failure

        logger.info(
            "WELLBEING_MEASURES_CREATED",
            extra={
                "risk_id": risk_id,
                "tenant_id": tenant_id,
                "measure_count": len(measure_ids),
                "notifications_sent": sent,
            }
        )
        return result
