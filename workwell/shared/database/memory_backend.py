"""In-memory implementation of every collaborator contract.

Dict-backed and process-local. Used for local development and tests;
nothing is shared between instances.
"""
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple

from workwell.shared.models import (
    Measure,
    Risk,
    Submission,
    SubmissionStatus,
    TenantRole,
)
from .protocols import MeasureStore, RiskStore, SubmissionSource, TenantDirectory
from .repository import DuplicateError

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class InMemoryBackend(SubmissionSource, TenantDirectory, RiskStore, MeasureStore):
    """Stores submissions, memberships, risks and measures in plain dicts."""

    def __init__(self):
        self._submissions: Dict[str, Submission] = {}
        self._memberships: List[Tuple[str, str, TenantRole]] = []
        self._risks: Dict[str, Risk] = {}
        self._measures: Dict[str, Measure] = {}

    # -- seeding -----------------------------------------------------------

    def add_submission(self, submission: Submission) -> None:
        self._submissions[submission.id] = submission

    def add_member(self, tenant_id: str, user_id: str, role: TenantRole) -> None:
        """Register a tenant member. Insertion order is lookup order."""
        self._memberships.append((tenant_id, user_id, role))

    @property
    def risks(self) -> List[Risk]:
        return list(self._risks.values())

    @property
    def measures(self) -> List[Measure]:
        return list(self._measures.values())

    # -- SubmissionSource --------------------------------------------------

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        return self._submissions.get(submission_id)

    def find_submissions(
        self,
        tenant_id: str,
        category: str,
        start: datetime,
        end: datetime,
        statuses: Sequence[SubmissionStatus],
    ) -> List[Submission]:
        start, end = _as_utc(start), _as_utc(end)
        return [
            s for s in self._submissions.values()
            if s.tenant_id == tenant_id
            and s.category == category
            and s.status in statuses
            and start <= s.submitted_at < end
        ]

    # -- TenantDirectory ---------------------------------------------------

    def find_first_user_with_role(self, tenant_id: str, role: TenantRole) -> Optional[str]:
        users = self.find_users_with_role(tenant_id, role)
        return users[0] if users else None

    def find_users_with_role(self, tenant_id: str, role: TenantRole) -> List[str]:
        return [
            user_id for member_tenant, user_id, member_role in self._memberships
            if member_tenant == tenant_id and member_role == role
        ]

    # -- RiskStore ---------------------------------------------------------

    def create_risk(self, risk: Risk) -> str:
        risk_id = risk.id or f"risk_{uuid.uuid4().hex[:12]}"
        if risk_id in self._risks:
            raise DuplicateError(f"risk {risk_id} already exists")
        self._risks[risk_id] = replace(risk, id=risk_id)
        logger.debug("MEMORY_RISK_CREATED", extra={"risk_id": risk_id})
        return risk_id

    def find_risks(self, tenant_id: str, start: datetime, end: datetime) -> List[Risk]:
        start, end = _as_utc(start), _as_utc(end)
        return [
            r for r in self._risks.values()
            if r.tenant_id == tenant_id and start <= _as_utc(r.created_at) < end
        ]

    # -- MeasureStore ------------------------------------------------------

    def create_measure(self, measure: Measure) -> str:
        measure_id = measure.id or f"measure_{uuid.uuid4().hex[:12]}"
        if measure_id in self._measures:
            raise DuplicateError(f"measure {measure_id} already exists")
        self._measures[measure_id] = replace(measure, id=measure_id)
        logger.debug("MEMORY_MEASURE_CREATED", extra={"measure_id": measure_id})
        return measure_id

    def find_measures(self, tenant_id: str, start: datetime, end: datetime) -> List[Measure]:
        start, end = _as_utc(start), _as_utc(end)
        return [
            m for m in self._measures.values()
            if m.tenant_id == tenant_id and start <= _as_utc(m.created_at) < end
        ]
