"""Collaborator contracts consumed by the analysis and reporting engines.

Each contract has a PostgreSQL implementation next to the service that
owns the table, and an in-memory implementation in memory_backend.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence

from workwell.shared.models import (
    Measure,
    Risk,
    Submission,
    SubmissionStatus,
    TenantRole,
)


class SubmissionSource(ABC):
    """Read access to survey submissions."""

    @abstractmethod
    def get_submission(self, submission_id: str) -> Optional[Submission]:
        """Return the submission with fields and values, or None."""

    @abstractmethod
    def find_submissions(
        self,
        tenant_id: str,
        category: str,
        start: datetime,
        end: datetime,
        statuses: Sequence[SubmissionStatus],
    ) -> List[Submission]:
        """Return submissions with start <= submitted_at < end."""


class TenantDirectory(ABC):
    """Role lookups within a tenant."""

    @abstractmethod
    def find_first_user_with_role(self, tenant_id: str, role: TenantRole) -> Optional[str]:
        """Return the first user id holding the role, or None."""

    @abstractmethod
    def find_users_with_role(self, tenant_id: str, role: TenantRole) -> List[str]:
        """Return every user id holding the role."""


class RiskStore(ABC):
    """Persistence for Risk records."""

    @abstractmethod
    def create_risk(self, risk: Risk) -> str:
        """Persist a new risk and return its id."""

    @abstractmethod
    def find_risks(self, tenant_id: str, start: datetime, end: datetime) -> List[Risk]:
        """Return risks created with start <= created_at < end."""


class MeasureStore(ABC):
    """Persistence for Measure records.

    Measures are written one at a time; a failure on one write leaves
    earlier writes in place.
    """

    @abstractmethod
    def create_measure(self, measure: Measure) -> str:
        """Persist a new measure and return its id."""

    @abstractmethod
    def find_measures(self, tenant_id: str, start: datetime, end: datetime) -> List[Measure]:
        """Return measures created with start <= created_at < end."""
