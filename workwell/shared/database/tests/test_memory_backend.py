"""Tests for the in-memory collaborator backend."""
import pytest
from datetime import datetime, timedelta, timezone

from workwell.shared.database import DuplicateError, InMemoryBackend
from workwell.shared.models import (
    Measure,
    Risk,
    RiskCategory,
    RiskStatus,
    Submission,
    SubmissionStatus,
    TenantRole,
)

JAN_1 = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def backend():
    return InMemoryBackend()


def make_submission(submission_id, submitted_at, status=SubmissionStatus.SUBMITTED,
                    tenant_id="tenant_001", category="wellbeing"):
    return Submission(
        id=submission_id,
        tenant_id=tenant_id,
        category=category,
        status=status,
        submitted_at=submitted_at,
    )


def make_risk(created_at=JAN_1, tenant_id="tenant_001", risk_id=None):
    return Risk(
        tenant_id=tenant_id,
        title="Strained psychosocial work environment",
        category=RiskCategory.HEALTH,
        likelihood=3,
        consequence=4,
        status=RiskStatus.OPEN,
        description="test",
        id=risk_id,
        created_at=created_at,
    )


class TestSubmissions:
    """Tests for SubmissionSource behaviour."""

    def test_get_missing_submission_returns_none(self, backend):
        assert backend.get_submission("missing") is None

    def test_get_submission(self, backend):
        submission = make_submission("sub_1", JAN_1)
        backend.add_submission(submission)

        assert backend.get_submission("sub_1") is submission

    def test_find_uses_half_open_window(self, backend):
        backend.add_submission(make_submission("start", JAN_1))
        backend.add_submission(make_submission("end", datetime(2026, 1, 1, tzinfo=timezone.utc)))

        found = backend.find_submissions(
            "tenant_001", "wellbeing", JAN_1, datetime(2026, 1, 1, tzinfo=timezone.utc),
            [SubmissionStatus.SUBMITTED],
        )

        assert [s.id for s in found] == ["start"]

    def test_find_filters_status_category_and_tenant(self, backend):
        backend.add_submission(make_submission("ok", JAN_1 + timedelta(days=1)))
        backend.add_submission(make_submission(
            "draft", JAN_1 + timedelta(days=1), status=SubmissionStatus.DRAFT))
        backend.add_submission(make_submission(
            "other_form", JAN_1 + timedelta(days=1), category="incident"))
        backend.add_submission(make_submission(
            "other_tenant", JAN_1 + timedelta(days=1), tenant_id="tenant_002"))

        found = backend.find_submissions(
            "tenant_001", "wellbeing", JAN_1, JAN_1 + timedelta(days=365),
            [SubmissionStatus.SUBMITTED, SubmissionStatus.APPROVED],
        )

        assert [s.id for s in found] == ["ok"]

    def test_naive_window_treated_as_utc(self, backend):
        backend.add_submission(make_submission("sub_1", JAN_1 + timedelta(hours=1)))

        found = backend.find_submissions(
            "tenant_001", "wellbeing", datetime(2025, 1, 1), datetime(2025, 1, 2),
            [SubmissionStatus.SUBMITTED],
        )

        assert len(found) == 1


class TestTenantDirectory:
    """Tests for role lookups."""

    def test_first_user_follows_insertion_order(self, backend):
        backend.add_member("tenant_001", "user_a", TenantRole.ADMIN)
        backend.add_member("tenant_001", "user_b", TenantRole.ADMIN)

        assert backend.find_first_user_with_role("tenant_001", TenantRole.ADMIN) == "user_a"

    def test_no_member_returns_none(self, backend):
        backend.add_member("tenant_002", "user_a", TenantRole.SAFETY_OFFICER)

        assert backend.find_first_user_with_role("tenant_001", TenantRole.SAFETY_OFFICER) is None
        assert backend.find_users_with_role("tenant_001", TenantRole.SAFETY_OFFICER) == []

    def test_users_with_role_filters_role(self, backend):
        backend.add_member("tenant_001", "user_a", TenantRole.ADMIN)
        backend.add_member("tenant_001", "user_b", TenantRole.OCCUPATIONAL_HEALTH)
        backend.add_member("tenant_001", "user_c", TenantRole.OCCUPATIONAL_HEALTH)

        users = backend.find_users_with_role("tenant_001", TenantRole.OCCUPATIONAL_HEALTH)

        assert users == ["user_b", "user_c"]


class TestRiskAndMeasureStores:
    """Tests for risk and measure persistence."""

    def test_create_risk_assigns_id(self, backend):
        risk_id = backend.create_risk(make_risk())

        assert risk_id.startswith("risk_")
        assert backend.risks[0].id == risk_id

    def test_create_risk_keeps_given_id(self, backend):
        assert backend.create_risk(make_risk(risk_id="risk_fixed")) == "risk_fixed"

    def test_duplicate_risk_id_raises(self, backend):
        backend.create_risk(make_risk(risk_id="risk_fixed"))

        with pytest.raises(DuplicateError):
            backend.create_risk(make_risk(risk_id="risk_fixed"))

    def test_find_risks_in_period(self, backend):
        backend.create_risk(make_risk(created_at=JAN_1 + timedelta(days=3)))
        backend.create_risk(make_risk(created_at=JAN_1 - timedelta(days=3)))

        found = backend.find_risks("tenant_001", JAN_1, JAN_1 + timedelta(days=365))

        assert len(found) == 1

    def test_create_and_find_measure(self, backend):
        measure = Measure(
            tenant_id="tenant_001",
            risk_id="risk_1",
            title="Follow up",
            description="",
            due_at=JAN_1 + timedelta(days=90),
            created_at=JAN_1 + timedelta(days=1),
        )

        measure_id = backend.create_measure(measure)
        found = backend.find_measures("tenant_001", JAN_1, JAN_1 + timedelta(days=365))

        assert measure_id.startswith("measure_")
        assert [m.id for m in found] == [measure_id]
