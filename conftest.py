"""Shared pytest fixtures for Workwell service tests."""
import pytest
from datetime import datetime, timezone

from workwell.shared.models import (
    FieldType,
    Submission,
    SubmissionStatus,
    SurveyField,
    SurveyResponseValue,
)


def build_submission(
    submission_id="sub_1",
    numeric=None,
    frequency=None,
    free_text=None,
    tenant_id="tenant_001",
    category="wellbeing",
    status=SubmissionStatus.SUBMITTED,
    submitted_at=None,
):
    """Build a submission from {label: raw_value} mappings per field type."""
    fields, values = [], []
    groups = (
        (numeric or {}, FieldType.NUMERIC_SCALE),
        (frequency or {}, FieldType.CATEGORICAL_FREQUENCY),
        (free_text or {}, FieldType.FREE_TEXT),
    )
    for answers, field_type in groups:
        for label, raw in answers.items():
            field_id = f"{submission_id}_field_{len(fields)}"
            fields.append(SurveyField(id=field_id, label=label, field_type=field_type))
            values.append(SurveyResponseValue(
                field_id=field_id, submission_id=submission_id, raw_value=raw))

    return Submission(
        id=submission_id,
        tenant_id=tenant_id,
        category=category,
        status=status,
        submitted_at=submitted_at or datetime(2025, 3, 1, tzinfo=timezone.utc),
        fields=fields,
        values=values,
    )


@pytest.fixture
def make_submission():
    """Factory fixture for survey submissions."""
    return build_submission


@pytest.fixture
def scenario_submission():
    """Two HIGH sections, one LOW section and a bullying disclosure."""
    return build_submission(
        numeric={
            "Workload this week": "2",
            "Support from manager": "2",
            "Team atmosphere": "5",
        },
        frequency={"Have you experienced bullying?": "Sometimes"},
    )
