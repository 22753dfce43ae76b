"""Tests for survey and risk domain models."""
import pytest
from datetime import datetime, timezone

from workwell.shared.models import (
    FieldType,
    RiskCategory,
    RiskLevel,
    RiskStatus,
    Risk,
    SectionScore,
    Submission,
    SubmissionStatus,
    SurveyField,
    SurveyResponseValue,
)


class TestSubmission:

    def test_naive_timestamp_is_treated_as_utc(self):
        submission = Submission(
            id="sub_1",
            tenant_id="tenant_001",
            category="wellbeing",
            status=SubmissionStatus.SUBMITTED,
            submitted_at=datetime(2025, 3, 1),
        )

        assert submission.submitted_at.tzinfo == timezone.utc
        assert submission.is_wellbeing

    def test_lists_are_frozen_to_tuples(self):
        fields = [SurveyField("f1", "Workload this week", FieldType.NUMERIC_SCALE)]
        values = [SurveyResponseValue("f1", "sub_1", "4")]

        submission = Submission(
            id="sub_1",
            tenant_id="tenant_001",
            category="wellbeing",
            status=SubmissionStatus.SUBMITTED,
            submitted_at=datetime(2025, 3, 1, tzinfo=timezone.utc),
            fields=fields,
            values=values,
        )

        assert isinstance(submission.fields, tuple)
        assert submission.value_for("f1") == "4"
        assert submission.value_for("missing") is None
        assert submission.fields_of_type(FieldType.FREE_TEXT) == []


class TestSectionScore:

    def test_rejects_average_out_of_range(self):
        with pytest.raises(ValueError):
            SectionScore(section="Workload", average=5.5, risk_level=RiskLevel.LOW)

    def test_zero_average_is_valid(self):
        score = SectionScore(section="Workload", average=0.0, risk_level=RiskLevel.HIGH)

        assert score.to_dict()["risk_level"] == "HIGH"


class TestRisk:

    def make(self, likelihood=3, consequence=4):
        return Risk(
            tenant_id="tenant_001",
            title="Strained psychosocial work environment",
            category=RiskCategory.HEALTH,
            likelihood=likelihood,
            consequence=consequence,
            status=RiskStatus.OPEN,
            description="",
        )

    def test_score_is_product(self):
        assert self.make(3, 4).score == 12

    @pytest.mark.parametrize("likelihood,consequence", [(0, 4), (6, 4), (3, 0)])
    def test_bounds(self, likelihood, consequence):
        with pytest.raises(ValueError):
            self.make(likelihood, consequence)
