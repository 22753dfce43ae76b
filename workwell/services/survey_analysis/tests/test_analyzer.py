"""Tests for the survey analyzer pipeline."""
import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from workwell.shared.database import InMemoryBackend
from workwell.shared.models import IncidentType, RiskLevel, TenantRole
from workwell.services.remediation.measure_rules import (
    FOLLOW_UP_SURVEY_TITLE,
    LEADERSHIP_TRAINING_TITLE,
    URGENT_HARASSMENT_TITLE,
    WORKLOAD_DIALOGUE_TITLE,
)
from workwell.services.remediation.notifier import NotificationDispatcher
from workwell.services.remediation.synthesizer import RemediationSynthesizer
from workwell.services.survey_analysis.analyzer import (
    InputError,
    PartialAnalysisError,
    SurveyAnalyzer,
)
from workwell.services.survey_analysis.config import (
    LEADERSHIP_AND_SUPPORT,
    ROLE_AND_PREDICTABILITY,
    SOCIAL_ENVIRONMENT,
    WORKLOAD,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

HEALTHY_ANSWERS = {
    "Workload this week": "4",
    "Clear expectations": "4",
    "Team atmosphere": "5",
    "Support from manager": "4",
}


@pytest.fixture
def backend():
    backend = InMemoryBackend()
    backend.add_member("tenant_001", "safety_1", TenantRole.SAFETY_OFFICER)
    backend.add_member("tenant_001", "ohs_1", TenantRole.OCCUPATIONAL_HEALTH)
    return backend


@pytest.fixture
def sink():
    sink = MagicMock()
    sink.send.return_value = True
    return sink


@pytest.fixture
def analyzer(backend, sink):
    synthesizer = RemediationSynthesizer(
        risk_store=backend,
        measure_store=backend,
        directory=backend,
        dispatcher=NotificationDispatcher(backend, sink),
        clock=lambda: NOW,
    )
    return SurveyAnalyzer(submissions=backend, synthesizer=synthesizer)


class TestInputValidation:
    """Tests for rejected submissions."""

    def test_missing_submission(self, analyzer):
        with pytest.raises(InputError) as exc:
            analyzer.analyze_submission("missing")

        assert exc.value.not_found is True
        assert exc.value.submission_id == "missing"

    def test_wrong_category_rejected_without_side_effects(
        self, analyzer, backend, sink, make_submission
    ):
        backend.add_submission(make_submission(
            category="incident_report",
            numeric={"Workload this week": "1"},
        ))

        with pytest.raises(InputError) as exc:
            analyzer.analyze_submission("sub_1")

        assert exc.value.not_found is False
        assert backend.risks == []
        assert backend.measures == []
        sink.send.assert_not_called()


class TestScenario:
    """End-to-end analysis of an actionable submission."""

    def test_sections_and_incidents(self, analyzer, backend, scenario_submission):
        backend.add_submission(scenario_submission)

        result = analyzer.analyze_submission("sub_1")
        sections = {s.section: s for s in result.sections}

        assert sections[WORKLOAD].average == 2.0
        assert sections[WORKLOAD].risk_level == RiskLevel.HIGH
        assert sections[LEADERSHIP_AND_SUPPORT].average == 2.0
        assert sections[LEADERSHIP_AND_SUPPORT].risk_level == RiskLevel.HIGH
        assert sections[SOCIAL_ENVIRONMENT].average == 5.0
        assert sections[SOCIAL_ENVIRONMENT].risk_level == RiskLevel.LOW
        assert sections[ROLE_AND_PREDICTABILITY].average == 0.0
        assert [i.incident_type for i in result.critical_incidents] == [IncidentType.BULLYING]
        assert result.critical_incidents[0].frequency == "Sometimes"
        assert result.overall_score == 2.25
        assert result.risk_level == RiskLevel.HIGH
        assert result.requires_action is True

    def test_remediation_outcome(self, analyzer, backend, scenario_submission):
        backend.add_submission(scenario_submission)

        result = analyzer.analyze_submission("sub_1")

        assert result.risk_id == backend.risks[0].id
        assert result.measure_titles == (
            URGENT_HARASSMENT_TITLE,
            WORKLOAD_DIALOGUE_TITLE,
            LEADERSHIP_TRAINING_TITLE,
            FOLLOW_UP_SURVEY_TITLE,
        )

    def test_to_dict(self, analyzer, backend, scenario_submission):
        backend.add_submission(scenario_submission)

        data = analyzer.analyze_submission("sub_1").to_dict()

        assert data["risk_level"] == "HIGH"
        assert data["requires_action"] is True
        assert data["overall_score"] == 2.25
        assert data["critical_incidents"] == [{"type": "bullying", "frequency": "Sometimes"}]
        assert len(data["sections"]) == 4
        assert len(data["measure_titles"]) == 4


class TestPartialRemediation:
    """A measure fails to store after the risk was created."""

    def test_carries_full_analysis_and_cause(self, backend, sink, scenario_submission):
        backend.add_submission(scenario_submission)
        measure_store = MagicMock()
        measure_store.create_measure.side_effect = ["measure_1", RuntimeError("insert failed")]
        analyzer = SurveyAnalyzer(
            submissions=backend,
            synthesizer=RemediationSynthesizer(
                risk_store=backend,
                measure_store=measure_store,
                directory=backend,
                dispatcher=NotificationDispatcher(backend, sink),
                clock=lambda: NOW,
            ),
        )

        with pytest.raises(PartialAnalysisError) as exc:
            analyzer.analyze_submission("sub_1")

        result = exc.value.result
        assert result.submission_id == "sub_1"
        assert result.overall_score == 2.25
        assert result.risk_level == RiskLevel.HIGH
        assert len(result.sections) == 4
        assert [i.incident_type for i in result.critical_incidents] == [IncidentType.BULLYING]
        assert result.risk_id == backend.risks[0].id
        assert result.measure_titles == (URGENT_HARASSMENT_TITLE,)
        assert isinstance(exc.value.cause, RuntimeError)
        assert sink.send.call_count == 2


class TestNoAction:
    def test_low_submission_creates_nothing(self, analyzer, backend, sink, make_submission):
        backend.add_submission(make_submission(numeric=HEALTHY_ANSWERS))

        result = analyzer.analyze_submission("sub_1")

        assert result.risk_level == RiskLevel.LOW
        assert result.requires_action is False
        assert result.risk_id is None
        assert result.measure_titles == ()
        assert backend.risks == []
        sink.send.assert_not_called()

    def test_synthesizer_not_called_when_no_action(self, backend, make_submission):
        backend.add_submission(make_submission(numeric=HEALTHY_ANSWERS))
        synthesizer = MagicMock()

        SurveyAnalyzer(submissions=backend, synthesizer=synthesizer).analyze_submission("sub_1")

        synthesizer.synthesize.assert_not_called()
