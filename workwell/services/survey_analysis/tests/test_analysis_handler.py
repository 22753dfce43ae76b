"""Tests for the Survey Analysis HTTP handler."""
import pytest
from unittest.mock import MagicMock, patch

from workwell.shared.database import InMemoryBackend
from workwell.services.remediation.notifier import NotificationDispatcher
from workwell.services.remediation.synthesizer import RemediationSynthesizer
from workwell.services.survey_analysis.analyzer import InputError, SurveyAnalyzer
from workwell.services.survey_analysis.handler import app, set_analyzer


@pytest.fixture
def client():
    """Flask test client."""
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def analyzer(backend):
    sink = MagicMock()
    sink.send.return_value = True
    analyzer = SurveyAnalyzer(
        submissions=backend,
        synthesizer=RemediationSynthesizer(
            risk_store=backend,
            measure_store=backend,
            directory=backend,
            dispatcher=NotificationDispatcher(backend, sink),
        ),
    )
    set_analyzer(analyzer)
    yield analyzer
    set_analyzer(None)


class TestHealthEndpoints:

    def test_health_returns_200(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["service"] == "survey-analysis"

    def test_ready_reflects_database(self, client):
        manager = MagicMock()
        manager.health_check.return_value = {"status": "connected", "healthy": True}

        with patch(
            "workwell.services.survey_analysis.handler.get_connection_manager",
            return_value=manager,
        ):
            response = client.get("/ready")

        assert response.status_code == 200
        assert response.get_json()["status"] == "ready"

    def test_ready_returns_503_when_database_down(self, client):
        manager = MagicMock()
        manager.health_check.return_value = {"status": "error", "healthy": False}

        with patch(
            "workwell.services.survey_analysis.handler.get_connection_manager",
            return_value=manager,
        ):
            response = client.get("/ready")

        assert response.status_code == 503
        assert response.get_json()["database"] == "error"


class TestAnalyzeEndpoint:

    def test_analyze_scenario(self, client, analyzer, backend, scenario_submission):
        backend.add_submission(scenario_submission)

        response = client.post("/submissions/sub_1/analyze")

        assert response.status_code == 200
        data = response.get_json()
        assert data["risk_level"] == "HIGH"
        assert data["risk_id"] == backend.risks[0].id
        assert len(data["measure_titles"]) == 4

    def test_missing_submission_returns_404(self, client, analyzer):
        response = client.post("/submissions/missing/analyze")

        assert response.status_code == 404
        assert response.get_json()["submission_id"] == "missing"

    def test_wrong_category_returns_400(self, client, analyzer, backend, make_submission):
        backend.add_submission(make_submission(category="incident_report"))

        response = client.post("/submissions/sub_1/analyze")

        assert response.status_code == 400
        assert "wellbeing" in response.get_json()["error"]

    def test_partial_persistence_returns_full_analysis(self, client, backend, scenario_submission):
        backend.add_submission(scenario_submission)
        measure_store = MagicMock()
        measure_store.create_measure.side_effect = ["measure_1", RuntimeError("insert failed")]
        sink = MagicMock()
        sink.send.return_value = True
        set_analyzer(SurveyAnalyzer(
            submissions=backend,
            synthesizer=RemediationSynthesizer(
                risk_store=backend,
                measure_store=measure_store,
                directory=backend,
                dispatcher=NotificationDispatcher(backend, sink),
            ),
        ))

        try:
            response = client.post("/submissions/sub_1/analyze")
        finally:
            set_analyzer(None)

        assert response.status_code == 207
        data = response.get_json()
        assert data["partial"] is True
        assert "insert failed" in data["error"]
        assert data["risk_level"] == "HIGH"
        assert data["overall_score"] == 2.25
        assert len(data["sections"]) == 4
        assert data["critical_incidents"] == [{"type": "bullying", "frequency": "Sometimes"}]
        assert data["risk_id"] == backend.risks[0].id
        assert data["measure_titles"] == ["URGENT: Handle bullying/harassment"]

    def test_input_error_from_mock_analyzer(self, client):
        analyzer = MagicMock()
        analyzer.analyze_submission.side_effect = InputError("Submission not found", "x", not_found=True)
        set_analyzer(analyzer)

        try:
            response = client.post("/submissions/x/analyze")
        finally:
            set_analyzer(None)

        assert response.status_code == 404
