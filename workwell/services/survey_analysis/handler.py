"""Survey Analysis HTTP Handler.

Called by the forms subsystem after a psychosocial survey is submitted.

Endpoints:
- GET /health - Health check
- GET /ready - Readiness check (database connectivity)
- POST /submissions/<submission_id>/analyze - Analyze and remediate
"""
import logging
import os
from typing import Optional

from flask import Flask, jsonify

from workwell.shared.database import get_connection_manager
from workwell.services.remediation.notifier import (
    KinesisNotificationPublisher,
    NotificationDispatcher,
)
from workwell.services.remediation.risk_repository import (
    MeasureRepository,
    RiskRepository,
    TenantRoleRepository,
)
from workwell.services.remediation.synthesizer import RemediationSynthesizer
from .analyzer import InputError, PartialAnalysisError, SurveyAnalyzer
from .config import AnalysisConfig
from .section_scorer import SectionScorer
from .submission_repository import SubmissionRepository

logger = logging.getLogger(__name__)

app = Flask(__name__)


def build_analyzer() -> SurveyAnalyzer:
    """Wire the analyzer against PostgreSQL and Kinesis from env config."""
    manager = get_connection_manager()
    directory = TenantRoleRepository(manager)
    synthesizer = RemediationSynthesizer(
        risk_store=RiskRepository(manager),
        measure_store=MeasureRepository(manager),
        directory=directory,
        dispatcher=NotificationDispatcher(directory, KinesisNotificationPublisher.from_env()),
    )
    return SurveyAnalyzer(
        submissions=SubmissionRepository(manager),
        synthesizer=synthesizer,
        scorer=SectionScorer(config=AnalysisConfig.from_env()),
    )


# Global analyzer instance
_analyzer: Optional[SurveyAnalyzer] = None


def get_analyzer() -> SurveyAnalyzer:
    """Get or create the global analyzer instance."""
    global _analyzer
    if _analyzer is None:
        _analyzer = build_analyzer()
    return _analyzer


def set_analyzer(analyzer: Optional[SurveyAnalyzer]) -> None:
    """Set the global analyzer (for testing)."""
    global _analyzer
    _analyzer = analyzer


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({"status": "healthy", "service": "survey-analysis"})


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check endpoint."""
    database = get_connection_manager().health_check()
    status_code = 200 if database["healthy"] else 503
    return jsonify({
        "status": "ready" if database["healthy"] else "not_ready",
        "service": "survey-analysis",
        "database": database["status"],
    }), status_code


@app.route("/submissions/<submission_id>/analyze", methods=["POST"])
def analyze(submission_id: str):
    """Analyze a submission, creating risk and measures when required."""
    try:
        result = get_analyzer().analyze_submission(submission_id)
    except InputError as e:
        return jsonify({"error": e.reason, "submission_id": e.submission_id}), (
            404 if e.not_found else 400
        )
    except PartialAnalysisError as e:
        logger.error(
            "ANALYZE_PARTIAL_FAILURE",
            extra={
                "submission_id": submission_id,
                "risk_id": e.result.risk_id,
                "error": str(e.cause),
            }
        )
        body = e.result.to_dict()
        body.update({
            "partial": True,
            "error": f"Measures were only partially stored: {e.cause}",
        })
        return jsonify(body), 207

    return jsonify(result.to_dict())


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", "8080"))
    app.run(host="0.0.0.0", port=port)
