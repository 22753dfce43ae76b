"""Reporting Service HTTP Handler - annual psychosocial reports.

Endpoints:
- GET /health - Health check
- GET /ready - Readiness check (database connectivity)
- GET /report/<year> - Annual report as JSON
- GET /report/<year>/summary - Management summary as markdown
"""
import logging
import os
from typing import Optional

from flask import Flask, jsonify, request

from workwell.shared.database import get_connection_manager
from workwell.services.remediation.risk_repository import MeasureRepository, RiskRepository
from workwell.services.survey_analysis.config import AnalysisConfig
from workwell.services.survey_analysis.section_scorer import SectionScorer
from workwell.services.survey_analysis.submission_repository import SubmissionRepository
from .reporter import MAX_REPORT_YEAR, MIN_REPORT_YEAR, LongitudinalReporter

logger = logging.getLogger(__name__)

app = Flask(__name__)


def build_reporter() -> LongitudinalReporter:
    """Wire the reporter against PostgreSQL from env config."""
    manager = get_connection_manager()
    return LongitudinalReporter(
        submissions=SubmissionRepository(manager),
        risks=RiskRepository(manager),
        measures=MeasureRepository(manager),
        scorer=SectionScorer(config=AnalysisConfig.from_env()),
    )


# Global reporter instance
_reporter: Optional[LongitudinalReporter] = None


def get_reporter() -> LongitudinalReporter:
    """Get or create the global reporter instance."""
    global _reporter
    if _reporter is None:
        _reporter = build_reporter()
    return _reporter


def set_reporter(reporter: Optional[LongitudinalReporter]) -> None:
    """Set the global reporter (for testing)."""
    global _reporter
    _reporter = reporter


def _request_error(year: int) -> Optional[str]:
    """Validation message for a report request, or None when valid."""
    if not request.args.get("tenant_id"):
        return "tenant_id is required"
    if not MIN_REPORT_YEAR <= year <= MAX_REPORT_YEAR:
        return f"year must be between {MIN_REPORT_YEAR} and {MAX_REPORT_YEAR}"
    return None


@app.route("/health", methods=["GET"])
def health():
    """Health check endpoint."""
    return jsonify({"status": "healthy", "service": "reporting-service"})


@app.route("/ready", methods=["GET"])
def ready():
    """Readiness check endpoint."""
    database = get_connection_manager().health_check()
    status_code = 200 if database["healthy"] else 503
    return jsonify({
        "status": "ready" if database["healthy"] else "not_ready",
        "service": "reporting-service",
        "database": database["status"],
    }), status_code


@app.route("/report/<int:year>", methods=["GET"])
def report(year: int):
    """Annual report.

    Query params:
        tenant_id: Required - Tenant identifier
    """
    error = _request_error(year)
    if error:
        return jsonify({"error": error}), 400

    tenant_id = request.args["tenant_id"]
    result = get_reporter().get_report(tenant_id, year)
    return jsonify(result.to_dict())


@app.route("/report/<int:year>/summary", methods=["GET"])
def summary(year: int):
    """Management summary.

    Query params:
        tenant_id: Required - Tenant identifier
    """
    error = _request_error(year)
    if error:
        return jsonify({"error": error}), 400

    tenant_id = request.args["tenant_id"]
    text = get_reporter().get_management_summary(tenant_id, year)
    return jsonify({"tenant_id": tenant_id, "year": year, "summary": text})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", "8080"))
    app.run(host="0.0.0.0", port=port)
