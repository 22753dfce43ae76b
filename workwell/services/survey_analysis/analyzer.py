"""Survey analyzer - the analyze_submission entry point.

Pipeline per submission:
    fetch -> validate -> score sections -> detect incidents -> classify
    -> (if action required) synthesize risk, measures and notifications

Everything before synthesis is pure. Synthesis is the only step with
side effects and runs at most once per call.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from workwell.shared.database import SubmissionSource
from workwell.shared.models import CriticalIncident, RiskLevel, SectionScore
from workwell.services.remediation.synthesizer import (
    PartialPersistenceError,
    RemediationSynthesizer,
)
from .classifier import RiskClassifier
from .incident_detector import CriticalIncidentDetector
from .section_scorer import SectionScorer

logger = logging.getLogger(__name__)


class InputError(Exception):
    """Submission cannot be analyzed. Raised before any side effect."""

    def __init__(self, reason: str, submission_id: str, not_found: bool = False):
        super().__init__(f"{reason}: {submission_id}")
        self.reason = reason
        self.submission_id = submission_id
        self.not_found = not_found


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analyze_submission call."""
    submission_id: str
    overall_score: float
    sections: Tuple[SectionScore, ...]
    critical_incidents: Tuple[CriticalIncident, ...]
    risk_level: RiskLevel
    requires_action: bool
    risk_id: Optional[str] = None
    measure_titles: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "submission_id": self.submission_id,
            "overall_score": round(self.overall_score, 2),
            "sections": [s.to_dict() for s in self.sections],
            "critical_incidents": [i.to_dict() for i in self.critical_incidents],
            "risk_level": self.risk_level.value,
            "requires_action": self.requires_action,
            "risk_id": self.risk_id,
            "measure_titles": list(self.measure_titles),
        }


class PartialAnalysisError(Exception):
    """Analysis finished but only part of the remediation was stored.

    Carries the full analysis result, with the risk id and the titles of
    the measures that were stored, plus the underlying error.
    """

    def __init__(self, result: AnalysisResult, cause: Exception):
        super().__init__(
            f"Submission {result.submission_id} analyzed but remediation was "
            f"only partially stored: {cause}"
        )
        self.result = result
        self.cause = cause


class SurveyAnalyzer:
    """Analyzes one psychosocial survey submission end to end."""

    def __init__(
        self,
        submissions: SubmissionSource,
        synthesizer: RemediationSynthesizer,
        scorer: Optional[SectionScorer] = None,
        detector: Optional[CriticalIncidentDetector] = None,
        classifier: Optional[RiskClassifier] = None,
    ):
        """Initialize analyzer with dependencies.

        Args:
            submissions: Source of submission snapshots
            synthesizer: Remediation synthesizer for actionable results
            scorer: Section scorer (injected for testing)
            detector: Critical incident detector (injected for testing)
            classifier: Risk classifier (injected for testing)
        """
        self.submissions = submissions
        self.synthesizer = synthesizer
        self.scorer = scorer or SectionScorer()
        self.detector = detector or CriticalIncidentDetector()
        self.classifier = classifier or RiskClassifier()

        logger.info(
            "SURVEY_ANALYZER_INITIALIZED",
            extra={"sections": self.scorer.section_names}
        )

    def analyze_submission(self, submission_id: str) -> AnalysisResult:
        """Analyze a submission and remediate when action is required.

        Args:
            submission_id: Submission to analyze

        Returns:
            AnalysisResult; risk_id and measure_titles are set only when
            remediation ran

        Raises:
            InputError: Submission missing or not a wellbeing survey
            PartialAnalysisError: Risk stored but a measure was not
        """
        logger.info("SURVEY_ANALYSIS_STARTED", extra={"submission_id": submission_id})

        submission = self.submissions.get_submission(submission_id)
        if submission is None:
            raise InputError("Submission not found", submission_id, not_found=True)
        if not submission.is_wellbeing:
            logger.warning(
                "SURVEY_ANALYSIS_REJECTED",
                extra={"submission_id": submission_id, "category": submission.category}
            )
            raise InputError("Submission is not a wellbeing survey", submission_id)

        sections = self.scorer.score(submission)
        incidents = self.detector.detect(submission)
        classification = self.classifier.classify(sections, incidents)

        risk_id = None
        measure_titles: Tuple[str, ...] = ()
        failure: Optional[PartialPersistenceError] = None
        if classification.requires_action:
            try:
                synthesis = self.synthesizer.synthesize(
                    tenant_id=submission.tenant_id,
                    sections=sections,
                    incidents=incidents,
                    overall_score=classification.overall_score,
                    requires_action=classification.requires_action,
                )
            except PartialPersistenceError as e:
                failure = e
                synthesis = e.result
            risk_id = synthesis.risk_id
            measure_titles = synthesis.measure_titles

        result = AnalysisResult(
            submission_id=submission.id,
            overall_score=classification.overall_score,
            sections=tuple(sections),
            critical_incidents=tuple(incidents),
            risk_level=classification.risk_level,
            requires_action=classification.requires_action,
            risk_id=risk_id,
            measure_titles=measure_titles,
        )

        logger.info(
            "SURVEY_ANALYSIS_COMPLETED",
            extra={
                "submission_id": submission.id,
                "tenant_id": submission.tenant_id,
                "risk_level": result.risk_level.value,
                "overall_score": round(result.overall_score, 2),
                "incident_count": len(incidents),
                "risk_id": risk_id,
                "measure_count": len(measure_titles),
            }
        )
        if failure is not None:
            raise PartialAnalysisError(result, failure.cause) from failure
        return result
