"""Longitudinal reporter - annual psychosocial report per tenant.

Pools every numeric answer of a calendar year across respondents,
compares with the previous year, and counts the risks and completed
measures the survey analysis produced.

The risk distribution is a coarse approximation: the number of sections
in each level bucket multiplied by the number of responses. It is not a
per-respondent tally.
"""
import logging
from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from workwell.shared.database import MeasureStore, RiskStore, SubmissionSource
from workwell.shared.models import (
    FieldType,
    IncidentType,
    MeasureStatus,
    QUALIFYING_STATUSES,
    Risk,
    RiskCategory,
    RiskLevel,
    Submission,
    SurveyCategory,
)
from workwell.services.survey_analysis.config import AnalysisConfig
from workwell.services.survey_analysis.incident_detector import CriticalIncidentDetector
from workwell.services.survey_analysis.section_scorer import SectionScorer, mean
from .summary import render_management_summary, score_label

logger = logging.getLogger(__name__)

TOP_CONCERN_LIMIT = 3
FEEDBACK_LIMIT = 5

# Free-text question label keywords per feedback group
POSITIVE_FEEDBACK_KEYWORDS = ("positive", "works well", "good")
NEGATIVE_FEEDBACK_KEYWORDS = ("negative", "challeng", "difficult", "worst")
SUGGESTION_FEEDBACK_KEYWORDS = ("suggest", "idea", "improve")

# The previous year and the next January 1st must both be representable
MIN_REPORT_YEAR = MINYEAR + 1
MAX_REPORT_YEAR = MAXYEAR - 1


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    """[Jan 1 of year, Jan 1 of next year) in UTC."""
    return (
        datetime(year, 1, 1, tzinfo=timezone.utc),
        datetime(year + 1, 1, 1, tzinfo=timezone.utc),
    )


def is_psychosocial_risk(risk: Risk) -> bool:
    """Title/category signature of risks created by survey analysis."""
    return risk.category == RiskCategory.HEALTH and "psychosocial" in risk.title.lower()


@dataclass(frozen=True)
class SectionAverage:
    """Pooled average for one section over a year."""
    section: str
    average: float
    response_count: int
    trend: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section": self.section,
            "average": round(self.average, 2),
            "response_count": self.response_count,
            "label": score_label(self.average),
            "trend": round(self.trend, 2) if self.trend is not None else None,
        }


@dataclass(frozen=True)
class Trend:
    """Overall score change against the previous year."""
    previous_score: float
    change: float

    @property
    def improving(self) -> bool:
        return self.change > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous_score": round(self.previous_score, 2),
            "change": round(self.change, 2),
            "improving": self.improving,
        }


@dataclass(frozen=True)
class RiskDistribution:
    low: int = 0
    medium: int = 0
    high: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"low": self.low, "medium": self.medium, "high": self.high}


@dataclass(frozen=True)
class OpenFeedback:
    """Free-text answers grouped by question label."""
    positive: Tuple[str, ...] = field(default_factory=tuple)
    negative: Tuple[str, ...] = field(default_factory=tuple)
    suggestions: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "positive": list(self.positive),
            "negative": list(self.negative),
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True)
class Report:
    """Annual psychosocial work environment report for one tenant."""
    tenant_id: str
    year: int
    total_responses: int
    overall_score: float
    section_averages: Tuple[SectionAverage, ...]
    critical_incident_counts: Dict[IncidentType, int]
    risk_distribution: RiskDistribution
    top_concerns: Tuple[str, ...] = field(default_factory=tuple)
    trend: Optional[Trend] = None
    generated_risks_count: int = 0
    implemented_measures_count: int = 0
    open_feedback: OpenFeedback = field(default_factory=OpenFeedback)

    @property
    def total_critical_incidents(self) -> int:
        return sum(self.critical_incident_counts.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tenant_id": self.tenant_id,
            "year": self.year,
            "total_responses": self.total_responses,
            "overall_score": round(self.overall_score, 2),
            "overall_label": score_label(self.overall_score),
            "section_averages": [s.to_dict() for s in self.section_averages],
            "critical_incident_counts": {
                incident_type.value: count
                for incident_type, count in self.critical_incident_counts.items()
            },
            "risk_distribution": self.risk_distribution.to_dict(),
            "top_concerns": list(self.top_concerns),
            "trend": self.trend.to_dict() if self.trend else None,
            "generated_risks_count": self.generated_risks_count,
            "implemented_measures_count": self.implemented_measures_count,
            "open_feedback": self.open_feedback.to_dict(),
        }


class LongitudinalReporter:
    """Builds annual reports from stored submissions, risks and measures."""

    def __init__(
        self,
        submissions: SubmissionSource,
        risks: RiskStore,
        measures: MeasureStore,
        scorer: Optional[SectionScorer] = None,
        detector: Optional[CriticalIncidentDetector] = None,
    ):
        """Initialize reporter.

        Args:
            submissions: Source of survey submissions
            risks: Risk records for the generated-risk count
            measures: Measure records for the implemented-measure count
            scorer: Section scorer providing taxonomy and value parsing
            detector: Incident detector shared with per-submission analysis
        """
        self.submissions = submissions
        self.risks = risks
        self.measures = measures
        self.scorer = scorer or SectionScorer()
        self.detector = detector or CriticalIncidentDetector()

    @property
    def config(self) -> AnalysisConfig:
        return self.scorer.config

    def _fetch_year(self, tenant_id: str, year: int) -> List[Submission]:
        start, end = year_bounds(year)
        return self.submissions.find_submissions(
            tenant_id,
            SurveyCategory.WELLBEING.value,
            start,
            end,
            QUALIFYING_STATUSES,
        )

    def _pool(self, submissions: Sequence[Submission]) -> Dict[str, List[float]]:
        pooled: Dict[str, List[float]] = {name: [] for name in self.scorer.section_names}
        for submission in submissions:
            for section, values in self.scorer.collect_values(submission).items():
                pooled[section].extend(values)
        return pooled

    def _empty_report(self, tenant_id: str, year: int) -> Report:
        return Report(
            tenant_id=tenant_id,
            year=year,
            total_responses=0,
            overall_score=0.0,
            section_averages=tuple(
                SectionAverage(section=name, average=0.0, response_count=0)
                for name in self.scorer.section_names
            ),
            critical_incident_counts={t: 0 for t in IncidentType},
            risk_distribution=RiskDistribution(),
        )

    def count_incidents(self, submissions: Sequence[Submission]) -> Dict[IncidentType, int]:
        """Per incident type, the number of submissions disclosing it."""
        counts = {t: 0 for t in IncidentType}
        for submission in submissions:
            for incident in self.detector.detect(submission):
                counts[incident.incident_type] += 1
        return counts

    def risk_distribution(
        self,
        averages: Sequence[SectionAverage],
        total_responses: int,
    ) -> RiskDistribution:
        levels = [self.config.level_for(a.average) for a in averages]
        return RiskDistribution(
            low=levels.count(RiskLevel.LOW) * total_responses,
            medium=levels.count(RiskLevel.MEDIUM) * total_responses,
            high=levels.count(RiskLevel.HIGH) * total_responses,
        )

    def top_concerns(self, averages: Sequence[SectionAverage]) -> Tuple[str, ...]:
        """Up to three sections below the LOW threshold, worst first."""
        below = [a for a in averages if a.average < self.config.low_risk_from]
        below.sort(key=lambda a: a.average)
        return tuple(a.section for a in below[:TOP_CONCERN_LIMIT])

    def collect_feedback(self, submissions: Sequence[Submission]) -> OpenFeedback:
        """Group free-text answers by keywords in their question label."""
        groups: Dict[str, List[str]] = {"positive": [], "negative": [], "suggestions": []}
        keyword_groups = (
            ("positive", POSITIVE_FEEDBACK_KEYWORDS),
            ("negative", NEGATIVE_FEEDBACK_KEYWORDS),
            ("suggestions", SUGGESTION_FEEDBACK_KEYWORDS),
        )

        for submission in submissions:
            for f in submission.fields_of_type(FieldType.FREE_TEXT):
                text = (submission.value_for(f.id) or "").strip()
                if not text:
                    continue
                label = f.label.lower()
                for group, keywords in keyword_groups:
                    if any(k in label for k in keywords):
                        groups[group].append(text)
                        break

        return OpenFeedback(
            positive=tuple(groups["positive"][:FEEDBACK_LIMIT]),
            negative=tuple(groups["negative"][:FEEDBACK_LIMIT]),
            suggestions=tuple(groups["suggestions"][:FEEDBACK_LIMIT]),
        )

    def count_remediation(self, tenant_id: str, year: int) -> Tuple[int, int]:
        """Psychosocial risks created in the year and their completed measures."""
        start, end = year_bounds(year)
        risk_ids = {
            r.id for r in self.risks.find_risks(tenant_id, start, end)
            if is_psychosocial_risk(r)
        }
        implemented = sum(
            1 for m in self.measures.find_measures(tenant_id, start, end)
            if m.status == MeasureStatus.COMPLETED and m.risk_id in risk_ids
        )
        return len(risk_ids), implemented

    def get_report(self, tenant_id: str, year: int) -> Report:
        """Build the annual report. Zero submissions yield a zeroed report."""
        logger.info("REPORT_GENERATION_STARTED", extra={"tenant_id": tenant_id, "year": year})

        submissions = self._fetch_year(tenant_id, year)
        if not submissions:
            logger.info("REPORT_EMPTY", extra={"tenant_id": tenant_id, "year": year})
            return self._empty_report(tenant_id, year)

        pooled = self._pool(submissions)

        previous = self._fetch_year(tenant_id, year - 1)
        previous_pooled = self._pool(previous) if previous else None

        averages = []
        for section, values in pooled.items():
            section_trend = None
            if previous_pooled is not None and previous_pooled[section]:
                section_trend = mean(values) - mean(previous_pooled[section])
            averages.append(SectionAverage(
                section=section,
                average=mean(values),
                response_count=len(values),
                trend=section_trend,
            ))

        overall = mean([a.average for a in averages])

        trend = None
        if previous_pooled is not None:
            previous_overall = mean([mean(v) for v in previous_pooled.values()])
            trend = Trend(previous_score=previous_overall, change=overall - previous_overall)

        generated, implemented = self.count_remediation(tenant_id, year)

        report = Report(
            tenant_id=tenant_id,
            year=year,
            total_responses=len(submissions),
            overall_score=overall,
            section_averages=tuple(averages),
            critical_incident_counts=self.count_incidents(submissions),
            risk_distribution=self.risk_distribution(averages, len(submissions)),
            top_concerns=self.top_concerns(averages),
            trend=trend,
            generated_risks_count=generated,
            implemented_measures_count=implemented,
            open_feedback=self.collect_feedback(submissions),
        )

        logger.info(
            "REPORT_GENERATION_COMPLETED",
            extra={
                "tenant_id": tenant_id,
                "year": year,
                "total_responses": report.total_responses,
                "overall_score": round(overall, 2),
                "has_trend": trend is not None,
                "critical_incidents": report.total_critical_incidents,
            }
        )
        return report

    def get_management_summary(self, tenant_id: str, year: int) -> str:
        """Markdown narrative of the annual report."""
        return render_management_summary(self.get_report(tenant_id, year))
