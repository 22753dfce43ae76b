"""Shared domain models for Workwell platform."""
from .survey import (
    FieldType,
    SubmissionStatus,
    SurveyCategory,
    SurveyField,
    SurveyResponseValue,
    Submission,
    QUALIFYING_STATUSES,
)
from .risk import (
    RiskLevel,
    IncidentType,
    RiskCategory,
    RiskStatus,
    MeasureStatus,
    MeasureCategory,
    TenantRole,
    Recommendation,
    SectionScore,
    CriticalIncident,
    Risk,
    Measure,
    utc_now,
)

__all__ = [
    "FieldType",
    "SubmissionStatus",
    "SurveyCategory",
    "SurveyField",
    "SurveyResponseValue",
    "Submission",
    "QUALIFYING_STATUSES",
    "RiskLevel",
    "IncidentType",
    "RiskCategory",
    "RiskStatus",
    "MeasureStatus",
    "MeasureCategory",
    "TenantRole",
    "Recommendation",
    "SectionScore",
    "CriticalIncident",
    "Risk",
    "Measure",
    "utc_now",
]
