"""Survey submission domain models.

A submission is one respondent's answers to a psychosocial survey template.
Submissions are fetched once per analysis and never modified afterwards.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple


class FieldType(Enum):
    """Question types the analysis engine understands."""
    NUMERIC_SCALE = "numeric_scale"                  # Likert scale 1-5
    CATEGORICAL_FREQUENCY = "categorical_frequency"  # Never / Rarely / Sometimes / Often
    FREE_TEXT = "free_text"


class SubmissionStatus(Enum):
    """Lifecycle states of a survey submission."""
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class SurveyCategory(Enum):
    """Form template categories relevant to this engine."""
    WELLBEING = "wellbeing"


# Submissions in these states count towards analysis and annual reports
QUALIFYING_STATUSES: Tuple[SubmissionStatus, ...] = (
    SubmissionStatus.SUBMITTED,
    SubmissionStatus.APPROVED,
)


@dataclass(frozen=True)
class SurveyField:
    """A single question on a survey template."""
    id: str
    label: str
    field_type: FieldType


@dataclass(frozen=True)
class SurveyResponseValue:
    """A respondent's raw answer to one field. None when left unanswered."""
    field_id: str
    submission_id: str
    raw_value: Optional[str] = None


@dataclass(frozen=True)
class Submission:
    """Snapshot of one completed survey instance.

    Analysis runs against a single fetched snapshot.
    """
    id: str
    tenant_id: str
    category: str
    status: SubmissionStatus
    submitted_at: datetime
    fields: Tuple[SurveyField, ...] = field(default_factory=tuple)
    values: Tuple[SurveyResponseValue, ...] = field(default_factory=tuple)
    form_id: Optional[str] = None

    def __post_init__(self):
        # Accept lists from callers while keeping the snapshot hashable
        object.__setattr__(self, "fields", tuple(self.fields))
        object.__setattr__(self, "values", tuple(self.values))
        if self.submitted_at.tzinfo is None:
            object.__setattr__(
                self, "submitted_at", self.submitted_at.replace(tzinfo=timezone.utc)
            )

    @property
    def is_wellbeing(self) -> bool:
        return self.category == SurveyCategory.WELLBEING.value

    def fields_of_type(self, field_type: FieldType) -> List[SurveyField]:
        """Return fields of the given type in template order."""
        return [f for f in self.fields if f.field_type == field_type]

    def value_for(self, field_id: str) -> Optional[str]:
        """Return the raw answer for a field, or None if there is none."""
        for value in self.values:
            if value.field_id == field_id:
                return value.raw_value
        return None
