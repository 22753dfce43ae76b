"""Risk level, incident and remediation domain models.

Derived values (SectionScore, CriticalIncident) are never persisted.
Risk and Measure are persisted side effects and are owned by the
risk-management subsystem once created.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RiskLevel(Enum):
    """Risk classification for a section or a whole submission.

    Section cut-points: average < 2.5 HIGH, < 3.5 MEDIUM, otherwise LOW.
    """
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class IncidentType(Enum):
    """Safety-critical disclosures detected from frequency questions."""
    BULLYING = "bullying"
    HARASSMENT = "harassment"
    IMPROPER_PRESSURE = "improper_pressure"
    UNRESOLVED_CONFLICT = "unresolved_conflict"


class RiskCategory(Enum):
    """Generic hazard classification used by the risk register."""
    HEALTH = "HEALTH"
    SAFETY = "SAFETY"
    ENVIRONMENT = "ENVIRONMENT"


class RiskStatus(Enum):
    OPEN = "OPEN"
    MITIGATING = "MITIGATING"
    CLOSED = "CLOSED"


class MeasureStatus(Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class MeasureCategory(Enum):
    PREVENTIVE = "PREVENTIVE"
    CORRECTIVE = "CORRECTIVE"


class TenantRole(Enum):
    """Tenant member roles involved in psychosocial follow-up."""
    SAFETY_OFFICER = "safety_officer"
    OCCUPATIONAL_HEALTH = "occupational_health"
    ADMIN = "admin"


@dataclass(frozen=True)
class Recommendation:
    """Canned advice attached to a section at a given risk level."""
    text: str
    urgent: bool = False


@dataclass(frozen=True)
class SectionScore:
    """Score for one taxonomy section of a single submission."""
    section: str
    average: float
    risk_level: RiskLevel
    critical_fields: Tuple[str, ...] = field(default_factory=tuple)
    recommendations: Tuple[Recommendation, ...] = field(default_factory=tuple)
    answered_count: int = 0

    def __post_init__(self):
        if not 0.0 <= self.average <= 5.0:
            raise ValueError(f"Section average must be 0.0-5.0, got {self.average}")

    def to_dict(self) -> dict:
        return {
            "section": self.section,
            "average": self.average,
            "risk_level": self.risk_level.value,
            "critical_fields": list(self.critical_fields),
            "recommendations": [r.text for r in self.recommendations],
            "answered_count": self.answered_count,
        }


@dataclass(frozen=True)
class CriticalIncident:
    """A non-"Never" answer to a sensitive frequency question."""
    incident_type: IncidentType
    frequency: str

    def to_dict(self) -> dict:
        return {"type": self.incident_type.value, "frequency": self.frequency}


@dataclass(frozen=True)
class Risk:
    """Hazard record created when a survey crosses the action threshold."""
    tenant_id: str
    title: str
    category: RiskCategory
    likelihood: int
    consequence: int
    status: RiskStatus
    description: str
    owner_id: Optional[str] = None
    context: str = ""
    id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        for name in ("likelihood", "consequence"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} must be 1-5, got {value}")

    @property
    def score(self) -> int:
        return self.likelihood * self.consequence


@dataclass(frozen=True)
class Measure:
    """Remediation task attached to a Risk."""
    tenant_id: str
    risk_id: str
    title: str
    description: str
    due_at: datetime
    status: MeasureStatus = MeasureStatus.PENDING
    category: MeasureCategory = MeasureCategory.PREVENTIVE
    responsible_id: Optional[str] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
