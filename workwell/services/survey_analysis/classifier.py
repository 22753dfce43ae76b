"""Risk classifier - overall level for a scored submission."""
from dataclasses import dataclass
from typing import Sequence

from workwell.shared.models import CriticalIncident, RiskLevel, SectionScore
from .section_scorer import mean


@dataclass(frozen=True)
class Classification:
    """Overall outcome of one submission."""
    risk_level: RiskLevel
    requires_action: bool
    overall_score: float


class RiskClassifier:
    """Combines section scores and incidents into one risk level.

    Any HIGH section or any critical incident makes the submission HIGH.
    The overall score averages every section, including sections without
    answers, which pull the mean towards zero.
    """

    def classify(
        self,
        sections: Sequence[SectionScore],
        incidents: Sequence[CriticalIncident],
    ) -> Classification:
        levels = {s.risk_level for s in sections}

        if RiskLevel.HIGH in levels or incidents:
            level = RiskLevel.HIGH
        elif RiskLevel.MEDIUM in levels:
            level = RiskLevel.MEDIUM
        else:
            level = RiskLevel.LOW

        return Classification(
            risk_level=level,
            requires_action=level in (RiskLevel.HIGH, RiskLevel.MEDIUM),
            overall_score=mean([s.average for s in sections]),
        )
