"""Section scorer - per-category averages for one submission.

Groups numeric-scale answers into the fixed section taxonomy and
classifies each section by its average.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence, Tuple

from workwell.shared.models import (
    FieldType,
    SectionScore,
    Submission,
    SurveyField,
)
from .config import (
    AnalysisConfig,
    SECTION_TAXONOMY,
    SectionDefinition,
    recommendations_for,
)
from .matchers import KeywordSectionMatcher, SectionMatcher

logger = logging.getLogger(__name__)


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return sum(values) / len(values)


class SectionScorer:
    """Scores a submission against the section taxonomy.

    Every taxonomy section is present in the output, in taxonomy order,
    whether or not any question was answered for it.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        matcher: Optional[SectionMatcher] = None,
        taxonomy: Sequence[SectionDefinition] = SECTION_TAXONOMY,
    ):
        self.config = config or AnalysisConfig()
        self.matcher = matcher or KeywordSectionMatcher()
        self.taxonomy = tuple(taxonomy)

    @property
    def section_names(self) -> List[str]:
        return [section.name for section in self.taxonomy]

    def parse_value(self, raw: Optional[str]) -> Optional[float]:
        """Parse a scale answer. Returns None for anything not on the scale."""
        if raw is None:
            return None
        try:
            value = float(raw.strip())
        except (AttributeError, ValueError):
            return None
        if math.isnan(value) or not self.config.scale_min <= value <= self.config.scale_max:
            return None
        return value

    def answered_fields(
        self,
        submission: Submission,
        section: SectionDefinition,
    ) -> List[Tuple[SurveyField, float]]:
        """Numeric fields of a section paired with their parsed answers."""
        numeric_fields = submission.fields_of_type(FieldType.NUMERIC_SCALE)
        answered = []
        for f in self.matcher.fields_for(section, numeric_fields):
            value = self.parse_value(submission.value_for(f.id))
            if value is not None:
                answered.append((f, value))
        return answered

    def collect_values(self, submission: Submission) -> Dict[str, List[float]]:
        """Raw parsed answers per section name.

        Used by the reporter to pool answers across respondents.
        """
        return {
            section.name: [value for _, value in self.answered_fields(submission, section)]
            for section in self.taxonomy
        }

    def score(self, submission: Submission) -> List[SectionScore]:
        """Score every section of the taxonomy for one submission."""
        scores = []
        for section in self.taxonomy:
            answered = self.answered_fields(submission, section)
            average = mean([value for _, value in answered])
            level = self.config.level_for(average)
            scores.append(SectionScore(
                section=section.name,
                average=average,
                risk_level=level,
                critical_fields=tuple(
                    f.label for f, value in answered
                    if value <= self.config.critical_value_max
                ),
                recommendations=recommendations_for(section.name, level),
                answered_count=len(answered),
            ))

        logger.debug(
            "SECTIONS_SCORED",
            extra={
                "submission_id": submission.id,
                "levels": {s.section: s.risk_level.value for s in scores},
            }
        )
        return scores
