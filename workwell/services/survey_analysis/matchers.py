"""Strategies deciding which survey fields feed which section or incident.

The default strategies match lower-case keyword substrings against field
labels. They sit behind small interfaces so a template that carries an
explicit section attribute per field can plug in its own strategy
without touching the scorer or detector.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from workwell.shared.models import SurveyField
from .config import SectionDefinition


class SectionMatcher(ABC):
    """Selects the fields that belong to a section."""

    @abstractmethod
    def fields_for(
        self,
        section: SectionDefinition,
        fields: Sequence[SurveyField],
    ) -> List[SurveyField]:
        pass


class IncidentFieldLocator(ABC):
    """Finds the field that reports on a sensitive topic."""

    @abstractmethod
    def locate(self, keyword: str, fields: Sequence[SurveyField]) -> Optional[SurveyField]:
        pass


class KeywordSectionMatcher(SectionMatcher):
    """Case-insensitive substring match of any section keyword."""

    def fields_for(
        self,
        section: SectionDefinition,
        fields: Sequence[SurveyField],
    ) -> List[SurveyField]:
        return [
            f for f in fields
            if any(keyword in f.label.lower() for keyword in section.keywords)
        ]


class FirstMatchIncidentLocator(IncidentFieldLocator):
    """Returns only the first field whose label contains the keyword.

    Later fields mentioning the same topic are ignored.
    """

    def locate(self, keyword: str, fields: Sequence[SurveyField]) -> Optional[SurveyField]:
        for f in fields:
            if keyword in f.label.lower():
                return f
        return None
