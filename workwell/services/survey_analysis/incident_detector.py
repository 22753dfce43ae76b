"""Critical incident detector.

Scans frequency questions about bullying, harassment, improper pressure
and unresolved conflict. Any answer other than exactly "Never" is a
disclosure that must be followed up.
"""
import logging
from typing import List, Optional, Sequence, Tuple

from workwell.shared.models import (
    CriticalIncident,
    FieldType,
    IncidentType,
    Submission,
)
from .config import INCIDENT_KEYWORDS, NEVER
from .matchers import FirstMatchIncidentLocator, IncidentFieldLocator

logger = logging.getLogger(__name__)


class CriticalIncidentDetector:
    """Detects safety-critical disclosures in one submission."""

    def __init__(
        self,
        locator: Optional[IncidentFieldLocator] = None,
        keywords: Sequence[Tuple[str, IncidentType]] = INCIDENT_KEYWORDS,
    ):
        self.locator = locator or FirstMatchIncidentLocator()
        self.keywords = tuple(keywords)

    def detect(self, submission: Submission) -> List[CriticalIncident]:
        """Return one incident per topic whose answer is not "Never".

        Topics without a matching question are skipped. An unanswered
        question counts as "Never".
        """
        frequency_fields = submission.fields_of_type(FieldType.CATEGORICAL_FREQUENCY)
        incidents = []

        for keyword, incident_type in self.keywords:
            field = self.locator.locate(keyword, frequency_fields)
            if field is None:
                continue

            frequency = submission.value_for(field.id) or NEVER
            if frequency != NEVER:
                incidents.append(CriticalIncident(incident_type, frequency))

        if incidents:
            logger.warning(
                "CRITICAL_INCIDENTS_DETECTED",
                extra={
                    "submission_id": submission.id,
                    "tenant_id": submission.tenant_id,
                    "incident_types": [i.incident_type.value for i in incidents],
                }
            )

        return incidents
