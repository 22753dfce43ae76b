"""Submission repository for the survey analysis service.

Reads completed form submissions together with their template fields
and answers. Submissions are written by the forms subsystem; this
repository never modifies them.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from workwell.shared.database import (
    BaseRepository,
    ConnectionManager,
    SubmissionSource,
)
from workwell.shared.models import (
    FieldType,
    Submission,
    SubmissionStatus,
    SurveyField,
    SurveyResponseValue,
)

logger = logging.getLogger(__name__)


class SubmissionRepository(BaseRepository[Submission], SubmissionSource):
    """Repository for survey submissions.

    Tables:
        form_submissions: id, tenant_id, form_id, category, status, submitted_at
        form_fields: id, form_id, label, field_type, position
        form_field_values: submission_id, field_id, value
    """

    def __init__(self, connection_manager: ConnectionManager):
        super().__init__(connection_manager, "form_submissions")

    def _row_to_entity(self, row: tuple) -> Submission:
        """Convert a submission header row without fields or values.

        Expected columns:
            0: id
            1: tenant_id
            2: form_id
            3: category
            4: status
            5: submitted_at
        """
        return Submission(
            id=row[0],
            tenant_id=row[1],
            category=row[3],
            status=SubmissionStatus(row[4]),
            submitted_at=row[5],
            form_id=row[2],
        )

    def _entity_to_params(self, entity: Submission) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "tenant_id": entity.tenant_id,
            "form_id": entity.form_id,
            "category": entity.category,
            "status": entity.status.value,
            "submitted_at": entity.submitted_at,
        }

    def _load_fields(self, form_id: str) -> List[SurveyField]:
        rows = self._fetch_all(
            """
            SELECT id, label, field_type FROM form_fields
            WHERE form_id = %s
            ORDER BY position
            """,
            (form_id,),
        )
        return [SurveyField(id=r[0], label=r[1], field_type=FieldType(r[2])) for r in rows]

    def _load_values(self, submission_id: str) -> List[SurveyResponseValue]:
        rows = self._fetch_all(
            "SELECT field_id, value FROM form_field_values WHERE submission_id = %s",
            (submission_id,),
        )
        return [
            SurveyResponseValue(field_id=r[0], submission_id=submission_id, raw_value=r[1])
            for r in rows
        ]

    def _hydrate(self, row: tuple) -> Submission:
        header = self._row_to_entity(row)
        return Submission(
            id=header.id,
            tenant_id=header.tenant_id,
            category=header.category,
            status=header.status,
            submitted_at=header.submitted_at,
            fields=self._load_fields(header.form_id),
            values=self._load_values(header.id),
            form_id=header.form_id,
        )

    def get_submission(self, submission_id: str) -> Optional[Submission]:
        row = self._find_row(submission_id)
        if row is None:
            logger.info("SUBMISSION_NOT_FOUND", extra={"submission_id": submission_id})
            return None
        return self._hydrate(row)

    def find_submissions(
        self,
        tenant_id: str,
        category: str,
        start: datetime,
        end: datetime,
        statuses: Sequence[SubmissionStatus],
    ) -> List[Submission]:
        rows = self._fetch_all(
            f"""
            SELECT * FROM {self.table_name}
            WHERE tenant_id = %s
              AND category = %s
              AND status = ANY(%s)
              AND submitted_at >= %s AND submitted_at < %s
            ORDER BY submitted_at
            """,
            (tenant_id, category, [s.value for s in statuses], start, end),
        )

        logger.info(
            "SUBMISSIONS_FETCHED",
            extra={"tenant_id": tenant_id, "category": category, "count": len(rows)}
        )
        return [self._hydrate(row) for row in rows]
