"""PostgreSQL storage for risks, measures and tenant role lookups.

Risks and measures belong to the risk-management subsystem; this module
only appends new rows and reads them back for annual reporting.
"""
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from workwell.shared.database import (
    BaseRepository,
    ConnectionManager,
    MeasureStore,
    RiskStore,
    TenantDirectory,
)
from workwell.shared.models import (
    Measure,
    MeasureCategory,
    MeasureStatus,
    Risk,
    RiskCategory,
    RiskStatus,
    TenantRole,
)

logger = logging.getLogger(__name__)


class RiskRepository(BaseRepository[Risk], RiskStore):
    """Repository for risk register entries."""

    def __init__(self, connection_manager: ConnectionManager):
        super().__init__(connection_manager, "risks")

    def _row_to_entity(self, row: tuple) -> Risk:
        """Convert database row to Risk.

        Expected columns:
            0: id
            1: tenant_id
            2: title
            3: category
            4: likelihood
            5: consequence
            6: score (derived, ignored)
            7: status
            8: description
            9: owner_id
            10: context
            11: created_at
        """
        return Risk(
            id=row[0],
            tenant_id=row[1],
            title=row[2],
            category=RiskCategory(row[3]),
            likelihood=row[4],
            consequence=row[5],
            status=RiskStatus(row[7]),
            description=row[8],
            owner_id=row[9],
            context=row[10] or "",
            created_at=row[11],
        )

    def _entity_to_params(self, entity: Risk) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "tenant_id": entity.tenant_id,
            "title": entity.title,
            "category": entity.category.value,
            "likelihood": entity.likelihood,
            "consequence": entity.consequence,
            "score": entity.score,
            "status": entity.status.value,
            "description": entity.description,
            "owner_id": entity.owner_id,
            "context": entity.context,
            "created_at": entity.created_at,
        }

    def create_risk(self, risk: Risk) -> str:
        if risk.id is None:
            risk = replace(risk, id=f"risk_{uuid.uuid4().hex[:12]}")
        risk_id = self.insert(risk)

        logger.info(
            "RISK_STORED",
            extra={"risk_id": risk_id, "tenant_id": risk.tenant_id}
        )
        return risk_id

    def find_risks(self, tenant_id: str, start: datetime, end: datetime) -> List[Risk]:
        rows = self._fetch_all(
            f"""
            SELECT * FROM {self.table_name}
            WHERE tenant_id = %s AND created_at >= %s AND created_at < %s
            ORDER BY created_at
            """,
            (tenant_id, start, end),
        )
        return [self._row_to_entity(row) for row in rows]


class MeasureRepository(BaseRepository[Measure], MeasureStore):
    """Repository for remediation measures."""

    def __init__(self, connection_manager: ConnectionManager):
        super().__init__(connection_manager, "measures")

    def _row_to_entity(self, row: tuple) -> Measure:
        """Convert database row to Measure.

        Expected columns:
            0: id
            1: tenant_id
            2: risk_id
            3: title
            4: description
            5: due_at
            6: status
            7: category
            8: responsible_id
            9: created_at
        """
        return Measure(
            id=row[0],
            tenant_id=row[1],
            risk_id=row[2],
            title=row[3],
            description=row[4],
            due_at=row[5],
            status=MeasureStatus(row[6]),
            category=MeasureCategory(row[7]),
            responsible_id=row[8],
            created_at=row[9],
        )

    def _entity_to_params(self, entity: Measure) -> Dict[str, Any]:
        return {
            "id": entity.id,
            "tenant_id": entity.tenant_id,
            "risk_id": entity.risk_id,
            "title": entity.title,
            "description": entity.description,
            "due_at": entity.due_at,
            "status": entity.status.value,
            "category": entity.category.value,
            "responsible_id": entity.responsible_id,
            "created_at": entity.created_at,
        }

    def create_measure(self, measure: Measure) -> str:
        if measure.id is None:
            measure = replace(measure, id=f"measure_{uuid.uuid4().hex[:12]}")
        return self.insert(measure)

    def find_measures(self, tenant_id: str, start: datetime, end: datetime) -> List[Measure]:
        rows = self._fetch_all(
            f"""
            SELECT * FROM {self.table_name}
            WHERE tenant_id = %s AND created_at >= %s AND created_at < %s
            ORDER BY created_at
            """,
            (tenant_id, start, end),
        )
        return [self._row_to_entity(row) for row in rows]


class TenantRoleRepository(TenantDirectory):
    """Role lookups against the user_tenants membership table."""

    def __init__(self, connection_manager: ConnectionManager):
        self.connection_manager = connection_manager

    def find_users_with_role(self, tenant_id: str, role: TenantRole) -> List[str]:
        """User ids holding the role, oldest membership first."""
        with self.connection_manager.get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT user_id FROM user_tenants
                    WHERE tenant_id = %s AND role = %s
                    ORDER BY created_at
                    """,
                    (tenant_id, role.value)
                )
                rows = cur.fetchall()

        return [row[0] for row in rows]

    def find_first_user_with_role(self, tenant_id: str, role: TenantRole) -> Optional[str]:
        users = self.find_users_with_role(tenant_id, role)
        return users[0] if users else None
