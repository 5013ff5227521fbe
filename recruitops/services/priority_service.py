"""
Priority Annotation Store

One row per (recruitee_job_id, recruitee_company_id) in vacancy_priorities.
Rows are created lazily the first time an admin saves an annotation and are
only ever updated afterwards (upsert, no deletes). Annotations of vacancies
that disappeared from Recruitee stay in place.

calculated_priority is always recomputed here on write; it is never taken
from the client.
"""

from typing import Dict, List, Optional, Tuple

from sqlalchemy import text

from recruitops.core.log import get_logger
from recruitops.db.postgres import Database
from recruitops.services.priority import (
    calculate_priority, get_display_priority, priority_score,
)

logger = get_logger(__name__)

DIMENSIONS = ("client_pain_level", "time_criticality", "strategic_value", "account_health")

SELECT_COLUMNS = """
    priority_id, recruitee_job_id, recruitee_company_id,
    client_pain_level, time_criticality, strategic_value, account_health,
    calculated_priority, manual_override, notes, updated_by, created_at, updated_at
"""


def with_derived_fields(row: dict) -> dict:
    """Add the raw score and the displayed tier to a stored row."""
    row = dict(row)
    row["priority_score"] = priority_score(*(row.get(d) for d in DIMENSIONS))
    row["display_priority"] = get_display_priority(
        row.get("calculated_priority"), row.get("manual_override")
    )
    return row


class PriorityService:
    """
    Read and upsert vacancy priority annotations.
    """

    def __init__(self, database: Database):
        self.database = database

    def get(self, job_id: int, company_id: int) -> Optional[dict]:
        rows = self.database.execute_raw_sql(
            f"""
            SELECT {SELECT_COLUMNS} FROM vacancy_priorities
            WHERE recruitee_job_id = :job_id AND recruitee_company_id = :company_id
            """,
            {"job_id": job_id, "company_id": company_id},
        )
        return with_derived_fields(rows[0]) if rows else None

    def list_all(self) -> List[dict]:
        rows = self.database.execute_raw_sql(
            f"SELECT {SELECT_COLUMNS} FROM vacancy_priorities "
            "ORDER BY recruitee_company_id, recruitee_job_id"
        )
        return [with_derived_fields(row) for row in rows]

    def by_key(self) -> Dict[Tuple[int, int], dict]:
        """All annotations keyed by (job_id, company_id)."""
        return {
            (row["recruitee_job_id"], row["recruitee_company_id"]): row
            for row in self.list_all()
        }

    def upsert(
        self,
        job_id: int,
        company_id: int,
        client_pain_level: Optional[str] = None,
        time_criticality: Optional[str] = None,
        strategic_value: Optional[str] = None,
        account_health: Optional[str] = None,
        manual_override: Optional[str] = None,
        notes: Optional[str] = None,
        updated_by: Optional[int] = None,
    ) -> dict:
        """
        Create or replace the annotation for a vacancy.

        Returns the stored row with priority_score and display_priority.
        """
        params = {
            "job_id": job_id,
            "company_id": company_id,
            "client_pain_level": client_pain_level,
            "time_criticality": time_criticality,
            "strategic_value": strategic_value,
            "account_health": account_health,
            "calculated_priority": calculate_priority(
                client_pain_level, time_criticality, strategic_value, account_health
            ),
            "manual_override": manual_override,
            "notes": notes,
            "updated_by": updated_by,
        }

        with self.database.session() as db:
            db.execute(
                text("""
                    INSERT INTO vacancy_priorities (
                        recruitee_job_id, recruitee_company_id,
                        client_pain_level, time_criticality, strategic_value, account_health,
                        calculated_priority, manual_override, notes, updated_by
                    )
                    VALUES (
                        :job_id, :company_id,
                        :client_pain_level, :time_criticality, :strategic_value, :account_health,
                        :calculated_priority, :manual_override, :notes, :updated_by
                    )
                    ON CONFLICT (recruitee_job_id, recruitee_company_id) DO UPDATE SET
                        client_pain_level = excluded.client_pain_level,
                        time_criticality = excluded.time_criticality,
                        strategic_value = excluded.strategic_value,
                        account_health = excluded.account_health,
                        calculated_priority = excluded.calculated_priority,
                        manual_override = excluded.manual_override,
                        notes = excluded.notes,
                        updated_by = excluded.updated_by,
                        updated_at = CURRENT_TIMESTAMP
                """),
                params,
            )

        logger.info(
            "Priority for job %s / company %s set to %s (override: %s)",
            job_id, company_id, params["calculated_priority"], manual_override,
        )
        return self.get(job_id, company_id)
