"""
Visibility Service

Admins can hide client companies or single vacancies from the dashboard.

- company_visibility keyed by (recruitee_company_id, company_name), since
  one Recruitee account holds many client companies under the same id
- job_visibility keyed by (recruitee_job_id, recruitee_company_id)

A missing row means visible.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import text

from recruitops.core.log import get_logger
from recruitops.db.postgres import Database

logger = get_logger(__name__)


def _as_bool_rows(rows: List[dict]) -> List[dict]:
    # SQLite hands booleans back as 0 / 1
    for row in rows:
        row["is_visible"] = bool(row["is_visible"])
    return rows


class VisibilityService:

    def __init__(self, database: Database):
        self.database = database

    # ============================================================
    # COMPANIES
    # ============================================================

    def list_companies(self) -> List[dict]:
        return _as_bool_rows(self.database.execute_raw_sql(
            """
            SELECT recruitee_company_id, company_name, is_visible, updated_by, updated_at
            FROM company_visibility ORDER BY company_name
            """
        ))

    def hidden_companies(self) -> set:
        """(company_id, company_name) pairs that are hidden."""
        return {
            (row["recruitee_company_id"], row["company_name"])
            for row in self.list_companies() if not row["is_visible"]
        }

    def is_company_visible(self, company_id: int, company_name: str) -> bool:
        return (company_id, company_name) not in self.hidden_companies()

    def set_company(
        self, company_id: int, company_name: str, is_visible: bool, updated_by: Optional[int] = None
    ) -> dict:
        with self.database.session() as db:
            db.execute(
                text("""
                    INSERT INTO company_visibility (recruitee_company_id, company_name, is_visible, updated_by)
                    VALUES (:company_id, :company_name, :is_visible, :updated_by)
                    ON CONFLICT (recruitee_company_id, company_name) DO UPDATE SET
                        is_visible = excluded.is_visible,
                        updated_by = excluded.updated_by,
                        updated_at = CURRENT_TIMESTAMP
                """),
                {
                    "company_id": company_id,
                    "company_name": company_name,
                    "is_visible": is_visible,
                    "updated_by": updated_by,
                },
            )
        logger.info("Company %s (%s) visibility set to %s", company_name, company_id, is_visible)
        return {"recruitee_company_id": company_id, "company_name": company_name, "is_visible": is_visible}

    def rename_company(self, source_name: str, target_name: str) -> int:
        """
        Move visibility rows from one company name to another (merge).

        Where the target already has a row for the same company id, the
        target row wins and the source row is dropped.
        """
        moved = 0
        with self.database.session() as db:
            rows = db.execute(
                text("SELECT visibility_id, recruitee_company_id FROM company_visibility "
                     "WHERE company_name = :source"),
                {"source": source_name},
            ).fetchall()
            for visibility_id, company_id in rows:
                clash = db.execute(
                    text("SELECT 1 FROM company_visibility "
                         "WHERE recruitee_company_id = :company_id AND company_name = :target"),
                    {"company_id": company_id, "target": target_name},
                ).fetchone()
                if clash:
                    db.execute(text("DELETE FROM company_visibility WHERE visibility_id = :id"),
                               {"id": visibility_id})
                else:
                    db.execute(
                        text("UPDATE company_visibility SET company_name = :target, "
                             "updated_at = CURRENT_TIMESTAMP WHERE visibility_id = :id"),
                        {"target": target_name, "id": visibility_id},
                    )
                moved += 1

            db.execute(
                text("UPDATE job_visibility SET company_name = :target WHERE company_name = :source"),
                {"source": source_name, "target": target_name},
            )
        return moved

    # ============================================================
    # JOBS
    # ============================================================

    def list_jobs(self) -> List[dict]:
        return _as_bool_rows(self.database.execute_raw_sql(
            """
            SELECT recruitee_job_id, recruitee_company_id, company_name, is_visible, updated_by, updated_at
            FROM job_visibility ORDER BY recruitee_company_id, recruitee_job_id
            """
        ))

    def hidden_jobs(self) -> set:
        """(job_id, company_id) pairs that are hidden."""
        return {
            (row["recruitee_job_id"], row["recruitee_company_id"])
            for row in self.list_jobs() if not row["is_visible"]
        }

    def is_job_visible(self, job_id: int, company_id: int) -> bool:
        return (job_id, company_id) not in self.hidden_jobs()

    def set_job(
        self,
        job_id: int,
        company_id: int,
        is_visible: bool,
        company_name: Optional[str] = None,
        updated_by: Optional[int] = None,
    ) -> dict:
        return self.set_jobs([{
            "job_id": job_id, "company_id": company_id, "company_name": company_name,
        }], is_visible, updated_by)[0]

    def set_jobs(
        self, jobs: Iterable[Dict], is_visible: bool, updated_by: Optional[int] = None
    ) -> List[dict]:
        """
        Set visibility for many vacancies in one transaction.

        Each item needs job_id and company_id; company_name is optional.
        """
        results = []
        with self.database.session() as db:
            for job in jobs:
                params = {
                    "job_id": job["job_id"],
                    "company_id": job["company_id"],
                    "company_name": job.get("company_name"),
                    "is_visible": is_visible,
                    "updated_by": updated_by,
                }
                db.execute(
                    text("""
                        INSERT INTO job_visibility
                            (recruitee_job_id, recruitee_company_id, company_name, is_visible, updated_by)
                        VALUES (:job_id, :company_id, :company_name, :is_visible, :updated_by)
                        ON CONFLICT (recruitee_job_id, recruitee_company_id) DO UPDATE SET
                            company_name = COALESCE(excluded.company_name, job_visibility.company_name),
                            is_visible = excluded.is_visible,
                            updated_by = excluded.updated_by,
                            updated_at = CURRENT_TIMESTAMP
                    """),
                    params,
                )
                results.append({
                    "recruitee_job_id": params["job_id"],
                    "recruitee_company_id": params["company_id"],
                    "company_name": params["company_name"],
                    "is_visible": is_visible,
                })

        logger.info("Visibility of %s vacancies set to %s", len(results), is_visible)
        return results

    def restore_all_jobs(self, updated_by: Optional[int] = None) -> List[Tuple[int, int]]:
        """Make every hidden vacancy visible again; returns the restored keys."""
        restored = sorted(self.hidden_jobs())
        if restored:
            with self.database.session() as db:
                db.execute(
                    text("""
                        UPDATE job_visibility
                        SET is_visible = :visible, updated_by = :updated_by, updated_at = CURRENT_TIMESTAMP
                        WHERE is_visible = :hidden
                    """),
                    {"visible": True, "hidden": False, "updated_by": updated_by},
                )
        logger.info("Restored %s hidden vacancies", len(restored))
        return restored
