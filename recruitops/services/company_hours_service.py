"""
Company Hours

Weekly hour budgets per client company: how many recruitment hours were
sold for a week and how many were spent. Weeks start on Monday; the
dashboard shows the current and the previous week.
"""

from datetime import date, timedelta
from typing import Optional

from sqlalchemy import text

from recruitops.core.log import get_logger
from recruitops.db.postgres import Database

logger = get_logger(__name__)


def week_start(day: date) -> date:
    """Monday of the week containing `day`."""
    return day - timedelta(days=day.weekday())


def remaining_hours(total_hours: float, spent_hours: float) -> float:
    return max(0.0, (total_hours or 0.0) - (spent_hours or 0.0))


def _hours_row(row: dict) -> dict:
    row = dict(row)
    row["week_start_date"] = str(row["week_start_date"])[:10]
    row["total_hours"] = float(row["total_hours"] or 0)
    row["spent_hours"] = float(row["spent_hours"] or 0)
    row["remaining_hours"] = remaining_hours(row["total_hours"], row["spent_hours"])
    return row


class CompanyHoursService:

    def __init__(self, database: Database):
        self.database = database

    def get_weeks(
        self,
        today: date,
        company_id: Optional[int] = None,
        company_name: Optional[str] = None,
    ) -> dict:
        """
        Hours for the current and previous week.

        Without a company filter every company is returned.
        """
        current = week_start(today)
        previous = current - timedelta(days=7)

        sql = """
            SELECT recruitee_company_id, company_name, week_start_date,
                   total_hours, spent_hours, updated_by, updated_at
            FROM company_hours
            WHERE week_start_date IN (:current, :previous)
        """
        params = {"current": current.isoformat(), "previous": previous.isoformat()}
        if company_id is not None:
            sql += " AND recruitee_company_id = :company_id"
            params["company_id"] = company_id
        if company_name:
            sql += " AND company_name = :company_name"
            params["company_name"] = company_name
        sql += " ORDER BY company_name, week_start_date"

        rows = [_hours_row(row) for row in self.database.execute_raw_sql(sql, params)]
        return {
            "current_week": current.isoformat(),
            "previous_week": previous.isoformat(),
            "current": [r for r in rows if r["week_start_date"] == current.isoformat()],
            "previous": [r for r in rows if r["week_start_date"] == previous.isoformat()],
        }

    def upsert(
        self,
        company_id: int,
        company_name: str,
        week_start_date: date,
        total_hours: float,
        spent_hours: float,
        updated_by: Optional[int] = None,
    ) -> dict:
        """Store the budget for a week; any date is moved to its Monday."""
        if total_hours < 0 or spent_hours < 0:
            raise ValueError("Hours must be non-negative")

        monday = week_start(week_start_date).isoformat()
        with self.database.session() as db:
            db.execute(
                text("""
                    INSERT INTO company_hours (
                        recruitee_company_id, company_name, week_start_date,
                        total_hours, spent_hours, updated_by
                    )
                    VALUES (:company_id, :company_name, :week, :total, :spent, :updated_by)
                    ON CONFLICT (recruitee_company_id, company_name, week_start_date) DO UPDATE SET
                        total_hours = excluded.total_hours,
                        spent_hours = excluded.spent_hours,
                        updated_by = excluded.updated_by,
                        updated_at = CURRENT_TIMESTAMP
                """),
                {
                    "company_id": company_id,
                    "company_name": company_name,
                    "week": monday,
                    "total": total_hours,
                    "spent": spent_hours,
                    "updated_by": updated_by,
                },
            )
        logger.info("Hours for %s, week %s: %s/%s", company_name, monday, spent_hours, total_hours)

        return _hours_row({
            "recruitee_company_id": company_id,
            "company_name": company_name,
            "week_start_date": monday,
            "total_hours": total_hours,
            "spent_hours": spent_hours,
            "updated_by": updated_by,
            "updated_at": None,
        })
