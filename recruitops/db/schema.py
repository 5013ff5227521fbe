"""
Relational schema.

Tables are declared with SQLAlchemy Core so the same definitions create the
schema on PostgreSQL in production and on SQLite in the test suite. Services
query them with plain SQL through sqlalchemy.text().

Tables:
- users               - dashboard accounts (admin / viewer)
- vacancy_priorities  - 4-factor priority annotation per (job, company)
- company_visibility  - show/hide a client company on the dashboard
- job_visibility      - show/hide a single vacancy
- known_companies     - company names added to the extraction whitelist
- company_hours       - weekly hour budget per client company
"""

from sqlalchemy import (
    Boolean, Column, Date, DateTime, Float, Integer, MetaData, String, Table, Text,
    UniqueConstraint, func, true,
)

from recruitops.db.postgres import Database

metadata = MetaData()


users = Table(
    "users", metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password_hash", String(255), nullable=False),
    Column("role", String(20), nullable=False, server_default="viewer"),
    Column("is_active", Boolean, nullable=False, server_default=true()),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

vacancy_priorities = Table(
    "vacancy_priorities", metadata,
    Column("priority_id", Integer, primary_key=True, autoincrement=True),
    Column("recruitee_job_id", Integer, nullable=False),
    Column("recruitee_company_id", Integer, nullable=False),
    Column("client_pain_level", String(50)),
    Column("time_criticality", String(50)),
    Column("strategic_value", String(50)),
    Column("account_health", String(50)),
    Column("calculated_priority", String(10), nullable=False, server_default="Green"),
    Column("manual_override", String(10)),
    Column("notes", Text),
    Column("updated_by", Integer),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint("recruitee_job_id", "recruitee_company_id", name="uq_vacancy_priority_key"),
)

company_visibility = Table(
    "company_visibility", metadata,
    Column("visibility_id", Integer, primary_key=True, autoincrement=True),
    Column("recruitee_company_id", Integer, nullable=False),
    Column("company_name", String(255), nullable=False),
    Column("is_visible", Boolean, nullable=False, server_default=true()),
    Column("updated_by", Integer),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint("recruitee_company_id", "company_name", name="uq_company_visibility_key"),
)

job_visibility = Table(
    "job_visibility", metadata,
    Column("visibility_id", Integer, primary_key=True, autoincrement=True),
    Column("recruitee_job_id", Integer, nullable=False),
    Column("recruitee_company_id", Integer, nullable=False),
    Column("company_name", String(255)),
    Column("is_visible", Boolean, nullable=False, server_default=true()),
    Column("updated_by", Integer),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint("recruitee_job_id", "recruitee_company_id", name="uq_job_visibility_key"),
)

known_companies = Table(
    "known_companies", metadata,
    Column("known_company_id", Integer, primary_key=True, autoincrement=True),
    Column("company_name", String(255), nullable=False, unique=True),
    Column("created_by", Integer),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

company_hours = Table(
    "company_hours", metadata,
    Column("hours_id", Integer, primary_key=True, autoincrement=True),
    Column("recruitee_company_id", Integer, nullable=False),
    Column("company_name", String(255), nullable=False),
    Column("week_start_date", Date, nullable=False),
    Column("total_hours", Float, nullable=False, server_default="0"),
    Column("spent_hours", Float, nullable=False, server_default="0"),
    Column("updated_by", Integer),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Column("updated_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint(
        "recruitee_company_id", "company_name", "week_start_date",
        name="uq_company_hours_week",
    ),
)


def init_schema(database: Database) -> None:
    """Create any missing tables. Safe to call on every startup."""
    metadata.create_all(database.engine)
