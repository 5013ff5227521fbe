"""
Known Companies

Company names admins add on top of the built-in KNOWN_COMPANIES list.
Title extraction checks both lists, so adding a client here fixes how its
vacancies are grouped on the next snapshot refresh.
"""

from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from recruitops.core.log import get_logger
from recruitops.db.postgres import Database
from recruitops.services.company_names import KNOWN_COMPANIES

logger = get_logger(__name__)


class DuplicateCompanyError(Exception):
    """The company is already on the known list."""


class KnownCompanyService:

    def __init__(self, database: Database):
        self.database = database

    def list_all(self) -> List[dict]:
        return self.database.execute_raw_sql(
            "SELECT known_company_id, company_name, created_by, created_at "
            "FROM known_companies ORDER BY company_name"
        )

    def names(self) -> List[str]:
        return [row["company_name"] for row in self.list_all()]

    def contains(self, company_name: str) -> bool:
        wanted = (company_name or "").strip().lower()
        return any(name.lower() == wanted for name in [*KNOWN_COMPANIES, *self.names()])

    def add(self, company_name: str, created_by: Optional[int] = None) -> dict:
        name = (company_name or "").strip()
        if not name:
            raise ValueError("Company name is required")
        if self.contains(name):
            raise DuplicateCompanyError(f"'{name}' is already a known company")

        try:
            with self.database.session() as db:
                db.execute(
                    text("INSERT INTO known_companies (company_name, created_by) "
                         "VALUES (:name, :created_by)"),
                    {"name": name, "created_by": created_by},
                )
        except IntegrityError as e:
            raise DuplicateCompanyError(f"'{name}' is already a known company") from e

        logger.info("Known company added: %s", name)
        return next(row for row in self.list_all() if row["company_name"] == name)
