"""
Dashboard Accounts

Two roles: admin (edits annotations, visibility, companies, hours, roles)
and viewer (read-only). The very first account registered becomes admin.
"""

from typing import Optional

from sqlalchemy import text

from recruitops.core.log import get_logger
from recruitops.db.postgres import Database

logger = get_logger(__name__)

ROLE_ADMIN = "admin"
ROLE_VIEWER = "viewer"

USER_COLUMNS = "user_id, email, password_hash, role, is_active, created_at"


class EmailTakenError(Exception):
    """An account with this email already exists."""


def _user_row(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    row["is_active"] = bool(row["is_active"])
    return row


class UserService:

    def __init__(self, database: Database):
        self.database = database

    def get(self, user_id: int) -> Optional[dict]:
        rows = self.database.execute_raw_sql(
            f"SELECT {USER_COLUMNS} FROM users WHERE user_id = :id", {"id": user_id}
        )
        return _user_row(rows[0] if rows else None)

    def get_by_email(self, email: str) -> Optional[dict]:
        rows = self.database.execute_raw_sql(
            f"SELECT {USER_COLUMNS} FROM users WHERE email = :email", {"email": email}
        )
        return _user_row(rows[0] if rows else None)

    def create(self, email: str, password_hash: str) -> str:
        """Insert an account and return the role it was given."""
        with self.database.session() as db:
            if db.execute(text("SELECT 1 FROM users WHERE email = :email"), {"email": email}).fetchone():
                raise EmailTakenError(email)

            existing = db.execute(text("SELECT COUNT(*) FROM users")).scalar()
            role = ROLE_ADMIN if existing == 0 else ROLE_VIEWER
            db.execute(
                text("INSERT INTO users (email, password_hash, role) VALUES (:email, :hash, :role)"),
                {"email": email, "hash": password_hash, "role": role},
            )

        logger.info("Registered %s as %s", email, role)
        return role

    def set_role(self, user_id: int, role: str) -> bool:
        """False when no such user exists."""
        with self.database.session() as db:
            result = db.execute(
                text("UPDATE users SET role = :role, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
                {"role": role, "id": user_id},
            )
            return result.rowcount > 0
