"""
Relational database access.

The Database object owns the SQLAlchemy engine and session factory. One
instance is built per process in create_app() and handed to routes through
FastAPI dependencies.
"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from recruitops.core.log import get_logger

logger = get_logger(__name__)


class Database:
    """
    Wrapper around a SQLAlchemy engine.

    Usage:
        db = Database("postgresql://user:pw@localhost/recruitops")
        with db.session() as session:
            session.execute(text("SELECT * FROM users"))
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: Engine = self._create_engine(url, echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @staticmethod
    def _create_engine(url: str, echo: bool) -> Engine:
        if url.startswith("sqlite"):
            # Single shared connection so in-memory databases survive across sessions
            return create_engine(
                url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        # pool_size=5: maintain 5 connections ready
        # max_overflow=10: allow 10 extra connections under load
        return create_engine(url, pool_size=5, max_overflow=10, echo=echo)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Context manager for database sessions.
        Commits on success, rolls back on any exception.
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def execute_raw_sql(self, sql: str, params: dict = None) -> list:
        """
        Execute raw SQL and return results as list of dicts.
        """
        with self.session() as db:
            result = db.execute(text(sql), params or {})
            columns = list(result.keys())
            return [dict(zip(columns, row)) for row in result.fetchall()]

    def test_connection(self) -> bool:
        """
        Test if the database is reachable.
        Returns True if connection successful, False otherwise.
        """
        try:
            with self.session() as db:
                row = db.execute(text("SELECT 1 AS test")).fetchone()
                return row[0] == 1
        except Exception as e:
            logger.error("Database connection failed: %s", e)
            return False

    def dispose(self) -> None:
        self.engine.dispose()
