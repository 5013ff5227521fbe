"""
Database module - relational (SQLAlchemy) and document (MongoDB) stores.
"""
from recruitops.db.postgres import Database
from recruitops.db.mongodb import DocumentStore, COLLECTIONS
from recruitops.db.schema import init_schema

__all__ = [
    "Database",
    "DocumentStore",
    "COLLECTIONS",
    "init_schema",
]
