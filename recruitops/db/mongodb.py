"""
MongoDB Connection Utility

MongoDB stores:
- ATS snapshots (raw offers, hires and applications pulled from Recruitee)
- Silver medalist match runs (LLM output, kept for audit)

WHY MongoDB for these?
- Schema-flexible: ATS payloads and AI outputs vary in structure
- Document-oriented: one snapshot per user, replaced wholesale on refresh
- No joins needed: each document is self-contained
"""
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database as MongoDatabase

from recruitops.core.log import get_logger

logger = get_logger(__name__)


# Collection name constants (avoid typos)
COLLECTIONS = {
    "ats_snapshots": "ats_snapshots",
    "match_runs": "match_runs",
}


class DocumentStore:
    """
    Owns a MongoClient and the dashboard's document database.

    Connection pooling is handled internally by pymongo, so one
    DocumentStore is shared by the whole process.
    """

    def __init__(self, client: MongoClient, db_name: str):
        self.client = client
        self.db: MongoDatabase = client[db_name]

    @classmethod
    def from_uri(cls, uri: str, db_name: str) -> "DocumentStore":
        return cls(MongoClient(uri), db_name)

    def collection(self, name: str) -> Collection:
        """Get a collection by its key in COLLECTIONS."""
        return self.db[COLLECTIONS[name]]

    def init_indexes(self) -> None:
        """
        Create indexes for better query performance.
        Call this once during app startup.
        """
        # One snapshot per user
        self.collection("ats_snapshots").create_index("user_id", unique=True)

        # Match runs are listed per job, newest first
        self.collection("match_runs").create_index([
            ("job_id", ASCENDING),
            ("created_at", DESCENDING),
        ])

        logger.info("MongoDB indexes created")

    def test_connection(self) -> bool:
        """
        Test if MongoDB is reachable.
        Returns True if connection successful, False otherwise.
        """
        try:
            self.client.admin.command("ping")
            return True
        except Exception as e:
            logger.error("MongoDB connection failed: %s", e)
            return False

    def close(self) -> None:
        self.client.close()
