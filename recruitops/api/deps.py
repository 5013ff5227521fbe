"""
FastAPI dependency providers.

create_app() builds every collaborator once and stores it on app.state;
these providers hand them to route handlers.

Usage:
    @router.get("/x")
    async def route(database: Database = Depends(get_database)):
        ...
"""

from fastapi import Depends, Request

from recruitops.core.config import Settings
from recruitops.db.mongodb import DocumentStore
from recruitops.db.postgres import Database
from recruitops.services.ats_client import RecruiteeClient
from recruitops.services.known_companies_service import KnownCompanyService
from recruitops.services.llm_client import LLMClient
from recruitops.services.snapshot_service import SnapshotService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_documents(request: Request) -> DocumentStore:
    return request.app.state.documents


def get_ats_client(request: Request) -> RecruiteeClient:
    return request.app.state.ats_client


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_snapshot_service(
    settings: Settings = Depends(get_app_settings),
    database: Database = Depends(get_database),
    documents: DocumentStore = Depends(get_documents),
    ats_client: RecruiteeClient = Depends(get_ats_client),
) -> SnapshotService:
    """Snapshot service that also knows the admin-added company names."""
    return SnapshotService(
        documents,
        ats_client,
        known_companies=KnownCompanyService(database).names(),
        ttl_minutes=settings.snapshot_ttl_minutes,
        page_size=settings.recruitee_page_size,
        max_pages=settings.recruitee_max_pages,
    )
