"""
Analytics Routes

GET /analytics/company-hires  - Hires per company over the last N days
GET /analytics/summary        - Headline counts, priority mix, hires per month
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query

from recruitops.api.deps import get_database, get_snapshot_service
from recruitops.api.routes.dashboard_routes import dashboard_rows
from recruitops.core.auth import get_current_user
from recruitops.db.postgres import Database
from recruitops.schemas.schemas import AnalyticsSummary, CompanyHiresResponse
from recruitops.services.analytics_service import (
    hires_per_company, hires_per_month, priority_distribution,
)
from recruitops.services.dashboard_service import group_by_company
from recruitops.services.snapshot_service import SnapshotService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/company-hires", response_model=CompanyHiresResponse)
async def company_hires(
    days: int = Query(90, ge=1, le=3650),
    user: dict = Depends(get_current_user),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    hires = snapshots.get_or_refresh(user["user_id"]).hires
    return hires_per_company(hires, days=days)


@router.get("/summary", response_model=AnalyticsSummary)
async def summary(
    year: Optional[int] = Query(None, ge=2000, le=2100),
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    year = year or datetime.now(timezone.utc).year
    snapshot = snapshots.get_or_refresh(user["user_id"])
    rows = dashboard_rows(snapshot, database)
    return AnalyticsSummary(
        total_vacancies=len(rows),
        total_companies=len(group_by_company(rows)),
        total_hires=len(snapshot.hires),
        total_applications=len(snapshot.applications),
        priority_distribution=priority_distribution(rows),
        hires_per_month=hires_per_month(snapshot.hires, year),
        year=year,
    )
