"""
Export Routes - CSV downloads

GET /export/vacancies.csv
GET /export/companies.csv
GET /export/companies-jobs.csv
"""

from datetime import date

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from recruitops.api.deps import get_database, get_snapshot_service
from recruitops.api.routes.dashboard_routes import dashboard_rows
from recruitops.core.auth import get_current_user
from recruitops.db.postgres import Database
from recruitops.services.dashboard_service import group_by_company
from recruitops.services.export_service import companies_csv, companies_jobs_csv, vacancies_csv
from recruitops.services.known_companies_service import KnownCompanyService
from recruitops.services.snapshot_service import SnapshotService

router = APIRouter(prefix="/export", tags=["Export"])


def _csv_response(content: str, name: str) -> Response:
    filename = f"{name}-{date.today().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/vacancies.csv")
async def export_vacancies(
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    rows = dashboard_rows(snapshots.get_or_refresh(user["user_id"]), database)
    return _csv_response(vacancies_csv(rows), "vacancies")


@router.get("/companies.csv")
async def export_companies(
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    rows = dashboard_rows(snapshots.get_or_refresh(user["user_id"]), database)
    return _csv_response(companies_csv(group_by_company(rows)), "companies")


@router.get("/companies-jobs.csv")
async def export_companies_jobs(
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    jobs = snapshots.get_or_refresh(user["user_id"]).jobs
    return _csv_response(
        companies_jobs_csv(jobs, KnownCompanyService(database).names()), "companies-jobs"
    )
