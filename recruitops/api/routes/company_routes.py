"""
Company Management Routes

GET  /companies/known              - Built-in and admin-added company names
POST /companies/known              - Add a company name (admin)
POST /companies/assign-vacancies   - Move vacancies to another company (admin)
POST /companies/merge              - Merge one company into another (admin)
GET  /companies/hours              - Hour budgets, current and previous week
PUT  /companies/hours              - Set a week's hour budget (admin)
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from recruitops.api.deps import get_database, get_snapshot_service
from recruitops.core.auth import get_current_admin, get_current_user
from recruitops.core.log import get_logger
from recruitops.db.postgres import Database
from recruitops.schemas.schemas import (
    AssignVacanciesRequest, CompanyHoursEntry, CompanyHoursResponse, CompanyHoursUpdate,
    CompanyUpdateResponse, KnownCompanyCreate, KnownCompanyResponse, MergeCompaniesRequest,
)
from recruitops.services.company_hours_service import CompanyHoursService
from recruitops.services.company_names import KNOWN_COMPANIES
from recruitops.services.known_companies_service import DuplicateCompanyError, KnownCompanyService
from recruitops.services.snapshot_service import SnapshotService
from recruitops.services.visibility_service import VisibilityService

logger = get_logger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


# ============================================================
# KNOWN COMPANIES
# ============================================================

@router.get("/known", response_model=List[KnownCompanyResponse])
async def list_known_companies(
    user: dict = Depends(get_current_user), database: Database = Depends(get_database)
):
    built_in = [KnownCompanyResponse(company_name=name, built_in=True) for name in KNOWN_COMPANIES]
    added = [KnownCompanyResponse(**row) for row in KnownCompanyService(database).list_all()]
    return built_in + added


@router.post("/known", response_model=KnownCompanyResponse, status_code=201)
async def add_known_company(
    request: KnownCompanyCreate,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
):
    try:
        row = KnownCompanyService(database).add(request.company_name, created_by=admin["user_id"])
    except DuplicateCompanyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return KnownCompanyResponse(**row)


# ============================================================
# ASSIGN / MERGE
# ============================================================

@router.post("/assign-vacancies", response_model=CompanyUpdateResponse)
async def assign_vacancies(
    request: AssignVacanciesRequest,
    admin: dict = Depends(get_current_admin),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    """Point vacancies at another company in the cached snapshot."""
    company_name = request.company_name.strip()
    if not company_name:
        raise HTTPException(status_code=400, detail="company_name must not be blank")

    updated = snapshots.assign_company(admin["user_id"], request.job_ids, company_name)
    if updated == 0:
        raise HTTPException(status_code=404, detail="None of the vacancies are in the snapshot")
    return CompanyUpdateResponse(
        message=f"{updated} vacancies assigned to {company_name}", updated=updated
    )


@router.post("/merge", response_model=CompanyUpdateResponse)
async def merge_companies(
    request: MergeCompaniesRequest,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    """
    Merge a company into another: its vacancies and visibility rows move
    to the target name.
    """
    source = request.source_company_name
    target = request.target_company_name
    if source == target:
        raise HTTPException(status_code=400, detail="Source and target company are the same")

    moved_jobs = snapshots.rename_company(admin["user_id"], source, target)
    VisibilityService(database).rename_company(source, target)

    logger.info(
        "Company %s (%s) merged into %s by %s",
        source, request.source_company_id, target, admin["email"],
    )
    return CompanyUpdateResponse(
        message=f'Company "{source}" merged into "{target}"', updated=moved_jobs
    )


# ============================================================
# HOURS
# ============================================================

@router.get("/hours", response_model=CompanyHoursResponse)
async def get_company_hours(
    company_id: Optional[int] = None,
    company_name: Optional[str] = None,
    on: Optional[date] = Query(None, description="Any day of the week to report on"),
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
):
    return CompanyHoursService(database).get_weeks(on or date.today(), company_id, company_name)


@router.put("/hours", response_model=CompanyHoursEntry)
async def set_company_hours(
    request: CompanyHoursUpdate,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
):
    return CompanyHoursService(database).upsert(
        request.company_id,
        request.company_name,
        request.week_start_date,
        request.total_hours,
        request.spent_hours,
        updated_by=admin["user_id"],
    )
