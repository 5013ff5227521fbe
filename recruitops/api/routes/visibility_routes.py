"""
Visibility Routes

GET  /visibility/companies          - Company visibility rows
PUT  /visibility/companies          - Show/hide a company (admin)
GET  /visibility/jobs               - Vacancy visibility rows
PUT  /visibility/jobs               - Show/hide one vacancy (admin)
PUT  /visibility/jobs/bulk          - Show/hide many vacancies (admin)
POST /visibility/jobs/restore-all   - Make every hidden vacancy visible (admin)
"""

from typing import List

from fastapi import APIRouter, Depends

from recruitops.api.deps import get_database
from recruitops.core.auth import get_current_admin, get_current_user
from recruitops.db.postgres import Database
from recruitops.schemas.schemas import (
    BulkJobVisibilityUpdate, CompanyVisibilityResponse, CompanyVisibilityUpdate, JobKey,
    JobVisibilityResponse, JobVisibilityUpdate, RestoreAllResponse,
)
from recruitops.services.visibility_service import VisibilityService

router = APIRouter(prefix="/visibility", tags=["Visibility"])


@router.get("/companies", response_model=List[CompanyVisibilityResponse])
async def list_company_visibility(
    user: dict = Depends(get_current_user), database: Database = Depends(get_database)
):
    return VisibilityService(database).list_companies()


@router.put("/companies", response_model=CompanyVisibilityResponse)
async def set_company_visibility(
    request: CompanyVisibilityUpdate,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
):
    return VisibilityService(database).set_company(
        request.company_id, request.company_name, request.is_visible, admin["user_id"]
    )


@router.get("/jobs", response_model=List[JobVisibilityResponse])
async def list_job_visibility(
    user: dict = Depends(get_current_user), database: Database = Depends(get_database)
):
    return VisibilityService(database).list_jobs()


@router.put("/jobs", response_model=JobVisibilityResponse)
async def set_job_visibility(
    request: JobVisibilityUpdate,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
):
    return VisibilityService(database).set_job(
        request.job_id, request.company_id, request.is_visible,
        company_name=request.company_name, updated_by=admin["user_id"],
    )


@router.put("/jobs/bulk", response_model=List[JobVisibilityResponse])
async def set_jobs_visibility(
    request: BulkJobVisibilityUpdate,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
):
    return VisibilityService(database).set_jobs(
        [job.model_dump() for job in request.jobs], request.is_visible, admin["user_id"]
    )


@router.post("/jobs/restore-all", response_model=RestoreAllResponse)
async def restore_all_jobs(
    admin: dict = Depends(get_current_admin), database: Database = Depends(get_database)
):
    restored = VisibilityService(database).restore_all_jobs(admin["user_id"])
    return RestoreAllResponse(
        restored=len(restored),
        jobs=[JobKey(job_id=job_id, company_id=company_id) for job_id, company_id in restored],
    )
