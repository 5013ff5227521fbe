"""
ATS Routes - Recruitee data, from the snapshot cache or live

POST /ats/refresh                     - Rebuild the snapshot now
GET  /ats/status                      - Cache age and counts
GET  /ats/jobs                        - Published vacancies
GET  /ats/hires                       - Hired candidates (?month=&year=)
GET  /ats/jobs/{job_id}/applicants    - Candidates of one vacancy
GET  /ats/jobs/{job_id}/placements    - Live placements of one vacancy
GET  /ats/offers/{offer_id}           - One offer straight from Recruitee
GET  /ats/companies                   - Companies registered in Recruitee
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from recruitops.api.deps import get_ats_client, get_database, get_snapshot_service
from recruitops.core.auth import get_current_user
from recruitops.db.postgres import Database
from recruitops.schemas.schemas import (
    ApplicantListResponse, HireListResponse, JobListResponse, PlacementListResponse,
    RecruiteeCompanyListResponse, RefreshResponse, SnapshotStatus,
)
from recruitops.services.analytics_service import filter_by_period
from recruitops.services.ats_client import RecruiteeClient
from recruitops.services.ats_parsing import Vacancy, parse_offer, parse_placement
from recruitops.services.known_companies_service import KnownCompanyService
from recruitops.services.snapshot_service import SnapshotService

router = APIRouter(prefix="/ats", tags=["ATS"])


@router.post("/refresh", response_model=RefreshResponse)
async def refresh_snapshot(
    user: dict = Depends(get_current_user),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    """Fetch everything from Recruitee again, ignoring the cache TTL."""
    snapshot = snapshots.refresh(user["user_id"])
    return RefreshResponse(cached_at=snapshot.cached_at, stats=snapshot.stats)


@router.get("/status", response_model=SnapshotStatus)
async def snapshot_status(
    user: dict = Depends(get_current_user),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    return snapshots.status(user["user_id"])


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs(
    user: dict = Depends(get_current_user),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    jobs = snapshots.get_or_refresh(user["user_id"]).jobs
    return JobListResponse(jobs=jobs, total=len(jobs))


@router.get("/hires", response_model=HireListResponse)
async def list_hires(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    user: dict = Depends(get_current_user),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    hires = filter_by_period(snapshots.get_or_refresh(user["user_id"]).hires, month, year)
    return HireListResponse(hires=hires, total=len(hires), month=month, year=year)


@router.get("/jobs/{job_id}/applicants", response_model=ApplicantListResponse)
async def list_applicants(
    job_id: int,
    user: dict = Depends(get_current_user),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    snapshot = snapshots.get_or_refresh(user["user_id"])
    if snapshot.job(job_id) is None:
        raise HTTPException(status_code=404, detail="Vacancy not found")

    applicants = [
        c for c in snapshot.candidates
        if c.offer_id == job_id or any(p.offer_id == job_id for p in c.placements)
    ]
    return ApplicantListResponse(job_id=job_id, applicants=applicants, total=len(applicants))


# ============================================================
# LIVE RECRUITEE LOOKUPS (not cached)
# ============================================================

@router.get("/jobs/{job_id}/placements", response_model=PlacementListResponse)
async def list_placements(
    job_id: int,
    user: dict = Depends(get_current_user),
    ats_client: RecruiteeClient = Depends(get_ats_client),
):
    """Upstream failures yield an empty list rather than an error."""
    placements = [parse_placement(raw) for raw in ats_client.fetch_placements(job_id)]
    return PlacementListResponse(job_id=job_id, placements=placements, total=len(placements))


@router.get("/offers/{offer_id}", response_model=Vacancy)
async def get_offer(
    offer_id: int,
    user: dict = Depends(get_current_user),
    ats_client: RecruiteeClient = Depends(get_ats_client),
    database: Database = Depends(get_database),
):
    raw = ats_client.fetch_offer(offer_id)
    if raw is None:
        raise HTTPException(status_code=404, detail="Offer not found in Recruitee")
    return parse_offer(raw, ats_client.account_id, KnownCompanyService(database).names())


@router.get("/companies", response_model=RecruiteeCompanyListResponse)
async def list_recruitee_companies(
    user: dict = Depends(get_current_user),
    ats_client: RecruiteeClient = Depends(get_ats_client),
):
    companies = ats_client.fetch_companies()
    return RecruiteeCompanyListResponse(companies=companies, total=len(companies))
