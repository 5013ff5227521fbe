"""
Silver Medalist Routes

GET /silver-medalists?job_id=123&mode=ai

Finds candidates who reached a late stage elsewhere but were not hired and
ranks them for the given vacancy. mode=ai uses the LLM (falling back to an
unfiltered list when it matches nobody); mode=keyword is deterministic.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from recruitops.api.deps import (
    get_app_settings, get_documents, get_llm_client, get_snapshot_service,
)
from recruitops.core.auth import get_current_user
from recruitops.core.config import Settings
from recruitops.db.mongodb import DocumentStore
from recruitops.schemas.schemas import MatchMode, SilverMedalistMatch, SilverMedalistResponse
from recruitops.services.llm_client import LLMClient
from recruitops.services.matching_service import CandidateMatcher
from recruitops.services.silver_medalists import find_silver_medalists
from recruitops.services.snapshot_service import SnapshotService

router = APIRouter(prefix="/silver-medalists", tags=["Silver Medalists"])


@router.get("", response_model=SilverMedalistResponse)
async def match_silver_medalists(
    job_id: int,
    mode: MatchMode = Query(MatchMode.ai),
    user: dict = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
    documents: DocumentStore = Depends(get_documents),
    llm_client: LLMClient = Depends(get_llm_client),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    snapshot = snapshots.get_or_refresh(user["user_id"])
    job = snapshot.job(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Vacancy not found")

    offers = {j.job_id: j for j in snapshot.jobs}
    candidates = find_silver_medalists(snapshot.candidates, offers)

    matcher = CandidateMatcher(
        llm_client,
        documents,
        batch_size=settings.match_batch_size,
        min_score=settings.match_min_score,
        fallback_score=settings.match_fallback_score,
    )
    if mode == MatchMode.keyword:
        outcome = matcher.keyword(candidates, job.title, job.tags, job_id=job_id)
    else:
        outcome = matcher.match(candidates, job.title, job.description, job_id=job_id)

    return SilverMedalistResponse(
        job_id=job_id,
        job_title=job.title,
        matching_method=outcome.method,
        total_candidates=len(candidates),
        matches=[
            SilverMedalistMatch(
                candidate=m.candidate, score=m.score, reasoning=m.reasoning, method=m.method
            )
            for m in outcome.matches
        ],
    )
