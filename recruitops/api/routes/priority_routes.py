"""
Vacancy Priority Routes

GET /priorities                        - All annotations
GET /priorities/{job_id}/{company_id}  - One annotation
PUT /priorities/{job_id}/{company_id}  - Create or replace an annotation (admin)
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from recruitops.api.deps import get_database
from recruitops.core.auth import get_current_admin, get_current_user
from recruitops.db.postgres import Database
from recruitops.schemas.schemas import PriorityResponse, PriorityUpdate
from recruitops.services.priority_service import PriorityService

router = APIRouter(prefix="/priorities", tags=["Priorities"])


def _value(enum_value):
    return enum_value.value if enum_value is not None else None


@router.get("", response_model=List[PriorityResponse])
async def list_priorities(
    user: dict = Depends(get_current_user), database: Database = Depends(get_database)
):
    return PriorityService(database).list_all()


@router.get("/{job_id}/{company_id}", response_model=PriorityResponse)
async def get_priority(
    job_id: int,
    company_id: int,
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
):
    row = PriorityService(database).get(job_id, company_id)
    if not row:
        raise HTTPException(status_code=404, detail="No priority set for this vacancy")
    return row


@router.put("/{job_id}/{company_id}", response_model=PriorityResponse)
async def set_priority(
    job_id: int,
    company_id: int,
    request: PriorityUpdate,
    admin: dict = Depends(get_current_admin),
    database: Database = Depends(get_database),
):
    """
    Save the four priority dimensions, override and notes for a vacancy.

    The calculated tier is derived from the dimensions on every save.
    """
    return PriorityService(database).upsert(
        job_id,
        company_id,
        client_pain_level=_value(request.client_pain_level),
        time_criticality=_value(request.time_criticality),
        strategic_value=_value(request.strategic_value),
        account_health=_value(request.account_health),
        manual_override=_value(request.manual_override),
        notes=request.notes,
        updated_by=admin["user_id"],
    )
