"""
Dashboard Routes

GET /dashboard         - Vacancies grouped per company, sorted by priority
GET /dashboard/kanban  - Vacancies bucketed by displayed priority
"""

from fastapi import APIRouter, Depends, Query

from recruitops.api.deps import get_database, get_snapshot_service
from recruitops.core.auth import get_current_user
from recruitops.db.postgres import Database
from recruitops.schemas.schemas import DashboardResponse, KanbanResponse
from recruitops.services.dashboard_service import build_dashboard, build_kanban, join_vacancies
from recruitops.services.priority_service import PriorityService
from recruitops.services.snapshot_service import Snapshot, SnapshotService
from recruitops.services.visibility_service import VisibilityService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def dashboard_inputs(database: Database, include_hidden: bool = False) -> dict:
    """Annotations and visibility state to join against the snapshot."""
    visibility = VisibilityService(database)
    return {
        "annotations": PriorityService(database).by_key(),
        "hidden_jobs": visibility.hidden_jobs(),
        "hidden_companies": visibility.hidden_companies(),
        "include_hidden": include_hidden,
    }


def dashboard_rows(snapshot: Snapshot, database: Database, include_hidden: bool = False) -> list:
    """Snapshot vacancies joined with annotations and visibility."""
    return join_vacancies(snapshot.jobs, **dashboard_inputs(database, include_hidden))


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    include_hidden: bool = Query(False, description="Also return hidden vacancies"),
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    snapshot = snapshots.get_or_refresh(user["user_id"])
    groups = build_dashboard(snapshot.jobs, **dashboard_inputs(database, include_hidden))
    return DashboardResponse(
        companies=groups,
        total_vacancies=sum(group["vacancy_count"] for group in groups),
        cached_at=snapshot.cached_at,
    )


@router.get("/kanban", response_model=KanbanResponse)
async def get_kanban(
    user: dict = Depends(get_current_user),
    database: Database = Depends(get_database),
    snapshots: SnapshotService = Depends(get_snapshot_service),
):
    snapshot = snapshots.get_or_refresh(user["user_id"])
    return KanbanResponse(
        columns=build_kanban(dashboard_rows(snapshot, database)),
        cached_at=snapshot.cached_at,
    )
