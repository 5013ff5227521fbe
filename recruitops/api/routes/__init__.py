"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from recruitops.api.routes.auth_routes import router as auth_router
from recruitops.api.routes.priority_routes import router as priority_router
from recruitops.api.routes.dashboard_routes import router as dashboard_router
from recruitops.api.routes.ats_routes import router as ats_router
from recruitops.api.routes.visibility_routes import router as visibility_router
from recruitops.api.routes.company_routes import router as company_router
from recruitops.api.routes.analytics_routes import router as analytics_router
from recruitops.api.routes.silver_medalist_routes import router as silver_medalist_router
from recruitops.api.routes.export_routes import router as export_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(priority_router)
api_router.include_router(dashboard_router)
api_router.include_router(ats_router)
api_router.include_router(visibility_router)
api_router.include_router(company_router)
api_router.include_router(analytics_router)
api_router.include_router(silver_medalist_router)
api_router.include_router(export_router)
