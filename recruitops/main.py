"""
RecruitOps Dashboard - Main Application

FastAPI backend with:
- PostgreSQL for annotations and admin state
- MongoDB for ATS snapshots and match runs
- Recruitee ATS as the source of vacancies and candidates
- OpenAI-compatible LLM for silver medalist matching
- JWT authentication (admin / viewer)

Run: uvicorn recruitops.main:app --reload
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from recruitops import __version__
from recruitops.api.routes import api_router
from recruitops.core.config import Settings, get_settings
from recruitops.core.log import configure_logging, get_logger
from recruitops.db.mongodb import DocumentStore
from recruitops.db.postgres import Database
from recruitops.db.schema import init_schema
from recruitops.services.ats_client import ATSConfigError, ATSError, RecruiteeClient
from recruitops.services.llm_client import LLMClient, LLMConfigError, LLMError

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    documents: Optional[DocumentStore] = None,
    ats_client: Optional[RecruiteeClient] = None,
    llm_client: Optional[LLMClient] = None,
) -> FastAPI:
    """
    Build the application and every collaborator it needs.

    Anything passed in is used as-is, which is how the tests swap in
    SQLite, mongomock and mocked upstream clients.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="RecruitOps Dashboard",
        description="""
        Recruitment-operations dashboard on top of the Recruitee ATS.

        ## Features
        - **Priorities**: 4-factor vacancy priority with manual override
        - **Dashboard**: Vacancies grouped per client company, sorted by priority
        - **Visibility**: Hide companies or vacancies, restore in bulk
        - **Companies**: Known-company list, vacancy reassignment, merges, weekly hours
        - **Analytics**: Hires per company and per month
        - **Silver Medalists**: Re-surface late-stage candidates for a vacancy
        - **Export**: CSV downloads
        """,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.state.settings = settings
    app.state.database = database or Database(settings.sqlalchemy_url, echo=settings.debug)
    app.state.documents = documents or DocumentStore.from_uri(settings.mongodb_uri, settings.mongodb_db)
    app.state.ats_client = ats_client or RecruiteeClient.from_settings(settings)
    app.state.llm_client = llm_client or LLMClient.from_settings(settings)

    # CORS middleware (allow all for development)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(api_router, prefix="/api")

    # Upstream failures
    @app.exception_handler(ATSConfigError)
    @app.exception_handler(LLMConfigError)
    async def upstream_config_error(request: Request, exc: Exception):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(ATSError)
    @app.exception_handler(LLMError)
    async def upstream_error(request: Request, exc: Exception):
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.on_event("startup")
    async def startup_event():
        """Create missing tables and MongoDB indexes."""
        init_schema(app.state.database)
        try:
            app.state.documents.init_indexes()
        except Exception as e:
            logger.warning("MongoDB index initialization failed: %s", e)

        if not app.state.ats_client.configured:
            logger.warning("Recruitee API credentials not configured")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release HTTP and database connections."""
        app.state.ats_client.close()
        app.state.documents.close()
        app.state.database.dispose()

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check."""
        return {
            "status": "healthy",
            "database": "connected" if app.state.database.test_connection() else "disconnected",
            "mongodb": "connected" if app.state.documents.test_connection() else "disconnected",
            "recruitee": "configured" if app.state.ats_client.configured else "not configured",
            "llm": "configured" if app.state.llm_client.configured else "not configured",
        }

    return app


app = create_app()
