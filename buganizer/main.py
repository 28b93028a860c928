"""
Buganizer - Main Application
============================

Issue tracker with a filter query language and SLA tracking.

Modules:
- Issues: File, update and comment on issues
- Search: Filter-language search and saved views
- SLA: Resolution targets, risk scans and compliance statistics

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities, value objects, query language
- Infrastructure: Database, in-memory storage, Slack, config watcher
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from buganizer.config import settings
from buganizer.core import ApplicationException
from buganizer.dependencies import get_memory_store
from buganizer.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)
from buganizer.issues.infrastructure import SlackNotifier, SQLAlchemyIssueRepository
from buganizer.issues.interfaces import issues_router
from buganizer.search.application import IssueQueryService
from buganizer.search.interfaces import search_router
from buganizer.shared.api import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    MetricsMiddleware,
    application_exception_handler,
    global_exception_handler,
)
from buganizer.shared.infrastructure.logging import get_logger, setup_logging
from buganizer.shared.infrastructure.slack import SlackClient
from buganizer.sla.application import SLAMonitor, SLAService
from buganizer.sla.infrastructure import SLAConfigManager, SLAScheduler
from buganizer.sla.interfaces import sla_router

logger = get_logger(__name__)

# Global service instances
sla_config_manager: Optional[SLAConfigManager] = None
sla_scheduler: Optional[SLAScheduler] = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database and create tables (postgres backend)
    3. Load SLA configuration and watch it for changes
    4. Create the Slack notifier
    5. Start the SLA risk monitor

    SHUTDOWN:
    1. Stop SLA scheduler
    2. Stop config watcher
    3. Close Slack client
    4. Close database connections
    """
    global sla_config_manager, sla_scheduler

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting Buganizer", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "storage_backend": settings.storage_backend
    })

    use_database = settings.storage_backend == "postgres"
    if use_database:
        logger.info("Initializing database")
        init_database()

        # Development convenience; production schemas are migrated
        try:
            await create_tables()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                "Database not available - running in degraded mode",
                extra={"error": str(e)}
            )

    logger.info("Loading SLA configuration")
    sla_config_manager = SLAConfigManager()
    sla_config_manager.load(settings.sla_config_path)
    sla_config_manager.start_watching()
    app.state.sla_config = sla_config_manager

    slack_client = SlackClient()
    notifier = SlackNotifier(slack_client, config_provider=sla_config_manager)
    app.state.notifier = notifier

    if settings.sla_monitor_interval > 0:
        monitor = SLAMonitor(notifier)

        async def sla_monitor_job():
            """Background SLA risk scan."""
            if not use_database:
                service = SLAService(IssueQueryService(get_memory_store().issues), sla_config_manager)
                await monitor.evaluate(service)
                return

            async with get_session_context() as session:
                query_service = IssueQueryService(SQLAlchemyIssueRepository(session))
                await monitor.evaluate(SLAService(query_service, sla_config_manager))

        sla_scheduler = SLAScheduler(interval_seconds=settings.sla_monitor_interval)
        await sla_scheduler.start(sla_monitor_job)
    else:
        logger.info("SLA monitor disabled")

    logger.info("Buganizer started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down Buganizer")

    if sla_scheduler:
        await sla_scheduler.stop()
        sla_scheduler = None

    if sla_config_manager:
        sla_config_manager.stop_watching()

    await slack_client.close()

    if use_database:
        await close_database()

    logger.info("Buganizer shutdown complete")


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware and routers."""
    app = FastAPI(
        title="Buganizer API",
        description="""
        ## Issue Tracker

        ### Issues
        - `POST /issues` - File an issue (due date set from the SLA table)
        - `GET /issues` - List issues with a filter string
        - `GET /issues/{id}`, `PATCH /issues/{id}`
        - `POST/GET /issues/{id}/comments`, `POST /issues/{id}/attachments`

        ### Search
        - `GET /search` - Search with the filter language
        - `POST/GET /views`, `GET /views/{id}` - Saved views

        ### SLA
        - `POST /sla/target` - Resolution target for a priority/severity pair
        - `GET /sla/risk` - Issues due within the at-risk window
        - `GET /sla/stats` - Compliance by priority and severity

        All routes except `/` and `/health` require an `X-User-ID` header.
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # === CORS Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Custom Middleware (from shared) ===
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # === Include Module Routers ===
    app.include_router(issues_router)
    app.include_router(search_router)
    app.include_router(sla_router)

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """Health check endpoint for load balancers and orchestrators."""
        config_loaded = getattr(request.app.state, "sla_config", None) is not None
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": {
                "storage_backend": settings.storage_backend,
                "sla_config": "loaded" if config_loaded else "defaults",
                "sla_monitor": "running" if sla_scheduler and sla_scheduler.is_running else "stopped",
            }
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": "Buganizer",
            "version": settings.app_version,
            "architecture": "Clean Architecture / Modular Monolith",
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "issues": {"prefix": "/issues"},
                "search": {"prefix": "/search", "views": "/views"},
                "sla": {"prefix": "/sla"},
            }
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "buganizer.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower()
    )
