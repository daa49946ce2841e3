"""
SOP SLA Tracker - Main Application
===================================

Business-hours SLA timers for Standard Operating Procedures.

Modules:
- SLA Tracking: Start, adjust and complete SLA timers per SOP
- Compliance: On-time / overdue statistics per SOP and globally

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Business-hours calculator, entities and the SOP catalog
- Infrastructure: Key-value record store, YAML catalog with hot reload
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

# Configuration and Core
from src.config import Settings, get_settings
from src.core import ApplicationException

# Shared
from src.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler
)
from src.shared.infrastructure.clock import Clock, system_clock_ms
from src.shared.infrastructure.logging import setup_logging, get_logger

# SLA Module
from src.sla.application import SLATrackingService, ComplianceService
from src.sla.infrastructure import (
    InMemoryKeyValueStore, KeyValueSLARepository, SLACatalogManager
)
from src.sla.interfaces import sla_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Start watching the SLA catalog file

    SHUTDOWN:
    1. Stop the catalog watcher
    """
    settings: Settings = app.state.settings
    catalog_manager: SLACatalogManager = app.state.catalog_provider

    # === STARTUP ===
    logger.info("Starting SLA Tracker", extra={
        "version": settings.app_version,
        "environment": settings.environment,
        "business_timezone": settings.business_timezone
    })

    if settings.watch_catalog:
        catalog_manager.start_watching()

    logger.info("SLA Tracker started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down SLA Tracker")
    catalog_manager.stop_watching()
    logger.info("SLA Tracker shutdown complete")


def create_app(
    settings: Optional[Settings] = None,
    clock: Clock = system_clock_ms
) -> FastAPI:
    """
    Build the FastAPI application.

    Services are wired here so the app is usable with or without the
    lifespan running.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.environment)

    app = FastAPI(
        title="SOP SLA Tracker API",
        description="""
    ## SOP SLA Tracker

    SLA timers per Standard Operating Procedure. Business-days SLA types
    only count Monday 08:00 - Friday 17:00 in the configured timezone.

    ---

    ### Endpoints

    - `POST /sla/elapsed` - Counted elapsed time between two instants
    - `GET /sla/sops` - SOP catalog
    - `POST /sla/records` - Start an SLA timer
    - `GET /sla/records` - SLA history
    - `GET /sla/records/{id}/timer` - Timer snapshot
    - `POST /sla/records/{id}/complete` - Complete an SLA
    - `GET /sla/compliance` - Compliance statistics
    """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # === Services ===
    catalog_manager = SLACatalogManager()
    catalog_manager.load(settings.sla_catalog_path)

    repository = KeyValueSLARepository(
        InMemoryKeyValueStore(), catalog_manager, tz=settings.business_timezone
    )
    tracking_service = SLATrackingService(
        repository,
        catalog_manager,
        clock=clock,
        tz=settings.business_timezone
    )

    app.state.settings = settings
    app.state.catalog_provider = catalog_manager
    app.state.repository = repository
    app.state.tracking_service = tracking_service
    app.state.compliance_service = ComplianceService(tracking_service, repository)

    # === Middleware ===
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    app.add_exception_handler(ApplicationException, application_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    # === Routers ===
    app.include_router(sla_router)

    @app.get("/health", tags=["Health"], responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "version": "1.0.0",
                        "environment": "development",
                        "checks": {
                            "sla_catalog": "loaded (12 SOPs)",
                            "catalog_watcher": "running",
                            "business_timezone": "America/Mexico_City"
                        }
                    }
                }
            }
        }
    })
    async def health_check(request: Request):
        """Health check endpoint for load balancers and orchestrators."""
        manager: SLACatalogManager = request.app.state.catalog_provider
        checks = {
            "sla_catalog": f"loaded ({len(manager.catalog.sops)} SOPs)",
            "catalog_watcher": "running" if manager.is_watching else "stopped",
            "business_timezone": settings.business_timezone
        }
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "checks": checks
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "architecture": "Clean Architecture / Modular Monolith",
            "docs": "/docs",
            "health": "/health",
            "modules": {
                "sla": {
                    "prefix": "/sla",
                    "endpoints": [
                        "POST /sla/elapsed - Counted elapsed time",
                        "GET /sla/sops - SOP catalog",
                        "POST /sla/records - Start SLA timer",
                        "GET /sla/records - SLA history",
                        "GET /sla/records/{id}/timer - Timer snapshot",
                        "GET /sla/compliance - Compliance statistics"
                    ]
                }
            }
        }

    return app


app = create_app()


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.environment == "development",
        log_level="info"
    )
