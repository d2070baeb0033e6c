"""
FastAPI application entry point for the Book Catalog API.

This module provides the main FastAPI application with:
- Book catalog and authentication routers
- Health, readiness and Prometheus metrics endpoints
- Request logging with correlation ids
- Database pool management, schema creation and default-user seeding
- Graceful startup and shutdown
"""

import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Any

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from prometheus_client import CONTENT_TYPE_LATEST

from catalog_api.src import __version__
from catalog_api.src.config import get_settings, Settings
from catalog_api.src.db.schema import create_tables
from catalog_api.src.db.seed import seed_default_users
from catalog_api.src.dependencies import close_db_pool, get_db_pool, init_db_pool
from catalog_api.src.middleware.request_logging import RequestLoggingMiddleware
from catalog_api.src.repositories.user_repo import UserRepository
from catalog_api.src.routers import auth, books
from catalog_api.src.services.user_service import UserService
from shared.logging import configure_logging
from shared.metrics import get_metrics_handler, setup_metrics

logger = structlog.get_logger(__name__)


# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - Database connection pool initialization
    - Table creation
    - Default user seeding
    - Pool shutdown
    """
    settings: Settings = get_settings()

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    try:
        pool = await init_db_pool()
        await create_tables(pool)

        if settings.seed_default_users:
            created = await seed_default_users(UserService(UserRepository(pool)), settings)
            logger.info("default_users_seeded", created=created)

        logger.info("application_started", app_name=settings.app_name)

        yield

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        raise

    finally:
        logger.info("application_shutting_down")
        await close_db_pool()
        logger.info("application_shutdown_complete")


# ============================================================================
# Exception Handlers
# ============================================================================

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=exc.errors()
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# ============================================================================
# FastAPI Application
# ============================================================================

def create_app(settings: Settings = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to the cached settings)

    Returns:
        Configured application
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name=settings.app_name,
        environment=settings.environment,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Book catalog with username/password authentication.",
        lifespan=lifespan,
        debug=settings.debug,
    )

    if settings.cors_enabled:
        logger.info("configuring_cors", origins=settings.cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=settings.cors_allow_methods,
            allow_headers=["*"],
        )

    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(books.router)
    app.include_router(auth.router, prefix=settings.auth_prefix)

    # ========================================================================
    # Health, Readiness and Metrics
    # ========================================================================

    @app.get("/health", tags=["Health"])
    async def health_check() -> Dict[str, Any]:
        """Liveness probe; does not touch the database."""
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment
        }

    @app.get("/ready", tags=["Health"])
    async def readiness_check() -> JSONResponse:
        """
        Readiness probe.

        Returns 200 when the database answers ``SELECT 1`` and 503 otherwise.
        """
        checks = {"database": "unknown"}

        try:
            pool = get_db_pool()
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
            checks["database"] = "healthy"
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            checks["database"] = "unhealthy"

        all_healthy = all(value == "healthy" for value in checks.values())

        return JSONResponse(
            status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if all_healthy else "not_ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "checks": checks
            }
        )

    if settings.metrics_enabled:
        metrics_handler = get_metrics_handler()

        @app.get("/metrics", tags=["Monitoring"], response_class=PlainTextResponse)
        async def metrics() -> Response:
            """Prometheus metrics endpoint."""
            _, catalog_metrics = setup_metrics()
            try:
                pool = get_db_pool()
                catalog_metrics.db_connections_active.set(pool.get_size())
                catalog_metrics.db_connections_idle.set(pool.get_idle_size())
            except RuntimeError:
                logger.debug("metrics_pool_unavailable")

            return Response(content=metrics_handler(), media_type=CONTENT_TYPE_LATEST)

    logger.debug("application_created", version=__version__)
    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "catalog_api.src.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
