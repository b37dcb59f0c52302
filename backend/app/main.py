"""
FastAPI application entry point.

Uses structured logging from core.logging module.
"""

import time
from typing import Optional

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse

from core.cache import CacheProvider, RedisCache
from core.config import get_settings
from core.db import db
from core.logging import RequestLoggingMiddleware, configure_logging, get_logger
from core.services import BackgroundWriter

from .error_handlers import register_exception_handlers
from .routers import explore as explore_router

settings = get_settings()
configure_logging(level="DEBUG" if settings.debug else settings.log_level, fmt=settings.log_format)
logger = get_logger("api")


def check_database_health(max_retries: int = 3, retry_delay: float = 2.0) -> bool:
    """
    Check database connectivity with retry logic.

    Args:
        max_retries: Maximum number of connection attempts
        retry_delay: Seconds to wait between retries

    Returns:
        True if database is reachable

    Raises:
        RuntimeError: If database is unreachable after all retries
    """
    for attempt in range(max_retries):
        result = db.health_check()
        if result["healthy"]:
            logger.info(
                "database_health_check_passed",
                attempt=attempt + 1,
                latency_ms=result["latency_ms"],
            )
            return True

        logger.warning(
            "database_health_check_failed",
            attempt=attempt + 1,
            max_retries=max_retries,
            error=result["error"],
        )
        if attempt < max_retries - 1:
            time.sleep(retry_delay * (attempt + 1))

    raise RuntimeError(
        f"Database unreachable after {max_retries} attempts. "
        "Check DATABASE_URL configuration and database server status."
    )


def create_app(
    cache: Optional[CacheProvider] = None,
    writer: Optional[BackgroundWriter] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        cache: Cache client; a RedisCache from settings when omitted
        writer: Background writer for cache repopulation
    """
    api_prefix = f"{settings.api_prefix}/v1"

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.cache = cache if cache is not None else RedisCache(settings)
    app.state.writer = writer or BackgroundWriter(max_workers=settings.cache_write_workers)

    # Structured request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Exception handlers
    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Initialize services on startup."""
        logger.info("app_startup", app_name=settings.app_name, env=settings.env)

        db.initialize()
        logger.info("database_initialized")

        check_database_health(max_retries=3, retry_delay=2.0)

        if isinstance(app.state.cache, RedisCache):
            if app.state.cache.initialize():
                logger.info("cache_initialized", redis_host=settings.redis_host)
            else:
                logger.warning("cache_unavailable")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Drain pending cache writes, then release connections."""
        logger.info("app_shutdown")

        app.state.writer.shutdown(wait=True)
        logger.info("background_writer_stopped")

        if isinstance(app.state.cache, RedisCache):
            app.state.cache.close()

        db.reset()
        logger.info("database_disposed")

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """
        Readiness check endpoint.

        Returns 200 if the database answers, 503 otherwise. The cache is
        reported but optional: reads fall through to the database without it.
        """
        checks = {
            "database": db.health_check()["healthy"],
            "cache": False,
        }

        if isinstance(app.state.cache, RedisCache):
            checks["cache"] = app.state.cache.health_check().get("status") == "healthy"

        if not checks["database"]:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": checks},
            )

        return {"status": "ready", "checks": checks}

    # API is accessible at /api/v1/*
    app.include_router(explore_router.router, prefix=api_prefix)

    return app


app = create_app()
