"""
Card Show Finder API entrypoint with database pool and Redis lifecycle management.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from showfinder.config import settings
from showfinder.db.pool import db_pool
from showfinder.features.show_review import review_admin_router, submissions_router
from showfinder.features.show_search import shows_router
from showfinder.infrastructure.observability.logging import get_logger, log_request, setup_logging
from showfinder.middleware import CORSMiddleware, RequestContextMiddleware
from showfinder.routes import health
from showfinder.services.redis_client import fast_redis

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    startup_tasks = []

    try:
        # Database pool first, every route needs it
        logger.info("Initializing database pool")
        await db_pool.initialize()
        startup_tasks.append("database_pool")

        logger.info("Initializing Redis connection")
        await fast_redis.initialize()
        startup_tasks.append("redis")

        logger.info("All services initialized successfully", services=startup_tasks)

    except Exception as e:
        logger.error("Failed to initialize services", error=str(e), completed_tasks=startup_tasks)

        # Clean up in reverse order
        if "redis" in startup_tasks:
            try:
                await fast_redis.close()
            except Exception as cleanup_error:
                logger.error("Error cleaning up Redis", error=str(cleanup_error))

        if "database_pool" in startup_tasks:
            try:
                await db_pool.close()
            except Exception as cleanup_error:
                logger.error("Error cleaning up database pool", error=str(cleanup_error))

        raise

    yield

    logger.info("Application shutting down")

    shutdown_errors = []

    try:
        logger.info("Closing Redis connection")
        await fast_redis.close()
    except Exception as e:
        logger.error("Error closing Redis", error=str(e))
        shutdown_errors.append(f"Redis: {e}")

    # Pool last, in-flight approvals may still hold connections
    try:
        logger.info("Closing database pool")
        await db_pool.close()
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))
        shutdown_errors.append(f"Database: {e}")

    if shutdown_errors:
        logger.warning("Some services had shutdown errors", errors=shutdown_errors)
    else:
        logger.info("All services closed successfully")


app = FastAPI(
    title="Card Show Finder API",
    description="Trading card show discovery, submission intake and admin review",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CORSMiddleware, allowed_origins=settings.CORS_ALLOWED_ORIGINS)
app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(shows_router)
app.include_router(submissions_router)
app.include_router(review_admin_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        request.method,
        request.url.path,
        response.status_code,
        round(process_time, 2),
        request_id=response.headers.get("X-Request-ID"),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
