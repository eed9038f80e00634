"""FastAPI application entrypoint: lifespan, routers, middleware."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import text

from app.config import get_settings
from app.database import engine
from app.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from app.models import Base  # noqa: F401  registers every mapper before the routers load
from app.routes import fields, irrigation, notifications, savings, weather

logger = structlog.get_logger("tarimsense")

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Verify the database connection
      3. Connect to Redis (optional; forecast caching and field locks
         degrade to per-process behaviour without it)

    Shutdown:
      1. Close Redis connection pool
      2. Dispose SQLAlchemy engine
    """
    configure_structured_logging()
    settings = get_settings()
    logger.info(
        "tarimsense_starting",
        log_level=settings.log_level,
        schedule_timezone=settings.schedule_timezone,
    )

    try:
        async with engine.connect() as connection:
            await connection.execute(text("SELECT 1"))
    except Exception:
        logger.exception("startup_failure")
        raise

    redis: Redis | None = Redis.from_url(settings.redis_url, decode_responses=True)
    try:
        await redis.ping()
    except RedisError as exc:
        logger.warning("redis_unavailable", error=str(exc))
        await redis.aclose()
        redis = None
    app.state.redis = redis

    yield

    logger.info("tarimsense_shutting_down")
    if redis is not None:
        await redis.aclose()
    await engine.dispose()


app = FastAPI(
    title="TarimSense API",
    description=(
        "Farm management API with a weather-driven irrigation recommendation "
        "engine: per-field dated schedules with water volume, time window "
        "and advisory notes."
    ),
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── Middleware ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health check ────────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Liveness probe; does not touch the database."""
    return {
        "status": "ok",
        "service": "tarimsense",
        "version": VERSION,
    }


# ── Router registration ────────────────────────────────────────────────────
app.include_router(fields.router, prefix="/api/v1")
app.include_router(irrigation.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")
app.include_router(weather.router, prefix="/api/v1")
app.include_router(savings.router, prefix="/api/v1")
