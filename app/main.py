"""FastAPI application entrypoint: lifespan, error handlers, routers and middleware."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.database import create_engine, create_session_factory, ping
from app.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from app.middleware.rate_limit import RateLimitMiddleware
from app.routes import auth, farmer, scientist, sensor

logger = structlog.get_logger("agromonitor")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Create the async engine + session factory on ``app.state``
      3. Probe the database
      4. Connect to Redis when rate limiting is enabled

    Shutdown:
      1. Close the Redis connection pool
      2. Dispose the SQLAlchemy engine
    """
    configure_structured_logging()
    settings = get_settings()
    logger.info("agromonitor_starting", log_level=settings.log_level, auth_scheme=settings.auth_scheme.value)

    engine = create_engine(settings)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.redis = None

    redis: Redis | None = None
    try:
        await ping(engine)
        if settings.rate_limit_enabled:
            redis = Redis.from_url(settings.redis_url, decode_responses=True)
            await redis.ping()
            app.state.redis = redis
    except Exception as exc:
        logger.exception("startup_failure", error=str(exc))
        if redis is not None:
            await redis.aclose()
        await engine.dispose()
        raise

    yield

    logger.info("agromonitor_shutting_down")
    if redis is not None:
        await redis.aclose()
    await engine.dispose()


settings = get_settings()

app = FastAPI(
    title="AgroMonitor API",
    description=(
        "Agricultural monitoring API: farmer crop records with an embedded action "
        "history, sensor ingestion, alerts, and scientist statistics and recommendations."
    ),
    version=settings.service_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── Middleware ──────────────────────────────────────────────────────────────
app.add_middleware(RateLimitMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Error bodies ────────────────────────────────────────────────────────────
def _error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _error_response(exc.status_code, message, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", "")
    else:
        message = "Invalid request"
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ── Health check ────────────────────────────────────────────────────────────
async def _check_database(app: FastAPI) -> dict[str, Any]:
    engine = getattr(app.state, "engine", None)
    if engine is None:
        return {"ok": False, "message": "engine not initialized"}
    try:
        await ping(engine)
    except Exception as exc:
        return {"ok": False, "message": str(exc)}
    return {"ok": True, "message": "ok"}


async def _check_redis(app: FastAPI) -> dict[str, Any]:
    if not get_settings().rate_limit_enabled:
        return {"ok": True, "message": "disabled"}
    redis = getattr(app.state, "redis", None)
    if redis is None:
        return {"ok": False, "message": "redis not connected"}
    try:
        await redis.ping()
    except Exception as exc:
        return {"ok": False, "message": str(exc)}
    return {"ok": True, "message": "ok"}


async def _run_readiness_checks(app: FastAPI) -> dict[str, dict[str, Any]]:
    return {
        "database": await _check_database(app),
        "redis": await _check_redis(app),
    }


@app.get("/health", tags=["system"])
async def health_check(request: Request) -> dict[str, str]:
    """Liveness plus a database connectivity flag."""
    database = await _check_database(request.app)
    return {
        "status": "ok",
        "service": settings.service_name,
        "version": settings.service_version,
        "database": "connected" if database["ok"] else "disconnected",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/health/ready", tags=["system"])
async def readiness_check(request: Request) -> JSONResponse:
    checks = await _run_readiness_checks(request.app)
    ready = all(check["ok"] for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "ok" if ready else "degraded", "checks": checks},
    )


# ── Router registration ────────────────────────────────────────────────────
app.include_router(auth.router, prefix=settings.api_prefix)
app.include_router(farmer.router, prefix=settings.api_prefix)
app.include_router(scientist.router, prefix=settings.api_prefix)
app.include_router(sensor.router, prefix=settings.api_prefix)
