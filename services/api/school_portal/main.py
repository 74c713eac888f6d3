"""FastAPI application entry point.

School Portal API - admissions, results and fees for a single school.
"""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from school_portal.routes import api_router
from school_portal.services.auth import SessionStore, StubAuthProvider
from school_portal.services.sync import TableAccessor
from school_portal.settings import Settings, get_settings
from school_portal.stores.memory import MemorySessionBackend, MemorySnapshotCache
from school_portal.stores.postgres import close_db, init_db, ping_db
from school_portal.stores.redis import close_redis, init_redis
from school_portal.stores.snapshots import RedisSessionBackend, RedisSnapshotCache
from school_portal.stores.tables import TABLE_MODELS, PostgresTableStore

logger = logging.getLogger("uvicorn.error")


def install_services(app: FastAPI, settings: Settings, *, use_redis: bool = False) -> None:
    """Attach accessor, session store and auth provider to app.state."""
    if use_redis:
        cache, sessions = RedisSnapshotCache(), RedisSessionBackend()
    else:
        cache, sessions = MemorySnapshotCache(), MemorySessionBackend()
    app.state.accessor = TableAccessor(cache=cache, remote=PostgresTableStore())
    app.state.sessions = SessionStore(sessions, ttl=settings.session_ttl_seconds)
    app.state.auth_provider = StubAuthProvider(settings.demo_accounts)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events.
    """
    # Startup
    settings = get_settings()

    try:
        await init_db()
        await ping_db()
        logger.info("Postgres connected")
    except Exception:
        logger.exception("Postgres init failed")

    use_redis = True
    try:
        await init_redis()
    except Exception:
        logger.exception("Redis init failed, using in-process snapshot cache")
        use_redis = False

    install_services(app, settings, use_redis=use_redis)

    # Warm the snapshots so the first reads are not empty
    accessor: TableAccessor = app.state.accessor
    for table in TABLE_MODELS:
        await accessor.refresh(table)

    yield

    # Shutdown
    await accessor.drain()
    await close_redis()
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Admissions, results and fees API",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # In-process defaults until the lifespan connects Redis
    install_services(app, settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handler for structured error format
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler returning structured error format."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": str(exc) if settings.debug else "Internal server error",
                    "detail": None,
                }
            },
        )

    # Health check endpoint
    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, bool]:
        """Health check endpoint."""
        return {"ok": True}

    # Include API routes
    app.include_router(api_router)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "school_portal.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
