"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import router as health_router
from api.v1 import public_router
from api.v1 import router as v1_router
from api.v1.dependencies import build_profile_service
from core.config import Settings, get_settings
from core.logging import setup_logging
from infrastructure.database.session import (
    create_engine,
    create_session_factory,
    create_tables,
)
from infrastructure.storage.supabase_store import SupabaseImageStore

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    settings: Settings = app.state.settings

    if settings.create_tables_on_startup:
        await create_tables(app.state.engine)
        logger.info("database_tables_ready")

    if not settings.storage_configured:
        logger.warning("image_storage_not_configured", bucket=settings.storage_bucket)

    logger.info("application_started", app_name=settings.app_name, environment=settings.app_env)
    yield

    await app.state.engine.dispose()
    logger.info("application_stopped", app_name=settings.app_name)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Every collaborator (database engine, image store, profile service) is
    built from ``settings`` here and kept on ``app.state``.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Profile Cards\n\n"
            "Create, fetch, replace and delete public profile cards. "
            "Profile and header images are uploaded to object storage and "
            "stored on the profile as public URLs.\n\n"
            "Create and update accept `multipart/form-data` (with optional "
            "`profileImage` / `headerImage` files) or a JSON object."
        ),
        version="1.0.0",
        debug=settings.debug,
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "profiles",
                "description": "Profile card operations",
            },
        ],
    )

    engine = create_engine(settings)
    session_factory = create_session_factory(engine)
    image_store = SupabaseImageStore.from_settings(settings)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.profile_service = build_profile_service(session_factory, image_store)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app, settings)

    # Include routers; the catch-all profile page route goes last. Paths
    # matched earlier (/health, /health/detailed, /docs, /redoc, /openapi.json)
    # shadow it, so profiles with those usernames are not readable at GET /{key}.
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api")
    app.include_router(public_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
