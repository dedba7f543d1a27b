"""FastAPI application."""

from contextlib import asynccontextmanager

from dishka import AsyncContainer
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logfire

from authhost.application.session_reclaimer import SessionReclaimer
from authhost.config import Settings
from authhost.domain.service import UserService
from authhost.interface.api.routes import auth, health, hello, roles, users
from authhost.interface.error import register_error_handlers
from authhost.util.di.container import create_container, setup_di
from authhost.util.observability import instrument_fastapi, instrument_httpx


async def ensure_seed_users(container: AsyncContainer) -> int:
    """Create the configured seed users in their own transaction."""
    async with container() as request_container:
        settings = await request_container.get(Settings)
        if not settings.auth.seed_users:
            return 0
        user_service = await request_container.get(UserService)
        return await user_service.ensure_seed_users(settings.auth.seed_users)


def create_app(container: AsyncContainer | None = None) -> FastAPI:
    """Create FastAPI application.

    Note: Logfire should be configured before calling this function.
    In production, start_app.py handles this.

    Args:
        container: DI container, the production container when omitted
    """
    settings = Settings()
    if container is None:
        container = create_container()

    # Logfire must be configured before instrumentation
    instrument_httpx()

    @asynccontextmanager
    async def lifespan(app_instance: FastAPI):
        await ensure_seed_users(container)
        reclaimer = SessionReclaimer(
            container, settings.auth.session_reclaim_interval_seconds
        )
        reclaimer.start()
        try:
            yield
        finally:
            await reclaimer.stop()
            await container.close()
            logfire.info("Application shut down")

    app_instance = FastAPI(
        title="Authhost API",
        description="Authentication and session host: credentials, HTTP Basic/Digest and OAuth providers",
        version="0.1.0",
        lifespan=lifespan,
    )

    instrument_fastapi(app_instance)

    app_instance.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "Accept",
            "Origin",
            "User-Agent",
            "Cache-Control",
            "X-Requested-With",
        ],
        expose_headers=["Content-Length", "Content-Type", "WWW-Authenticate"],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    setup_di(app_instance, container)
    register_error_handlers(app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(hello.router)
    app_instance.include_router(auth.router)
    app_instance.include_router(users.router)
    app_instance.include_router(roles.router)

    return app_instance


# Create app instance for uvicorn
# Note: Logfire must be configured before this module is imported
# In production: start_app.py handles this
app = create_app()
