from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from site_backend.core.config import Settings, get_settings
from site_backend.core.logging import RequestLogMiddleware, configure_logging
from site_backend.routers import auth as auth_router
from site_backend.routers import backup as backup_router
from site_backend.routers import blog as blog_router
from site_backend.routers import files as files_router
from site_backend.routers import notes as notes_router
from site_backend.routers import vice_bank as vice_bank_router
from site_backend.services.registry import Services, build_services

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Baseline security headers for a JSON API."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


async def _periodic_backup(services: Services, interval_seconds: int) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        # file writes block; keep them off the event loop
        failed = await asyncio.to_thread(services.backup_all)
        if failed:
            logger.warning("Scheduled backup incomplete: %s", ", ".join(failed))
        else:
            logger.info("Scheduled backup complete")


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Factory compatible with uvicorn/gunicorn (`--factory`)."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        task = None
        if settings.backup_interval_seconds > 0:
            task = asyncio.create_task(_periodic_backup(app.state.services, settings.backup_interval_seconds))
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task

    app = FastAPI(title="Site Backend API", lifespan=lifespan)
    app.state.settings = settings
    app.state.services = services or build_services(settings)

    if settings.app_env != "prod":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[
                "http://localhost:8000",
                "http://127.0.0.1:8000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            ],
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_middleware(RequestLogMiddleware)

    app.include_router(auth_router.router)
    app.include_router(blog_router.router)
    app.include_router(notes_router.router)
    app.include_router(files_router.router)
    app.include_router(vice_bank_router.router)
    app.include_router(backup_router.router)
    return app
