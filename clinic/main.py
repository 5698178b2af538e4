"""Application factory.

Settings are built once here and stored on ``app.state`` together with the
engine and session factory; request handlers reach them through
``clinic.core.deps.get_settings`` and ``clinic.db.session.get_db``.

Nothing is built at import time; serve with
``uvicorn clinic.main:create_app --factory``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from clinic.core.config import Settings
from clinic.core.errors import register_error_handlers
from clinic.core.http_hardening import RequestIdLogFilter, install_http_hardening
from clinic.api.public.router import router as public_router
from clinic.api.admin.router import router as admin_router
from clinic.db.migrate import upgrade_to_head
from clinic.db.session import build_engine, build_session_factory
from clinic.services.doctor_bootstrap import ensure_clinic_doctors
from clinic.services.email_service import email_provider_health

logger = logging.getLogger("clinic")


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, str(settings.LOG_LEVEL or "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdLogFilter) for f in handler.filters):
            handler.addFilter(RequestIdLogFilter())
    logging.getLogger("clinic").setLevel(level)


def _startup(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    if settings.DB_AUTO_MIGRATE:
        upgrade_to_head(settings.DATABASE_URL)

    with app.state.session_factory() as db:
        ensure_clinic_doctors(db, settings)

    health = email_provider_health(settings)
    if health["can_send"]:
        logger.info("email provider ready: %s (%s)", health["provider"], health["mode"])
    else:
        logger.warning("email provider not ready: %s; issues=%s", health["provider"], health["issues"])
    if settings.OTP_DELIVERY_DEGRADED_MODE:
        logger.warning("OTP_DELIVERY_DEGRADED_MODE is on: undelivered codes are returned to clients")


def create_app(settings: Settings | None = None) -> FastAPI:
    if settings is None:
        settings = Settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        _startup(app)
        logger.info("%s started (env=%s)", settings.APP_NAME, settings.APP_ENV)
        yield
        app.state.engine.dispose()

    app = FastAPI(title=settings.APP_NAME, version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL)
    app.state.session_factory = build_session_factory(app.state.engine)

    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_http_hardening(app)
    register_error_handlers(app)

    app.include_router(public_router, prefix="/api")
    app.include_router(admin_router, prefix="/api/admin")

    @app.get("/", include_in_schema=False)
    def landing():
        return JSONResponse({"service": settings.APP_NAME, "status": "ok"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
