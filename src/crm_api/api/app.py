"""
crm_api.api.app

FastAPI app factory for the CRM service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from fastapi import FastAPI
from starlette.middleware.authentication import AuthenticationMiddleware

from crm_api.api.routers.account_types import router as account_types_router
from crm_api.api.routers.accounts import router as accounts_router
from crm_api.api.routers.dev_auth import router as dev_auth_router
from crm_api.api.routers.health import router as health_router
from crm_api.api.routers.notes import router as notes_router
from crm_api.auth.backend import JwtAuthBackend
from crm_api.auth.jwt import JwtConfig
from crm_api.db.init_db import init_db
from crm_api.db.session import create_engine, create_sessionmaker
from crm_api.observability.logging import configure_logging, get_logger
from crm_api.observability.middleware import CorrelationIdMiddleware
from crm_api.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    app = FastAPI(
        title="Sales CRM API",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
    )
    app.state.settings = settings

    # Last added runs first: correlation context is bound before authentication logs anything.
    app.add_middleware(AuthenticationMiddleware, backend=JwtAuthBackend(JwtConfig.from_settings(settings)))
    app.add_middleware(CorrelationIdMiddleware, header_name=settings.correlation_header)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(notes_router)
    app.include_router(accounts_router)
    app.include_router(account_types_router)

    @app.on_event("startup")
    async def _startup() -> None:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()
        log.info("shutdown")

    return app
