# agentrpg/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from sqlalchemy import exc as sa_exc

from agentrpg.api.v1.api import api_router
from agentrpg.core.config import Settings, get_settings
from agentrpg.core.logging_config import configure_logging
from agentrpg.db.credential_store import CredentialStore, StoreError
from agentrpg.services.auth_service import CredentialService

logger = logging.getLogger(__name__)


def connect_store(settings: Settings) -> Optional[CredentialStore]:
    """
    Open the credential store and make sure its schema exists.

    Returns None (degraded mode) when no database is configured or it
    cannot be reached. A schema failure is logged but the store is kept.
    """
    if not settings.database_url:
        logger.warning("No DATABASE_URL - running without persistence")
        return None

    try:
        store = CredentialStore.from_url(settings.database_url, settings.store_timeout_seconds)
        store.ping()
    except (StoreError, sa_exc.ArgumentError) as exc:
        logger.error("Database connection failed: %s", exc)
        return None
    logger.info("Connected to %s", store.engine.dialect.name)

    try:
        store.init_schema()
    except StoreError:
        logger.exception("Schema initialization failed; continuing without schema guarantees")
    return store


def create_application(
    settings: Optional[Settings] = None,
    store: Optional[CredentialStore] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    if store is None:
        store = connect_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if store is not None:
            store.dispose()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        docs_url=settings.docs_url,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.credential_service = CredentialService(
        store,
        salt_bytes=settings.salt_bytes,
        timeout=settings.store_timeout_seconds,
    )

    # ---------- CORS ----------
    if settings.backend_cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.backend_cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # ---------- ROUTERS ----------
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", response_class=PlainTextResponse, summary="Health check")
    def health():
        return "ok"

    logger.info("%s v%s ready", settings.PROJECT_NAME, settings.VERSION)
    return app


app = create_application()
