"""FastAPI application factory. No business logic; only wiring, lifecycle and middleware.

Run with: uvicorn inkwell.main:create_app --factory
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from inkwell.api import router
from inkwell.api.gate import install_session_gate
from inkwell.core.config import Settings, get_settings
from inkwell.core.database import Database
from inkwell.services.auth import seed_admin

logger = logging.getLogger(__name__)


def _seed_admin(database: Database, settings: Settings) -> None:
    """Ensure the configured admin account exists. Failures are logged, not fatal."""
    if not settings.ADMIN_EMAIL or settings.ADMIN_PASSWORD is None:
        return
    db = database.session()
    try:
        seed_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD.get_secret_value())
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Admin seeding error: %s", e)
    finally:
        db.close()


def create_app(settings: Settings | None = None, database: Database | None = None) -> FastAPI:
    """
    Build the application.

    Settings are read from the environment when not given; a missing
    DATABASE_URL raises here and aborts startup.
    """
    settings = settings or get_settings()
    # A caller-supplied handle is the caller's to dispose.
    owns_database = database is None
    if database is None:
        database = Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logging.basicConfig(
            level=settings.LOG_LEVEL,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        database.connect()
        if settings.AUTO_CREATE_TABLES:
            database.create_all()
        _seed_admin(database, settings)
        try:
            yield
        finally:
            if owns_database:
                database.dispose()

    app = FastAPI(
        title="Inkwell",
        version="0.1.0",
        docs_url="/docs" if settings.APP_ENV == "dev" else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database

    install_session_gate(app, settings)
    app.include_router(router)
    return app
