"""Database handle: engine, connection pool and session management.

The handle is constructed explicitly and owned by the application lifespan
(see inkwell.main); request handlers reach it through the get_db dependency.
"""

import logging
from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from inkwell.core.config import Settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Owns the SQLAlchemy engine and session factory for one process."""

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 0,
        connect_timeout: int = 10,
    ) -> None:
        self.url = url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.connect_timeout = connect_timeout
        self._engine: Engine | None = None
        self._sessionmaker: sessionmaker[Session] | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            connect_timeout=settings.DB_CONNECT_TIMEOUT_SEC,
        )

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    def _engine_options(self) -> dict[str, Any]:
        if self.is_sqlite:
            options: dict[str, Any] = {
                "connect_args": {"check_same_thread": False},
            }
            # In-memory databases live and die with their single connection.
            if self.url in ("sqlite://", "sqlite:///:memory:"):
                options["poolclass"] = StaticPool
            return options
        return {
            "pool_pre_ping": True,
            "pool_size": self.pool_size,
            "max_overflow": self.max_overflow,
            "connect_args": {"connect_timeout": self.connect_timeout},
        }

    def connect(self) -> None:
        """Create the engine and session factory. Safe to call more than once."""
        if self._engine is not None:
            return
        engine = create_engine(self.url, echo=self.echo, **self._engine_options())
        if self.is_sqlite:
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        self._engine = engine
        self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("Database engine created (dialect=%s)", engine.dialect.name)

    def dispose(self) -> None:
        """Close every pooled connection and forget the engine."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed")

    def create_all(self) -> None:
        """Create all tables known to the ORM metadata (no-op for existing tables)."""
        from inkwell.models import Base

        Base.metadata.create_all(self.engine)

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._sessionmaker()


def get_database(request: Request) -> Database:
    """Return the Database handle attached to the running application."""
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = get_database(request).session()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
