from contextlib import contextmanager
from typing import Generator, Optional

import logging

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)


# ============================================================
# ✅ Database handle (engine + session factory)
# ============================================================
class Database:
    """
    Owns the SQLModel engine for one application instance.

    Built once by the app factory and stored on ``app.state.db``; handlers
    reach it only through the ``get_session`` dependency.
    """

    def __init__(self, url: str, echo: bool = False, engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine or self._build_engine(url, echo)

    @staticmethod
    def _build_engine(url: str, echo: bool) -> Engine:
        kwargs = {"echo": echo, "pool_pre_ping": True}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            # In-memory SQLite must share one connection or every session sees an empty db
            if url in ("sqlite://", "sqlite:///:memory:"):
                kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    def create_all(self) -> None:
        """Create all tables declared on SQLModel.metadata."""
        try:
            SQLModel.metadata.create_all(self.engine)
            logger.info("All database tables created successfully.")
        except Exception:
            logger.exception("Failed to create tables")
            raise

    def session(self) -> Session:
        return Session(self.engine)

    def ping(self) -> None:
        """Run ``SELECT 1``; raises whatever the driver raises."""
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self.engine.dispose()

    @staticmethod
    @contextmanager
    def transaction(session: Session) -> Generator[Session, None, None]:
        """Commit everything written inside the block, or nothing."""
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise


# ============================================================
# ✅ Dependency: FastAPI session generator
# ============================================================
def get_database(request: Request) -> Database:
    return request.app.state.db


def get_session(request: Request) -> Generator[Session, None, None]:
    """
    Provides a SQLModel Session bound to the app's Database.
    Closes automatically after request completes.
    """
    with get_database(request).session() as session:
        yield session
