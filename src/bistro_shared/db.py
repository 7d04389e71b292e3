"""
Database handle shared by the bistro services.

A single :class:`Database` is built when the process starts and handed to
every service that needs storage.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bistro_shared.logging_config import get_logger

logger = get_logger(__name__)

SLOW_QUERY_SECONDS = 1.0


def _engine_kwargs(database_url: str) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        return {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,
    }


class Database:
    """Owns the SQLAlchemy engine and session factory."""

    def __init__(self, database_url: str, echo: bool = False):
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set; cannot start without a database")

        self.engine: Engine = create_engine(
            database_url, echo=echo, **_engine_kwargs(database_url)
        )
        self._session_factory = sessionmaker(
            bind=self.engine, autoflush=False, expire_on_commit=False
        )
        self._install_slow_query_logging()

    def _install_slow_query_logging(self) -> None:
        @event.listens_for(self.engine, "before_cursor_execute")
        def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            conn.info.setdefault("query_start_time", []).append(time.time())

        @event.listens_for(self.engine, "after_cursor_execute")
        def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            total = time.time() - conn.info["query_start_time"].pop(-1)
            if total > SLOW_QUERY_SECONDS:
                logger.warning(f"Slow query detected ({total:.2f}s): {statement[:200]}...")

    def create_all(self, metadata) -> None:
        """Ensure all tables declared on the provided metadata exist."""
        metadata.create_all(self.engine)
        logger.info("Database schema ready")

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except OperationalError as exc:
            logger.warning("Database ping failed: %s", exc)
            return False

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Provide a transactional scope around a series of operations.

        Commits when the block finishes and rolls back when an exception
        escapes it.
        """
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
