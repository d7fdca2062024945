"""
Connection pool lifecycle.

A ``Database`` owns the SQLAlchemy engine (and therefore the pool).  The API
creates one at startup, hands out a session per request, and disposes the
pool at shutdown.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine as SAEngine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ..config import Settings
from ..exceptions import StorageError

logger = logging.getLogger(__name__)


def _engine_kwargs(settings: Settings) -> Dict[str, Any]:
    url = settings.database_url
    kwargs: Dict[str, Any] = {"echo": settings.echo_sql}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory databases live and die with a single connection.
        if url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url:
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_size"] = settings.pool_size
        kwargs["pool_timeout"] = settings.pool_timeout
        kwargs["pool_pre_ping"] = True
        if url.startswith("postgresql"):
            kwargs["connect_args"] = {"connect_timeout": settings.connect_timeout}
    return kwargs


class Database:
    """Process-wide database handle with an explicit open/close lifecycle."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._engine: Optional[SAEngine] = None
        self._tables_ready = False
        self._tables_lock = threading.Lock()

    @property
    def engine(self) -> SAEngine:
        if self._engine is None:
            raise StorageError("database is not open")
        return self._engine

    def open(self) -> None:
        """
        Create the engine and make sure the tables exist.

        If the store is down the engine is kept and table creation is
        retried on the next ``ping()`` or ``session()``.
        """
        if self._engine is not None:
            return
        self._engine = create_engine(self.settings.database_url, **_engine_kwargs(self.settings))
        self.ensure_tables()

    def ensure_tables(self) -> None:
        if self._tables_ready:
            return
        with self._tables_lock:
            if self._tables_ready:
                return
            try:
                SQLModel.metadata.create_all(self.engine)
            except SQLAlchemyError as e:
                logger.error(f"Database connection error: {e}")
                raise StorageError(str(e)) from e
            self._tables_ready = True

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._tables_ready = False
            logger.info("Database pool disposed")

    def ping(self) -> bool:
        """Return True if a trivial query round-trips."""
        try:
            self.ensure_tables()
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except StorageError:
            return False
        except SQLAlchemyError as e:
            logger.error(f"Database connection error: {e}")
            return False

    @contextmanager
    def session(self) -> Iterator[Session]:
        self.ensure_tables()
        with Session(self.engine) as session:
            yield session
