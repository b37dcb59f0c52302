"""
Engine and session handling for the decisions database.

One process-wide ``DatabaseManager`` owns the engine. PostgreSQL gets a
``QueuePool`` sized from settings; SQLite (tests, local runs) gets a single
shared connection through ``StaticPool``.

Usage:
    from core.db import db, get_db, Base

    db.initialize()
    with db.session() as session:
        likers, next_token = DecisionRepository(session).get_likers("user123", None)
"""

import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import get_settings


class Base(DeclarativeBase):
    pass


class DatabaseManager:
    """
    Process-wide holder of the engine and session factory.

    ``initialize`` is idempotent; ``reset`` disposes the engine so the next
    ``initialize`` can point at a different URL.
    """

    _instance: Optional["DatabaseManager"] = None
    _initialized: bool = False

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def initialize(self, database_url: str | None = None) -> None:
        """
        Create the engine and session factory.

        Args:
            database_url: Overrides ``settings.sqlalchemy_url``
        """
        if self._initialized:
            return

        settings = get_settings()
        url = database_url or settings.sqlalchemy_url

        if url.startswith("sqlite"):
            engine_options = {
                "poolclass": StaticPool,
                "connect_args": {"check_same_thread": False},
            }
        else:
            engine_options = {
                "poolclass": QueuePool,
                "pool_size": settings.db_pool_size,
                "max_overflow": settings.db_max_overflow,
                "pool_pre_ping": settings.db_pool_pre_ping,
            }

        self.engine = create_engine(url, echo=settings.debug, **engine_options)
        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self._initialized = True

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Session that commits when the block succeeds and rolls back otherwise."""
        self._ensure_initialized()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def health_check(self) -> dict:
        """
        Run ``SELECT 1`` and time it.

        Returns:
            dict with 'healthy' (bool), 'latency_ms' (float), and 'error' (str or None)
        """
        if not self._initialized:
            return {"healthy": False, "latency_ms": 0, "error": "Database not initialized"}

        start = time.perf_counter()
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            error = None
        except Exception as e:
            error = str(e)
        latency = round((time.perf_counter() - start) * 1000, 2)
        return {"healthy": error is None, "latency_ms": latency, "error": error}

    def reset(self) -> None:
        """Dispose the engine and forget the configuration."""
        if getattr(self, "engine", None) is not None:
            self.engine.dispose()
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")


db = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    Writes that must be durable before the response is sent commit
    themselves; the commit here only closes out read transactions.
    """
    with db.session() as session:
        yield session


__all__ = ["Base", "DatabaseManager", "db", "get_db"]
