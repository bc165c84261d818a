"""Explicitly constructed handle to the relational store.

The Store owns the SQLAlchemy engine and session factory. It is opened once at
process start (FastAPI lifespan or CLI command) and closed at shutdown, then
passed to every component that needs it.
"""

from __future__ import annotations

import threading
from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sweatsync.core.errors import PersistenceError, SweatSyncError
from sweatsync.db.models import Base


def _is_sqlite(url: str) -> bool:
    return url.lower().startswith("sqlite")


def _is_in_memory(url: str) -> bool:
    return _is_sqlite(url) and (":memory:" in url or url.rstrip("/") in {"sqlite:", "sqlite:/"})


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Store:
    """Database handle with explicit open/close lifecycle.

    Attributes:
        database_url: SQLAlchemy URL the handle connects to
    """

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self.database_url = database_url
        self._echo = echo
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._activation_locks: dict[int, threading.Lock] = {}
        self._activation_locks_guard = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Store is not open")
        return self._engine

    def open(self) -> Store:
        """Create the engine and session factory. Safe to call twice."""
        if self._engine is not None:
            return self

        logger.info(f"[STORE] Opening database: {self.database_url}")
        connect_args: dict = {}
        engine_kwargs: dict = {"echo": self._echo}
        if _is_sqlite(self.database_url):
            connect_args = {"check_same_thread": False}
            if _is_in_memory(self.database_url):
                # One shared connection, otherwise every checkout sees an empty database
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True
            engine_kwargs["pool_recycle"] = 3600

        engine = create_engine(self.database_url, connect_args=connect_args, **engine_kwargs)
        if _is_sqlite(self.database_url):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)

        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
        logger.info("[STORE] Database engine initialized")
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("[STORE] Database connection closed")

    def create_all(self) -> None:
        """Create all tables that do not exist yet."""
        Base.metadata.create_all(bind=self.engine)
        logger.info("[STORE] Database tables verified")

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"[STORE] Database ping failed: {e}")
            return False
        return True

    @contextmanager
    def session(self, operation: str = "session", account_id: int | None = None) -> Generator[Session, None, None]:
        """Yield a session that commits on success and rolls back on error.

        Domain errors (SweatSyncError) are re-raised unchanged. Database errors
        are logged with the operation name and account id, then re-raised as
        PersistenceError.

        Args:
            operation: Name of the store operation, used in logs and errors
            account_id: Account the operation runs for, when known
        """
        if self._session_factory is None:
            raise RuntimeError("Store is not open")

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SweatSyncError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"[STORE] {operation} failed for account_id={account_id}: {type(e).__name__}: {e}")
            raise PersistenceError(operation, account_id=account_id, original_error=e) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def activation_lock(self, account_id: int) -> Generator[None, None, None]:
        """Serialize plan activation for one account within this process."""
        with self._activation_locks_guard:
            lock = self._activation_locks.setdefault(account_id, threading.Lock())
        with lock:
            yield
