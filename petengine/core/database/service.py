"""
Centralized async database engine and session management.

Purpose
-------
Own the single SQLAlchemy `AsyncEngine` and session factory used by the
SQL-backed repositories, and provide the two context managers every data
access goes through:

- `get_session()`: reads, no automatic commit.
- `get_transaction()`: atomic writes, commit on success, rollback on error.

Design Notes
------------
- Class-level singleton (all classmethods), initialized once at startup.
- Configuration comes from `Config.DATABASE_URL` / `Config.DATABASE_ECHO`;
  `initialize(database_url=...)` overrides the URL (tests use a temp file).
- SQLite connections use `NullPool` so each session owns its connection and
  SQLite's file lock serializes concurrent writers.
- Game-rule exceptions raised inside a transaction roll it back and are
  re-raised unchanged; only database errors are logged at error level.

Usage
-----
    await DatabaseService.initialize()
    await DatabaseService.create_all()

    async with DatabaseService.get_transaction() as session:
        wallet = await session.get(WalletRow, user_id)
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from petengine.core.config.config import Config
from petengine.core.database.base import Base
from petengine.core.exceptions import DatabaseError, DatabaseNotInitializedError
from petengine.core.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ConnectionMetrics:
    """Session and transaction counters."""

    total_sessions_created: int = 0
    active_sessions: int = 0
    total_transactions: int = 0
    total_commits: int = 0
    total_rollbacks: int = 0
    slow_sessions: int = 0
    session_times: list = field(default_factory=list)

    def record_session_start(self) -> None:
        self.total_sessions_created += 1
        self.active_sessions += 1

    def record_session_end(self, duration: float, slow_threshold: float = 5.0) -> None:
        self.active_sessions = max(0, self.active_sessions - 1)
        self.session_times.append(duration)
        if duration > slow_threshold:
            self.slow_sessions += 1
        if len(self.session_times) > 1000:
            self.session_times = self.session_times[-1000:]

    def get_summary(self) -> Dict[str, Any]:
        average = sum(self.session_times) / len(self.session_times) if self.session_times else 0.0
        return {
            "total_sessions_created": self.total_sessions_created,
            "active_sessions": self.active_sessions,
            "total_transactions": self.total_transactions,
            "total_commits": self.total_commits,
            "total_rollbacks": self.total_rollbacks,
            "rollback_rate": self.total_rollbacks / max(1, self.total_transactions),
            "slow_sessions": self.slow_sessions,
            "avg_session_time_ms": round(average * 1000, 2),
        }


class DatabaseService:
    """
    Async engine and session factory.

    Thread Safety
    -------------
    Each session is isolated per coroutine. Initialization is guarded by an
    async lock so concurrent startup calls create a single engine.
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _database_url: Optional[str] = None
    _metrics: ConnectionMetrics = ConnectionMetrics()
    _init_lock: asyncio.Lock = asyncio.Lock()

    # ========================================================================
    # Initialization & Shutdown
    # ========================================================================

    @classmethod
    async def initialize(cls, database_url: Optional[str] = None, echo: Optional[bool] = None) -> None:
        """
        Create the engine and session factory (idempotent).

        Raises
        ------
        DatabaseError
            If the engine cannot connect.
        """
        async with cls._init_lock:
            if cls._engine is not None:
                logger.debug("DatabaseService already initialized; skipping")
                return

            url = database_url or Config.DATABASE_URL
            engine_kwargs: Dict[str, Any] = {
                "echo": Config.DATABASE_ECHO if echo is None else echo,
            }
            if url.startswith("sqlite"):
                engine_kwargs["poolclass"] = NullPool
                engine_kwargs["connect_args"] = {"timeout": 30}
            else:
                engine_kwargs["pool_pre_ping"] = True

            try:
                engine = create_async_engine(url, **engine_kwargs)
                async with engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            except (OSError, SQLAlchemyError) as exc:
                logger.error(
                    "DatabaseService initialization failed",
                    extra={"url_scheme": url.split("://", 1)[0], "error_type": type(exc).__name__},
                    exc_info=True,
                )
                raise DatabaseError("initialize", exc) from exc

            cls._engine = engine
            cls._database_url = url
            cls._session_factory = async_sessionmaker(
                bind=engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
            cls._metrics = ConnectionMetrics()

            logger.info(
                "DatabaseService initialized",
                extra={"url_scheme": url.split("://", 1)[0]},
            )

    @classmethod
    async def create_all(cls) -> None:
        """Create every table registered on `Base.metadata`."""
        cls._ensure_initialized()
        assert cls._engine is not None

        # Import for side effect: registers the ORM tables on Base.metadata
        import petengine.database.models  # noqa: F401

        async with cls._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema created", extra={"tables": sorted(Base.metadata.tables)})

    @classmethod
    async def shutdown(cls) -> None:
        """Dispose the engine. Safe to call when not initialized."""
        async with cls._init_lock:
            if cls._engine is None:
                return
            try:
                await cls._engine.dispose()
                logger.info("DatabaseService shutdown complete", extra=cls._metrics.get_summary())
            finally:
                cls._engine = None
                cls._session_factory = None
                cls._database_url = None

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None

    @classmethod
    async def health_check(cls) -> bool:
        if cls._engine is None:
            return False
        try:
            async with cls._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.warning("Database health check failed", exc_info=True)
            return False

    @classmethod
    def get_metrics(cls) -> Dict[str, Any]:
        return cls._metrics.get_summary()

    # ========================================================================
    # Session & Transaction Context Managers
    # ========================================================================

    @classmethod
    def _ensure_initialized(cls) -> None:
        if cls._session_factory is None or cls._engine is None:
            logger.error("DatabaseService operation attempted before initialization")
            raise DatabaseNotInitializedError()

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session without automatic commit, closed on exit.

        Raises
        ------
        DatabaseNotInitializedError
            If `initialize()` has not run.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        cls._metrics.record_session_start()
        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                yield session
            finally:
                await session.close()
                duration = time.perf_counter() - start
                cls._metrics.record_session_end(duration)
                logger.debug("Database session closed", extra={"duration_ms": duration * 1000})

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Session wrapped in one atomic transaction.

        Commits on clean exit; rolls back and re-raises on any exception.
        Never call `commit()` or `rollback()` inside the block.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        cls._metrics.record_session_start()
        cls._metrics.total_transactions += 1
        start = time.perf_counter()

        async with cls._session_factory() as session:
            committed = False
            try:
                yield session
                await session.commit()
                committed = True
                cls._metrics.total_commits += 1
            except (OperationalError, DBAPIError) as exc:
                await session.rollback()
                cls._metrics.total_rollbacks += 1
                logger.error(
                    "Database error in transaction",
                    exc_info=True,
                    extra={"error_type": type(exc).__name__, "committed": committed},
                )
                raise
            except Exception as exc:
                await session.rollback()
                cls._metrics.total_rollbacks += 1
                logger.debug(
                    "Transaction rolled back",
                    extra={"error_type": type(exc).__name__},
                )
                raise
            finally:
                duration = time.perf_counter() - start
                cls._metrics.record_session_end(duration)
                if duration > 5.0:
                    logger.warning(
                        "Slow transaction",
                        extra={"duration_seconds": round(duration, 3), "committed": committed},
                    )


__all__ = ["DatabaseService", "ConnectionMetrics"]
