"""
Async engine and request-scoped sessions.

The process holds one ``AsyncDatabaseManager``. Endpoints never open
connections themselves: they take a session from ``get_async_db``, which is
rolled back on error and closed once the response is produced.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings

logger = logging.getLogger(__name__)


class AsyncDatabaseManager:
    """Owns the async engine, its pool and the session factory."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.async_database_url
        self.async_engine = None
        self.async_session_factory = None
        self._is_initialized = False
        self._initialize_engine()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _engine_options(self) -> Dict[str, Any]:
        if self.is_sqlite:
            return {"echo": settings.ASYNC_DB_ECHO}

        pool_size = settings.ASYNC_DB_POOL_SIZE
        max_overflow = settings.ASYNC_DB_MAX_OVERFLOW
        if settings.ENVIRONMENT == "development":
            pool_size = min(pool_size, 5)
            max_overflow = min(max_overflow, 5)

        logger.info(f"Weight DB pool: size={pool_size}, overflow={max_overflow}, "
                    f"timeout={settings.ASYNC_DB_POOL_TIMEOUT}s, recycle={settings.ASYNC_DB_POOL_RECYCLE}s")

        return {
            "echo": settings.ASYNC_DB_ECHO,
            "pool_pre_ping": settings.ASYNC_DB_POOL_PRE_PING,
            "pool_size": pool_size,
            "max_overflow": max_overflow,
            "pool_recycle": settings.ASYNC_DB_POOL_RECYCLE,
            "pool_timeout": settings.ASYNC_DB_POOL_TIMEOUT,
            "connect_args": {
                "server_settings": {"application_name": "wellnest_weight"},
                "command_timeout": settings.ASYNC_DB_COMMAND_TIMEOUT,
            },
        }

    def _initialize_engine(self):
        if not self.database_url:
            raise ValueError("No database URL configured for this environment")

        # Some hosting dashboards export the URL with escaped colons
        self.database_url = self.database_url.replace("\\x3a", ":")

        try:
            self.async_engine = create_async_engine(self.database_url, **self._engine_options())
        except Exception as e:
            logger.error(f"Could not create engine for {self.database_url.split('@')[-1]}: {e}")
            raise

        self.async_session_factory = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._is_initialized = True
        logger.info(f"Engine ready ({settings.ENVIRONMENT}, {self.async_engine.dialect.name})")

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield one session; roll it back if the request raises.

        Raises:
            RuntimeError: If the manager has been closed
        """
        if not self._is_initialized:
            raise RuntimeError("AsyncDatabaseManager is not initialized")

        async with self.async_session_factory() as session:
            try:
                yield session
            except Exception as e:
                await session.rollback()
                if isinstance(e, SQLAlchemyError):
                    logger.error(f"Session rolled back after database error: {e}")
                raise

    async def test_connection(self) -> bool:
        try:
            async with self.async_session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    async def get_connection_info(self) -> dict:
        if not self.async_engine:
            return {"status": "not_initialized"}

        pool = self.async_engine.pool
        info = {"status": "initialized", "pool_type": type(pool).__name__}
        # Only queue pools report sizing
        if hasattr(pool, "checkedout"):
            info.update(
                pool_size=pool.size(),
                checked_in=pool.checkedin(),
                checked_out=pool.checkedout(),
                overflow=pool.overflow(),
            )
        return info

    async def close(self):
        if not self.async_engine:
            return
        try:
            await self.async_engine.dispose()
            logger.info("Engine disposed")
        finally:
            self._is_initialized = False
            self.async_engine = None
            self.async_session_factory = None


_async_db_manager: Optional[AsyncDatabaseManager] = None
_manager_lock = asyncio.Lock()


async def get_async_db_manager() -> AsyncDatabaseManager:
    """The process-wide manager, created on first use."""
    global _async_db_manager

    if _async_db_manager is None:
        async with _manager_lock:
            if _async_db_manager is None:
                _async_db_manager = AsyncDatabaseManager()

    return _async_db_manager


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    manager = await get_async_db_manager()
    async for session in manager.get_async_session():
        yield session


async def startup_async_database():
    """
    Create the engine and check the database answers.

    Raises:
        RuntimeError: If the database cannot be reached
    """
    manager = await get_async_db_manager()
    if not await manager.test_connection():
        raise RuntimeError("Database unreachable at startup")
    logger.info(f"Database ready: {await manager.get_connection_info()}")


async def shutdown_async_database():
    try:
        await close_async_db_manager()
    except Exception as e:
        logger.error(f"Error while closing database engine: {e}")


async def check_async_database_health(session: AsyncSession) -> dict:
    """
    Run ``SELECT 1`` on ``session`` and report status and latency.

    Returns:
        dict: {"status": "healthy" | "unhealthy", "response_time_ms": float,
        "timestamp": ISO string, "error": str | None}
    """
    started = time.perf_counter()
    report = {
        "status": "unhealthy",
        "response_time_ms": 0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "error": None,
    }

    try:
        result = await session.execute(text("SELECT 1"))
        if result.scalar() == 1:
            report["status"] = "healthy"
    except SQLAlchemyError as e:
        report["error"] = str(e)
        logger.error(f"Database health check failed: {e}")
    finally:
        report["response_time_ms"] = round((time.perf_counter() - started) * 1000, 2)

    return report


async def close_async_db_manager():
    global _async_db_manager

    if _async_db_manager is not None:
        await _async_db_manager.close()
        _async_db_manager = None
