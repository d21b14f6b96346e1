from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import text, event, inspect
from typing import AsyncGenerator, Optional, Dict, Any
import logging
import asyncio
import time
from datetime import datetime, timezone

from wedding_planner.core.config import settings
from wedding_planner.db.base_class import Base

logger = logging.getLogger(__name__)


class AsyncDatabaseManager:
    """
    Manages async database connections and sessions.

    Owns the engine and session factory, hands out one session per request
    and disposes of the pool on shutdown.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.async_database_url
        self.async_engine = None
        self.async_session_factory = None
        self._is_initialized = False
        self._initialize_engine()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def _initialize_engine(self):
        """Initialize the async database engine."""
        try:
            if not self.database_url:
                raise ValueError("Async database URL is not configured")

            # Replace any escaped colons in the URL
            self.database_url = self.database_url.replace("\\x3a", ":")

            logger.info(f"Initializing async database engine with URL: {self.database_url[:50]}...")
            logger.info(f"Environment: {settings.ENVIRONMENT}")

            engine_kwargs: Dict[str, Any] = {"echo": settings.DB_ECHO}
            if not self.is_sqlite:
                engine_kwargs.update(
                    pool_pre_ping=settings.DB_POOL_PRE_PING,
                    pool_size=settings.DB_POOL_SIZE,
                    max_overflow=settings.DB_MAX_OVERFLOW,
                    pool_recycle=settings.DB_POOL_RECYCLE,
                    pool_timeout=settings.DB_POOL_TIMEOUT,
                )
                logger.info(f"Pool configuration - Size: {settings.DB_POOL_SIZE}, "
                            f"Max Overflow: {settings.DB_MAX_OVERFLOW}, "
                            f"Timeout: {settings.DB_POOL_TIMEOUT}s, Recycle: {settings.DB_POOL_RECYCLE}s")

            self.async_engine = create_async_engine(self.database_url, **engine_kwargs)

            if self.is_sqlite:
                configure_sqlite_engine(self.async_engine)

            self.async_session_factory = async_sessionmaker(
                bind=self.async_engine,
                class_=AsyncSession,
                expire_on_commit=False,  # Keep objects accessible after commit
                autoflush=False,
            )

            self._is_initialized = True
            logger.info("Async database engine initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize async database engine: {e}")
            raise

    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get an async database session with proper lifecycle management.

        The session is rolled back on any exception and always closed, which
        releases its pooled connection.
        """
        if not self._is_initialized:
            raise RuntimeError("AsyncDatabaseManager is not initialized")

        async with self.async_session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Database error in session: {e}")
                raise
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_tables(self):
        """Create all tables registered on the declarative base."""
        import wedding_planner.models  # noqa: F401  registers every model

        async with self.async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables verified")

    async def test_connection(self) -> bool:
        """Test the database connection."""
        try:
            async with self.async_session_factory() as session:
                await session.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    async def get_connection_info(self) -> dict:
        """Get information about the current connection pool."""
        if not self.async_engine:
            return {"status": "not_initialized"}

        pool = self.async_engine.pool
        try:
            return {
                "pool_size": pool.size(),
                "checked_in": pool.checkedin(),
                "checked_out": pool.checkedout(),
                "overflow": pool.overflow(),
                "status": "initialized"
            }
        except AttributeError:
            # SQLite pools expose fewer counters
            return {
                "status": "initialized",
                "pool_type": str(type(pool).__name__),
            }

    async def close(self):
        """Dispose of the engine and all pooled connections."""
        if self.async_engine:
            try:
                await self.async_engine.dispose()
                logger.info("Async database engine disposed successfully")
            except Exception as e:
                logger.error(f"Error disposing async database engine: {e}")
            finally:
                self._is_initialized = False
                self.async_engine = None
                self.async_session_factory = None


def configure_sqlite_engine(async_engine) -> None:
    """
    Enable foreign keys and SAVEPOINT support on a SQLite engine.

    The driver's own transaction handling is switched off and BEGIN is emitted
    by SQLAlchemy instead, otherwise nested transactions misbehave.
    """

    @event.listens_for(async_engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(async_engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# Global async database manager instance (singleton pattern)
_async_db_manager: Optional[AsyncDatabaseManager] = None
_manager_lock = asyncio.Lock()


async def get_async_db_manager() -> AsyncDatabaseManager:
    """Get or create the global async database manager instance."""
    global _async_db_manager

    if _async_db_manager is None:
        async with _manager_lock:
            # Double-check locking pattern
            if _async_db_manager is None:
                _async_db_manager = AsyncDatabaseManager()
                logger.info("Created new AsyncDatabaseManager singleton instance")

    return _async_db_manager


# Async dependency injection function for FastAPI
async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency for async database session injection.

    Each request gets its own session checked out from the pool; it is
    rolled back on error and released once the response is produced.

    Example:
        @router.get("/weddings")
        async def list_weddings(db: AsyncSession = Depends(get_async_db)):
            ...
    """
    manager = await get_async_db_manager()
    async for session in manager.get_async_session():
        yield session


# Database startup and shutdown handlers
async def startup_async_database():
    """Initialize async database connections on application startup."""
    try:
        logger.info("Starting async database initialization...")
        manager = await get_async_db_manager()

        connection_test = await manager.test_connection()
        if not connection_test:
            raise RuntimeError("Failed to establish database connection during startup")

        if settings.AUTO_CREATE_TABLES:
            await manager.create_tables()

        pool_info = await manager.get_connection_info()
        logger.info(f"Async database startup completed. Pool info: {pool_info}")

    except Exception as e:
        logger.error(f"Failed to initialize async database during startup: {e}")
        raise


async def shutdown_async_database():
    """Clean up async database connections on application shutdown."""
    global _async_db_manager

    try:
        logger.info("Starting async database shutdown...")
        if _async_db_manager is not None:
            await _async_db_manager.close()
            _async_db_manager = None
        logger.info("Async database shutdown completed successfully")
    except Exception as e:
        logger.error(f"Error during async database shutdown: {e}")


async def check_async_database_health(db: AsyncSession) -> dict:
    """
    Check database connectivity through the given session.

    Returns:
        dict: Health check results with status and details, e.g.
        {"status": "healthy", "connected": True, "table_count": 13,
         "response_time_ms": 3.2, "timestamp": "..."}
    """
    start_time = time.time()
    health_status = {
        "status": "unhealthy",
        "connected": False,
        "table_count": 0,
        "response_time_ms": 0,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "error": None
    }

    try:
        await db.execute(text("SELECT 1"))
        health_status["connected"] = True

        connection = await db.connection()
        table_names = await connection.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        health_status["table_count"] = len(table_names)
        health_status["status"] = "healthy"
    except Exception as e:
        health_status["error"] = str(e)
        logger.error(f"Database health check failed: {e}")
    finally:
        health_status["response_time_ms"] = round((time.time() - start_time) * 1000, 2)

    return health_status
