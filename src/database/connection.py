"""
Database connection and pool management
"""

import asyncpg
import logging
from typing import Callable
from fastapi import Request

from config.settings import (
    DATABASE_URL,
    DB_HOST,
    DB_PORT,
    DB_POOL_MIN_SIZE,
    DB_POOL_MAX_SIZE,
    DB_COMMAND_TIMEOUT,
)
from database.schema import init_schema

logger = logging.getLogger(__name__)


def connection_setup(is_closing: Callable[[], bool]):
    """
    Build the per-connection init hook for a pool.

    Every pooled connection gets a termination listener that logs connections
    dropped underneath the pool instead of letting them surface as crashes.
    ``is_closing`` reports whether the owning pool is shutting down, in which
    case closed connections are expected and stay silent.
    """
    def on_terminated(conn: asyncpg.Connection) -> None:
        if is_closing():
            return
        logger.error(f"Unexpected termination of pooled database connection: {conn!r}")

    async def setup(conn: asyncpg.Connection) -> None:
        conn.add_termination_listener(on_terminated)

    return setup


async def create_db_pool(dsn: str = DATABASE_URL) -> asyncpg.Pool:
    """Create the asyncpg pool and verify the database answers"""
    pool = None
    pool = await asyncpg.create_pool(
        dsn,
        min_size=DB_POOL_MIN_SIZE,
        max_size=DB_POOL_MAX_SIZE,
        command_timeout=DB_COMMAND_TIMEOUT,
        init=connection_setup(lambda: pool is not None and pool.is_closing()),
    )

    # Test connection
    async with pool.acquire() as conn:
        await conn.fetchval("SELECT 1")

    logger.info(f"Database connected to {DB_HOST}:{DB_PORT}")
    return pool


async def init_database(dsn: str = DATABASE_URL) -> asyncpg.Pool:
    """
    Build the pool and make sure the users table exists.

    Any failure here is fatal: the pool is closed again and the error is
    re-raised so the application never starts serving requests.
    """
    try:
        pool = await create_db_pool(dsn)
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Failed to connect to database at {DB_HOST}:{DB_PORT}: {e}", exc_info=True)
        raise

    try:
        await init_schema(pool)
    except Exception:
        await pool.close()
        raise

    logger.info("Database initialized successfully")
    return pool


async def close_database(pool) -> None:
    """Close database connection pool"""
    if pool is not None:
        logger.info("Closing database connection pool...")
        await pool.close()
    logger.info("Database connections closed")


async def get_db_pool(request: Request):
    """FastAPI dependency returning the pool built during application startup"""
    pool = getattr(request.app.state, "db_pool", None)
    if pool is None:
        raise RuntimeError("Database pool not initialized")
    return pool
