"""
Schema bootstrap for the users table
"""

import logging

import asyncpg

logger = logging.getLogger(__name__)

USERS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        email VARCHAR(100) UNIQUE NOT NULL,
        age INTEGER,
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    )
"""


async def init_schema(pool) -> None:
    """Create the users table if it does not exist yet. Never alters an existing table."""
    try:
        async with pool.acquire() as conn:
            await conn.execute(USERS_TABLE_SQL)
    except (OSError, asyncpg.PostgresError) as e:
        logger.error(f"Error initializing database schema: {e}", exc_info=True)
        raise

    logger.info("Database table initialized successfully")
