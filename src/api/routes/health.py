"""
Health check API route
"""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from database.connection import get_db_pool

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(db_pool=Depends(get_db_pool)):
    """
    Health check - always answers 200 while the process is up.

    Database connectivity is reported in the payload rather than through
    the status code.
    """
    database_status = "connected"
    try:
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except Exception as e:
        logger.warning(f"Health check database probe failed: {e}")
        database_status = "unavailable"

    return {
        "status": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": database_status
    }
