"""
Health check API route
"""

import logging
from datetime import datetime
from fastapi import APIRouter, HTTPException

from signalpage.database.connection import get_db_pool

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/")
async def health_check():
    """Health check - reports unhealthy only when the database is unreachable"""
    try:
        db_pool = get_db_pool()
        async with db_pool.acquire() as conn:
            await conn.fetchval("SELECT 1")

        return {
            "status": "healthy",
            "timestamp": datetime.utcnow().isoformat(),
            "database": "connected"
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Health check failed")
