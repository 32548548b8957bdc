"""
Scheduled digest API route, triggered by an external cron with X-Cron-Secret
"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from signalpage.services.digest_service import run_weekly_digest
from signalpage.utils.auth import AuthConfig

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/weekly")
async def weekly_digest(_: bool = Depends(AuthConfig.get_cron_dependency())):
    """Send weekly analytics digests to users whose digest day is today"""
    try:
        return await run_weekly_digest()

    except Exception as e:
        logger.error(f"Weekly digest fatal error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Weekly digest failed")
