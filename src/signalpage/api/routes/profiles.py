"""
Profile API routes
"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from signalpage.models.profile import ProfileInput
from signalpage.services.profiles_service import get_profiles_service
from signalpage.utils.auth import AuthConfig, AuthContext
from signalpage.utils.error_handling import raise_for_service_error
from signalpage.utils.helpers import sanitize_username

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/profile")
async def get_profile(auth: AuthContext = Depends(AuthConfig.get_auth_dependency())):
    """Get the caller's profile"""
    profiles_service = get_profiles_service()

    try:
        result = await profiles_service.get_profile(auth.user_id)
        raise_for_service_error(result, not_found="Profile not found")
        return {"profile": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get profile for {auth.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get profile")

@router.put("/profile")
async def save_profile(
    request: ProfileInput,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Create or update the caller's profile"""
    profiles_service = get_profiles_service()

    username = sanitize_username(request.username)
    if not username:
        raise HTTPException(status_code=400, detail="Username may only contain letters, numbers, dashes and underscores")

    try:
        data = request.model_dump()
        data["username"] = username

        result = await profiles_service.save_profile(auth.user_id, auth.email, data)
        raise_for_service_error(result, conflict="Username is already taken")
        return {"profile": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to save profile for {auth.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save profile")
