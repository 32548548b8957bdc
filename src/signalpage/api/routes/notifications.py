"""
Notification API routes - in-app notifications and notification settings
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, Query

from signalpage.models.notification import MarkNotificationsRequest, NotificationSettingsInput
from signalpage.services.notifications_service import (
    get_notification_settings_service, get_notifications_service
)
from signalpage.utils.auth import AuthConfig, AuthContext

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/notifications")
async def list_notifications(
    unread: bool = Query(False),
    limit: int = Query(20, ge=1, le=100),
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Caller's notifications, newest first, with the unread count"""
    notifications_service = get_notifications_service()

    try:
        result = await notifications_service.list_notifications(auth.user_id, unread_only=unread, limit=limit)
        if not result.success:
            logger.error(f"Error fetching notifications: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to fetch notifications")

        unread_count = await notifications_service.unread_count(auth.user_id)
        return {"notifications": result.data or [], "unreadCount": unread_count}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Notifications error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.patch("/notifications")
async def mark_notifications(
    request: MarkNotificationsRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Mark specific notifications, or all of them, as read"""
    notifications_service = get_notifications_service()

    if request.mark_all_read:
        operation = notifications_service.mark_all_read(auth.user_id)
    elif request.notification_ids is not None:
        if not request.notification_ids:
            return {"success": True}
        operation = notifications_service.mark_read(auth.user_id, request.notification_ids)
    else:
        raise HTTPException(status_code=400, detail="Invalid request body")

    try:
        result = await operation
        if not result.success:
            logger.error(f"Error marking notifications as read: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to update notifications")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Notifications error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/notifications/settings")
async def get_notification_settings(auth: AuthContext = Depends(AuthConfig.get_auth_dependency())):
    """Stored settings, or defaults if the user never saved any"""
    try:
        settings = await get_notification_settings_service().get_settings(auth.user_id)
        return {"settings": settings}

    except Exception as e:
        logger.error(f"Error fetching notification settings: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch settings")

@router.api_route("/notifications/settings", methods=["POST", "PUT"])
async def save_notification_settings(
    request: NotificationSettingsInput,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Upsert settings; omitted fields take their defaults"""
    try:
        result = await get_notification_settings_service().save_settings(auth.user_id, request.with_defaults())
        if not result.success:
            logger.error(f"Error updating notification settings: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to update settings")
        return {"settings": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Notification settings error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
