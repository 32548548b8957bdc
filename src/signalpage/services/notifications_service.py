"""
Notifications service - in-app notifications, per-user settings and event dispatch
"""

import logging
from datetime import datetime
from typing import Dict, Any, List, Optional
from signalpage.models.enums import AnalyticsEventType, NotificationType
from signalpage.models.notification import DEFAULT_NOTIFICATION_SETTINGS
from signalpage.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

NOTIFICATION_TEXT = {
    NotificationType.PAGE_VIEW: (
        "New page view",
        "Someone just viewed your {label} page.",
    ),
    NotificationType.RETURN_VISITOR: (
        "Return visitor",
        "A visitor came back to your {label} page.",
    ),
    NotificationType.HIGH_ENGAGEMENT: (
        "High engagement",
        "A visitor spent over 2 minutes on your {label} page.",
    ),
    NotificationType.WEEKLY_DIGEST: (
        "Weekly Digest Queued",
        "Your weekly analytics digest is being sent to {label}",
    ),
}


def select_notification(event_type: str, is_return_visitor: bool, settings: Dict[str, Any]) -> Optional[NotificationType]:
    """
    Decide which notification (if any) an analytics event produces for the page owner

    A returning visitor's page_view produces a return_visitor notification instead of page_view.
    """
    if event_type == AnalyticsEventType.PAGE_VIEW.value:
        if is_return_visitor:
            return NotificationType.RETURN_VISITOR if settings.get("email_on_return_visitor") else None
        return NotificationType.PAGE_VIEW if settings.get("email_on_page_view") else None

    if event_type == AnalyticsEventType.HIGH_ENGAGEMENT.value:
        return NotificationType.HIGH_ENGAGEMENT if settings.get("email_on_high_engagement") else None

    return None


class NotificationsService(BaseService):
    """Service for in-app notifications"""

    def __init__(self):
        super().__init__("notifications", ["user_id", "page_id", "type", "title", "message", "is_read", "metadata"])

    async def list_notifications(self, user_id: str, unread_only: bool = False, limit: int = 20) -> ServiceResult:
        filters: Dict[str, Any] = {"user_id": user_id}
        if unread_only:
            filters["is_read"] = False
        return await self.read(
            filters=filters,
            order_by=[{"field": "created_at", "dir": "desc"}],
            limit=limit
        )

    async def unread_count(self, user_id: str) -> int:
        result = await self.count(filters={"user_id": user_id, "is_read": False})
        return result.count if result.success else 0

    async def mark_read(self, user_id: str, notification_ids: List[str]) -> ServiceResult:
        return await self.update_where(
            {"user_id": user_id, "id": {"op": "in", "value": notification_ids}},
            {"is_read": True}
        )

    async def mark_all_read(self, user_id: str) -> ServiceResult:
        return await self.update_where({"user_id": user_id, "is_read": False}, {"is_read": True})

    async def notify(
        self,
        user_id: str,
        page_id: Optional[str],
        notification_type: NotificationType,
        label: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> ServiceResult:
        title, template = NOTIFICATION_TEXT[notification_type]
        logger.info(f"🔔 Notifying user {user_id}: {notification_type.value} on page {page_id}")
        return await self.create({
            "user_id": user_id,
            "page_id": page_id,
            "type": notification_type.value,
            "title": title,
            "message": template.format(label=label),
            "is_read": False,
            "metadata": metadata or {},
        })


class NotificationSettingsService(BaseService):
    """Per-user notification preferences, keyed by user_id"""

    def __init__(self):
        super().__init__(
            "user_notification_settings",
            list(DEFAULT_NOTIFICATION_SETTINGS.keys()) + ["user_id"],
            id_field="user_id"
        )

    async def get_settings(self, user_id: str) -> Dict[str, Any]:
        """Stored settings, or the defaults when the user never saved any"""
        result = await self.read(filters={"user_id": user_id}, limit=1)
        if not result.success:
            raise RuntimeError(result.error)
        return result.first or dict(DEFAULT_NOTIFICATION_SETTINGS)

    async def save_settings(self, user_id: str, settings: Dict[str, Any]) -> ServiceResult:
        record = {"user_id": user_id, **settings, "updated_at": datetime.utcnow()}
        return await self.upsert(record, conflict_fields=["user_id"])

    async def get_digest_subscribers(self, digest_day: str) -> ServiceResult:
        """Users who want the weekly digest on the given weekday"""
        return await self.read(
            filters={"email_weekly_digest": True, "digest_day": digest_day},
            limit=10000
        )


# Global service instances
_notifications_service: Optional[NotificationsService] = None
_settings_service: Optional[NotificationSettingsService] = None

def get_notifications_service() -> NotificationsService:
    """Get the global notifications service instance"""
    global _notifications_service
    if _notifications_service is None:
        _notifications_service = NotificationsService()
    return _notifications_service

def get_notification_settings_service() -> NotificationSettingsService:
    """Get the global notification settings service instance"""
    global _settings_service
    if _settings_service is None:
        _settings_service = NotificationSettingsService()
    return _settings_service
