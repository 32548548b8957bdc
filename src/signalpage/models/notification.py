"""
Notification and notification settings models
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from signalpage.models.enums import DigestDay

DEFAULT_NOTIFICATION_SETTINGS = {
    "email_on_page_view": False,
    "email_on_return_visitor": True,
    "email_on_high_engagement": True,
    "email_weekly_digest": True,
    "digest_day": DigestDay.MONDAY.value,
}

class MarkNotificationsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    notification_ids: Optional[List[str]] = Field(default=None, alias="notificationIds")
    mark_all_read: Optional[bool] = Field(default=None, alias="markAllRead")

class NotificationSettingsInput(BaseModel):
    email_on_page_view: Optional[bool] = None
    email_on_return_visitor: Optional[bool] = None
    email_on_high_engagement: Optional[bool] = None
    email_weekly_digest: Optional[bool] = None
    digest_day: Optional[DigestDay] = None

    def with_defaults(self) -> dict:
        """Resolve omitted fields to the default settings"""
        resolved = dict(DEFAULT_NOTIFICATION_SETTINGS)
        for key, value in self.model_dump(exclude_none=True).items():
            resolved[key] = value.value if isinstance(value, DigestDay) else value
        return resolved
