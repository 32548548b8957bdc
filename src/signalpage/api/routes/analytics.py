"""
Analytics API routes - public tracking beacon and owner-facing page summaries
"""

import logging
from typing import Any, Dict
from fastapi import APIRouter, HTTPException, Depends, Query, Request

from signalpage.models.analytics import AnalyticsEventRequest
from signalpage.models.enums import AnalyticsEventType
from signalpage.services.analytics_service import get_analytics_service
from signalpage.services.notifications_service import (
    get_notification_settings_service, get_notifications_service, select_notification
)
from signalpage.services.signal_pages_service import get_signal_pages_service
from signalpage.utils.auth import AuthConfig, AuthContext
from signalpage.utils.error_handling import raise_for_service_error
from signalpage.utils.helpers import hash_value

router = APIRouter()
logger = logging.getLogger(__name__)

VALID_EVENT_TYPES = {event.value for event in AnalyticsEventType}


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


def page_label(owner: Dict[str, Any]) -> str:
    if owner.get("role_title") and owner.get("company_name"):
        return f"{owner['role_title']} at {owner['company_name']}"
    return owner.get("slug") or "signal"


async def dispatch_notification(owner: Dict[str, Any], event: Dict[str, Any]):
    """Create the owner's in-app notification for a visitor event, per their settings"""
    settings = await get_notification_settings_service().get_settings(str(owner["user_id"]))
    notification_type = select_notification(event["event_type"], event["is_return_visitor"], settings)
    if notification_type is None:
        return

    result = await get_notifications_service().notify(
        user_id=str(owner["user_id"]),
        page_id=str(owner["id"]),
        notification_type=notification_type,
        label=page_label(owner),
        metadata={
            "event_type": event["event_type"],
            "referrer": event.get("referrer"),
            "time_on_page": event.get("time_on_page"),
        }
    )
    if not result.success:
        logger.warning(f"Failed to store notification for page {owner['id']}: {result.error}")


@router.post("/analytics")
async def record_analytics_event(body: AnalyticsEventRequest, request: Request):
    """Record a visitor event from a published page; no authentication"""
    if not body.page_id or not body.event_type:
        raise HTTPException(status_code=400, detail="Missing required fields")

    if body.event_type not in VALID_EVENT_TYPES:
        raise HTTPException(status_code=400, detail="Invalid event type")

    analytics_service = get_analytics_service()

    try:
        owner_result = await get_signal_pages_service().get_page_owner(body.page_id)
        raise_for_service_error(owner_result, not_found="Page not found")
        owner = owner_result.first

        visitor_hash = body.visitor_fingerprint or None
        is_return_visitor = False
        if body.event_type == AnalyticsEventType.PAGE_VIEW.value:
            is_return_visitor = await analytics_service.has_previous_view(body.page_id, visitor_hash)

        event = {
            "page_id": body.page_id,
            "event_type": body.event_type,
            "section_id": body.section_id,
            "referrer": request.headers.get("referer"),
            "user_agent": request.headers.get("user-agent"),
            "ip_hash": hash_value(client_ip(request)),
            "visitor_hash": visitor_hash,
            "is_return_visitor": is_return_visitor,
            "time_on_page": body.time_on_page,
            "session_id": body.session_id,
            "metadata": body.metadata or {},
        }

        result = await analytics_service.record_event(event)
        if not result.success:
            logger.error(f"Error recording analytics: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to record analytics")

        try:
            await dispatch_notification(owner, event)
        except Exception as e:
            logger.warning(f"Notification dispatch failed for page {body.page_id}: {e}")

        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Analytics error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

@router.get("/pages/{page_id}/analytics")
async def get_page_analytics(
    page_id: str,
    days: int = Query(7, ge=1, le=365),
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Visitor summary for one of the caller's pages"""
    try:
        page_result = await get_signal_pages_service().get_page(auth.user_id, page_id)
        raise_for_service_error(page_result, not_found="Page not found")

        result = await get_analytics_service().get_page_summary(page_id, days)
        raise_for_service_error(result)

        return {"page_id": page_id, "days": days, "summary": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to summarize analytics for page {page_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load analytics")
