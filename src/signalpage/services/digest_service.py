"""
Weekly digest service - aggregates a week of page views per user and emails a summary
"""

import html
import time
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from signalpage.config import settings
from signalpage.models.email import EmailRequest
from signalpage.models.analytics import AnalyticsSummary
from signalpage.models.enums import AnalyticsEventType, DeliveryStatus, NotificationType
from signalpage.services.analytics_service import get_analytics_service, get_snapshots_service
from signalpage.services.email_service import send_email_via_resend
from signalpage.services.notifications_service import get_notification_settings_service, get_notifications_service
from signalpage.services.profiles_service import get_profiles_service
from signalpage.services.signal_pages_service import get_signal_pages_service

logger = logging.getLogger(__name__)

DIGEST_WINDOW_DAYS = 7
DIGEST_EMAIL_TYPE = "weekly_digest"
WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


@dataclass
class PageDigest:
    title: str
    total_views: int
    unique_visitors: int
    return_visitors: int
    high_engagement_count: int
    avg_time_on_page: int


@dataclass
class DigestData:
    full_name: Optional[str]
    week_start: datetime
    week_end: datetime
    pages: List[PageDigest] = field(default_factory=list)

    @property
    def total_views(self) -> int:
        return sum(p.total_views for p in self.pages)

    @property
    def total_unique_visitors(self) -> int:
        return sum(p.unique_visitors for p in self.pages)

    @property
    def total_return_visitors(self) -> int:
        return sum(p.return_visitors for p in self.pages)


def format_duration(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes}m {remaining}s" if remaining else f"{minutes}m"


def page_title(page: Dict[str, Any]) -> str:
    role = page.get("role_title") or "Signal Page"
    company = page.get("company_name")
    return f"{role} @ {company}" if company else role


def digest_subject(total_views: int) -> str:
    if total_views > 0:
        return f"Your SignalPage Weekly Digest - {total_views} views this week"
    return "Your SignalPage Weekly Digest"


def _greeting(full_name: Optional[str]) -> str:
    if full_name and full_name.strip():
        return f"Hi {full_name.split()[0]}"
    return "Hi there"


def _short_date(value: datetime) -> str:
    return f"{value.strftime('%b')} {value.day}"


def render_digest_text(data: DigestData) -> str:
    lines = [
        f"{_greeting(data.full_name)},",
        "",
        f"Your SignalPage Weekly Digest ({_short_date(data.week_start)} - {_short_date(data.week_end)})",
        "",
        "SUMMARY",
        "-------",
        f"Total Views: {data.total_views}",
        f"Unique Visitors: {data.total_unique_visitors}",
        f"Return Visitors: {data.total_return_visitors}",
        "",
    ]

    if data.pages and data.total_views > 0:
        lines += ["PAGE PERFORMANCE", "----------------"]
        for page in data.pages:
            lines += [
                "",
                page.title,
                f"  Views: {page.total_views}",
                f"  Unique: {page.unique_visitors}",
                f"  Return: {page.return_visitors}",
                f"  High Engagement: {page.high_engagement_count}",
            ]
    else:
        lines.append("No page views this week. Share your SignalPages to start getting views!")

    lines += [
        "",
        "---",
        f"View full analytics: {settings.APP_URL}/dashboard",
        f"Manage preferences: {settings.APP_URL}/dashboard/profile",
    ]
    return "\n".join(lines) + "\n"


def _stat_row(label: str, value: Any, color: str = "#111827") -> str:
    return (
        "<tr>"
        f'<td style="padding: 4px 0; color: #6b7280; font-size: 14px;">{label}</td>'
        f'<td style="padding: 4px 0; text-align: right; font-weight: 500; color: {color};">{value}</td>'
        "</tr>"
    )


def _summary_cell(value: int, label: str, color: str = "#111827") -> str:
    return (
        '<td style="padding: 16px; text-align: center;">'
        f'<p style="margin: 0; font-size: 28px; font-weight: 700; color: {color};">{value}</p>'
        f'<p style="margin: 4px 0 0 0; font-size: 12px; color: #6b7280; text-transform: uppercase;">{label}</p>'
        "</td>"
    )


def render_digest_html(data: DigestData) -> str:
    if data.pages and data.total_views > 0:
        page_rows = []
        for page in data.pages:
            stats = [
                _stat_row("Total Views", page.total_views),
                _stat_row("Unique Visitors", page.unique_visitors),
                _stat_row("Return Visitors", page.return_visitors, "#2563eb"),
                _stat_row("High Engagement (2+ min)", page.high_engagement_count, "#059669"),
            ]
            if page.avg_time_on_page > 0:
                stats.append(_stat_row("Avg. Time on Page", format_duration(page.avg_time_on_page)))
            page_rows.append(
                '<tr><td style="padding: 16px; border-bottom: 1px solid #e5e7eb;">'
                f'<p style="margin: 0 0 8px 0; font-weight: 600; color: #111827;">{html.escape(page.title)}</p>'
                f'<table style="width: 100%;">{"".join(stats)}</table>'
                "</td></tr>"
            )
        pages_html = "".join(page_rows)
    else:
        pages_html = (
            '<tr><td style="padding: 24px; text-align: center; color: #6b7280;">'
            '<p style="margin: 0;">No page views this week.</p>'
            '<p style="margin: 8px 0 0 0; font-size: 14px;">Share your SignalPages to start getting views!</p>'
            "</td></tr>"
        )

    summary = "".join([
        _summary_cell(data.total_views, "Total Views"),
        _summary_cell(data.total_unique_visitors, "Unique"),
        _summary_cell(data.total_return_visitors, "Return", "#2563eb"),
    ])

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Your Weekly SignalPage Digest</title>
</head>
<body style="margin: 0; padding: 0; font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif; background-color: #f3f4f6;">
  <table style="width: 100%; max-width: 600px; margin: 0 auto; background-color: #ffffff;">
    <tr>
      <td style="padding: 32px 24px; background-color: #2563eb;">
        <h1 style="margin: 0; color: #ffffff; font-size: 24px; font-weight: 700;">SignalPage</h1>
        <p style="margin: 8px 0 0 0; color: #bfdbfe; font-size: 14px;">Weekly Analytics Digest</p>
      </td>
    </tr>
    <tr>
      <td style="padding: 24px;">
        <p style="margin: 0; font-size: 16px; color: #374151;">{html.escape(_greeting(data.full_name))},</p>
        <p style="margin: 12px 0 0 0; font-size: 14px; color: #6b7280;">
          Here's how your SignalPages performed from {_short_date(data.week_start)} to {_short_date(data.week_end)}.
        </p>
      </td>
    </tr>
    <tr>
      <td style="padding: 0 24px;">
        <table style="width: 100%; background-color: #f9fafb; border-radius: 8px;"><tr>{summary}</tr></table>
      </td>
    </tr>
    <tr>
      <td style="padding: 24px;">
        <h2 style="margin: 0 0 16px 0; font-size: 16px; font-weight: 600; color: #111827;">Page Performance</h2>
        <table style="width: 100%; border: 1px solid #e5e7eb; border-collapse: collapse;">{pages_html}</table>
      </td>
    </tr>
    <tr>
      <td style="padding: 0 24px 24px;">
        <a href="{settings.APP_URL}/dashboard" style="display: block; text-align: center; background-color: #2563eb; color: #ffffff; padding: 12px 24px; border-radius: 6px; text-decoration: none; font-weight: 500;">View Full Analytics</a>
      </td>
    </tr>
    <tr>
      <td style="padding: 24px; background-color: #f9fafb; border-top: 1px solid #e5e7eb;">
        <p style="margin: 0; font-size: 12px; color: #9ca3af; text-align: center;">
          You're receiving this because you opted in to weekly digests.<br>
          <a href="{settings.APP_URL}/dashboard/profile" style="color: #6b7280;">Manage preferences</a>
        </p>
      </td>
    </tr>
  </table>
</body>
</html>
"""


async def _build_page_digest(user_id: str, page: Dict[str, Any], week_start: datetime) -> Optional[PageDigest]:
    """Aggregate a page's views for the window and store the snapshot; None when it had no views"""
    result = await get_analytics_service().summarize_since(
        page["id"], week_start, event_type=AnalyticsEventType.PAGE_VIEW.value
    )
    if not result.success:
        logger.error(f"Error fetching analytics for page {page['id']}: {result.error}")
        return None

    summary = AnalyticsSummary.model_validate(result.first or {})
    if summary.total_views == 0:
        return None

    snapshot = await get_snapshots_service().save_snapshot({
        "user_id": user_id,
        "page_id": page["id"],
        "week_start": week_start.date(),
        "total_views": summary.total_views,
        "unique_visitors": summary.unique_visitors,
        "return_visitors": summary.return_visitors,
        "avg_time_on_page": summary.avg_time_on_page,
        "high_engagement_count": summary.high_engagement_count,
        "top_referrers": summary.referrer_counts,
    })
    if not snapshot.success:
        logger.warning(f"Failed to save analytics snapshot for page {page['id']}: {snapshot.error}")

    return PageDigest(
        title=page_title(page),
        total_views=summary.total_views,
        unique_visitors=summary.unique_visitors,
        return_visitors=summary.return_visitors,
        high_engagement_count=summary.high_engagement_count,
        avg_time_on_page=summary.avg_time_on_page,
    )


async def send_user_digest(user_id: str, week_start: datetime, week_end: datetime) -> Optional[bool]:
    """
    Build and send one user's digest

    Returns:
        True when sent or queued, False on failure, None when the user was skipped
    """
    profile_result = await get_profiles_service().get_profile(user_id)
    profile = profile_result.first or {}
    email = profile.get("email")
    if not email:
        logger.error(f"Could not get email for user {user_id}")
        return False

    pages_result = await get_signal_pages_service().list_pages(user_id)
    if not pages_result.success or not pages_result.data:
        logger.info(f"No pages found for user {user_id}")
        return None

    data = DigestData(full_name=profile.get("full_name"), week_start=week_start, week_end=week_end)
    for page in pages_result.data:
        page_digest = await _build_page_digest(user_id, page, week_start)
        if page_digest:
            data.pages.append(page_digest)

    totals = {
        "total_views": data.total_views,
        "total_unique": data.total_unique_visitors,
        "total_return": data.total_return_visitors,
    }
    response = await send_email_via_resend(
        EmailRequest(
            recipient_email=email,
            recipient_name=profile.get("full_name"),
            subject=digest_subject(data.total_views),
            body=render_digest_text(data),
            html_body=render_digest_html(data),
            email_type=DIGEST_EMAIL_TYPE,
            metadata=totals
        ),
        user_id
    )
    if response.status == DeliveryStatus.FAILED.value:
        return False

    notification = await get_notifications_service().notify(
        user_id=user_id,
        page_id=None,
        notification_type=NotificationType.WEEKLY_DIGEST,
        label=email,
        metadata=totals
    )
    if not notification.success:
        logger.warning(f"Failed to record digest notification for user {user_id}: {notification.error}")
    return True


async def run_weekly_digest(now: Optional[datetime] = None) -> Dict[str, Any]:
    """Send digests to every user who chose today's weekday"""
    started = time.monotonic()
    now = now or datetime.utcnow()
    today = WEEKDAYS[now.weekday()]
    week_start = now - timedelta(days=DIGEST_WINDOW_DAYS)

    logger.info(f"📧 Starting weekly digest for {today}")

    subscribers = await get_notification_settings_service().get_digest_subscribers(today)
    if not subscribers.success:
        raise RuntimeError(f"Failed to fetch notification settings: {subscribers.error}")

    queued = 0
    errors = 0
    for row in subscribers.data:
        user_id = str(row["user_id"])
        try:
            outcome = await send_user_digest(user_id, week_start, now)
        except Exception as e:
            logger.error(f"Digest failed for user {user_id}: {e}", exc_info=True)
            outcome = False

        if outcome is True:
            queued += 1
        elif outcome is False:
            errors += 1

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(f"Weekly digest completed in {duration_ms}ms. Queued: {queued}, Errors: {errors}")

    return {"success": True, "queued": queued, "errors": errors, "duration_ms": duration_ms}
