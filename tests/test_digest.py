"""
Weekly digest tests: formatting, rendering and the batch run
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, patch

from signalpage.models.email import EmailResponse
from signalpage.models.enums import NotificationType
from signalpage.services.digest_service import (
    DigestData, PageDigest, digest_subject, format_duration, page_title,
    render_digest_html, render_digest_text, run_weekly_digest, send_user_digest
)

from service_mocks import USER_ID, PAGE_ID, failed, mock_service, ok

WEEK_START = datetime(2026, 10, 12, 9, 0)
WEEK_END = datetime(2026, 10, 19, 9, 0)


def _digest(pages):
    return DigestData(full_name="Jane Doe", week_start=WEEK_START, week_end=WEEK_END, pages=pages)


class TestFormatting:

    @pytest.mark.parametrize("seconds,expected", [(45, "45s"), (120, "2m"), (125, "2m 5s")])
    def test_format_duration(self, seconds, expected):
        assert format_duration(seconds) == expected

    def test_page_title(self):
        assert page_title({"role_title": "Engineer", "company_name": "Acme"}) == "Engineer @ Acme"
        assert page_title({"role_title": "Engineer"}) == "Engineer"
        assert page_title({}) == "Signal Page"

    def test_subject_includes_views_only_when_nonzero(self):
        assert digest_subject(12) == "Your SignalPage Weekly Digest - 12 views this week"
        assert digest_subject(0) == "Your SignalPage Weekly Digest"


class TestRendering:

    def test_text_digest_with_views(self):
        text = render_digest_text(_digest([PageDigest("Engineer @ Acme", 5, 3, 1, 2, 130)]))

        assert text.startswith("Hi Jane,")
        assert "(Oct 12 - Oct 19)" in text
        assert "Total Views: 5" in text
        assert "PAGE PERFORMANCE" in text
        assert "  High Engagement: 2" in text
        assert "View full analytics: https://signalpage.test/dashboard" in text

    def test_text_digest_without_views(self):
        data = DigestData(full_name=None, week_start=WEEK_START, week_end=WEEK_END)
        text = render_digest_text(data)

        assert text.startswith("Hi there,")
        assert "No page views this week." in text
        assert "PAGE PERFORMANCE" not in text

    def test_html_digest_shows_average_time(self):
        html = render_digest_html(_digest([PageDigest("Engineer @ Acme", 5, 3, 1, 2, 130)]))

        assert "Engineer @ Acme" in html
        assert "2m 10s" in html
        assert 'href="https://signalpage.test/dashboard/profile"' in html

    def test_html_digest_escapes_user_content(self):
        data = DigestData(
            full_name="<b>Jane</b>", week_start=WEEK_START, week_end=WEEK_END,
            pages=[PageDigest("R&D <Lead> @ Acme", 5, 3, 1, 2, 0)]
        )

        html = render_digest_html(data)

        assert "<b>Jane" not in html
        assert "Hi &lt;b&gt;Jane&lt;/b&gt;," in html
        assert "R&amp;D &lt;Lead&gt; @ Acme" in html


class TestSendUserDigest:

    @pytest.fixture
    def digest_services(self):
        referrers = {f"https://site{n}.example": 1 for n in range(7)}
        summary = {
            "total_views": 7, "unique_visitors": 5, "return_visitors": 2,
            "avg_time_on_page": 150, "high_engagement_count": 1, "referrer_counts": referrers,
        }
        mocks = {
            "profiles": mock_service(get_profile=ok([{"email": "jane@example.com", "full_name": "Jane Doe"}])),
            "pages": mock_service(list_pages=ok([{"id": PAGE_ID, "role_title": "Engineer", "company_name": "Acme"}])),
            "analytics": mock_service(summarize_since=ok([summary])),
            "snapshots": mock_service(save_snapshot=ok([{"id": "s1"}])),
            "notifications": mock_service(notify=ok([{"id": "n1"}])),
            "send": AsyncMock(return_value=EmailResponse(queue_id="q1", status="sent", recipient="jane@example.com")),
        }
        with patch("signalpage.services.digest_service.get_profiles_service", return_value=mocks["profiles"]), \
                patch("signalpage.services.digest_service.get_signal_pages_service", return_value=mocks["pages"]), \
                patch("signalpage.services.digest_service.get_analytics_service", return_value=mocks["analytics"]), \
                patch("signalpage.services.digest_service.get_snapshots_service", return_value=mocks["snapshots"]), \
                patch("signalpage.services.digest_service.get_notifications_service", return_value=mocks["notifications"]), \
                patch("signalpage.services.digest_service.send_email_via_resend", mocks["send"]):
            yield mocks

    @pytest.mark.asyncio
    async def test_sends_digest_and_saves_snapshot(self, digest_services):
        outcome = await send_user_digest(USER_ID, WEEK_START, WEEK_END)

        assert outcome is True
        digest_services["analytics"].summarize_since.assert_awaited_once_with(
            PAGE_ID, WEEK_START, event_type="page_view"
        )
        snapshot = digest_services["snapshots"].save_snapshot.call_args.args[0]
        assert snapshot["week_start"] == WEEK_START.date()
        assert snapshot["total_views"] == 7
        assert snapshot["unique_visitors"] == 5
        assert len(snapshot["top_referrers"]) == 7

        request = digest_services["send"].call_args.args[0]
        assert request.subject == "Your SignalPage Weekly Digest - 7 views this week"
        assert request.email_type == "weekly_digest"

    @pytest.mark.asyncio
    async def test_records_digest_notification(self, digest_services):
        await send_user_digest(USER_ID, WEEK_START, WEEK_END)

        kwargs = digest_services["notifications"].notify.call_args.kwargs
        assert kwargs["user_id"] == USER_ID
        assert kwargs["page_id"] is None
        assert kwargs["notification_type"] == NotificationType.WEEKLY_DIGEST
        assert kwargs["label"] == "jane@example.com"
        assert kwargs["metadata"] == {"total_views": 7, "total_unique": 5, "total_return": 2}

    @pytest.mark.asyncio
    async def test_failed_send_skips_notification(self, digest_services):
        digest_services["send"].return_value = EmailResponse(queue_id="q1", status="failed", recipient="jane@example.com")

        assert await send_user_digest(USER_ID, WEEK_START, WEEK_END) is False
        digest_services["notifications"].notify.assert_not_called()

    @pytest.mark.asyncio
    async def test_page_without_views_has_no_snapshot(self, digest_services):
        digest_services["analytics"].summarize_since.return_value = ok([{"total_views": 0}])

        assert await send_user_digest(USER_ID, WEEK_START, WEEK_END) is True
        digest_services["snapshots"].save_snapshot.assert_not_called()
        assert digest_services["send"].call_args.args[0].subject == "Your SignalPage Weekly Digest"

    @pytest.mark.asyncio
    async def test_missing_email_is_failure(self):
        profiles = mock_service(get_profile=ok([{"full_name": "Jane"}]))
        with patch("signalpage.services.digest_service.get_profiles_service", return_value=profiles):
            assert await send_user_digest(USER_ID, WEEK_START, WEEK_END) is False

    @pytest.mark.asyncio
    async def test_user_without_pages_is_skipped(self):
        profiles = mock_service(get_profile=ok([{"email": "jane@example.com"}]))
        pages = mock_service(list_pages=ok([]))
        with patch("signalpage.services.digest_service.get_profiles_service", return_value=profiles), \
                patch("signalpage.services.digest_service.get_signal_pages_service", return_value=pages):
            assert await send_user_digest(USER_ID, WEEK_START, WEEK_END) is None


class TestRunWeeklyDigest:

    @pytest.mark.asyncio
    async def test_counts_queued_and_errors(self):
        settings_service = mock_service(get_digest_subscribers=ok([
            {"user_id": "u1"}, {"user_id": "u2"}, {"user_id": "u3"}, {"user_id": "u4"}
        ]))
        send = AsyncMock(side_effect=[True, False, None, RuntimeError("boom")])

        with patch("signalpage.services.digest_service.get_notification_settings_service", return_value=settings_service), \
                patch("signalpage.services.digest_service.send_user_digest", send):
            result = await run_weekly_digest(now=WEEK_END)

        settings_service.get_digest_subscribers.assert_awaited_once_with("monday")
        assert result["success"] is True
        assert result["queued"] == 1
        assert result["errors"] == 2

    @pytest.mark.asyncio
    async def test_subscriber_lookup_failure_raises(self):
        settings_service = mock_service(get_digest_subscribers=failed("DATABASE_ERROR"))

        with patch("signalpage.services.digest_service.get_notification_settings_service", return_value=settings_service):
            with pytest.raises(RuntimeError):
                await run_weekly_digest(now=WEEK_END)
