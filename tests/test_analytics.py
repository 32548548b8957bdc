"""
Analytics summary and notification selection tests
"""

import pytest
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

from signalpage.models.enums import NotificationType
from signalpage.models.notification import DEFAULT_NOTIFICATION_SETTINGS, NotificationSettingsInput
from signalpage.services.analytics_service import (
    HIGH_ENGAGEMENT_SECONDS, AnalyticsService, build_summary
)
from signalpage.services.notifications_service import select_notification


def _pool(conn):
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = conn
    pool.acquire.return_value.__aexit__.return_value = False
    return pool


class TestBuildSummary:

    def test_summary_from_aggregate_rows(self):
        totals = {
            "total_views": 3, "unique_visitors": 2, "return_visitors": 1,
            "avg_time_on_page": 90, "high_engagement_count": 1,
        }
        referrers = [{"referrer": f"https://site{n}.example", "count": 1} for n in range(6)]
        referrers.insert(0, {"referrer": "https://linkedin.com", "count": 4})

        summary = build_summary(totals, referrers, [{"event_type": "page_view", "count": 3}])

        assert summary.total_views == 3
        assert summary.unique_visitors == 2
        assert summary.avg_time_on_page == 90
        assert summary.top_referrers[0].referrer == "https://linkedin.com"
        assert summary.top_referrers[0].count == 4
        assert len(summary.top_referrers) == 5
        # every referrer survives outside the display cut
        assert len(summary.referrer_counts) == 7
        assert summary.events_by_type == {"page_view": 3}

    def test_empty_window(self):
        summary = build_summary(None, [], [])
        assert summary.total_views == 0
        assert summary.avg_time_on_page == 0
        assert summary.top_referrers == []
        assert summary.referrer_counts == {}


class TestSummarizeSince:

    @pytest.mark.asyncio
    async def test_aggregates_in_sql(self):
        conn = MagicMock()
        conn.fetch = AsyncMock(side_effect=[
            [{"total_views": 12000, "unique_visitors": 900, "return_visitors": 40,
              "avg_time_on_page": 75, "high_engagement_count": 300}],
            [{"referrer": "Direct", "count": 12000}],
            [{"event_type": "page_view", "count": 12000}],
        ])
        since = datetime(2026, 10, 12)

        with patch("signalpage.services.base_service.get_db_pool", return_value=_pool(conn)):
            result = await AnalyticsService().summarize_since("page-1", since, event_type="page_view")

        assert result.success
        assert result.first["total_views"] == 12000
        assert result.first["referrer_counts"] == {"Direct": 12000}

        totals_call = conn.fetch.call_args_list[0]
        assert "COUNT(*)" in totals_call.args[0]
        assert totals_call.args[1:] == ("page-1", since, "page_view", HIGH_ENGAGEMENT_SECONDS)
        assert "GROUP BY" in conn.fetch.call_args_list[1].args[0]

    @pytest.mark.asyncio
    async def test_database_error_is_reported(self):
        conn = MagicMock()
        conn.fetch = AsyncMock(side_effect=RuntimeError("connection reset"))

        with patch("signalpage.services.base_service.get_db_pool", return_value=_pool(conn)):
            result = await AnalyticsService().summarize_since("page-1", datetime(2026, 10, 12))

        assert not result.success
        assert result.error_type == "EXECUTION_ERROR"


class TestSelectNotification:

    @pytest.mark.parametrize("event_type,is_return,expected", [
        ("page_view", False, None),
        ("page_view", True, NotificationType.RETURN_VISITOR),
        ("high_engagement", False, NotificationType.HIGH_ENGAGEMENT),
        ("cta_click", False, None),
    ])
    def test_default_settings(self, event_type, is_return, expected):
        assert select_notification(event_type, is_return, DEFAULT_NOTIFICATION_SETTINGS) == expected

    def test_page_view_when_enabled(self):
        settings = {**DEFAULT_NOTIFICATION_SETTINGS, "email_on_page_view": True}
        assert select_notification("page_view", False, settings) == NotificationType.PAGE_VIEW

    def test_everything_disabled(self):
        settings = {key: False for key in DEFAULT_NOTIFICATION_SETTINGS}
        assert select_notification("page_view", True, settings) is None
        assert select_notification("high_engagement", False, settings) is None


class TestNotificationSettingsInput:

    def test_omitted_fields_take_defaults(self):
        resolved = NotificationSettingsInput(email_on_page_view=True, digest_day="friday").with_defaults()

        assert resolved["email_on_page_view"] is True
        assert resolved["email_on_return_visitor"] is True
        assert resolved["digest_day"] == "friday"
