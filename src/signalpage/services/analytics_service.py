"""
Analytics service - page event recording, return-visitor detection and summaries
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Any, List, Optional
from signalpage.models.analytics import AnalyticsSummary, ReferrerCount
from signalpage.models.enums import AnalyticsEventType
from signalpage.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

# Seconds on page that count as a high engagement visit
HIGH_ENGAGEMENT_SECONDS = 120
TOP_REFERRER_LIMIT = 5

# $1 page_id, $2 since, $3 optional event_type filter, $4 high engagement threshold
SUMMARY_TOTALS_QUERY = """
SELECT
    COUNT(*) FILTER (WHERE event_type = 'page_view') AS total_views,
    COUNT(DISTINCT COALESCE(visitor_hash, ip_hash)) FILTER (WHERE event_type = 'page_view') AS unique_visitors,
    COUNT(*) FILTER (WHERE event_type = 'page_view' AND is_return_visitor) AS return_visitors,
    COALESCE(ROUND(AVG(time_on_page) FILTER (WHERE time_on_page > 0)), 0)::int AS avg_time_on_page,
    COUNT(*) FILTER (WHERE time_on_page >= $4) AS high_engagement_count
FROM page_analytics
WHERE page_id = $1 AND created_at >= $2 AND ($3::text IS NULL OR event_type = $3)
"""

REFERRER_COUNTS_QUERY = """
SELECT COALESCE(NULLIF(referrer, ''), 'Direct') AS referrer, COUNT(*) AS count
FROM page_analytics
WHERE page_id = $1 AND created_at >= $2 AND event_type = 'page_view'
GROUP BY 1
ORDER BY count DESC, referrer
"""

EVENT_TYPE_COUNTS_QUERY = """
SELECT event_type, COUNT(*) AS count
FROM page_analytics
WHERE page_id = $1 AND created_at >= $2 AND ($3::text IS NULL OR event_type = $3)
GROUP BY event_type
"""


def build_summary(
    totals: Optional[Dict[str, Any]],
    referrer_rows: List[Dict[str, Any]],
    event_type_rows: List[Dict[str, Any]]
) -> AnalyticsSummary:
    """
    Assemble a dashboard summary from the aggregate query rows

    referrer_counts keeps every referrer; top_referrers is the display cut.
    """
    totals = totals or {}
    referrers = {row["referrer"]: int(row["count"]) for row in referrer_rows}
    ranked = sorted(referrers.items(), key=lambda item: (-item[1], item[0]))

    return AnalyticsSummary(
        total_views=int(totals.get("total_views") or 0),
        unique_visitors=int(totals.get("unique_visitors") or 0),
        return_visitors=int(totals.get("return_visitors") or 0),
        avg_time_on_page=int(totals.get("avg_time_on_page") or 0),
        high_engagement_count=int(totals.get("high_engagement_count") or 0),
        top_referrers=[
            ReferrerCount(referrer=referrer, count=count)
            for referrer, count in ranked[:TOP_REFERRER_LIMIT]
        ],
        referrer_counts=referrers,
        events_by_type={row["event_type"]: int(row["count"]) for row in event_type_rows},
    )


class AnalyticsService(BaseService):
    """Service for page_analytics events"""

    def __init__(self):
        super().__init__(
            "page_analytics",
            [
                "page_id", "event_type", "section_id", "referrer", "user_agent", "ip_hash",
                "visitor_hash", "is_return_visitor", "time_on_page", "session_id", "metadata",
            ]
        )

    async def has_previous_view(self, page_id: str, visitor_hash: Optional[str]) -> bool:
        """True when this visitor already has a page_view recorded for the page"""
        if not visitor_hash:
            return False
        result = await self.count(filters={
            "page_id": page_id,
            "visitor_hash": visitor_hash,
            "event_type": AnalyticsEventType.PAGE_VIEW.value,
        })
        return result.success and result.count > 0

    async def record_event(self, event: Dict[str, Any]) -> ServiceResult:
        logger.info(f"📈 Analytics event {event.get('event_type')} for page {event.get('page_id')}")
        return await self.create(event)

    async def summarize_since(
        self,
        page_id: str,
        since: datetime,
        event_type: Optional[str] = None
    ) -> ServiceResult:
        """
        Aggregate a page's events since a point in time

        Counting happens in SQL so the summary covers every event in the window.
        event_type narrows the totals and type counts (the digest passes page_view).

        Returns:
            ServiceResult with one AnalyticsSummary dict
        """
        try:
            totals = await self._fetch(
                "AGGREGATE", SUMMARY_TOTALS_QUERY, [page_id, since, event_type, HIGH_ENGAGEMENT_SECONDS]
            )
            referrers = await self._fetch("AGGREGATE", REFERRER_COUNTS_QUERY, [page_id, since])
            event_types = await self._fetch("AGGREGATE", EVENT_TYPE_COUNTS_QUERY, [page_id, since, event_type])
        except Exception as e:
            return self._failure("Analytics summary", e)

        summary = build_summary(totals[0] if totals else None, referrers, event_types)
        return ServiceResult(success=True, data=[summary.model_dump()], count=1)

    async def get_page_summary(self, page_id: str, days: int = 7) -> ServiceResult:
        """Summary of the last N days of events for a page"""
        since = datetime.utcnow() - timedelta(days=days)
        return await self.summarize_since(page_id, since)


class AnalyticsSnapshotsService(BaseService):
    """Weekly per-page aggregates written by the digest job"""

    def __init__(self):
        super().__init__(
            "analytics_snapshots",
            [
                "page_id", "user_id", "week_start", "total_views", "unique_visitors",
                "return_visitors", "avg_time_on_page", "high_engagement_count", "top_referrers",
            ]
        )

    async def save_snapshot(self, snapshot: Dict[str, Any]) -> ServiceResult:
        return await self.upsert(snapshot, conflict_fields=["page_id", "week_start"])


# Global service instances
_analytics_service: Optional[AnalyticsService] = None
_snapshots_service: Optional[AnalyticsSnapshotsService] = None

def get_analytics_service() -> AnalyticsService:
    """Get the global analytics service instance"""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service

def get_snapshots_service() -> AnalyticsSnapshotsService:
    """Get the global analytics snapshots service instance"""
    global _snapshots_service
    if _snapshots_service is None:
        _snapshots_service = AnalyticsSnapshotsService()
    return _snapshots_service
