"""
Analytics event and summary models
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

class AnalyticsEventRequest(BaseModel):
    """Tracking beacon sent by published pages. Validation of the event type happens in the route."""
    model_config = ConfigDict(populate_by_name=True)

    page_id: Optional[str] = Field(default=None, alias="pageId")
    event_type: Optional[str] = Field(default=None, alias="eventType")
    section_id: Optional[str] = Field(default=None, alias="sectionId")
    metadata: Optional[Dict[str, Any]] = None
    visitor_fingerprint: Optional[str] = Field(default=None, alias="visitorFingerprint")
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    time_on_page: Optional[int] = Field(default=None, alias="timeOnPage", ge=0)

class ReferrerCount(BaseModel):
    referrer: str
    count: int

class AnalyticsSummary(BaseModel):
    total_views: int = 0
    unique_visitors: int = 0
    return_visitors: int = 0
    avg_time_on_page: int = 0
    high_engagement_count: int = 0
    top_referrers: List[ReferrerCount] = []
    referrer_counts: Dict[str, int] = {}
    events_by_type: Dict[str, int] = {}
