"""
Enum definitions for the SignalPage backend
"""

from enum import Enum

# Job-related enums
class SeniorityLevel(str, Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    STAFF = "staff"
    PRINCIPAL = "principal"
    DIRECTOR = "director"
    VP = "vp"
    C_LEVEL = "c_level"

class JobStatus(str, Enum):
    """
    Lifecycle of a job application.

    - DRAFT: Intake saved, or generation finished/failed
    - GENERATING: A page is being generated right now
    - PUBLISHED: Its signal page is publicly visible
    - ARCHIVED: Hidden from the dashboard
    """
    DRAFT = "draft"
    GENERATING = "generating"
    PUBLISHED = "published"
    ARCHIVED = "archived"

class ResumeTag(str, Enum):
    TECHNICAL = "technical"
    AI = "ai"
    DATA = "data"
    MANAGEMENT = "management"
    SALES = "sales"
    MARKETING = "marketing"
    ARCHITECT = "architect"
    GENERAL = "general"

# Analytics
class AnalyticsEventType(str, Enum):
    PAGE_VIEW = "page_view"
    SECTION_VIEW = "section_view"
    CASE_STUDY_CLICK = "case_study_click"
    CTA_CLICK = "cta_click"
    PDF_DOWNLOAD = "pdf_download"
    CALENDAR_CLICK = "calendar_click"
    CONTACT_CLICK = "contact_click"
    HIGH_ENGAGEMENT = "high_engagement"
    PAGE_LEAVE = "page_leave"

class NotificationType(str, Enum):
    PAGE_VIEW = "page_view"
    RETURN_VISITOR = "return_visitor"
    HIGH_ENGAGEMENT = "high_engagement"
    WEEKLY_DIGEST = "weekly_digest"

class DigestDay(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

# Email-related enums
class EmailType(str, Enum):
    COVER_LETTER = "cover_letter"
    THANK_YOU = "thank_you"
    FOLLOW_UP = "follow_up"
    OFFER_DISCUSSION = "offer_discussion"

class InterviewType(str, Enum):
    RECRUITER = "recruiter"
    HIRING_MANAGER = "hiring_manager"
    TECHNICAL = "technical"
    PANEL = "panel"
    EXECUTIVE = "executive"
    HR_CULTURE = "hr_culture"
    OTHER = "other"

class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    OPENED = "opened"
    FAILED = "failed"

# Billing
class SubscriptionTier(str, Enum):
    FREE = "free"
    PRO = "pro"
    COACH = "coach"

class PaidTier(str, Enum):
    """Tiers that can be bought through checkout"""
    PRO = "pro"
    COACH = "coach"

class BillingInterval(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
