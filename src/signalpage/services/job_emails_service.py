"""
Job emails service - generated application emails saved per job
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from signalpage.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

# Unique key of job_emails (declared NULLS NOT DISTINCT so cover letters upsert too)
EMAIL_UNIQUE_KEY = ["job_id", "user_id", "email_type", "interview_round", "interview_type"]

class JobEmailsService(BaseService):
    """Service for generated job application emails"""

    def __init__(self):
        super().__init__(
            "job_emails",
            EMAIL_UNIQUE_KEY + ["subject", "body", "include_signalpage_link"]
        )

    async def save_email(self, user_id: str, job_id: str, email: Dict[str, Any]) -> ServiceResult:
        """Insert or replace the email for (job, type, round, interview type)"""
        record = {
            "job_id": job_id,
            "user_id": user_id,
            "email_type": email["email_type"],
            "interview_round": email.get("interview_round"),
            "interview_type": email.get("interview_type"),
            "subject": email.get("subject"),
            "body": email["body"],
            "include_signalpage_link": email.get("include_signalpage_link", True),
            "updated_at": datetime.utcnow(),
        }
        logger.info(f"Saving {record['email_type']} email for job {job_id}")
        return await self.upsert(record, conflict_fields=EMAIL_UNIQUE_KEY)

    async def list_for_job(self, user_id: str, job_id: str) -> ServiceResult:
        return await self.read(
            filters={"user_id": user_id, "job_id": job_id},
            order_by=[{"field": "created_at", "dir": "desc"}]
        )

    async def update_email(self, user_id: str, email_id: str, updates: Dict[str, Any]) -> ServiceResult:
        return await self.update(email_id, {**updates, "updated_at": datetime.utcnow()}, filters={"user_id": user_id})

    async def delete_email(self, user_id: str, email_id: str) -> ServiceResult:
        return await self.delete(email_id, filters={"user_id": user_id})


# Global service instance
_job_emails_service: Optional[JobEmailsService] = None

def get_job_emails_service() -> JobEmailsService:
    """Get the global job emails service instance"""
    global _job_emails_service
    if _job_emails_service is None:
        _job_emails_service = JobEmailsService()
    return _job_emails_service
