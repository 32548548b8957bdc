"""
Jobs service - job applications owned by a user
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from signalpage.models.enums import JobStatus
from signalpage.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

class JobsService(BaseService):
    """Service for job application operations"""

    def __init__(self):
        super().__init__(
            "jobs",
            [
                "user_id", "resume_id", "company_name", "role_title", "job_description",
                "company_url", "job_posting_url", "seniority_level", "status",
                "parsed_requirements", "recruiter_name", "hiring_manager_name",
            ]
        )

    async def create_job(self, user_id: str, data: Dict[str, Any]) -> ServiceResult:
        record = {**data, "user_id": user_id, "status": data.get("status") or JobStatus.DRAFT.value}
        logger.info(f"Creating job for user {user_id}: {data.get('company_name')} / {data.get('role_title')}")
        return await self.create(record)

    async def list_jobs(self, user_id: str, status: Optional[str] = None, limit: int = 100) -> ServiceResult:
        filters: Dict[str, Any] = {"user_id": user_id}
        if status:
            filters["status"] = status
        return await self.read(
            filters=filters,
            order_by=[{"field": "created_at", "dir": "desc"}],
            limit=limit
        )

    async def get_job(self, user_id: str, job_id: str) -> ServiceResult:
        return await self.get_by_id(job_id, filters={"user_id": user_id})

    async def update_job(self, user_id: str, job_id: str, updates: Dict[str, Any]) -> ServiceResult:
        return await self.update(job_id, {**updates, "updated_at": datetime.utcnow()}, filters={"user_id": user_id})

    async def set_status(self, user_id: str, job_id: str, status: JobStatus) -> ServiceResult:
        logger.info(f"Job {job_id} status -> {status.value}")
        return await self.update_job(user_id, job_id, {"status": status.value})

    async def save_requirements(self, user_id: str, job_id: str, requirements: Dict[str, Any]) -> ServiceResult:
        return await self.update_job(user_id, job_id, {"parsed_requirements": requirements})

    async def delete_job(self, user_id: str, job_id: str) -> ServiceResult:
        return await self.delete(job_id, filters={"user_id": user_id})


# Global service instance
_jobs_service: Optional[JobsService] = None

def get_jobs_service() -> JobsService:
    """Get the global jobs service instance"""
    global _jobs_service
    if _jobs_service is None:
        _jobs_service = JobsService()
    return _jobs_service
