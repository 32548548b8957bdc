"""
Resumes service - stored resumes and the primary-resume invariant
"""

import logging
from typing import Dict, Any, Optional
from signalpage.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

class ResumesService(BaseService):
    """Service for resume management. Each user has at most one primary resume."""

    def __init__(self):
        super().__init__(
            "resumes",
            ["user_id", "name", "tag", "raw_text", "parsed_data", "file_url", "is_primary"]
        )

    async def list_resumes(self, user_id: str) -> ServiceResult:
        return await self.read(
            filters={"user_id": user_id},
            order_by=[{"field": "is_primary", "dir": "desc"}, {"field": "created_at", "dir": "desc"}]
        )

    async def get_resume(self, user_id: str, resume_id: str) -> ServiceResult:
        return await self.get_by_id(resume_id, filters={"user_id": user_id})

    async def get_primary_resume(self, user_id: str) -> ServiceResult:
        """Primary resume for a user; RESOURCE_NOT_FOUND if none is flagged"""
        result = await self.read(filters={"user_id": user_id, "is_primary": True}, limit=1)
        if result.success and not result.data:
            return ServiceResult(success=False, error="No primary resume", error_type="RESOURCE_NOT_FOUND")
        return result

    async def create_resume(self, user_id: str, data: Dict[str, Any]) -> ServiceResult:
        """
        Store a resume. The user's first resume becomes primary.

        Args:
            user_id: Owner
            data: name, tag, raw_text, parsed_data, file_url

        Returns:
            ServiceResult with the created resume
        """
        existing = await self.count(filters={"user_id": user_id})
        if not existing.success:
            return existing

        record = {**data, "user_id": user_id, "is_primary": existing.count == 0}
        logger.info(f"Creating resume for user {user_id} (primary={record['is_primary']})")
        return await self.create(record)

    async def set_primary(self, user_id: str, resume_id: str) -> ServiceResult:
        """Flag one resume primary and clear the flag on all others in a single statement"""
        found = await self.get_resume(user_id, resume_id)
        if not found.success:
            return found

        try:
            rows = await self._fetch(
                "UPDATE",
                f"UPDATE {self.table_name} SET is_primary = (id = $2), updated_at = NOW() "
                f"WHERE user_id = $1 RETURNING *",
                [user_id, resume_id]
            )
        except Exception as e:
            return self._failure("Set primary", e)

        primary = [row for row in rows if row.get("is_primary")]
        return ServiceResult(success=True, data=primary, count=len(primary))

    async def delete_resume(self, user_id: str, resume_id: str) -> ServiceResult:
        """Delete a resume; if it was primary, the newest remaining one is promoted"""
        result = await self.delete(resume_id, filters={"user_id": user_id})
        if not result.success or not result.first.get("is_primary"):
            return result

        remaining = await self.read(
            filters={"user_id": user_id},
            order_by=[{"field": "created_at", "dir": "desc"}],
            limit=1
        )
        if remaining.success and remaining.data:
            promoted = remaining.first["id"]
            logger.info(f"Promoting resume {promoted} to primary for user {user_id}")
            await self.update(promoted, {"is_primary": True}, filters={"user_id": user_id})

        return result


# Global service instance
_resumes_service: Optional[ResumesService] = None

def get_resumes_service() -> ResumesService:
    """Get the global resumes service instance"""
    global _resumes_service
    if _resumes_service is None:
        _resumes_service = ResumesService()
    return _resumes_service
