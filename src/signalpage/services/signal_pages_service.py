"""
Signal pages service - generated landing pages, edits and public lookup
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from signalpage.services.base_service import BaseService, ServiceResult, serialize_row

logger = logging.getLogger(__name__)

PAGE_COLUMNS = [
    "job_id", "user_id", "slug", "is_published", "hero", "fit_section", "highlights",
    "plan_30_60_90", "case_studies", "ai_commentary", "show_ai_commentary",
    "match_score", "match_breakdown", "generated_at", "last_edited_at", "version",
]

class SignalPagesService(BaseService):
    """Service for signal page operations"""

    def __init__(self):
        super().__init__("signal_pages", PAGE_COLUMNS)

    async def create_page(self, user_id: str, job_id: str, slug: str, content: Dict[str, Any]) -> ServiceResult:
        """
        Insert a freshly generated page (unpublished, version 1)

        Returns:
            ServiceResult with the page; CONFLICT_ERROR if the slug is already used
        """
        record = {
            **content,
            "job_id": job_id,
            "user_id": user_id,
            "slug": slug,
            "is_published": False,
            "version": 1,
            "generated_at": datetime.utcnow(),
        }
        logger.info(f"Creating signal page '{slug}' for job {job_id}")
        return await self.create(record)

    async def list_pages(self, user_id: str) -> ServiceResult:
        """Pages for a user, newest first, with the job's company and role"""
        try:
            rows = await self._fetch(
                "READ",
                """
                SELECT p.*, j.company_name, j.role_title, j.status AS job_status
                FROM signal_pages p
                JOIN jobs j ON j.id = p.job_id
                WHERE p.user_id = $1
                ORDER BY p.created_at DESC
                """,
                [user_id]
            )
            return ServiceResult(success=True, data=rows, count=len(rows))
        except Exception as e:
            return self._failure("List pages", e)

    async def get_page(self, user_id: str, page_id: str) -> ServiceResult:
        return await self.get_by_id(page_id, filters={"user_id": user_id})

    async def get_page_for_job(self, user_id: str, job_id: str) -> ServiceResult:
        return await self.read(filters={"user_id": user_id, "job_id": job_id}, limit=1)

    async def count_pages(self, user_id: str) -> ServiceResult:
        return await self.count(filters={"user_id": user_id})

    async def update_content(self, user_id: str, page_id: str, fields: Dict[str, Any]) -> ServiceResult:
        """Update computed fields (score, commentary) without counting as a user edit"""
        return await self.update(page_id, fields, filters={"user_id": user_id})

    async def apply_edit(self, user_id: str, page_id: str, updates: Dict[str, Any]) -> ServiceResult:
        """
        Apply a user edit: bumps version and last_edited_at in the same statement

        Returns:
            ServiceResult with the updated page, RESOURCE_NOT_FOUND if not owned
        """
        if not updates:
            return ServiceResult(success=False, error="No fields provided for update", error_type="INVALID_QUERY")

        try:
            columns = [self._check_column(column) for column in updates]
            sets = [f"{column} = ${i}" for i, column in enumerate(columns, start=1)]
            sets += ["version = version + 1", "last_edited_at = NOW()", "updated_at = NOW()"]
            params = list(updates.values()) + [page_id, user_id]
            query = (
                f"UPDATE {self.table_name} SET {', '.join(sets)} "
                f"WHERE id = ${len(params) - 1} AND user_id = ${len(params)} RETURNING *"
            )
            rows = await self._fetch("UPDATE", query, params)
        except Exception as e:
            return self._failure("Edit page", e)

        if not rows:
            return ServiceResult(success=False, error=f"Page {page_id} not found", error_type="RESOURCE_NOT_FOUND")
        return ServiceResult(success=True, data=rows, count=len(rows))

    async def delete_page(self, user_id: str, page_id: str) -> ServiceResult:
        return await self.delete(page_id, filters={"user_id": user_id})

    async def get_page_owner(self, page_id: str) -> ServiceResult:
        """Owner and job labels for a page, used when dispatching visitor notifications"""
        try:
            rows = await self._fetch(
                "READ",
                """
                SELECT p.id, p.user_id, p.slug, j.company_name, j.role_title
                FROM signal_pages p
                JOIN jobs j ON j.id = p.job_id
                WHERE p.id = $1
                """,
                [page_id]
            )
        except Exception as e:
            return self._failure("Page owner lookup", e)

        if not rows:
            return ServiceResult(success=False, error=f"Page {page_id} not found", error_type="RESOURCE_NOT_FOUND")
        return ServiceResult(success=True, data=rows, count=len(rows))

    async def get_published_page(self, username: str, slug: str) -> ServiceResult:
        """
        Public lookup of a published page with its job and owner profile

        Returns:
            ServiceResult with {page, job, profile}; RESOURCE_NOT_FOUND unless published
        """
        try:
            db_pool = self._get_pool()
            async with db_pool.acquire() as conn:
                page = await conn.fetchrow(
                    """
                    SELECT p.* FROM signal_pages p
                    JOIN profiles pr ON pr.id = p.user_id
                    WHERE pr.username = $1 AND p.slug = $2 AND p.is_published = TRUE
                    """,
                    username, slug
                )
                if not page:
                    return ServiceResult(success=False, error="Page not found", error_type="RESOURCE_NOT_FOUND")

                job = await conn.fetchrow(
                    "SELECT company_name, role_title, company_url, seniority_level FROM jobs WHERE id = $1",
                    page["job_id"]
                )
                profile = await conn.fetchrow(
                    """
                    SELECT id, username, full_name, headline, about_me, linkedin_url,
                           portfolio_url, github_url, avatar_url
                    FROM profiles WHERE id = $1
                    """,
                    page["user_id"]
                )
        except Exception as e:
            return self._failure("Public page lookup", e)

        bundle = {
            "page": serialize_row(page),
            "job": serialize_row(job) if job else None,
            "profile": serialize_row(profile) if profile else None,
        }
        return ServiceResult(success=True, data=[bundle], count=1)


# Global service instance
_signal_pages_service: Optional[SignalPagesService] = None

def get_signal_pages_service() -> SignalPagesService:
    """Get the global signal pages service instance"""
    global _signal_pages_service
    if _signal_pages_service is None:
        _signal_pages_service = SignalPagesService()
    return _signal_pages_service
