"""
Profiles service - user profile and subscription columns
"""

import logging
from datetime import datetime
from typing import Dict, Any, Optional
from signalpage.services.base_service import BaseService, ServiceResult

logger = logging.getLogger(__name__)

PROFILE_COLUMNS = [
    "email", "username", "full_name", "headline", "about_me",
    "linkedin_url", "portfolio_url", "github_url", "avatar_url",
    "subscription_tier", "subscription_status", "subscription_id",
    "stripe_customer_id", "is_free_user",
]

class ProfilesService(BaseService):
    """Service for profile operations. Profile id is the auth user id."""

    def __init__(self):
        super().__init__("profiles", PROFILE_COLUMNS)

    async def get_profile(self, user_id: str) -> ServiceResult:
        return await self.get_by_id(user_id)

    async def get_by_username(self, username: str) -> ServiceResult:
        return await self.read(filters={"username": username}, limit=1)

    async def get_by_stripe_customer(self, customer_id: str) -> ServiceResult:
        """Find the profile that owns a Stripe customer"""
        result = await self.read(filters={"stripe_customer_id": customer_id}, limit=1)
        if result.success and not result.data:
            return ServiceResult(
                success=False,
                error=f"No profile for customer {customer_id}",
                error_type="RESOURCE_NOT_FOUND"
            )
        return result

    async def save_profile(self, user_id: str, email: Optional[str], data: Dict[str, Any]) -> ServiceResult:
        """
        Create or update the caller's profile

        Args:
            user_id: Authenticated user id (profile primary key)
            email: Email from the access token, stored on first save
            data: Profile fields (username already sanitized)

        Returns:
            ServiceResult with the saved profile; CONFLICT_ERROR if the username is taken
        """
        record = {"id": user_id, **data, "updated_at": datetime.utcnow()}
        if email:
            record["email"] = email
        logger.info(f"Saving profile for user {user_id} (username={data.get('username')})")
        return await self.upsert(record, conflict_fields=["id"])

    async def update_profile(self, user_id: str, updates: Dict[str, Any]) -> ServiceResult:
        return await self.update(user_id, {**updates, "updated_at": datetime.utcnow()})


# Global service instance
_profiles_service: Optional[ProfilesService] = None

def get_profiles_service() -> ProfilesService:
    """Get the global profiles service instance"""
    global _profiles_service
    if _profiles_service is None:
        _profiles_service = ProfilesService()
    return _profiles_service
