"""
Authentication utilities for API endpoints
"""

import hmac
import logging
from typing import Optional
from fastapi import HTTPException, Header
from dataclasses import dataclass
import jwt

from signalpage.config import settings

logger = logging.getLogger(__name__)

@dataclass
class AuthContext:
    """Authenticated user resolved from the bearer token"""
    is_authenticated: bool
    user_id: str
    email: Optional[str] = None
    role: str = "authenticated"


def decode_user_token(token: str) -> dict:
    """
    Validate a user access token issued by the auth backend.

    Raises:
        jwt.InvalidTokenError: if the signature, audience or expiry is invalid
        RuntimeError: if no signing secret is configured
    """
    if not settings.AUTH_JWT_SECRET:
        raise RuntimeError("AUTH_JWT_SECRET is not configured")

    return jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=settings.AUTH_JWT_ALGORITHMS,
        audience=settings.AUTH_JWT_AUDIENCE,
        options={"require": ["sub", "exp"]}
    )


async def authenticate_user(authorization: Optional[str] = Header(None)) -> AuthContext:
    """
    FastAPI dependency for JWT Bearer token authentication.

    Args:
        authorization: Authorization header with Bearer JWT token

    Returns:
        AuthContext: the caller's user id and email

    Raises:
        HTTPException: 401 if authentication fails
    """
    if not authorization:
        logger.warning("AUTH: Request missing Authorization header - returning 401")
        raise HTTPException(status_code=401, detail="Unauthorized")

    if not authorization.startswith("Bearer "):
        logger.warning("AUTH: Invalid Authorization header format - returning 401")
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format. Expected 'Bearer <token>'"
        )

    token = authorization[7:]  # Remove "Bearer " prefix

    try:
        payload = decode_user_token(token)
        user_id = payload["sub"]
        logger.debug(f"AUTH: Token validated for user {user_id}")

        return AuthContext(
            is_authenticated=True,
            user_id=user_id,
            email=payload.get("email"),
            role=payload.get("role", "authenticated")
        )

    except jwt.ExpiredSignatureError:
        logger.info("AUTH: Expired token")
        raise HTTPException(401, "Token expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"AUTH: Invalid JWT token: {str(e)}")
        raise HTTPException(401, "Invalid token")
    except Exception as e:
        logger.error(f"AUTH: JWT authentication error: {str(e)}")
        raise HTTPException(401, "Authentication failed")


async def authenticate_cron(x_cron_secret: Optional[str] = Header(None)) -> bool:
    """
    Guard for scheduler-triggered endpoints (weekly digest).

    Raises:
        HTTPException: 503 if no cron secret is configured, 401 on mismatch
    """
    if not settings.CRON_SECRET:
        logger.error("CRON: CRON_SECRET not configured")
        raise HTTPException(503, "Scheduled jobs are not configured")

    if not x_cron_secret or not hmac.compare_digest(x_cron_secret, settings.CRON_SECRET):
        logger.warning("CRON: Invalid or missing X-Cron-Secret header")
        raise HTTPException(401, "Unauthorized")

    return True


class AuthConfig:
    """
    Centralized authentication configuration for the application.
    Every non-public endpoint takes one of these dependencies.
    """

    @staticmethod
    def get_auth_dependency():
        """Get the mandatory user auth dependency"""
        return authenticate_user

    @staticmethod
    def get_cron_dependency():
        """Get the scheduler auth dependency"""
        return authenticate_cron
