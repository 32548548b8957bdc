"""
User profile models
"""

from typing import Optional
from pydantic import BaseModel, Field

class ProfileInput(BaseModel):
    full_name: str = Field(min_length=1)
    username: str
    headline: Optional[str] = None
    about_me: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    github_url: Optional[str] = None
    avatar_url: Optional[str] = None
