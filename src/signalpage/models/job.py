"""
Job application Pydantic models
"""

from typing import List, Optional
from pydantic import BaseModel, Field
from signalpage.models.enums import SeniorityLevel, JobStatus

class ParsedJobRequirements(BaseModel):
    responsibilities: List[str] = []
    required_skills: List[str] = []
    preferred_skills: List[str] = []
    business_problems: List[str] = []
    company_context: Optional[str] = None
    role_context: Optional[str] = None


class JobIntakeInput(BaseModel):
    company_name: str = Field(min_length=1)
    role_title: str = Field(min_length=1)
    job_description: str = Field(min_length=1)
    company_url: Optional[str] = None
    job_posting_url: Optional[str] = None
    seniority_level: SeniorityLevel = SeniorityLevel.MID
    resume_id: Optional[str] = None
    recruiter_name: Optional[str] = None
    hiring_manager_name: Optional[str] = None

class JobUpdateRequest(BaseModel):
    company_name: Optional[str] = None
    role_title: Optional[str] = None
    job_description: Optional[str] = None
    company_url: Optional[str] = None
    job_posting_url: Optional[str] = None
    seniority_level: Optional[SeniorityLevel] = None
    status: Optional[JobStatus] = None
    resume_id: Optional[str] = None
    recruiter_name: Optional[str] = None
    hiring_manager_name: Optional[str] = None


class FetchJobPostingRequest(BaseModel):
    url: Optional[str] = None
