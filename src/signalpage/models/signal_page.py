"""
Signal page Pydantic models - generated sections, match breakdown and page requests
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

class HeroSection(BaseModel):
    tagline: str = ""
    value_promise: str = ""

class FitBullet(BaseModel):
    requirement: str = ""
    evidence: str = ""

class FitSection(BaseModel):
    intro: Optional[str] = None
    fit_bullets: List[FitBullet] = []

class HighlightSection(BaseModel):
    company: str = ""
    role: str = ""
    domain: Optional[str] = None
    problem: str = ""
    solution: str = ""
    impact: str = ""
    metrics: Optional[List[str]] = None
    relevance_note: Optional[str] = None

class PlanPhase(BaseModel):
    title: str = ""
    objectives: List[str] = []
    deliverables: Optional[List[str]] = None

class Plan306090(BaseModel):
    intro: Optional[str] = None
    day_30: PlanPhase = PlanPhase()
    day_60: PlanPhase = PlanPhase()
    day_90: PlanPhase = PlanPhase()

class CaseStudy(BaseModel):
    title: str = ""
    relevance: str = ""
    description: str = ""
    link: Optional[str] = None
    image_url: Optional[str] = None

class MatchBreakdown(BaseModel):
    skills_match: int
    experience_match: int
    requirements_match: int
    matched_skills: List[str]
    missing_skills: List[str]
    total_required_skills: int
    total_matched_skills: int


class GeneratePageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: Optional[str] = Field(default=None, alias="jobId")

class PageIdRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_id: Optional[str] = Field(default=None, alias="pageId")

class PageUpdateRequest(BaseModel):
    """Editable fields of a signal page; omitted fields are left unchanged"""
    hero: Optional[HeroSection] = None
    fit_section: Optional[FitSection] = None
    highlights: Optional[List[HighlightSection]] = None
    plan_30_60_90: Optional[Plan306090] = None
    case_studies: Optional[List[CaseStudy]] = None
    ai_commentary: Optional[str] = None
    show_ai_commentary: Optional[bool] = None
    is_published: Optional[bool] = None
