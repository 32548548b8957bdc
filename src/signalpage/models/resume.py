"""
Resume-related Pydantic models
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from signalpage.models.enums import ResumeTag

class Experience(BaseModel):
    company: str = ""
    title: str = ""
    location: Optional[str] = None
    start_date: str = ""
    end_date: Optional[str] = None
    is_current: bool = False
    description: str = ""
    achievements: List[str] = []
    technologies: Optional[List[str]] = None

class Education(BaseModel):
    institution: str = ""
    degree: str = ""
    field: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    gpa: Optional[str] = None

class Project(BaseModel):
    name: str = ""
    description: str = ""
    url: Optional[str] = None
    technologies: List[str] = []
    highlights: List[str] = []

class ParsedResume(BaseModel):
    """Structured resume as produced by the resume parser"""
    summary: Optional[str] = None
    experiences: List[Experience] = []
    education: List[Education] = []
    skills: List[str] = []
    certifications: Optional[List[str]] = None
    projects: Optional[List[Project]] = None


class ParseResumeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resume_text: Optional[object] = Field(default=None, alias="resumeText")

class ResumeCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    tag: Optional[ResumeTag] = None
    raw_text: str = Field(alias="rawText")
    parsed_data: Optional[ParsedResume] = Field(default=None, alias="parsedData")
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
