"""
Application email (cover letter, thank-you, ...) and outbound email queue models
"""

from typing import Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from signalpage.models.enums import EmailType, InterviewType

class GenerateEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: Optional[str] = Field(default=None, alias="jobId")
    email_type: Optional[EmailType] = Field(default=None, alias="emailType")
    interview_round: Optional[int] = Field(default=None, alias="interviewRound", ge=1)
    interview_type: Optional[InterviewType] = Field(default=None, alias="interviewType")
    include_signalpage_link: bool = Field(default=True, alias="includeSignalpageLink")

class UpdateEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email_id: Optional[str] = Field(default=None, alias="emailId")
    subject: Optional[str] = None
    body: Optional[str] = None
    include_signalpage_link: Optional[bool] = Field(default=None, alias="includeSignalpageLink")

class GeneratedEmail(BaseModel):
    """Shape the LLM must return for an application email"""
    subject: str
    body: str


class EmailRequest(BaseModel):
    """Outbound email sent through Resend"""
    recipient_email: str
    recipient_name: Optional[str] = None
    subject: str
    body: str
    html_body: Optional[str] = None
    email_type: str = "custom"
    metadata: Optional[Dict[str, Any]] = {}

class EmailResponse(BaseModel):
    queue_id: str
    status: str
    recipient: str
    resend_id: Optional[str] = None
