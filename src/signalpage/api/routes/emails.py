"""
Application email API routes - generate, list, edit and delete cover letters and interview emails
"""

import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from signalpage.config import settings
from signalpage.config.plans import has_pro_access
from signalpage.models.email import GenerateEmailRequest, UpdateEmailRequest
from signalpage.models.enums import EmailType
from signalpage.models.resume import ParsedResume
from signalpage.services.generation_service import generate_application_email
from signalpage.services.job_emails_service import get_job_emails_service
from signalpage.services.jobs_service import get_jobs_service
from signalpage.services.llm.prompts import GenerationContext, build_email_prompt
from signalpage.services.llm.types import GenerationError
from signalpage.services.profiles_service import get_profiles_service
from signalpage.services.resumes_service import get_resumes_service
from signalpage.services.signal_pages_service import get_signal_pages_service
from signalpage.utils.auth import AuthConfig, AuthContext
from signalpage.utils.error_handling import raise_for_service_error

router = APIRouter()
logger = logging.getLogger(__name__)

# Email types that follow an interview and need its round and type
INTERVIEW_EMAIL_TYPES = {EmailType.THANK_YOU, EmailType.FOLLOW_UP}


def page_url(username: Optional[str], slug: Optional[str]) -> Optional[str]:
    if not username or not slug:
        return None
    return f"{settings.APP_URL}/{username}/{slug}"


def append_page_link(body: str, url: Optional[str]) -> str:
    if not url:
        return body
    return f"{body}\n\nP.S. I've created a personalized page highlighting my fit for this role: {url}"


async def _resume_for_job(user_id: str, job: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """The job's chosen resume, falling back to the primary resume"""
    resumes_service = get_resumes_service()
    if job.get("resume_id"):
        selected = await resumes_service.get_resume(user_id, str(job["resume_id"]))
        if selected.success and selected.first:
            return selected.first
    primary = await resumes_service.get_primary_resume(user_id)
    return primary.first if primary.success else None


@router.post("/generate-email")
async def generate_email(
    request: GenerateEmailRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Generate and save an application email for a job (Pro feature)"""
    profile_result = await get_profiles_service().get_profile(auth.user_id)
    profile = profile_result.first or {}
    if not has_pro_access(profile.get("subscription_tier") or "free"):
        raise HTTPException(status_code=403, detail="Email generation requires a Pro subscription")

    if not request.job_id or not request.email_type:
        raise HTTPException(status_code=400, detail="Job ID and email type are required")

    if request.email_type in INTERVIEW_EMAIL_TYPES and (not request.interview_round or not request.interview_type):
        raise HTTPException(status_code=400, detail="Interview round and type are required for this email type")

    logger.info(f"Job {request.job_id}: Generating {request.email_type.value} email")

    try:
        job_result = await get_jobs_service().get_job(auth.user_id, request.job_id)
        raise_for_service_error(job_result, not_found="Job not found")
        job = job_result.first

        resume = await _resume_for_job(auth.user_id, job)
        if not resume or not resume.get("parsed_data"):
            raise HTTPException(status_code=400, detail="Please upload a resume before generating emails")

        context = GenerationContext(
            resume=ParsedResume.model_validate(resume["parsed_data"]),
            job=job,
            user={
                "full_name": profile.get("full_name"),
                "headline": profile.get("headline"),
                "about_me": profile.get("about_me"),
            },
            recruiter_name=job.get("recruiter_name"),
            hiring_manager_name=job.get("hiring_manager_name"),
        )
        interview_type = request.interview_type.value if request.interview_type else None
        prompt = build_email_prompt(request.email_type.value, request.interview_round, interview_type)

        email = await generate_application_email(prompt, context)

        body = email.body
        if request.include_signalpage_link:
            page_result = await get_signal_pages_service().get_page_for_job(auth.user_id, request.job_id)
            page = page_result.first if page_result.success else None
            body = append_page_link(body, page_url(profile.get("username"), page.get("slug") if page else None))

        saved = await get_job_emails_service().save_email(auth.user_id, request.job_id, {
            "email_type": request.email_type.value,
            "interview_round": request.interview_round,
            "interview_type": interview_type,
            "subject": email.subject,
            "body": body,
            "include_signalpage_link": request.include_signalpage_link,
        })
        if not saved.success:
            logger.error(f"Failed to save email: {saved.error}")
            raise HTTPException(status_code=500, detail="Failed to save email")

        return {"success": True, "email": saved.first}

    except HTTPException:
        raise
    except GenerationError as e:
        logger.error(f"Failed to parse email from LLM response: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate email")
    except Exception as e:
        logger.error(f"Email generation error: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate email")

@router.get("/generate-email")
async def list_emails(
    job_id: Optional[str] = Query(None, alias="jobId"),
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Saved emails for a job, newest first"""
    if not job_id:
        raise HTTPException(status_code=400, detail="Job ID is required")

    try:
        result = await get_job_emails_service().list_for_job(auth.user_id, job_id)
        if not result.success:
            logger.error(f"Failed to fetch emails: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to fetch emails")
        return {"emails": result.data or []}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Email listing error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch emails")

@router.put("/generate-email")
async def update_email(
    request: UpdateEmailRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    if not request.email_id:
        raise HTTPException(status_code=400, detail="Email ID is required")

    updates = request.model_dump(exclude_none=True, exclude={"email_id"})
    if not updates:
        raise HTTPException(status_code=400, detail="No fields provided for update")

    try:
        result = await get_job_emails_service().update_email(auth.user_id, request.email_id, updates)
        raise_for_service_error(result, not_found="Email not found")
        return {"success": True, "email": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Email update error: {e}")
        raise HTTPException(status_code=500, detail="Failed to update email")

@router.delete("/generate-email")
async def delete_email(
    email_id: Optional[str] = Query(None, alias="emailId"),
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    if not email_id:
        raise HTTPException(status_code=400, detail="Email ID is required")

    try:
        result = await get_job_emails_service().delete_email(auth.user_id, email_id)
        raise_for_service_error(result, not_found="Email not found")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Email delete error: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete email")
