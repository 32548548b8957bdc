"""
Signal page API routes - generation, score and commentary refresh, editing and public view
"""

import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, HTTPException, Depends

from signalpage.models.enums import JobStatus
from signalpage.models.job import ParsedJobRequirements
from signalpage.models.resume import ParsedResume
from signalpage.models.signal_page import GeneratePageRequest, PageIdRequest, PageUpdateRequest
from signalpage.services.generation_service import (
    generate_ai_commentary, generate_full_page, parse_job_description
)
from signalpage.services.jobs_service import get_jobs_service
from signalpage.services.llm.prompts import GenerationContext
from signalpage.services.match_score import calculate_match_score
from signalpage.services.profiles_service import get_profiles_service
from signalpage.services.resumes_service import get_resumes_service
from signalpage.services.signal_pages_service import get_signal_pages_service
from signalpage.services.subscription_service import can_user_create_page
from signalpage.utils.auth import AuthConfig, AuthContext
from signalpage.utils.error_handling import raise_for_service_error
from signalpage.utils.helpers import generate_slug, unique_slug

router = APIRouter()
logger = logging.getLogger(__name__)


async def _load_profile(user_id: str, missing_message: str) -> Dict[str, Any]:
    result = await get_profiles_service().get_profile(user_id)
    if result.error_type == "RESOURCE_NOT_FOUND" or (result.success and not result.data):
        raise HTTPException(status_code=400, detail=missing_message)
    raise_for_service_error(result)
    return result.first


async def _load_parsed_resume(user_id: str, missing_message: str) -> ParsedResume:
    result = await get_resumes_service().get_primary_resume(user_id)
    if result.error_type == "RESOURCE_NOT_FOUND":
        raise HTTPException(status_code=400, detail=missing_message)
    raise_for_service_error(result)
    parsed = result.first.get("parsed_data")
    if not parsed:
        raise HTTPException(status_code=400, detail=missing_message)
    return ParsedResume.model_validate(parsed)


async def _load_page(user_id: str, page_id: Optional[str]) -> Dict[str, Any]:
    if not page_id:
        raise HTTPException(status_code=400, detail="Page ID is required")
    result = await get_signal_pages_service().get_page(user_id, page_id)
    raise_for_service_error(result, not_found="Page not found")
    return result.first


def _generation_context(resume: ParsedResume, job: Dict[str, Any], profile: Dict[str, Any]) -> GenerationContext:
    return GenerationContext(
        resume=resume,
        job=job,
        user={
            "full_name": profile.get("full_name"),
            "headline": profile.get("headline"),
            "about_me": profile.get("about_me"),
        },
        recruiter_name=job.get("recruiter_name"),
        hiring_manager_name=job.get("hiring_manager_name"),
    )


@router.post("/generate-page")
async def generate_page(
    request: GeneratePageRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Generate a signal page for one of the caller's jobs"""
    if not request.job_id:
        raise HTTPException(status_code=400, detail="Job ID is required")

    jobs_service = get_jobs_service()
    pages_service = get_signal_pages_service()
    job_id = request.job_id

    job_result = await jobs_service.get_job(auth.user_id, job_id)
    raise_for_service_error(job_result, not_found="Job not found")
    job = job_result.first

    profile = await _load_profile(auth.user_id, "Profile not found. Please complete your profile first.")
    resume = await _load_parsed_resume(auth.user_id, "Resume not found. Please upload and parse your resume first.")

    check = await can_user_create_page(auth.user_id)
    if not check.allowed:
        raise HTTPException(status_code=403, detail=check.reason)

    try:
        await jobs_service.set_status(auth.user_id, job_id, JobStatus.GENERATING)

        requirements_data = job.get("parsed_requirements")
        if not requirements_data:
            requirements = await parse_job_description(job["job_description"])
            requirements_data = requirements.model_dump()
            await jobs_service.save_requirements(auth.user_id, job_id, requirements_data)
        job = {**job, "parsed_requirements": requirements_data}

        context = _generation_context(resume, job, profile)
        generated = await generate_full_page(context)

        score, breakdown = calculate_match_score(resume, ParsedJobRequirements.model_validate(requirements_data))
        content = {**generated, "match_score": score, "match_breakdown": breakdown.model_dump()}

        slug = generate_slug(job["company_name"], job["role_title"])
        result = await pages_service.create_page(auth.user_id, job_id, slug, content)
        if not result.success and result.error_type == "CONFLICT_ERROR":
            retry_slug = unique_slug(slug)
            logger.info(f"Slug '{slug}' taken, retrying as '{retry_slug}'")
            result = await pages_service.create_page(auth.user_id, job_id, retry_slug, content)
        if not result.success:
            raise RuntimeError(f"Failed to store page: {result.error}")

        await jobs_service.set_status(auth.user_id, job_id, JobStatus.DRAFT)
        logger.info(f"Generated page {result.first['id']} for job {job_id} (score {score})")
        return {"page": result.first}

    except Exception as e:
        logger.error(f"Error generating page for job {job_id}: {e}", exc_info=True)
        await jobs_service.set_status(auth.user_id, job_id, JobStatus.DRAFT)
        raise HTTPException(status_code=500, detail="Failed to generate page")

@router.post("/recalculate-score")
async def recalculate_score(
    request: PageIdRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Recompute the match score against the current primary resume"""
    try:
        page = await _load_page(auth.user_id, request.page_id)
        resume = await _load_parsed_resume(auth.user_id, "Resume not found")

        job_result = await get_jobs_service().get_job(auth.user_id, str(page["job_id"]))
        raise_for_service_error(job_result, not_found="Page not found")
        requirements = job_result.first.get("parsed_requirements")
        if not requirements:
            raise HTTPException(status_code=400, detail="Job requirements not parsed")

        score, breakdown = calculate_match_score(resume, ParsedJobRequirements.model_validate(requirements))
        update = await get_signal_pages_service().update_content(
            auth.user_id, page["id"], {"match_score": score, "match_breakdown": breakdown.model_dump()}
        )
        raise_for_service_error(update, not_found="Page not found")

        return {"match_score": score, "match_breakdown": breakdown.model_dump()}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error recalculating score: {e}")
        raise HTTPException(status_code=500, detail="Failed to recalculate score")

@router.post("/regenerate-commentary")
async def regenerate_commentary(
    request: PageIdRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    try:
        page = await _load_page(auth.user_id, request.page_id)
        profile = await _load_profile(auth.user_id, "Profile not found")
        resume = await _load_parsed_resume(auth.user_id, "Resume not found")

        job_result = await get_jobs_service().get_job(auth.user_id, str(page["job_id"]))
        raise_for_service_error(job_result, not_found="Page not found")

        commentary = await generate_ai_commentary(_generation_context(resume, job_result.first, profile))

        update = await get_signal_pages_service().update_content(
            auth.user_id, page["id"], {"ai_commentary": commentary}
        )
        raise_for_service_error(update, not_found="Page not found")

        return {"ai_commentary": commentary}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error regenerating commentary: {e}")
        raise HTTPException(status_code=500, detail="Failed to regenerate commentary")

@router.get("/pages")
async def list_pages(auth: AuthContext = Depends(AuthConfig.get_auth_dependency())):
    pages_service = get_signal_pages_service()

    try:
        result = await pages_service.list_pages(auth.user_id)
        raise_for_service_error(result)
        return {"pages": result.data}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list pages: {e}")
        raise HTTPException(status_code=500, detail="Failed to list pages")

@router.get("/pages/{page_id}")
async def get_page(
    page_id: str,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    try:
        return {"page": await _load_page(auth.user_id, page_id)}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get page {page_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get page")

@router.patch("/pages/{page_id}")
async def update_page(
    page_id: str,
    request: PageUpdateRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Edit page sections or publish state; every edit bumps the page version"""
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields provided for update")

    try:
        result = await get_signal_pages_service().apply_edit(auth.user_id, page_id, updates)
        raise_for_service_error(result, not_found="Page not found")
        page = result.first

        if "is_published" in updates:
            status = JobStatus.PUBLISHED if updates["is_published"] else JobStatus.DRAFT
            await get_jobs_service().set_status(auth.user_id, str(page["job_id"]), status)

        return {"page": page}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update page {page_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update page")

@router.delete("/pages/{page_id}")
async def delete_page(
    page_id: str,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    try:
        result = await get_signal_pages_service().delete_page(auth.user_id, page_id)
        raise_for_service_error(result, not_found="Page not found")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete page {page_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete page")

@router.get("/public/{username}/{slug}")
async def get_public_page(username: str, slug: str):
    """Published page with its job and owner profile; no authentication"""
    try:
        result = await get_signal_pages_service().get_published_page(username.lower(), slug)
        raise_for_service_error(result, not_found="Page not found")
        return result.first

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to load public page {username}/{slug}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load page")
