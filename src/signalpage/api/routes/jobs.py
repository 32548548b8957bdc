"""
Job application API routes
"""

import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from signalpage.models.enums import JobStatus
from signalpage.models.job import FetchJobPostingRequest, JobIntakeInput, JobUpdateRequest
from signalpage.services.job_posting_fetcher import JobPostingFetchError, fetch_job_posting
from signalpage.services.jobs_service import get_jobs_service
from signalpage.utils.auth import AuthConfig, AuthContext
from signalpage.utils.error_handling import raise_for_service_error

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/jobs", status_code=201)
async def create_job(
    request: JobIntakeInput,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Create a job application in draft status"""
    jobs_service = get_jobs_service()

    try:
        result = await jobs_service.create_job(auth.user_id, request.model_dump(mode="json"))
        raise_for_service_error(result)
        return {"job": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create job: {e}")
        raise HTTPException(status_code=500, detail="Failed to create job")

@router.get("/jobs")
async def list_jobs(
    status: Optional[JobStatus] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    jobs_service = get_jobs_service()

    try:
        result = await jobs_service.list_jobs(auth.user_id, status.value if status else None, limit)
        raise_for_service_error(result)
        return {"jobs": result.data}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list jobs: {e}")
        raise HTTPException(status_code=500, detail="Failed to list jobs")

@router.get("/jobs/{job_id}")
async def get_job(
    job_id: str,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    jobs_service = get_jobs_service()

    try:
        result = await jobs_service.get_job(auth.user_id, job_id)
        raise_for_service_error(result, not_found="Job not found")
        return {"job": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get job {job_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to get job")

@router.put("/jobs/{job_id}")
async def update_job(
    job_id: str,
    request: JobUpdateRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Update job fields; omitted fields are unchanged"""
    jobs_service = get_jobs_service()

    updates = request.model_dump(mode="json", exclude_none=True)
    if not updates:
        raise HTTPException(status_code=400, detail="No fields provided for update")

    try:
        result = await jobs_service.update_job(auth.user_id, job_id, updates)
        raise_for_service_error(result, not_found="Job not found")
        return {"job": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update job {job_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update job")

@router.delete("/jobs/{job_id}")
async def delete_job(
    job_id: str,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    jobs_service = get_jobs_service()

    try:
        result = await jobs_service.delete_job(auth.user_id, job_id)
        raise_for_service_error(result, not_found="Job not found")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete job {job_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete job")

@router.post("/fetch-job-posting")
async def fetch_posting(
    request: FetchJobPostingRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Pull a job description from a posting URL for the intake form"""
    try:
        job_description = await fetch_job_posting(request.url)
        return {
            "success": True,
            "jobDescription": job_description,
            "note": "Please review and edit the extracted content as needed."
        }

    except JobPostingFetchError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error fetching job posting: {e}")
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred. Please copy and paste the job description manually."
        )
