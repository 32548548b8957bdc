"""
Resume API routes - file upload parsing, LLM resume parsing and stored resumes
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, File, UploadFile

from signalpage.models.resume import ParseResumeRequest, ResumeCreateRequest
from signalpage.services.file_processor import FileParseError, process_uploaded_file
from signalpage.services.generation_service import parse_resume
from signalpage.services.resumes_service import get_resumes_service
from signalpage.utils.auth import AuthConfig, AuthContext
from signalpage.utils.error_handling import raise_for_service_error

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/parse-file")
async def parse_file(
    file: UploadFile = File(None),
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Extract plain text from an uploaded PDF or TXT resume"""
    if file is None:
        raise HTTPException(status_code=400, detail="No file provided")

    try:
        text = await process_uploaded_file(file)
        return {"text": text}

    except FileParseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"File parsing error: {e}")
        raise HTTPException(
            status_code=500,
            detail="Failed to parse file. Please try copying and pasting the text instead."
        )

@router.post("/parse-resume")
async def parse_resume_text(
    request: ParseResumeRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Turn raw resume text into structured resume data"""
    if not request.resume_text or not isinstance(request.resume_text, str):
        raise HTTPException(status_code=400, detail="Resume text is required")

    try:
        parsed = await parse_resume(request.resume_text)
        return {"parsedData": parsed.model_dump()}

    except Exception as e:
        logger.error(f"Error parsing resume for {auth.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to parse resume")

@router.get("/resumes")
async def list_resumes(auth: AuthContext = Depends(AuthConfig.get_auth_dependency())):
    """List the caller's resumes, primary first"""
    resumes_service = get_resumes_service()

    try:
        result = await resumes_service.list_resumes(auth.user_id)
        raise_for_service_error(result)
        return {"resumes": result.data}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list resumes: {e}")
        raise HTTPException(status_code=500, detail="Failed to list resumes")

@router.post("/resumes", status_code=201)
async def create_resume(
    request: ResumeCreateRequest,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Store a resume; the first one becomes primary"""
    resumes_service = get_resumes_service()

    try:
        data = request.model_dump(mode="json", exclude_none=True)
        result = await resumes_service.create_resume(auth.user_id, data)
        raise_for_service_error(result)
        return {"resume": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create resume: {e}")
        raise HTTPException(status_code=500, detail="Failed to create resume")

@router.put("/resumes/{resume_id}/primary")
async def set_primary_resume(
    resume_id: str,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    """Make a resume the caller's primary resume"""
    resumes_service = get_resumes_service()

    try:
        result = await resumes_service.set_primary(auth.user_id, resume_id)
        raise_for_service_error(result, not_found="Resume not found")
        return {"resume": result.first}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to set primary resume {resume_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update resume")

@router.delete("/resumes/{resume_id}")
async def delete_resume(
    resume_id: str,
    auth: AuthContext = Depends(AuthConfig.get_auth_dependency())
):
    resumes_service = get_resumes_service()

    try:
        result = await resumes_service.delete_resume(auth.user_id, resume_id)
        raise_for_service_error(result, not_found="Resume not found")
        return {"success": True}

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete resume {resume_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to delete resume")
