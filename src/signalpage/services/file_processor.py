"""
File processing service for resume uploads - extracts plain text from PDF and TXT files
"""

import io
import asyncio
import logging
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
from pypdf import PdfReader

from signalpage.config import settings
from signalpage.utils.helpers import normalize_text

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
TEXT_CONTENT_TYPE = "text/plain"
WORD_CONTENT_TYPES = {
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}

CONTENT_TYPES_BY_EXTENSION = {
    "pdf": PDF_CONTENT_TYPE,
    "txt": TEXT_CONTENT_TYPE,
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class FileParseError(Exception):
    """Upload could not be turned into text; status_code is the HTTP status to report"""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def get_file_type(filename: Optional[str]) -> str:
    """Get file type from filename extension"""
    if not filename:
        return ""
    return Path(filename).suffix.lower().lstrip('.')

def resolve_content_type(content_type: Optional[str], filename: Optional[str]) -> str:
    """Browsers sometimes send application/octet-stream; fall back to the extension"""
    if content_type and content_type != "application/octet-stream":
        return content_type.split(";")[0].strip().lower()
    return CONTENT_TYPES_BY_EXTENSION.get(get_file_type(filename), content_type or "")

def extract_pdf_text(pdf_data: bytes) -> str:
    reader = PdfReader(io.BytesIO(pdf_data))
    pages = [page.extract_text() or "" for page in reader.pages]
    return "\n".join(pages)

def extract_text(data: bytes, content_type: str) -> str:
    if content_type == TEXT_CONTENT_TYPE:
        return data.decode("utf-8", errors="replace")
    if content_type == PDF_CONTENT_TYPE:
        return extract_pdf_text(data)
    if content_type in WORD_CONTENT_TYPES:
        raise FileParseError("DOC/DOCX files are not yet supported. Please convert to PDF or copy/paste the text.")
    raise FileParseError("Unsupported file type. Please upload a PDF or TXT file.")

def _too_large(limit: int) -> FileParseError:
    return FileParseError(f"File is too large. Maximum size is {limit // (1024 * 1024)}MB.", status_code=413)

async def process_uploaded_file(file: UploadFile) -> str:
    """
    Read an uploaded resume and return its normalized text

    The declared size is checked before reading, and the read itself stops one
    byte past the limit so an undeclared oversized body is never fully buffered.
    """
    limit = settings.MAX_UPLOAD_SIZE
    if file.size is not None and file.size > limit:
        raise _too_large(limit)

    data = await file.read(limit + 1)
    if len(data) > limit:
        raise _too_large(limit)

    content_type = resolve_content_type(file.content_type, file.filename)
    logger.info(f"Parsing uploaded file {file.filename} ({content_type}, {len(data)} bytes)")

    try:
        # pypdf is synchronous
        text = await asyncio.to_thread(extract_text, data, content_type)
    except FileParseError:
        raise
    except Exception as e:
        logger.error(f"Failed to extract text from {file.filename}: {e}")
        raise FileParseError("Failed to parse file. Please try copying and pasting the text instead.", status_code=500)

    return normalize_text(text)
