"""
Centralized error handling and structured error logging.

Every error response shares one body shape: {error, message, trace_id?, timestamp}.
The trace id is the one assigned by RequestContextMiddleware and echoed in X-Trace-ID.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union
from contextvars import ContextVar

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)

class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    SANITIZE_SENSITIVE_FIELDS = True
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'cookie', 'signature', 'credential', 'resume_text', 'raw_text'
    ]

    LOG_REQUEST_BODIES = True
    LOG_HEADERS = True
    MAX_BODY_LOG_SIZE = 5000

    # Uploads and signed webhook payloads are never copied into logs
    UNLOGGED_CONTENT_TYPES = ('multipart/form-data', 'application/pdf', 'application/octet-stream')

    INCLUDE_TRACE_ID = True
    INCLUDE_TIMESTAMP = True

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively redact sensitive fields and truncate oversized strings"""
        if not cls.SANITIZE_SENSITIVE_FIELDS:
            return data

        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(key) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        if isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        if isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        return data


def _new_trace_id() -> str:
    return str(uuid.uuid4())[:8]


def _captured_body(request: Request) -> Optional[Any]:
    """Body stashed by the middleware, parsed as JSON when possible"""
    body = getattr(request.state, 'captured_body', None)
    if not body:
        return None
    try:
        text = body.decode('utf-8')
    except UnicodeDecodeError:
        return "DECODE_ERROR"
    try:
        return ErrorHandlingConfig.sanitize_data(json.loads(text))
    except ValueError:
        return ErrorHandlingConfig.sanitize_data(text)


class StructuredLogger:
    """Structured JSON error logging with request context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True
    ) -> str:
        """Log one structured error entry and return its trace id"""
        trace_id = None
        if request is not None:
            trace_id = getattr(request.state, 'trace_id', None)
        trace_id = trace_id or request_id_var.get('') or _new_trace_id()

        log_entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request is not None:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(headers) if ErrorHandlingConfig.LOG_HEADERS else {},
                "client_ip": request.client.host if request.client else None,
                "body": _captured_body(request),
            }

        if exception is not None:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
            }
            if include_traceback:
                log_entry["exception"]["traceback"] = traceback.format_exc()

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.error(json.dumps(log_entry, indent=2, default=str))
        return trace_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assigns a trace id to every request and keeps the body for error logs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = _new_trace_id()
        request_id_var.set(trace_id)
        request.state.trace_id = trace_id
        request.state.captured_body = None

        content_type = request.headers.get('content-type', '')
        if ErrorHandlingConfig.LOG_REQUEST_BODIES and not content_type.startswith(ErrorHandlingConfig.UNLOGGED_CONTENT_TYPES):
            request.state.captured_body = await request.body()

        try:
            response = await call_next(request)
        except Exception as e:
            StructuredLogger.log_error(
                "unhandled_exception",
                f"Unhandled exception in request processing: {str(e)}",
                request=request,
                exception=e
            )
            raise

        response.headers["X-Trace-ID"] = trace_id
        return response


def _error_response(status_code: int, error: str, message: Any, trace_id: Optional[str] = None, **extra) -> JSONResponse:
    content: Dict[str, Any] = {"error": error, "message": message, **extra}
    if ErrorHandlingConfig.INCLUDE_TRACE_ID and trace_id:
        content["trace_id"] = trace_id
    if ErrorHandlingConfig.INCLUDE_TIMESTAMP:
        content["timestamp"] = datetime.utcnow().isoformat()
    return JSONResponse(status_code=status_code, content=content)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions; only 5xx are logged as errors"""
    trace_id = None
    if exc.status_code >= 500:
        trace_id = StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            exception=exc,
            include_traceback=False
        )
    else:
        logger.info(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {exc.detail}")

    response = _error_response(exc.status_code, f"HTTP {exc.status_code}", exc.detail, trace_id)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors (HTTP 422) with per-field details"""
    validation_details = [
        {
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown"),
        }
        for error in exc.errors()
    ]

    trace_id = StructuredLogger.log_error(
        "validation_error_422",
        f"Request validation failed: {len(validation_details)} validation errors",
        request=request,
        extra_context={"validation_errors": validation_details},
        include_traceback=False
    )

    return _error_response(
        422,
        "Validation Error",
        "Request validation failed",
        trace_id,
        detail=validation_details,
        error_count=len(validation_details)
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle everything else without exposing internals"""
    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc
    )
    return _error_response(500, "Internal Server Error", "An unexpected error occurred", trace_id)


def setup_error_handling(app):
    """Install the request context middleware and exception handlers"""
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling initialized")


INTERNAL_ERROR_MESSAGE = "Internal server error"

SERVICE_ERROR_STATUS = {
    "RESOURCE_NOT_FOUND": 404,
    "CONFLICT_ERROR": 409,
    "INVALID_QUERY": 400,
    "FOREIGN_KEY_ERROR": 400,
}


def raise_for_service_error(
    result,
    not_found: Optional[str] = None,
    conflict: Optional[str] = None,
    failure: str = INTERNAL_ERROR_MESSAGE
):
    """
    Translate a failed ServiceResult into an HTTPException

    Database and execution errors are logged and answered with the generic
    failure message so query details never reach the client.
    """
    if result.success:
        return
    status_code = SERVICE_ERROR_STATUS.get(result.error_type, 500)
    detail = result.error
    if status_code == 404 and not_found:
        detail = not_found
    elif status_code == 409 and conflict:
        detail = conflict
    elif status_code == 500:
        logger.error(f"Service failure ({result.error_type}): {result.error}")
        detail = failure
    raise HTTPException(status_code=status_code, detail=detail)
