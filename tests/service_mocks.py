"""
Helpers for building mocked services and ServiceResults in route tests
"""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

from signalpage.services.base_service import ServiceResult

USER_ID = "7d3f1c2a-0000-4000-8000-000000000001"
USER_EMAIL = "jane@example.com"
JOB_ID = "7d3f1c2a-0000-4000-8000-0000000000a1"
PAGE_ID = "7d3f1c2a-0000-4000-8000-0000000000b1"


def ok(data: Optional[List[Dict[str, Any]]] = None, count: int = 0) -> ServiceResult:
    return ServiceResult(success=True, data=data if data is not None else [], count=count)


def failed(error_type: str, error: str = "failed") -> ServiceResult:
    return ServiceResult(success=False, error=error, error_type=error_type)


def not_found() -> ServiceResult:
    return failed("RESOURCE_NOT_FOUND", "Record not found")


def mock_service(**methods: Any) -> MagicMock:
    """MagicMock service whose named methods are AsyncMocks returning the given values"""
    service = MagicMock()
    for name, value in methods.items():
        setattr(service, name, AsyncMock(return_value=value))
    return service
