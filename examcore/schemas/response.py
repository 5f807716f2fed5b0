from datetime import datetime, timezone
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

DataType = TypeVar("DataType")

class APIResponse(BaseModel, Generic[DataType]):
    """Envelope for every successful engine response."""
    message: str = Field(..., description="What the operation did, e.g. 'Exam submitted successfully'.")
    data: Optional[DataType] = Field(None, description="Exam, attempt, report or statistics payload.")

class ErrorDetail(BaseModel):
    code: str = Field(..., description="Stable engine error code such as ALREADY_ATTEMPTED or DEADLINE_PASSED")
    message: str = Field(..., description="User-facing message for the error kind")
    details: Optional[Dict[str, Any]] = Field(None, description="Identifiers of the exam, student or question involved")

class ErrorResponse(BaseModel):
    error: ErrorDetail
    timestamp: str = Field(..., description="UTC time the error was reported, ISO 8601")
    path: str = Field(..., description="Request URL that failed")
    request_id: Optional[str] = Field(None, description="X-Request-ID of the failed request")

    @classmethod
    def build(
        cls, code: str, message: str, path: str, request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> "ErrorResponse":
        return cls(
            error=ErrorDetail(code=code, message=message, details=details or None),
            timestamp=datetime.now(timezone.utc).isoformat(),
            path=path,
            request_id=request_id,
        )
