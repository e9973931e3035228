"""Common response envelope and error schemas."""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ResponseMeta(BaseModel):
    """Metadata attached to every API response."""

    timestamp: datetime = Field(..., description="Response generation time (UTC)")
    request_id: str = Field(..., description="Correlation ID of the request")
    api_version: str = Field(default="v1", description="API version")


class ApiResponse(BaseModel):
    """Standard success envelope."""

    status: bool = Field(..., description="Whether the operation succeeded")
    message: str = Field(..., description="Human-readable outcome")
    data: Dict[str, Any] = Field(default_factory=dict, description="Operation payload")
    meta: ResponseMeta


class ErrorDetail(BaseModel):
    """Problem details (RFC 7807) returned in HTTPException detail."""

    title: str = Field(..., description="Short error summary")
    status: int = Field(..., description="HTTP status code")
    detail: str = Field(..., description="Error explanation")
    instance: Optional[str] = Field(None, description="Request path")
    request_id: str = Field(..., description="Correlation ID of the request")
    timestamp: datetime = Field(..., description="Error time (UTC)")
    session_id: Optional[UUID] = Field(
        None, description="Analysis session that recorded this failure"
    )
