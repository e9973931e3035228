from datetime import datetime, timezone
from typing import Any, Optional, Dict
from uuid import uuid4

from fastapi import HTTPException, Request, status as http_status

from app.core.exceptions import (
    AppError,
    AnalysisFailedError,
    ForbiddenError,
    MalformedUpstreamResponseError,
    NotFoundError,
    SessionStateError,
    UpstreamUnavailableError,
    ValidationError,
)
from app.schemas.api import ApiResponse, ResponseMeta, ErrorDetail

# Most specific class first; anything else is a 500
ERROR_STATUS_MAP = [
    (ValidationError, http_status.HTTP_400_BAD_REQUEST, "Invalid Request"),
    (ForbiddenError, http_status.HTTP_403_FORBIDDEN, "Forbidden"),
    (NotFoundError, http_status.HTTP_404_NOT_FOUND, "Not Found"),
    (SessionStateError, http_status.HTTP_409_CONFLICT, "Invalid Session State"),
    (UpstreamUnavailableError, http_status.HTTP_503_SERVICE_UNAVAILABLE, "Upstream Unavailable"),
    (AnalysisFailedError, http_status.HTTP_502_BAD_GATEWAY, "Analysis Failed"),
    (MalformedUpstreamResponseError, http_status.HTTP_502_BAD_GATEWAY, "Malformed Upstream Response"),
]


def _request_id(request: Optional[Request]) -> str:
    if request and hasattr(request.state, "request_id"):
        return request.state.request_id
    return str(uuid4())


def create_api_response(
    data: Any,
    message: str = "Operation successful",
    status: bool = True,
    request: Optional[Request] = None,
    api_version: str = "v1"
) -> Dict[str, Any]:
    """Create a standardized API response as a dictionary.

    Lists are wrapped as ``{"items": [...]}``; pydantic models are dumped.
    """
    meta = ResponseMeta(
        timestamp=datetime.now(timezone.utc),
        request_id=_request_id(request),
        api_version=api_version
    )

    data_dict: Dict[str, Any] = {}
    if isinstance(data, dict):
        data_dict = data
    elif hasattr(data, "model_dump"):
        data_dict = data.model_dump(mode="json")
    elif isinstance(data, list):
        data_dict = {
            "items": [item.model_dump(mode="json") if hasattr(item, "model_dump") else item for item in data]
        }
    elif data is not None:
        data_dict = {"value": data}

    response = ApiResponse(
        status=status,
        message=message,
        data=data_dict,
        meta=meta
    )
    return response.model_dump(mode="json")


def create_error_detail(
    title: str,
    status: int,
    detail: str,
    request: Optional[Request] = None,
    instance: Optional[str] = None,
    session_id: Optional[Any] = None,
) -> ErrorDetail:
    """Create a standardized error detail (RFC 7807)."""
    return ErrorDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance or (request.url.path if request else None),
        request_id=_request_id(request),
        timestamp=datetime.now(timezone.utc),
        session_id=session_id,
    )


def http_exception_from_error(error: AppError, request: Optional[Request] = None) -> HTTPException:
    """Translate a service error into an HTTPException carrying ErrorDetail."""
    status_code = http_status.HTTP_500_INTERNAL_SERVER_ERROR
    title = "Internal Error"
    for error_type, mapped_status, mapped_title in ERROR_STATUS_MAP:
        if isinstance(error, error_type):
            status_code, title = mapped_status, mapped_title
            break

    error_detail = create_error_detail(
        title=title,
        status=status_code,
        detail=str(error),
        request=request,
        session_id=getattr(error, "session_id", None),
    )
    return HTTPException(status_code=status_code, detail=error_detail.model_dump(mode="json"))
