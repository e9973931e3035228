from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_async_session as get_session
from app.core.exceptions import AppError
from app.schemas.api import ApiResponse
from app.schemas.auth import CurrentUser
from app.schemas.remote_sets import RemoteSetDocumentsResponse
from app.services.document_provider_client import DocumentProviderClient
from app.services.session_service import SessionService
from app.utils.responses import create_api_response, http_exception_from_error

router = APIRouter()


def get_provider_client() -> DocumentProviderClient:
    return DocumentProviderClient()


async def get_session_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> SessionService:
    return SessionService(db_session)


@router.get(
    "/history",
    response_model=ApiResponse,
    summary="Remote sets analysed before",
    operation_id="get_remote_set_history",
)
async def get_remote_set_history(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    session_service: Annotated[SessionService, Depends(get_session_service)] = None,
) -> ApiResponse:
    """Distinct remote sets with their latest summary, newest first."""
    try:
        history = await session_service.remote_set_history(current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=history, message="History retrieved successfully", request=request)


@router.get(
    "/{remote_set_id}/documents",
    response_model=ApiResponse,
    summary="List the documents of a remote set",
    operation_id="list_remote_set_documents",
)
async def list_remote_set_documents(
    request: Request,
    remote_set_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    provider_client: Annotated[DocumentProviderClient, Depends(get_provider_client)] = None,
) -> ApiResponse:
    try:
        documents = await provider_client.list_documents(remote_set_id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(
        data=RemoteSetDocumentsResponse(
            remote_set_id=remote_set_id,
            documents=documents,
            fetched_at=datetime.now(timezone.utc),
        ),
        message="Documents retrieved successfully",
        request=request,
    )
