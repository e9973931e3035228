from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_async_session as get_session
from app.core.exceptions import AppError
from app.schemas.api import ApiResponse
from app.schemas.auth import CurrentUser
from app.services.session_service import SessionService
from app.utils.responses import create_api_response, http_exception_from_error

router = APIRouter()


async def get_session_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> SessionService:
    return SessionService(db_session)


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List analysis sessions",
    operation_id="list_analysis_sessions",
)
async def list_sessions(
    request: Request,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    session_service: Annotated[SessionService, Depends(get_session_service)] = None,
) -> ApiResponse:
    try:
        sessions = await session_service.list_sessions(current_user.id, limit=limit, offset=offset)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=sessions, message="Sessions retrieved successfully", request=request)


@router.get(
    "/{session_id}",
    response_model=ApiResponse,
    summary="Get an analysis session",
    operation_id="get_analysis_session",
)
async def get_session_detail(
    request: Request,
    session_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    session_service: Annotated[SessionService, Depends(get_session_service)] = None,
) -> ApiResponse:
    try:
        analysis_session = await session_service.get_session(session_id, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=analysis_session, message="Session retrieved successfully", request=request)
