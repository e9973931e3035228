from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_async_session as get_session
from app.core.exceptions import AppError
from app.schemas.analysis import AnalysisRequest
from app.schemas.api import ApiResponse
from app.schemas.auth import CurrentUser
from app.services.analysis import AnalysisService
from app.utils.logging import get_logger
from app.utils.responses import create_api_response, http_exception_from_error

LOGGER = get_logger(__name__)

router = APIRouter()


async def get_analysis_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> AnalysisService:
    return AnalysisService(db_session)


@router.post(
    "/",
    response_model=ApiResponse,
    summary="Analyse a set of documents against a rule",
    operation_id="run_analysis",
)
async def run_analysis(
    request: Request,
    payload: AnalysisRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    analysis_service: Annotated[AnalysisService, Depends(get_analysis_service)] = None,
) -> ApiResponse:
    """Run one analysis and return the engine outcome with its session ID.

    Failures after the session was recorded carry ``session_id`` in the
    error detail.
    """
    LOGGER.info(
        f"Analysis requested: mode={payload.mode.value}, documents={len(payload.document_ids)}",
        extra={"user_id": current_user.id},
    )
    try:
        result = await analysis_service.execute(payload, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=result, message="Analysis completed successfully", request=request)
