from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_async_session as get_session
from app.core.exceptions import AppError
from app.schemas.api import ApiResponse
from app.schemas.auth import CurrentUser
from app.schemas.rules import RuleCreate, RuleUpdate
from app.services.rule_service import RuleService
from app.utils.responses import create_api_response, http_exception_from_error

router = APIRouter()


async def get_rule_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> RuleService:
    return RuleService(db_session)


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List comparison rules",
    operation_id="list_rules",
)
async def list_rules(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    rule_service: Annotated[RuleService, Depends(get_rule_service)] = None,
) -> ApiResponse:
    """List the caller's rules, default rules first."""
    try:
        rules = await rule_service.list_rules(current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=rules, message="Rules retrieved successfully", request=request)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a comparison rule",
    operation_id="create_rule",
)
async def create_rule(
    request: Request,
    payload: RuleCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    rule_service: Annotated[RuleService, Depends(get_rule_service)] = None,
) -> ApiResponse:
    try:
        rule = await rule_service.create_rule(payload, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=rule, message="Rule created successfully", request=request)


@router.get(
    "/{rule_id}",
    response_model=ApiResponse,
    summary="Get a comparison rule",
    operation_id="get_rule",
)
async def get_rule(
    request: Request,
    rule_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    rule_service: Annotated[RuleService, Depends(get_rule_service)] = None,
) -> ApiResponse:
    try:
        rule = await rule_service.get_rule(rule_id, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=rule, message="Rule retrieved successfully", request=request)


@router.put(
    "/{rule_id}",
    response_model=ApiResponse,
    summary="Update a comparison rule",
    operation_id="update_rule",
)
async def update_rule(
    request: Request,
    rule_id: UUID,
    payload: RuleUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    rule_service: Annotated[RuleService, Depends(get_rule_service)] = None,
) -> ApiResponse:
    """Update a rule. Default rules cannot be edited."""
    try:
        rule = await rule_service.update_rule(rule_id, payload, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=rule, message="Rule updated successfully", request=request)


@router.delete(
    "/{rule_id}",
    response_model=ApiResponse,
    summary="Delete a comparison rule",
    operation_id="delete_rule",
)
async def delete_rule(
    request: Request,
    rule_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    rule_service: Annotated[RuleService, Depends(get_rule_service)] = None,
) -> ApiResponse:
    """Delete a rule. Default rules cannot be deleted."""
    try:
        await rule_service.delete_rule(rule_id, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=None, message="Rule deleted successfully", request=request)
