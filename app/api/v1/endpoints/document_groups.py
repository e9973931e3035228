from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_async_session as get_session
from app.core.exceptions import AppError
from app.schemas.api import ApiResponse
from app.schemas.auth import CurrentUser
from app.schemas.documents import DocumentGroupCreate, DocumentGroupUpdate
from app.services.document_group_service import DocumentGroupService
from app.utils.responses import create_api_response, http_exception_from_error

router = APIRouter()


async def get_document_group_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> DocumentGroupService:
    return DocumentGroupService(db_session)


@router.get(
    "/",
    response_model=ApiResponse,
    summary="List document groups",
    operation_id="list_document_groups",
)
async def list_document_groups(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    group_service: Annotated[DocumentGroupService, Depends(get_document_group_service)] = None,
) -> ApiResponse:
    try:
        groups = await group_service.list_groups(current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=groups, message="Document groups retrieved successfully", request=request)


@router.post(
    "/",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a document group",
    operation_id="create_document_group",
)
async def create_document_group(
    request: Request,
    payload: DocumentGroupCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    group_service: Annotated[DocumentGroupService, Depends(get_document_group_service)] = None,
) -> ApiResponse:
    try:
        group = await group_service.create_group(payload, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=group, message="Document group created successfully", request=request)


@router.get(
    "/{group_id}",
    response_model=ApiResponse,
    summary="Get a document group",
    operation_id="get_document_group",
)
async def get_document_group(
    request: Request,
    group_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    group_service: Annotated[DocumentGroupService, Depends(get_document_group_service)] = None,
) -> ApiResponse:
    try:
        group = await group_service.get_group(group_id, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=group, message="Document group retrieved successfully", request=request)


@router.put(
    "/{group_id}",
    response_model=ApiResponse,
    summary="Update a document group",
    operation_id="update_document_group",
)
async def update_document_group(
    request: Request,
    group_id: UUID,
    payload: DocumentGroupUpdate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    group_service: Annotated[DocumentGroupService, Depends(get_document_group_service)] = None,
) -> ApiResponse:
    try:
        group = await group_service.update_group(group_id, payload, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=group, message="Document group updated successfully", request=request)


@router.delete(
    "/{group_id}",
    response_model=ApiResponse,
    summary="Delete a document group and its documents",
    operation_id="delete_document_group",
)
async def delete_document_group(
    request: Request,
    group_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    group_service: Annotated[DocumentGroupService, Depends(get_document_group_service)] = None,
) -> ApiResponse:
    try:
        await group_service.delete_group(group_id, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=None, message="Document group deleted successfully", request=request)


@router.get(
    "/{group_id}/documents",
    response_model=ApiResponse,
    summary="List the documents of a group",
    operation_id="list_group_documents",
)
async def list_group_documents(
    request: Request,
    group_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    group_service: Annotated[DocumentGroupService, Depends(get_document_group_service)] = None,
) -> ApiResponse:
    """Group header plus its documents, newest upload first."""
    try:
        result = await group_service.list_group_documents(group_id, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=result, message="Documents retrieved successfully", request=request)
