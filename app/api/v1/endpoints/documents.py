from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user
from app.core.database import get_async_session as get_session
from app.core.exceptions import AppError
from app.schemas.api import ApiResponse
from app.schemas.auth import CurrentUser
from app.services.document_service import DocumentService
from app.utils.responses import create_api_response, http_exception_from_error

router = APIRouter()


async def get_document_service(
    db_session: Annotated[AsyncSession, Depends(get_session)]
) -> DocumentService:
    return DocumentService(db_session)


@router.post(
    "/upload",
    response_model=ApiResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a document into a group",
    operation_id="upload_document",
)
async def upload_document(
    request: Request,
    file: UploadFile = File(..., description="PDF, Word, Excel, text, CSV or image file"),
    group_id: UUID = Form(...),
    document_type: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    content = await file.read()
    try:
        document = await document_service.upload_document(
            user_id=current_user.id,
            group_id=group_id,
            file_name=file.filename or "",
            content_type=file.content_type,
            content=content,
            document_type=document_type,
            description=description,
        )
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=document, message="File uploaded successfully", request=request)


@router.delete(
    "/{document_id}",
    response_model=ApiResponse,
    summary="Delete an uploaded document",
    operation_id="delete_uploaded_document",
)
async def delete_document(
    request: Request,
    document_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)] = None,
    document_service: Annotated[DocumentService, Depends(get_document_service)] = None,
) -> ApiResponse:
    try:
        await document_service.delete_document(document_id, current_user.id)
    except AppError as e:
        raise http_exception_from_error(e, request) from e

    return create_api_response(data=None, message="Document deleted successfully", request=request)
