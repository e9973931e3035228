"""Document service for uploaded document management."""

import hashlib
import re
import time
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AppError, PersistenceError, StorageError, ValidationError
from app.repositories.document_group_repository import (
    DocumentGroupRepository,
    UploadedDocumentRepository,
)
from app.schemas.documents import UploadedDocumentResponse
from app.services.analysis.ownership import ensure_found_and_owned
from app.services.base_service import BaseService
from app.services.storage_service import StorageService, storage_path_from_url
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(file_name: str) -> str:
    return UNSAFE_FILENAME_CHARS.sub("_", file_name)


def build_storage_name(user_id: str, file_name: str, timestamp_ms: Optional[int] = None) -> str:
    """Unique object name: ``<user>-<epoch ms>-<sanitized original>``."""
    timestamp_ms = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    return f"{user_id}-{timestamp_ms}-{sanitize_filename(file_name)}"


def build_storage_path(user_id: str, group_id: UUID, storage_name: str) -> str:
    return f"uploads/{user_id}/groups/{group_id}/{storage_name}"


class DocumentService(BaseService):
    """Service for uploading documents into groups and deleting them.

    Bytes go to blob storage first; the metadata row is written only after
    the blob exists, and the blob is removed again if that write fails.
    """

    def __init__(self, session: AsyncSession, storage_service: Optional[StorageService] = None):
        super().__init__()
        self.group_repo = DocumentGroupRepository(session)
        self.document_repo = UploadedDocumentRepository(session)
        self.storage_service = storage_service or StorageService()

    async def run(self, *args, **kwargs) -> Any:
        """Route to appropriate handler based on action."""
        action = kwargs.get("action")

        if action == "upload_document":
            return await self._upload_document_logic(**{k: v for k, v in kwargs.items() if k != "action"})
        elif action == "delete_document":
            return await self._delete_document_logic(kwargs["document_id"], kwargs["user_id"])
        else:
            raise AppError(f"Unknown action: {action}")

    async def upload_document(
        self,
        user_id: str,
        group_id: UUID,
        file_name: str,
        content_type: Optional[str],
        content: bytes,
        document_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> UploadedDocumentResponse:
        """Store a file in an owned group.

        Raises:
            ValidationError: Empty, oversized or disallowed file
            NotFoundError / ForbiddenError: Group missing or not owned
            StorageError: Blob upload or signing failed
            PersistenceError: Metadata insert failed (blob already removed)
        """
        return await self.execute(
            action="upload_document",
            user_id=user_id,
            group_id=group_id,
            file_name=file_name,
            content_type=content_type,
            content=content,
            document_type=document_type,
            description=description,
        )

    async def delete_document(self, document_id: UUID, user_id: str) -> None:
        return await self.execute(action="delete_document", document_id=document_id, user_id=user_id)

    def _validate_file(self, file_name: str, content_type: Optional[str], content: bytes) -> None:
        if not file_name:
            raise ValidationError("No file provided")
        if len(content) > settings.upload.max_file_size:
            limit_mb = settings.upload.max_file_size // (1024 * 1024)
            raise ValidationError(f"File size exceeds {limit_mb}MB limit")
        if content_type not in settings.upload.allowed_mime_types:
            raise ValidationError(
                "File type not allowed. Allowed types: PDF, Word, Excel, Text, CSV, Images"
            )

    async def _upload_document_logic(
        self,
        user_id: str,
        group_id: UUID,
        file_name: str,
        content_type: Optional[str],
        content: bytes,
        document_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> UploadedDocumentResponse:
        self._validate_file(file_name, content_type, content)

        group = await self.group_repo.get_by_id(group_id)
        ensure_found_and_owned(group, user_id, "Document group", group_id)

        storage_name = build_storage_name(user_id, file_name)
        storage_path = build_storage_path(user_id, group_id, storage_name)
        checksum = hashlib.sha256(content).hexdigest()

        await self.storage_service.upload_bytes(storage_path, content, content_type=content_type, upsert=False)
        LOGGER.info(f"File uploaded to storage: filename={file_name}, path={storage_path}")

        try:
            file_url = await self.storage_service.get_signed_url(storage_path)
            document = await self.document_repo.create_document(
                user_id=user_id,
                group_id=group_id,
                file_name=storage_name,
                original_name=file_name,
                file_url=file_url,
                file_size=len(content),
                mime_type=content_type,
                document_type=document_type or None,
                description=description or None,
                checksum=checksum,
            )
        except (StorageError, SQLAlchemyError) as e:
            LOGGER.error(
                f"Document upload failed after storing blob: filename={file_name}, error={e}",
                exc_info=True,
                extra={"user_id": user_id, "group_id": str(group_id)},
            )
            await self._discard_blob(storage_path)
            if isinstance(e, StorageError):
                raise
            raise PersistenceError(f"Failed to save document metadata: {file_name}", original_error=e)

        LOGGER.info(f"Document upload completed: filename={file_name}, document_id={document.id}")
        return UploadedDocumentResponse.model_validate(document)

    async def _delete_document_logic(self, document_id: UUID, user_id: str) -> None:
        document = await self.document_repo.get_by_id(document_id)
        ensure_found_and_owned(document, user_id, "Document", document_id)

        await self._discard_blob(storage_path_from_url(document.file_url, self.storage_service.bucket))
        await self.document_repo.delete(document_id)
        LOGGER.info(f"Document deleted: document_id={document_id}", extra={"user_id": user_id})

    async def _discard_blob(self, storage_path: str) -> None:
        """Remove a blob, logging instead of raising; an orphaned blob is harmless."""
        try:
            await self.storage_service.remove_file(storage_path)
        except StorageError as e:
            LOGGER.warning(f"Could not remove blob {storage_path}: {e}")
