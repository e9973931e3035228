import uuid
from typing import Optional, List
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import DocumentGroup, UploadedDocument
from app.repositories.base_repository import BaseRepository


class DocumentGroupRepository(BaseRepository[DocumentGroup]):
    """Repository for user document groups."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, DocumentGroup)

    async def list_for_user(self, user_id: str) -> List[DocumentGroup]:
        """Groups owned by a user, newest first."""
        query = (
            select(DocumentGroup)
            .where(DocumentGroup.user_id == user_id)
            .order_by(DocumentGroup.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create_group(
        self, user_id: str, name: str, description: Optional[str] = None
    ) -> DocumentGroup:
        now = datetime.now(timezone.utc)
        return await self.create(
            user_id=user_id,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )


class UploadedDocumentRepository(BaseRepository[UploadedDocument]):
    """Repository for uploaded document metadata."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, UploadedDocument)

    async def list_for_group(self, group_id: uuid.UUID) -> List[UploadedDocument]:
        """Documents of a group, most recently uploaded first."""
        query = (
            select(UploadedDocument)
            .where(UploadedDocument.group_id == group_id)
            .order_by(UploadedDocument.uploaded_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create_document(
        self,
        user_id: str,
        group_id: uuid.UUID,
        file_name: str,
        original_name: str,
        file_url: str,
        file_size: int,
        mime_type: str,
        document_type: Optional[str] = None,
        description: Optional[str] = None,
        checksum: Optional[str] = None,
    ) -> UploadedDocument:
        """Record metadata for a file already written to blob storage."""
        return await self.create(
            user_id=user_id,
            group_id=group_id,
            file_name=file_name,
            original_name=original_name,
            file_url=file_url,
            file_size=file_size,
            mime_type=mime_type,
            document_type=document_type,
            description=description,
            checksum=checksum,
            uploaded_at=datetime.now(timezone.utc),
        )
