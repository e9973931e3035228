"""Document group service."""

from typing import Any, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, ValidationError
from app.repositories.document_group_repository import (
    DocumentGroupRepository,
    UploadedDocumentRepository,
)
from app.schemas.documents import (
    DocumentGroupCreate,
    DocumentGroupResponse,
    DocumentGroupUpdate,
    GroupDocumentsResponse,
    UploadedDocumentResponse,
)
from app.services.analysis.ownership import ensure_found_and_owned
from app.services.base_service import BaseService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentGroupService(BaseService):
    """CRUD for the folders that hold a user's uploaded documents."""

    def __init__(self, session: AsyncSession):
        super().__init__()
        self.group_repo = DocumentGroupRepository(session)
        self.document_repo = UploadedDocumentRepository(session)

    async def run(self, *args, **kwargs) -> Any:
        """Route to appropriate handler based on action."""
        action = kwargs.get("action")

        if action == "list_groups":
            return await self._list_groups_logic(kwargs["user_id"])
        elif action == "create_group":
            return await self._create_group_logic(kwargs["payload"], kwargs["user_id"])
        elif action == "get_group":
            return await self._get_group_logic(kwargs["group_id"], kwargs["user_id"])
        elif action == "update_group":
            return await self._update_group_logic(kwargs["group_id"], kwargs["payload"], kwargs["user_id"])
        elif action == "delete_group":
            return await self._delete_group_logic(kwargs["group_id"], kwargs["user_id"])
        elif action == "list_group_documents":
            return await self._list_group_documents_logic(kwargs["group_id"], kwargs["user_id"])
        else:
            raise AppError(f"Unknown action: {action}")

    async def list_groups(self, user_id: str) -> List[DocumentGroupResponse]:
        return await self.execute(action="list_groups", user_id=user_id)

    async def create_group(self, payload: DocumentGroupCreate, user_id: str) -> DocumentGroupResponse:
        return await self.execute(action="create_group", payload=payload, user_id=user_id)

    async def get_group(self, group_id: UUID, user_id: str) -> DocumentGroupResponse:
        return await self.execute(action="get_group", group_id=group_id, user_id=user_id)

    async def update_group(
        self, group_id: UUID, payload: DocumentGroupUpdate, user_id: str
    ) -> DocumentGroupResponse:
        return await self.execute(action="update_group", group_id=group_id, payload=payload, user_id=user_id)

    async def delete_group(self, group_id: UUID, user_id: str) -> None:
        return await self.execute(action="delete_group", group_id=group_id, user_id=user_id)

    async def list_group_documents(self, group_id: UUID, user_id: str) -> GroupDocumentsResponse:
        return await self.execute(action="list_group_documents", group_id=group_id, user_id=user_id)

    async def _list_groups_logic(self, user_id: str) -> List[DocumentGroupResponse]:
        groups = await self.group_repo.list_for_user(user_id)
        return [DocumentGroupResponse.model_validate(group) for group in groups]

    async def _create_group_logic(self, payload: DocumentGroupCreate, user_id: str) -> DocumentGroupResponse:
        name = payload.name.strip()
        if not name:
            raise ValidationError("Group name is required")

        description = payload.description.strip() if payload.description else None
        group = await self.group_repo.create_group(user_id=user_id, name=name, description=description or None)
        LOGGER.info(f"Document group created: group_id={group.id}", extra={"user_id": user_id})
        return DocumentGroupResponse.model_validate(group)

    async def _get_group_logic(self, group_id: UUID, user_id: str) -> DocumentGroupResponse:
        group = await self.group_repo.get_by_id(group_id)
        ensure_found_and_owned(group, user_id, "Document group", group_id)
        return DocumentGroupResponse.model_validate(group)

    async def _update_group_logic(
        self, group_id: UUID, payload: DocumentGroupUpdate, user_id: str
    ) -> DocumentGroupResponse:
        group = await self.group_repo.get_by_id(group_id)
        ensure_found_and_owned(group, user_id, "Document group", group_id)

        changes = payload.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = (changes["name"] or "").strip()
            if not changes["name"]:
                raise ValidationError("Group name cannot be empty")
        if "description" in changes and changes["description"] is not None:
            changes["description"] = changes["description"].strip() or None

        updated = await self.group_repo.update(group_id, **changes)
        return DocumentGroupResponse.model_validate(updated)

    async def _delete_group_logic(self, group_id: UUID, user_id: str) -> None:
        group = await self.group_repo.get_by_id(group_id)
        ensure_found_and_owned(group, user_id, "Document group", group_id)
        # Document rows go with the group (ON DELETE CASCADE); blobs stay in storage
        await self.group_repo.delete(group_id)
        LOGGER.info(f"Document group deleted: group_id={group_id}", extra={"user_id": user_id})

    async def _list_group_documents_logic(self, group_id: UUID, user_id: str) -> GroupDocumentsResponse:
        group = await self.group_repo.get_by_id(group_id)
        ensure_found_and_owned(group, user_id, "Document group", group_id)
        documents = await self.document_repo.list_for_group(group_id)
        return GroupDocumentsResponse(
            group=DocumentGroupResponse.model_validate(group),
            documents=[UploadedDocumentResponse.model_validate(doc) for doc in documents],
        )
