"""Tests for document upload and deletion."""

import hashlib
from uuid import uuid4

import pytest

from app.core.exceptions import ForbiddenError, NotFoundError, PersistenceError, ValidationError
from app.services.document_service import (
    DocumentService,
    build_storage_name,
    build_storage_path,
    sanitize_filename,
)
from app.services.storage_service import storage_path_from_url

USER_ID = "user-123"


@pytest.fixture
def service(mock_session, group_repo, document_repo, storage):
    service = DocumentService(mock_session, storage_service=storage)
    service.group_repo = group_repo
    service.document_repo = document_repo
    return service


def test_storage_naming():
    assert sanitize_filename("my invoice (1).pdf") == "my_invoice__1_.pdf"
    assert build_storage_name("u1", "a b.pdf", timestamp_ms=1700000000000) == "u1-1700000000000-a_b.pdf"
    assert build_storage_path("u1", "g1", "u1-1-a.pdf") == "uploads/u1/groups/g1/u1-1-a.pdf"


class TestUpload:
    @pytest.mark.asyncio
    async def test_upload_stores_blob_then_row(self, service, group_repo, storage, document_repo):
        group = group_repo.add()
        content = b"%PDF-1.4"

        document = await service.upload_document(
            USER_ID, group.id, "invoice.pdf", "application/pdf", content, document_type="invoice"
        )

        path = storage_path_from_url(document.file_url)
        assert path.startswith(f"uploads/{USER_ID}/groups/{group.id}/{USER_ID}-")
        assert storage.objects[path] == content
        assert document.original_name == "invoice.pdf"
        assert document.file_size == len(content)
        assert document.checksum == hashlib.sha256(content).hexdigest()
        assert document.id in document_repo.documents

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "file_name,content_type,content,message",
        [
            ("", "application/pdf", b"x", "No file provided"),
            ("big.pdf", "application/pdf", b"x" * (10 * 1024 * 1024 + 1), "File size exceeds 10MB limit"),
            ("run.exe", "application/x-msdownload", b"x", "File type not allowed"),
        ],
    )
    async def test_invalid_files_rejected(self, service, group_repo, storage, file_name, content_type, content, message):
        group = group_repo.add()

        with pytest.raises(ValidationError, match=message):
            await service.upload_document(USER_ID, group.id, file_name, content_type, content)

        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_foreign_group_rejected(self, service, group_repo, storage):
        group = group_repo.add(user_id="user-999")

        with pytest.raises(ForbiddenError):
            await service.upload_document(USER_ID, group.id, "a.pdf", "application/pdf", b"x")

        assert storage.objects == {}

    @pytest.mark.asyncio
    async def test_failed_insert_removes_blob(self, service, group_repo, document_repo, storage):
        group = group_repo.add()
        document_repo.fail_create = True

        with pytest.raises(PersistenceError):
            await service.upload_document(USER_ID, group.id, "a.pdf", "application/pdf", b"x")

        assert storage.objects == {}
        assert len(storage.removed) == 1


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_removes_blob_and_row(self, service, group_repo, document_repo, storage):
        group = group_repo.add()
        doc = document_repo.add(group, "a.pdf")
        path = storage_path_from_url(doc.file_url)
        storage.objects[path] = b"x"

        await service.delete_document(doc.id, USER_ID)

        assert storage.removed == [path]
        assert doc.id not in document_repo.documents

    @pytest.mark.asyncio
    async def test_delete_foreign_document(self, service, group_repo, document_repo):
        doc = document_repo.add(group_repo.add(user_id="user-999"), "a.pdf")

        with pytest.raises(ForbiddenError):
            await service.delete_document(doc.id, USER_ID)

        assert doc.id in document_repo.documents

    @pytest.mark.asyncio
    async def test_delete_missing_document(self, service):
        with pytest.raises(NotFoundError):
            await service.delete_document(uuid4(), USER_ID)
