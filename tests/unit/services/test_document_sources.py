import base64

import pytest

from app.core.exceptions import StorageError, ValidationError
from app.schemas.remote_sets import RemoteSetDetails
from app.services.analysis.document_sources import (
    RemoteSetSource,
    UploadedGroupSource,
    format_summary_date,
    mime_type_for,
)
from app.services.storage_service import storage_path_from_url


@pytest.mark.parametrize(
    "file_name,expected",
    [
        ("invoice.pdf", "application/pdf"),
        ("SCAN.JPG", "image/jpeg"),
        ("photo.jpeg", "image/jpeg"),
        ("label.png", "image/png"),
        ("anim.gif", "image/gif"),
        ("pic.webp", "image/webp"),
        ("notes.docx", "application/pdf"),
        ("no-extension", "application/pdf"),
    ],
)
def test_mime_type_for(file_name, expected):
    assert mime_type_for(file_name) == expected


def test_format_summary_date():
    assert format_summary_date("2024-01-15") == "Jan 15, 2024"
    assert format_summary_date("2024-03-05T10:00:00Z") == "Mar 5, 2024"
    assert format_summary_date("not a date") is None
    assert format_summary_date(None) is None


class TestRemoteSetSummary:
    @pytest.mark.asyncio
    async def test_uses_set_details(self, provider):
        provider.details["S1"] = RemoteSetDetails(company="ACME Ltd", destination="Rotterdam", date="2024-01-15")

        summary = await RemoteSetSource(provider, "S1").summarize()

        assert summary == "S1 - ACME Ltd - Rotterdam - Jan 15, 2024"
        assert provider.list_calls == []

    @pytest.mark.asyncio
    async def test_company_from_description(self, provider):
        provider.add_document("S1", "D1", "file.pdf", description="Company: Globex, export lot 7")

        assert await RemoteSetSource(provider, "S1").summarize() == "S1 - Globex"

    @pytest.mark.asyncio
    async def test_company_from_file_prefix(self, provider):
        provider.add_document("S1", "D1", "Initech-invoice.pdf")

        assert await RemoteSetSource(provider, "S1").summarize() == "S1 - Initech"

    @pytest.mark.asyncio
    async def test_falls_back_to_raw_id(self, provider):
        assert await RemoteSetSource(provider, "S1").summarize() == "S1"

        provider.unreachable = True
        assert await RemoteSetSource(provider, "S1").summarize() == "S1"


@pytest.mark.asyncio
async def test_remote_resolution_keeps_requested_ids(provider):
    provider.add_document("S1", "D1", "a.pdf")
    provider.add_document("S1", "D2", "b.pdf")

    document_set = await RemoteSetSource(provider, "S1").resolve_documents(["D2", "D9"])

    assert document_set.document_ids == ("D2", "D9")
    assert document_set.document_urls == ("https://provider.test/files/D2.pdf",)


class TestUploadedGroupSource:
    @pytest.mark.asyncio
    async def test_summary(self, group_repo, document_repo, storage):
        described = group_repo.add(name="Lot 7", description="Air freight")
        plain = group_repo.add(name="Lot 8")

        assert await UploadedGroupSource(document_repo, storage, described).summarize() == "Group: Lot 7 - Air freight"
        assert await UploadedGroupSource(document_repo, storage, plain).summarize() == "Group: Lot 8"

    @pytest.mark.asyncio
    async def test_encodes_in_request_order(self, group_repo, document_repo, storage):
        group = group_repo.add()
        first = document_repo.add(group, "a.pdf", document_type="invoice")
        second = document_repo.add(group, "b.jpg")
        storage.objects[storage_path_from_url(first.file_url)] = b"first"
        storage.objects[storage_path_from_url(second.file_url)] = b"second"

        document_set = await UploadedGroupSource(document_repo, storage, group).resolve_documents(
            [str(second.id), str(first.id)]
        )

        assert [doc.id for doc in document_set.documents] == [str(second.id), str(first.id)]
        assert document_set.documents[0].base64_data == base64.b64encode(b"second").decode()
        assert document_set.documents[0].mime_type == "image/jpeg"
        assert document_set.documents[0].name == "b.jpg"
        assert document_set.documents[0].type == "other"
        assert document_set.documents[1].type == "invoice"
        assert document_set.group_id == group.id

    @pytest.mark.asyncio
    async def test_missing_document_downloads_nothing(self, group_repo, document_repo, storage):
        group = group_repo.add()
        doc = document_repo.add(group, "a.pdf")
        storage.objects[storage_path_from_url(doc.file_url)] = b"x"

        with pytest.raises(ValidationError, match="not found in group"):
            await UploadedGroupSource(document_repo, storage, group).resolve_documents([str(doc.id), "missing-id"])

        assert storage.download_calls == []

    @pytest.mark.asyncio
    async def test_repeated_document_id_is_rejected(self, group_repo, document_repo, storage):
        group = group_repo.add()
        doc = document_repo.add(group, "a.pdf")
        storage.objects[storage_path_from_url(doc.file_url)] = b"x"

        with pytest.raises(ValidationError, match="not found in group"):
            await UploadedGroupSource(document_repo, storage, group).resolve_documents([str(doc.id), str(doc.id)])

        assert storage.download_calls == []

    @pytest.mark.asyncio
    async def test_download_failure_names_file(self, group_repo, document_repo, storage):
        group = group_repo.add()
        doc = document_repo.add(group, "a.pdf")

        with pytest.raises(StorageError) as exc_info:
            await UploadedGroupSource(document_repo, storage, group).resolve_documents([str(doc.id)])

        assert doc.file_name in str(exc_info.value)
