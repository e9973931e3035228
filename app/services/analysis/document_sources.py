"""Document sources for an analysis: remote sets and uploaded groups.

Both sources expose the same two coroutines, ``summarize()`` and
``resolve_documents(document_ids)``, and produce differently shaped
document sets: remote sets travel by reference, uploaded groups travel as
base64-encoded content.
"""

import base64
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from app.core.exceptions import AppError, StorageError, ValidationError
from app.database.models import DocumentGroup
from app.repositories.document_group_repository import UploadedDocumentRepository
from app.schemas.analysis import AnalysisMode
from app.services.document_provider_client import DocumentProviderClient
from app.services.storage_service import StorageService, storage_path_from_url
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/pdf"

MIME_TYPES = {
    "pdf": "application/pdf",
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}

COMPANY_PATTERN = re.compile(r"company[:\s]+([^\n,]+)", re.IGNORECASE)
FILE_PREFIX_PATTERN = re.compile(r"([^-]+)-")


def mime_type_for(file_name: str) -> str:
    """MIME type from the file extension; unknown extensions count as PDF."""
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def format_summary_date(value: Optional[str]) -> Optional[str]:
    """Render an ISO date as ``Jan 15, 2024``; None when unparsable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


@dataclass(frozen=True)
class EncodedDocument:
    """An uploaded document ready to be sent inline to the engine."""

    id: str
    name: str
    type: str
    base64_data: str
    mime_type: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "base64Data": self.base64_data,
            "mimeType": self.mime_type,
        }


@dataclass(frozen=True)
class RemoteDocumentSet:
    remote_set_id: str
    # The requested ids, forwarded as given; see document_urls for what the provider returned
    document_ids: Tuple[str, ...]
    document_urls: Tuple[str, ...]
    mode: AnalysisMode = AnalysisMode.REMOTE


@dataclass(frozen=True)
class UploadedDocumentSet:
    group_id: UUID
    documents: Tuple[EncodedDocument, ...]
    mode: AnalysisMode = AnalysisMode.UPLOADED


DocumentSet = Union[RemoteDocumentSet, UploadedDocumentSet]


class RemoteSetSource:
    """Documents owned by the external provider, referenced by set ID."""

    def __init__(self, provider_client: DocumentProviderClient, remote_set_id: str):
        self.provider_client = provider_client
        self.remote_set_id = remote_set_id

    async def summarize(self) -> str:
        """Best-effort human-readable label for the set.

        Tries the provider's set details first, then the first listed
        document; falls back to the raw set ID. Never raises for upstream
        failures.
        """
        try:
            details = await self.provider_client.get_set_details(self.remote_set_id)
            if details:
                parts = [details.company, details.destination, format_summary_date(details.date)]
                parts = [part for part in parts if part]
                if parts:
                    return f"{self.remote_set_id} - {' - '.join(parts)}"
        except AppError as e:
            LOGGER.warning(f"Could not fetch set details for summary: {e}")

        try:
            documents = await self.provider_client.list_documents(self.remote_set_id)
        except AppError as e:
            LOGGER.warning(f"Could not fetch documents for summary either: {e}")
            return self.remote_set_id

        if documents:
            first = documents[0]
            match = COMPANY_PATTERN.search(first.description or "") or FILE_PREFIX_PATTERN.search(first.file_name or "")
            if match:
                return f"{self.remote_set_id} - {match.group(1).strip()}"

        return self.remote_set_id

    async def resolve_documents(self, document_ids: List[str]) -> RemoteDocumentSet:
        """Collect URLs of the requested documents the provider knows about.

        Requested IDs are forwarded unchanged even when the provider does
        not list them.

        Raises:
            UpstreamUnavailableError: If the provider cannot be reached
        """
        documents = await self.provider_client.list_documents(self.remote_set_id)
        requested = set(document_ids)
        selected = [doc for doc in documents if doc.id in requested]

        if len(selected) != len(requested):
            LOGGER.warning(
                f"Provider listed {len(selected)} of {len(requested)} requested documents",
                extra={"remote_set_id": self.remote_set_id},
            )

        return RemoteDocumentSet(
            remote_set_id=self.remote_set_id,
            document_ids=tuple(document_ids),
            document_urls=tuple(doc.file_url for doc in selected),
        )


class UploadedGroupSource:
    """Documents the user uploaded into one of their groups."""

    def __init__(
        self,
        document_repo: UploadedDocumentRepository,
        storage_service: StorageService,
        group: DocumentGroup,
    ):
        self.document_repo = document_repo
        self.storage_service = storage_service
        self.group = group

    async def summarize(self) -> str:
        if not self.group.name:
            return f"Group: {self.group.id}"
        summary = f"Group: {self.group.name}"
        if self.group.description:
            summary += f" - {self.group.description}"
        return summary

    async def resolve_documents(self, document_ids: List[str]) -> UploadedDocumentSet:
        """Download and encode the requested documents in request order.

        Every requested ID must belong to the group; nothing is downloaded
        otherwise. A single failed download aborts the whole set.

        Raises:
            ValidationError: A requested document is not in the group
            StorageError: A download failed (names the file)
        """
        group_documents = await self.document_repo.list_for_group(self.group.id)
        by_id = {str(doc.id): doc for doc in group_documents}

        missing = [doc_id for doc_id in document_ids if doc_id not in by_id]
        # Each group document may be selected once
        if missing or len(set(document_ids)) != len(document_ids):
            LOGGER.warning(
                "Requested documents not found in group",
                extra={"group_id": str(self.group.id), "missing": missing},
            )
            raise ValidationError("Some requested documents not found in group")

        encoded: List[EncodedDocument] = []
        for doc_id in document_ids:
            doc = by_id[doc_id]
            path = storage_path_from_url(doc.file_url, self.storage_service.bucket)
            try:
                content = await self.storage_service.download_file(path)
            except StorageError as e:
                LOGGER.error(f"Failed to download {doc.file_name}: {e}", extra={"path": path})
                raise StorageError(f"Failed to download file: {doc.file_name}", original_error=e)

            encoded.append(
                EncodedDocument(
                    id=str(doc.id),
                    name=doc.original_name,
                    type=doc.document_type or "other",
                    base64_data=base64.b64encode(content).decode("ascii"),
                    mime_type=mime_type_for(doc.file_name),
                )
            )

        return UploadedDocumentSet(group_id=self.group.id, documents=tuple(encoded))


DocumentSource = Union[RemoteSetSource, UploadedGroupSource]
