"""HTTP client for the external document provider.

The provider owns remote document sets ("quotations") and exposes a
listing endpoint plus a details endpoint per set.
"""

from typing import List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.exceptions import MalformedUpstreamResponseError, UpstreamUnavailableError
from app.schemas.remote_sets import RemoteSetDetails, RemoteSetDocument
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class DocumentProviderClient:
    """Read-only client for remote document sets."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        self.base_url = (base_url or settings.provider.base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout

    async def list_documents(self, remote_set_id: str) -> List[RemoteSetDocument]:
        """List the documents of a remote set.

        Raises:
            UpstreamUnavailableError: If the provider is unreachable or
                answers with a non-success status
            MalformedUpstreamResponseError: If the listing has no document array
        """
        url = f"{self.base_url}{settings.provider.list_documents_path}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    url,
                    params={"quotation_id": remote_set_id},
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(
                f"Document provider unreachable: {e}",
                extra={"remote_set_id": remote_set_id},
            )
            raise UpstreamUnavailableError(f"Document provider unavailable: {e}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Document provider returned {response.status_code}: {response.text}",
                extra={"remote_set_id": remote_set_id},
            )
            raise UpstreamUnavailableError(
                f"Failed to fetch documents: {response.status_code} {response.reason_phrase}"
            )

        try:
            documents = response.json().get("documents")
            if not isinstance(documents, list):
                raise MalformedUpstreamResponseError("Invalid response format from document provider")
            return [RemoteSetDocument.model_validate(doc) for doc in documents]
        except (ValueError, AttributeError, PydanticValidationError) as e:
            raise MalformedUpstreamResponseError(
                "Invalid response format from document provider", original_error=e
            )

    async def get_set_details(self, remote_set_id: str) -> Optional[RemoteSetDetails]:
        """Fetch header details of a remote set; None if the provider has none.

        Raises:
            UpstreamUnavailableError: On transport failure or a non-404 error status
        """
        url = f"{self.base_url}{settings.provider.set_details_path}/{remote_set_id}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(url, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Document provider unavailable: {e}", original_error=e)

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise UpstreamUnavailableError(
                f"Failed to fetch set details: {response.status_code} {response.reason_phrase}"
            )

        try:
            return RemoteSetDetails.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise MalformedUpstreamResponseError("Invalid set details from document provider", original_error=e)
