from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.core.exceptions import MalformedUpstreamResponseError, UpstreamUnavailableError
from app.services.document_provider_client import DocumentProviderClient


def make_response(status_code=200, body=None, reason="OK"):
    response = MagicMock()
    response.status_code = status_code
    response.reason_phrase = reason
    response.text = str(body)
    response.json.return_value = body
    return response


@pytest.fixture
def client():
    return DocumentProviderClient(base_url="https://provider.test")


@pytest.mark.asyncio
async def test_list_documents(client):
    body = {
        "documents": [
            {
                "id": "D1",
                "quotation_id": "S1",
                "document_type": "invoice",
                "file_name": "ACME-invoice.pdf",
                "file_url": "https://provider.test/files/D1.pdf",
            }
        ]
    }
    get = AsyncMock(return_value=make_response(body=body))

    with patch("httpx.AsyncClient.get", get):
        documents = await client.list_documents("S1")

    assert [doc.id for doc in documents] == ["D1"]
    assert get.call_args.kwargs["params"] == {"quotation_id": "S1"}


@pytest.mark.asyncio
async def test_list_documents_unreachable(client):
    with patch("httpx.AsyncClient.get", AsyncMock(side_effect=httpx.ReadTimeout("timed out"))):
        with pytest.raises(UpstreamUnavailableError):
            await client.list_documents("S1")


@pytest.mark.asyncio
async def test_list_documents_error_status(client):
    response = make_response(status_code=503, body={}, reason="Service Unavailable")

    with patch("httpx.AsyncClient.get", AsyncMock(return_value=response)):
        with pytest.raises(UpstreamUnavailableError, match="503"):
            await client.list_documents("S1")


@pytest.mark.asyncio
async def test_list_documents_without_array(client):
    with patch("httpx.AsyncClient.get", AsyncMock(return_value=make_response(body={"items": []}))):
        with pytest.raises(MalformedUpstreamResponseError):
            await client.list_documents("S1")


@pytest.mark.asyncio
async def test_set_details_not_found_is_none(client):
    with patch("httpx.AsyncClient.get", AsyncMock(return_value=make_response(status_code=404, body={}))):
        assert await client.get_set_details("S1") is None


@pytest.mark.asyncio
async def test_set_details(client):
    body = {"company": "ACME", "destination": "Rotterdam", "date": "2024-01-15", "extra": 1}

    with patch("httpx.AsyncClient.get", AsyncMock(return_value=make_response(body=body))):
        details = await client.get_set_details("S1")

    assert details.company == "ACME"
    assert details.date == "2024-01-15"
