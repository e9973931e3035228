"""HTTP client for the external AI comparison engine."""

from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import (
    AnalysisFailedError,
    MalformedUpstreamResponseError,
    UpstreamUnavailableError,
)
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class AnalysisEngineClient:
    """Sends a single analysis request and returns the decoded JSON body.

    No retries: one request per call, failures surface to the caller.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[int] = None,
    ):
        self.base_url = (base_url or settings.engine.base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.engine.api_key
        self.timeout = timeout or settings.http_timeout

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def analyze(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST the payload to the engine's analyze endpoint.

        Raises:
            UpstreamUnavailableError: Transport failure (connect, timeout)
            AnalysisFailedError: Non-2xx status or ``success: false``
            MalformedUpstreamResponseError: Body is not a JSON object
        """
        url = f"{self.base_url}{settings.engine.analyze_path}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    headers=self.headers,
                    json=payload,
                    timeout=self.timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Analysis engine unreachable: {e}", exc_info=True)
            raise UpstreamUnavailableError(f"Analysis engine unavailable: {e}", original_error=e)

        if not response.is_success:
            message = self._error_message(response)
            LOGGER.error(
                f"Analysis engine returned {response.status_code}: {message}",
                extra={"status_code": response.status_code},
            )
            raise AnalysisFailedError(message)

        try:
            body = response.json()
        except ValueError as e:
            raise MalformedUpstreamResponseError("Analysis engine returned a non-JSON response", original_error=e)

        if not isinstance(body, dict):
            raise MalformedUpstreamResponseError("Analysis engine response is not a JSON object")

        if body.get("success") is False:
            raise AnalysisFailedError(body.get("error") or "Analysis engine reported failure")

        return body

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Prefer the engine's own ``error`` field over the status line."""
        try:
            error = response.json().get("error")
        except (ValueError, AttributeError):
            error = None
        return error or f"Analysis failed ({response.status_code}): {response.reason_phrase}"
