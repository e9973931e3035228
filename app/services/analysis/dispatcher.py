"""Builds and sends the single outbound request to the analysis engine."""

from typing import Any, Dict

from app.services.analysis.document_sources import (
    DocumentSet,
    RemoteDocumentSet,
    UploadedDocumentSet,
)
from app.services.analysis.rule_resolver import ResolvedRule
from app.services.analysis_engine_client import AnalysisEngineClient
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

UPLOADED_SET_PREFIX = "UPLOADED_GROUP_"


class AnalysisDispatcher:
    """One engine call per analysis session; never retried."""

    def __init__(self, engine_client: AnalysisEngineClient):
        self.engine_client = engine_client

    def build_payload(
        self, document_set: DocumentSet, rule: ResolvedRule, user_id: str
    ) -> Dict[str, Any]:
        """Engine payload for the given document set shape.

        Remote sets are sent by reference; uploaded groups inline their
        encoded documents and are addressed by a synthetic set ID.
        """
        if isinstance(document_set, RemoteDocumentSet):
            payload = {
                "quotation_id": document_set.remote_set_id,
                "document_ids": list(document_set.document_ids),
                "document_urls": list(document_set.document_urls),
            }
        elif isinstance(document_set, UploadedDocumentSet):
            payload = {
                "quotation_id": f"{UPLOADED_SET_PREFIX}{document_set.group_id}",
                "documents": [doc.to_payload() for doc in document_set.documents],
                "analysis_mode": document_set.mode.value,
            }
        else:
            raise TypeError(f"Unsupported document set: {type(document_set).__name__}")

        payload["rule_id"] = str(rule.rule_id) if rule.rule_id else None
        payload["user_id"] = user_id
        payload["rule"] = rule.to_payload()
        return payload

    async def dispatch(
        self, document_set: DocumentSet, rule: ResolvedRule, user_id: str
    ) -> Dict[str, Any]:
        """Send the analysis request and return the engine's JSON body.

        Raises:
            UpstreamUnavailableError: Engine unreachable
            AnalysisFailedError: Engine reported failure
            MalformedUpstreamResponseError: Engine body unreadable
        """
        payload = self.build_payload(document_set, rule, user_id)
        LOGGER.info(
            f"Dispatching {document_set.mode.value} analysis",
            extra={"quotation_id": payload["quotation_id"], "rule": rule.name},
        )
        return await self.engine_client.analyze(payload)
