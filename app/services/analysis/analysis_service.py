"""Analysis session orchestration.

One request produces exactly one AnalysisSession. Once the session exists,
every failure is recorded on it before the error reaches the caller, so a
returned request never leaves a session in ``processing``.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, ValidationError
from app.repositories.analysis_session_repository import AnalysisSessionRepository
from app.repositories.document_group_repository import (
    DocumentGroupRepository,
    UploadedDocumentRepository,
)
from app.repositories.rule_repository import RuleRepository
from app.schemas.analysis import AnalysisMode, AnalysisRequest, AnalysisResponse
from app.services.analysis.dispatcher import AnalysisDispatcher
from app.services.analysis.document_sources import (
    DocumentSource,
    RemoteSetSource,
    UploadedGroupSource,
)
from app.services.analysis.ownership import ensure_found_and_owned
from app.services.analysis.result_aggregator import ResultAggregator
from app.services.analysis.rule_resolver import RuleResolver, rule_source_from_request
from app.services.analysis.session_manager import SessionManager, SetReference
from app.services.analysis_engine_client import AnalysisEngineClient
from app.services.base_service import BaseService
from app.services.document_provider_client import DocumentProviderClient
from app.services.storage_service import StorageService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class AnalysisService(BaseService):
    """Runs a document analysis end to end for one caller."""

    def __init__(
        self,
        session: AsyncSession,
        storage_service: Optional[StorageService] = None,
        provider_client: Optional[DocumentProviderClient] = None,
        engine_client: Optional[AnalysisEngineClient] = None,
    ):
        super().__init__()
        self.rule_repo = RuleRepository(session)
        self.group_repo = DocumentGroupRepository(session)
        self.document_repo = UploadedDocumentRepository(session)
        self.session_repo = AnalysisSessionRepository(session)
        self.storage_service = storage_service or StorageService()
        self.provider_client = provider_client or DocumentProviderClient()
        self.engine_client = engine_client or AnalysisEngineClient()
        self.aggregator = ResultAggregator()

    def validate(self, request: AnalysisRequest, user_id: str):
        if request.mode == AnalysisMode.REMOTE:
            if not request.remote_set_id or request.group_id:
                raise ValidationError("Remote analysis requires remote_set_id and no group_id")
        elif not request.group_id or request.remote_set_id:
            raise ValidationError("Uploaded analysis requires group_id and no remote_set_id")

        if not request.document_ids:
            raise ValidationError("At least one document must be selected")
        if request.rule_id is None and request.rule_instructions is None:
            raise ValidationError("A rule_id or inline rule instructions are required")

    async def run(self, request: AnalysisRequest, user_id: str) -> AnalysisResponse:
        """Guard, resolve, record, dispatch and finalize.

        Raises:
            AppError: Any failure; ``session_id`` is set once a session exists
        """
        source = await self._document_source(request, user_id)
        rule = await RuleResolver(self.rule_repo).resolve(
            rule_source_from_request(request.rule_id, request.rule_instructions),
            user_id,
        )
        summary = await source.summarize()

        sessions = SessionManager(self.session_repo)
        analysis_session = await sessions.create(
            user_id=user_id,
            rule_id=rule.rule_id,
            set_reference=SetReference(
                remote_set_id=request.remote_set_id,
                group_id=request.group_id,
            ),
            document_ids=request.document_ids,
            summary=summary,
        )
        session_id = analysis_session.id
        await sessions.mark_started(session_id)

        try:
            document_set = await source.resolve_documents(request.document_ids)
            body = await AnalysisDispatcher(self.engine_client).dispatch(document_set, rule, user_id)
            outcome = self.aggregator.aggregate(body)
            await sessions.mark_completed(session_id, self.aggregator.to_persisted(outcome))
        except Exception as e:
            await self._record_failure(sessions, session_id, e)
            if isinstance(e, AppError):
                e.session_id = session_id
                raise
            raise AppError(f"Analysis failed: {e}", original_error=e, session_id=session_id) from e

        LOGGER.info(f"Analysis session {session_id} completed", extra={"user_id": user_id})
        return self.aggregator.to_response(outcome, session_id)

    async def _document_source(self, request: AnalysisRequest, user_id: str) -> DocumentSource:
        """Source for the request's mode; uploaded groups must be owned by the caller."""
        if request.mode == AnalysisMode.REMOTE:
            return RemoteSetSource(self.provider_client, request.remote_set_id)

        group = await self.group_repo.get_by_id(request.group_id)
        ensure_found_and_owned(group, user_id, "Document group", request.group_id)
        return UploadedGroupSource(self.document_repo, self.storage_service, group)

    @staticmethod
    async def _record_failure(sessions: SessionManager, session_id: UUID, error: Exception) -> None:
        """Mark the session failed; a failure here must not mask ``error``."""
        LOGGER.error(
            f"Analysis session {session_id} failed: {error}",
            exc_info=error,
        )
        try:
            await sessions.mark_failed(session_id, str(error) or error.__class__.__name__)
        except AppError as mark_error:
            LOGGER.error(
                f"Could not mark session {session_id} as failed: {mark_error}",
                exc_info=True,
            )
