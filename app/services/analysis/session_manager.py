"""Lifecycle of analysis session records.

Status flows ``pending -> processing -> completed | failed``. Completed and
failed are terminal. Results exist only on completed sessions and an error
message only on failed ones.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import NotFoundError, PersistenceError, SessionStateError, ValidationError
from app.database.models import AnalysisSession
from app.repositories.analysis_session_repository import AnalysisSessionRepository
from app.schemas.analysis import AnalysisMode
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class SessionStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS = {
    SessionStatus.PENDING: {SessionStatus.PROCESSING, SessionStatus.FAILED},
    SessionStatus.PROCESSING: {SessionStatus.COMPLETED, SessionStatus.FAILED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.FAILED: set(),
}


@dataclass(frozen=True)
class SetReference:
    """Exactly one of a remote set ID or an uploaded group ID."""

    remote_set_id: Optional[str] = None
    group_id: Optional[UUID] = None

    def validate(self) -> None:
        if bool(self.remote_set_id) == bool(self.group_id):
            raise ValidationError("Exactly one of remote_set_id or group_id is required")

    @property
    def mode(self) -> AnalysisMode:
        return AnalysisMode.REMOTE if self.remote_set_id else AnalysisMode.UPLOADED


class SessionManager:
    """Creates and finalizes AnalysisSession records."""

    def __init__(self, session_repo: AnalysisSessionRepository):
        self.session_repo = session_repo

    async def create(
        self,
        user_id: str,
        rule_id: Optional[UUID],
        set_reference: SetReference,
        document_ids: List[str],
        summary: Optional[str],
    ) -> AnalysisSession:
        """Persist a new session already in the processing state.

        Raises:
            ValidationError: Empty document list or ambiguous set reference
            PersistenceError: The insert failed
        """
        if not document_ids:
            raise ValidationError("At least one document is required")
        set_reference.validate()

        try:
            session = await self.session_repo.create_session(
                user_id=user_id,
                rule_id=rule_id,
                analysis_mode=set_reference.mode.value,
                remote_set_id=set_reference.remote_set_id,
                group_id=set_reference.group_id,
                set_summary=summary,
                document_ids=document_ids,
                status=SessionStatus.PROCESSING.value,
            )
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to create analysis session: {e}", original_error=e)

        LOGGER.info(
            f"Created analysis session {session.id}",
            extra={"user_id": user_id, "mode": set_reference.mode.value, "documents": len(document_ids)},
        )
        return session

    async def mark_started(self, session_id: UUID) -> None:
        """Record the start time. Failures are logged and ignored."""
        try:
            await self.session_repo.update(session_id, started_at=datetime.now(timezone.utc))
        except SQLAlchemyError as e:
            LOGGER.warning(f"Could not record start of session {session_id}: {e}")

    async def mark_completed(self, session_id: UUID, results: Dict[str, Any]) -> AnalysisSession:
        return await self._transition(
            session_id,
            SessionStatus.COMPLETED,
            results=results,
            error_message=None,
        )

    async def mark_failed(self, session_id: UUID, error_message: str) -> AnalysisSession:
        return await self._transition(
            session_id,
            SessionStatus.FAILED,
            results=None,
            error_message=error_message,
        )

    async def _transition(
        self, session_id: UUID, target: SessionStatus, **fields: Any
    ) -> AnalysisSession:
        """Move a session to a terminal state and stamp ``completed_at``.

        Raises:
            NotFoundError: Unknown session
            SessionStateError: The current status cannot move to ``target``
            PersistenceError: The update failed
        """
        try:
            session = await self.session_repo.get_by_id(session_id)
            if session is None:
                raise NotFoundError(f"Analysis session {session_id} not found")

            current = SessionStatus(session.status)
            if target not in ALLOWED_TRANSITIONS[current]:
                raise SessionStateError(
                    f"Cannot move session {session_id} from {current.value} to {target.value}",
                    session_id=session_id,
                )

            updated = await self.session_repo.update(
                session_id,
                status=target.value,
                completed_at=datetime.now(timezone.utc),
                **fields,
            )
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to update analysis session {session_id}: {e}",
                original_error=e,
                session_id=session_id,
            )

        LOGGER.info(f"Session {session_id} {current.value} -> {target.value}")
        return updated
