"""Read access to a user's analysis sessions and remote set history."""

from typing import Any, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, NotFoundError
from app.repositories.analysis_session_repository import AnalysisSessionRepository
from app.schemas.remote_sets import RemoteSetHistoryEntry
from app.schemas.sessions import AnalysisSessionResponse
from app.services.base_service import BaseService


class SessionService(BaseService):
    """Sessions are only visible to their owner; anyone else sees a 404."""

    def __init__(self, session: AsyncSession):
        super().__init__()
        self.session_repo = AnalysisSessionRepository(session)

    async def run(self, *args, **kwargs) -> Any:
        action = kwargs.get("action")

        if action == "list_sessions":
            return await self._list_sessions_logic(kwargs["user_id"], kwargs.get("limit", 100), kwargs.get("offset", 0))
        elif action == "get_session":
            return await self._get_session_logic(kwargs["session_id"], kwargs["user_id"])
        elif action == "remote_set_history":
            return await self._remote_set_history_logic(kwargs["user_id"])
        else:
            raise AppError(f"Unknown action: {action}")

    async def list_sessions(self, user_id: str, limit: int = 100, offset: int = 0) -> List[AnalysisSessionResponse]:
        return await self.execute(action="list_sessions", user_id=user_id, limit=limit, offset=offset)

    async def get_session(self, session_id: UUID, user_id: str) -> AnalysisSessionResponse:
        return await self.execute(action="get_session", session_id=session_id, user_id=user_id)

    async def remote_set_history(self, user_id: str) -> List[RemoteSetHistoryEntry]:
        return await self.execute(action="remote_set_history", user_id=user_id)

    async def _list_sessions_logic(self, user_id: str, limit: int, offset: int) -> List[AnalysisSessionResponse]:
        sessions = await self.session_repo.list_for_user(user_id, limit=limit, offset=offset)
        return [AnalysisSessionResponse.model_validate(s) for s in sessions]

    async def _get_session_logic(self, session_id: UUID, user_id: str) -> AnalysisSessionResponse:
        analysis_session = await self.session_repo.get_for_user(session_id, user_id)
        if analysis_session is None:
            raise NotFoundError(f"Session {session_id} not found")
        return AnalysisSessionResponse.model_validate(analysis_session)

    async def _remote_set_history_logic(self, user_id: str) -> List[RemoteSetHistoryEntry]:
        entries = await self.session_repo.list_remote_set_history(user_id)
        return [RemoteSetHistoryEntry(**entry) for entry in entries]
