import uuid
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import AnalysisSession
from app.repositories.base_repository import BaseRepository


class AnalysisSessionRepository(BaseRepository[AnalysisSession]):
    """Repository for analysis session records."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AnalysisSession)

    async def create_session(
        self,
        user_id: str,
        analysis_mode: str,
        document_ids: List[str],
        status: str,
        rule_id: Optional[uuid.UUID] = None,
        remote_set_id: Optional[str] = None,
        group_id: Optional[uuid.UUID] = None,
        set_summary: Optional[str] = None,
    ) -> AnalysisSession:
        """Insert a session row.

        Returns:
            Created AnalysisSession instance
        """
        return await self.create(
            user_id=user_id,
            rule_id=rule_id,
            analysis_mode=analysis_mode,
            remote_set_id=remote_set_id,
            group_id=group_id,
            set_summary=set_summary,
            document_ids=list(document_ids),
            status=status,
            created_at=datetime.now(timezone.utc),
        )

    async def get_for_user(
        self, session_id: uuid.UUID, user_id: str
    ) -> Optional[AnalysisSession]:
        """Fetch a session only if it belongs to the user."""
        query = select(AnalysisSession).where(
            AnalysisSession.id == session_id,
            AnalysisSession.user_id == user_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(
        self, user_id: str, limit: int = 100, offset: int = 0
    ) -> List[AnalysisSession]:
        """Sessions of a user, newest first."""
        return await self.get_all(
            skip=offset,
            limit=limit,
            filters={"user_id": user_id},
            order_by=[AnalysisSession.created_at.desc()],
        )

    async def list_remote_set_history(self, user_id: str) -> List[Dict[str, Any]]:
        """Distinct remote sets a user has analysed.

        Each entry carries the summary and timestamp of the latest session
        for that set; entries are ordered newest first.
        """
        query = (
            select(
                AnalysisSession.remote_set_id,
                AnalysisSession.set_summary,
                AnalysisSession.created_at,
            )
            .where(
                AnalysisSession.user_id == user_id,
                AnalysisSession.remote_set_id.is_not(None),
            )
            .order_by(AnalysisSession.created_at.desc())
        )
        result = await self.session.execute(query)

        history: Dict[str, Dict[str, Any]] = {}
        for remote_set_id, set_summary, created_at in result.all():
            if remote_set_id in history:
                continue
            history[remote_set_id] = {
                "remote_set_id": remote_set_id,
                "set_summary": set_summary,
                "last_analyzed_at": created_at,
            }
        return list(history.values())
