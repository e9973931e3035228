from typing import Optional, List
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.models import ComparisonRule
from app.repositories.base_repository import BaseRepository


class RuleRepository(BaseRepository[ComparisonRule]):
    """Repository for comparison rules."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ComparisonRule)

    async def list_for_user(self, user_id: str) -> List[ComparisonRule]:
        """Rules owned by a user, default rules first then newest first."""
        query = (
            select(ComparisonRule)
            .where(ComparisonRule.user_id == user_id)
            .order_by(ComparisonRule.is_default.desc(), ComparisonRule.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create_rule(
        self,
        user_id: str,
        name: str,
        comparison_instructions: str,
        description: Optional[str] = None,
        extraction_fields: Optional[List[str]] = None,
        critical_checks: Optional[List[str]] = None,
        is_default: bool = False,
    ) -> ComparisonRule:
        """Create a new comparison rule.

        Args:
            user_id: Owner (identity provider subject)
            name: Display name
            comparison_instructions: Free-text instructions for the engine
            description: Optional description
            extraction_fields: Ordered field names to extract
            critical_checks: Ordered checks to evaluate
            is_default: Whether the rule is a built-in default

        Returns:
            Created ComparisonRule instance
        """
        now = datetime.now(timezone.utc)
        return await self.create(
            user_id=user_id,
            name=name,
            description=description,
            comparison_instructions=comparison_instructions,
            extraction_fields=list(extraction_fields or []),
            critical_checks=list(critical_checks or []),
            is_default=is_default,
            created_at=now,
            updated_at=now,
        )
