"""Rule service for comparison rule management."""

from typing import Any, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, NotFoundError, ValidationError
from app.repositories.rule_repository import RuleRepository
from app.schemas.rules import RuleCreate, RuleResponse, RuleUpdate
from app.services.analysis.ownership import ensure_found_and_owned
from app.services.base_service import BaseService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class RuleService(BaseService):
    """Service for user comparison rules.

    Default rules are read-only: they can be listed and used for analysis
    but never edited or deleted.
    """

    def __init__(self, session: AsyncSession):
        super().__init__()
        self.rule_repo = RuleRepository(session)

    async def run(self, *args, **kwargs) -> Any:
        """Route to appropriate handler based on action."""
        action = kwargs.get("action")

        if action == "list_rules":
            return await self._list_rules_logic(kwargs["user_id"])
        elif action == "get_rule":
            return await self._get_rule_logic(kwargs["rule_id"], kwargs["user_id"])
        elif action == "create_rule":
            return await self._create_rule_logic(kwargs["payload"], kwargs["user_id"])
        elif action == "update_rule":
            return await self._update_rule_logic(kwargs["rule_id"], kwargs["payload"], kwargs["user_id"])
        elif action == "delete_rule":
            return await self._delete_rule_logic(kwargs["rule_id"], kwargs["user_id"])
        else:
            raise AppError(f"Unknown action: {action}")

    async def list_rules(self, user_id: str) -> List[RuleResponse]:
        return await self.execute(action="list_rules", user_id=user_id)

    async def get_rule(self, rule_id: UUID, user_id: str) -> RuleResponse:
        return await self.execute(action="get_rule", rule_id=rule_id, user_id=user_id)

    async def create_rule(self, payload: RuleCreate, user_id: str) -> RuleResponse:
        return await self.execute(action="create_rule", payload=payload, user_id=user_id)

    async def update_rule(self, rule_id: UUID, payload: RuleUpdate, user_id: str) -> RuleResponse:
        return await self.execute(action="update_rule", rule_id=rule_id, payload=payload, user_id=user_id)

    async def delete_rule(self, rule_id: UUID, user_id: str) -> None:
        return await self.execute(action="delete_rule", rule_id=rule_id, user_id=user_id)

    async def _list_rules_logic(self, user_id: str) -> List[RuleResponse]:
        rules = await self.rule_repo.list_for_user(user_id)
        return [RuleResponse.model_validate(rule) for rule in rules]

    async def _get_rule_logic(self, rule_id: UUID, user_id: str) -> RuleResponse:
        rule = await self.rule_repo.get_by_id(rule_id)
        ensure_found_and_owned(rule, user_id, "Rule", rule_id)
        return RuleResponse.model_validate(rule)

    async def _create_rule_logic(self, payload: RuleCreate, user_id: str) -> RuleResponse:
        name = payload.name.strip()
        instructions = payload.comparison_instructions.strip()
        if not name or not instructions:
            raise ValidationError("Name and comparison instructions are required")

        rule = await self.rule_repo.create_rule(
            user_id=user_id,
            name=name,
            description=payload.description.strip() if payload.description else None,
            comparison_instructions=instructions,
            extraction_fields=payload.extraction_fields,
            critical_checks=payload.critical_checks,
            is_default=False,
        )
        LOGGER.info(f"Rule created: rule_id={rule.id}, name={rule.name}", extra={"user_id": user_id})
        return RuleResponse.model_validate(rule)

    async def _update_rule_logic(self, rule_id: UUID, payload: RuleUpdate, user_id: str) -> RuleResponse:
        rule = await self.rule_repo.get_by_id(rule_id)
        ensure_found_and_owned(rule, user_id, "Rule", rule_id)
        if rule.is_default:
            raise ValidationError("Cannot edit default rule")

        changes = payload.model_dump(exclude_unset=True)
        for field in ("name", "comparison_instructions"):
            if field in changes:
                value = (changes[field] or "").strip()
                if not value:
                    raise ValidationError("Name and comparison instructions are required")
                changes[field] = value
        for field in ("extraction_fields", "critical_checks"):
            if field in changes and changes[field] is None:
                changes[field] = []

        updated = await self.rule_repo.update(rule_id, **changes)
        if updated is None:
            raise NotFoundError(f"Rule {rule_id} not found")
        LOGGER.info(f"Rule updated: rule_id={rule_id}", extra={"fields": sorted(changes)})
        return RuleResponse.model_validate(updated)

    async def _delete_rule_logic(self, rule_id: UUID, user_id: str) -> None:
        rule = await self.rule_repo.get_by_id(rule_id)
        ensure_found_and_owned(rule, user_id, "Rule", rule_id)
        if rule.is_default:
            raise ValidationError("Cannot delete default rule")

        await self.rule_repo.delete(rule_id)
        LOGGER.info(f"Rule deleted: rule_id={rule_id}", extra={"user_id": user_id})
