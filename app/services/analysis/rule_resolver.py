"""Resolution of the rule that parameterizes an analysis."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union
from uuid import UUID

from app.core.exceptions import ValidationError
from app.repositories.rule_repository import RuleRepository
from app.schemas.analysis import RuleInstructions
from app.services.analysis.ownership import ensure_found_and_owned
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

INLINE_RULE_NAME = "Custom Rule"


@dataclass(frozen=True)
class StoredRule:
    rule_id: UUID


@dataclass(frozen=True)
class InlineRule:
    instructions: RuleInstructions


RuleSource = Union[StoredRule, InlineRule]


@dataclass(frozen=True)
class ResolvedRule:
    """Snapshot of rule content used for one analysis call."""

    name: str
    comparison_instructions: str
    extraction_fields: Tuple[str, ...] = ()
    critical_checks: Tuple[str, ...] = ()
    rule_id: Optional[UUID] = None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "comparison_instructions": self.comparison_instructions,
            "extraction_fields": list(self.extraction_fields),
            "critical_checks": list(self.critical_checks),
        }


def rule_source_from_request(
    rule_id: Optional[UUID], rule_instructions: Optional[RuleInstructions]
) -> RuleSource:
    """Pick the rule source for a request; inline instructions win."""
    if rule_instructions is not None:
        return InlineRule(rule_instructions)
    if rule_id is not None:
        return StoredRule(rule_id)
    raise ValidationError("A rule_id or inline rule instructions are required")


class RuleResolver:
    """Turns a RuleSource into a ResolvedRule for a given caller."""

    def __init__(self, rule_repo: RuleRepository):
        self.rule_repo = rule_repo

    async def resolve(self, source: RuleSource, user_id: str) -> ResolvedRule:
        """Resolve rule content.

        Inline rules skip storage and ownership checks entirely.

        Raises:
            NotFoundError: Stored rule does not exist
            ForbiddenError: Stored rule belongs to someone else
        """
        if isinstance(source, InlineRule):
            instructions = source.instructions
            return ResolvedRule(
                name=INLINE_RULE_NAME,
                comparison_instructions=instructions.comparison_instructions,
                extraction_fields=tuple(instructions.extraction_fields),
                critical_checks=tuple(instructions.critical_checks),
            )

        rule = await self.rule_repo.get_by_id(source.rule_id)
        ensure_found_and_owned(rule, user_id, "Rule", source.rule_id)

        LOGGER.debug(f"Resolved stored rule {rule.id} ({rule.name})")
        return ResolvedRule(
            name=rule.name,
            comparison_instructions=rule.comparison_instructions,
            extraction_fields=tuple(rule.extraction_fields or ()),
            critical_checks=tuple(rule.critical_checks or ()),
            rule_id=rule.id,
        )
