"""Ownership checks shared by every user-scoped entity."""

from typing import Any, Optional

from app.core.exceptions import ForbiddenError, NotFoundError


def owns(entity: Any, user_id: str) -> bool:
    """True when ``entity`` belongs to ``user_id``."""
    return entity is not None and getattr(entity, "user_id", None) == user_id


def ensure_owner(entity: Any, user_id: str, label: str) -> None:
    """Raise ForbiddenError unless the caller owns ``entity``."""
    if not owns(entity, user_id):
        raise ForbiddenError(f"Unauthorized access to {label.lower()}")


def ensure_found_and_owned(
    entity: Optional[Any], user_id: str, label: str, entity_id: Any
) -> Any:
    """Existence check followed by an ownership check.

    A missing entity is NotFoundError, a foreign one is ForbiddenError.
    Returns the entity for convenient chaining.
    """
    if entity is None:
        raise NotFoundError(f"{label} {entity_id} not found")
    ensure_owner(entity, user_id, label)
    return entity
