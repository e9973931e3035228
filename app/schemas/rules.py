"""Schemas for comparison rules."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RuleCreate(BaseModel):
    name: str = Field(..., description="Rule name")
    description: Optional[str] = Field(None, description="Rule description")
    extraction_fields: List[str] = Field(default_factory=list, description="Fields to extract, in order")
    comparison_instructions: str = Field(..., description="Instructions for the comparison engine")
    critical_checks: List[str] = Field(default_factory=list, description="Checks that must pass")


class RuleUpdate(BaseModel):
    """Partial rule update; omitted fields are left unchanged."""

    name: Optional[str] = None
    description: Optional[str] = None
    extraction_fields: Optional[List[str]] = None
    comparison_instructions: Optional[str] = None
    critical_checks: Optional[List[str]] = None


class RuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    name: str
    description: Optional[str] = None
    extraction_fields: List[str] = Field(default_factory=list)
    comparison_instructions: str
    critical_checks: List[str] = Field(default_factory=list)
    is_default: bool = False
    created_at: datetime
    updated_at: datetime
