"""Schemas for analysis requests and normalized engine outcomes."""

from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalysisMode(str, Enum):
    """Where the documents of an analysis come from."""

    REMOTE = "remote"
    UPLOADED = "uploaded"


class CheckStatus(str, Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    WARNING = "WARNING"


class RuleInstructions(BaseModel):
    """Ad-hoc rule content supplied with the request instead of a stored rule."""

    comparison_instructions: str = Field(..., min_length=1)
    extraction_fields: List[str] = Field(default_factory=list)
    critical_checks: List[str] = Field(default_factory=list)


class AnalysisRequest(BaseModel):
    """Body of POST /analysis."""

    mode: AnalysisMode
    remote_set_id: Optional[str] = Field(None, description="Remote set to analyse (remote mode)")
    group_id: Optional[UUID] = Field(None, description="Document group to analyse (uploaded mode)")
    document_ids: List[str] = Field(default_factory=list, description="Documents to include, in order")
    rule_id: Optional[UUID] = Field(None, description="Stored rule to apply")
    rule_instructions: Optional[RuleInstructions] = Field(
        None, description="Inline rule; takes precedence over rule_id"
    )


class AnalysisResult(BaseModel):
    """Engine feedback for one document."""

    model_config = ConfigDict(extra="ignore")

    document_id: str
    document_name: str
    document_type: Optional[str] = None
    ai_feedback: str
    sequence_order: int


class CriticalCheckResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    check_name: str
    status: CheckStatus
    details: str = ""
    issue: str = ""


class AnalysisOutcome(BaseModel):
    """Normalized engine response, persisted as the session results."""

    model_config = ConfigDict(extra="ignore")

    success: bool = True
    full_feedback: Optional[str] = None
    results: List[AnalysisResult] = Field(default_factory=list)
    critical_checks_results: List[CriticalCheckResult] = Field(default_factory=list)
    extracted_data: Optional[Dict[str, Any]] = None
    critical_checks_list: Optional[List[str]] = None

    @field_validator("results", "critical_checks_results", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class AnalysisResponse(AnalysisOutcome):
    """Outcome returned to the caller together with its session."""

    session_id: UUID
