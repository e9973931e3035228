"""Schemas for analysis session records."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AnalysisSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    rule_id: Optional[UUID] = None
    analysis_mode: str
    remote_set_id: Optional[str] = None
    group_id: Optional[UUID] = None
    set_summary: Optional[str] = None
    document_ids: List[str]
    status: str
    results: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
