"""Schemas for document sets owned by the external document provider."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RemoteSetDocument(BaseModel):
    """A document listed by the provider for a remote set."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Provider document ID")
    quotation_id: str = Field(..., description="Owning remote set ID")
    document_type: Optional[str] = Field(None, description="Provider document type")
    file_name: str = Field(..., description="Original file name")
    file_url: str = Field(..., description="Provider-hosted URL of the file")
    description: Optional[str] = Field(None, description="Free-text description")
    submitted_at: Optional[datetime] = Field(None, description="Submission time")


class RemoteSetDetails(BaseModel):
    """Header information the provider exposes for a remote set."""

    model_config = ConfigDict(extra="ignore")

    company: Optional[str] = None
    destination: Optional[str] = None
    date: Optional[str] = None


class RemoteSetDocumentsResponse(BaseModel):
    """Document listing returned to API callers."""

    remote_set_id: str
    documents: List[RemoteSetDocument]
    fetched_at: datetime


class RemoteSetHistoryEntry(BaseModel):
    """A remote set the caller has analysed before."""

    remote_set_id: str
    set_summary: Optional[str] = None
    last_analyzed_at: datetime
