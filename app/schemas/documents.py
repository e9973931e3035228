"""Schemas for document groups and uploaded documents."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DocumentGroupCreate(BaseModel):
    name: str = Field(..., description="Group name")
    description: Optional[str] = Field(None, description="Group description")


class DocumentGroupUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class DocumentGroupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class UploadedDocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    group_id: UUID
    file_name: str
    original_name: str
    file_url: str
    file_size: int
    mime_type: str
    document_type: Optional[str] = None
    description: Optional[str] = None
    checksum: Optional[str] = None
    uploaded_at: datetime


class GroupDocumentsResponse(BaseModel):
    """A group together with its documents, newest upload first."""

    group: DocumentGroupResponse
    documents: List[UploadedDocumentResponse]
