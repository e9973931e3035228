"""Authentication schemas for Supabase JWT tokens."""

from typing import Optional, Dict, Any

from pydantic import BaseModel, Field


class CurrentUser(BaseModel):
    """Current authenticated user information."""

    id: str = Field(..., description="Supabase user ID (JWT subject)")
    email: Optional[str] = Field(None, description="User email")
    role: str = Field(default="user", description="User role")

    app_metadata: Optional[Dict[str, Any]] = Field(None, description="Application metadata")
    user_metadata: Optional[Dict[str, Any]] = Field(None, description="User metadata")


__all__ = ["CurrentUser"]
