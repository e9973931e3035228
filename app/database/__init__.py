"""Database module for SQLAlchemy models."""

from app.database.models import (
    AnalysisSession,
    ComparisonRule,
    DocumentGroup,
    UploadedDocument,
)

__all__ = [
    "AnalysisSession",
    "ComparisonRule",
    "DocumentGroup",
    "UploadedDocument",
]
