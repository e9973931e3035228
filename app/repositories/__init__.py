"""Repository layer modules."""

from app.repositories.analysis_session_repository import AnalysisSessionRepository
from app.repositories.document_group_repository import (
    DocumentGroupRepository,
    UploadedDocumentRepository,
)
from app.repositories.rule_repository import RuleRepository

__all__ = [
    "AnalysisSessionRepository",
    "DocumentGroupRepository",
    "RuleRepository",
    "UploadedDocumentRepository",
]
