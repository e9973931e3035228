"""Analysis session orchestration package."""

from .analysis_service import AnalysisService
from .dispatcher import AnalysisDispatcher
from .document_sources import RemoteSetSource, UploadedGroupSource
from .result_aggregator import ResultAggregator
from .rule_resolver import InlineRule, ResolvedRule, RuleResolver, StoredRule
from .session_manager import SessionManager, SessionStatus, SetReference

__all__ = [
    "AnalysisService",
    "AnalysisDispatcher",
    "RemoteSetSource",
    "UploadedGroupSource",
    "ResultAggregator",
    "InlineRule",
    "ResolvedRule",
    "RuleResolver",
    "StoredRule",
    "SessionManager",
    "SessionStatus",
    "SetReference",
]
