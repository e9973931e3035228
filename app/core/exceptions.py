"""Custom exception hierarchy."""

from typing import Optional
from uuid import UUID


class AppError(Exception):
    """Base exception for application errors.

    ``session_id`` is filled in once an analysis session exists, so callers
    can locate the persisted failure record.
    """

    def __init__(
        self,
        message: str,
        original_error: Exception = None,
        session_id: Optional[UUID] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.session_id = session_id


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class ForbiddenError(AppError):
    """Raised when the caller does not own the referenced entity."""
    pass


class NotFoundError(AppError):
    """Raised when a rule, group, document or session does not exist."""
    pass


class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass


class UpstreamUnavailableError(APIClientError):
    """Raised when the document provider or analysis engine cannot be reached."""
    pass


class AnalysisFailedError(APIClientError):
    """Raised when the analysis engine reports a failure."""
    pass


class MalformedUpstreamResponseError(APIClientError):
    """Raised when the analysis engine response cannot be interpreted."""
    pass


class PersistenceError(AppError):
    """Raised when a database write fails."""
    pass


class StorageError(AppError):
    """Raised when a blob storage operation fails."""
    pass


class SessionStateError(AppError):
    """Raised on an illegal analysis session status transition."""
    pass
