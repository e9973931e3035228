"""Normalizes engine responses into session results and API responses."""

from typing import Any, Dict
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import MalformedUpstreamResponseError
from app.schemas.analysis import AnalysisOutcome, AnalysisResponse
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ResultAggregator:
    """Validates the engine body without reordering or reinterpreting it."""

    def aggregate(self, body: Dict[str, Any]) -> AnalysisOutcome:
        try:
            outcome = AnalysisOutcome.model_validate(body)
        except PydanticValidationError as e:
            LOGGER.error(f"Unexpected analysis engine response shape: {e}")
            raise MalformedUpstreamResponseError(
                "Analysis engine response could not be parsed", original_error=e
            )

        LOGGER.info(
            f"Analysis produced {len(outcome.results)} document results "
            f"and {len(outcome.critical_checks_results)} critical check results"
        )
        return outcome

    @staticmethod
    def to_persisted(outcome: AnalysisOutcome) -> Dict[str, Any]:
        """JSON-ready form stored on the session."""
        return outcome.model_dump(mode="json")

    @staticmethod
    def to_response(outcome: AnalysisOutcome, session_id: UUID) -> AnalysisResponse:
        return AnalysisResponse(**outcome.model_dump(), session_id=session_id)
