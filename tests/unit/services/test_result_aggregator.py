from uuid import uuid4

import pytest

from app.core.exceptions import MalformedUpstreamResponseError
from app.services.analysis.result_aggregator import ResultAggregator


def test_missing_lists_become_empty():
    outcome = ResultAggregator().aggregate(
        {"success": True, "full_feedback": "ok", "results": None, "critical_checks_results": None}
    )

    assert outcome.results == []
    assert outcome.critical_checks_results == []
    assert outcome.extracted_data is None


def test_results_keep_engine_order():
    body = {
        "results": [
            {"document_id": "b", "document_name": "b.pdf", "ai_feedback": "fine", "sequence_order": 2},
            {"document_id": "a", "document_name": "a.pdf", "ai_feedback": "fine", "sequence_order": 1},
        ],
        "critical_checks_results": [
            {"check_name": "Weights", "status": "WARNING", "details": "close", "unexpected": True}
        ],
    }

    outcome = ResultAggregator().aggregate(body)

    assert [r.document_id for r in outcome.results] == ["b", "a"]
    assert outcome.critical_checks_results[0].status.value == "WARNING"
    assert outcome.critical_checks_results[0].issue == ""


def test_unknown_check_status_is_malformed():
    body = {"critical_checks_results": [{"check_name": "Weights", "status": "MAYBE"}]}

    with pytest.raises(MalformedUpstreamResponseError):
        ResultAggregator().aggregate(body)


def test_persisted_and_response_forms():
    outcome = ResultAggregator().aggregate(
        {"full_feedback": "ok", "extracted_data": {"weight": "10kg"}, "critical_checks_list": ["Weights"]}
    )
    session_id = uuid4()

    persisted = ResultAggregator.to_persisted(outcome)
    response = ResultAggregator.to_response(outcome, session_id)

    assert persisted["extracted_data"] == {"weight": "10kg"}
    assert persisted["results"] == []
    assert response.session_id == session_id
    assert response.critical_checks_list == ["Weights"]
