"""Tests for API endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import jwt
import pytest
from fastapi.testclient import TestClient

from app.api.v1.endpoints.analysis import get_analysis_service
from app.api.v1.endpoints.remote_sets import get_provider_client
from app.api.v1.endpoints.rules import get_rule_service
from app.api.v1.endpoints.sessions import get_session_service
from app.core.auth import get_current_user
from app.core.exceptions import AnalysisFailedError, NotFoundError
from app.main import app
from app.schemas.auth import CurrentUser
from app.services.analysis import AnalysisService
from app.services.rule_service import RuleService
from app.services.storage_service import storage_path_from_url

USER_ID = "user-123"


@pytest.fixture
def authenticated():
    app.dependency_overrides[get_current_user] = lambda: CurrentUser(id=USER_ID, email="ops@example.com")


@pytest.fixture
def analysis_service(mock_session, rule_repo, group_repo, document_repo, session_repo, storage, provider, make_engine):
    """Real orchestrator wired to in-memory collaborators."""

    def _build(engine):
        service = AnalysisService(
            mock_session, storage_service=storage, provider_client=provider, engine_client=engine
        )
        service.rule_repo = rule_repo
        service.group_repo = group_repo
        service.document_repo = document_repo
        service.session_repo = session_repo
        app.dependency_overrides[get_analysis_service] = lambda: service
        return service

    return _build


class TestAuthentication:
    def test_missing_token_is_unauthorized(self, test_client: TestClient) -> None:
        response = test_client.get("/api/v1/rules/")

        assert response.status_code == 401

    def test_invalid_token_is_unauthorized(self, test_client: TestClient) -> None:
        with patch("app.core.auth.jwt_verifier.verify_token", AsyncMock(side_effect=jwt.InvalidTokenError("bad"))):
            response = test_client.get("/api/v1/rules/", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_valid_token_resolves_user(self, test_client: TestClient, mock_session, rule_repo) -> None:
        rule_repo.add(name="Mine")
        rule_repo.add(user_id="user-999", name="Theirs")
        service = RuleService(mock_session)
        service.rule_repo = rule_repo
        app.dependency_overrides[get_rule_service] = lambda: service
        claims = MagicMock(sub=USER_ID, email=None, role="authenticated", app_metadata={}, user_metadata={})

        with patch("app.core.auth.jwt_verifier.verify_token", AsyncMock(return_value=claims)):
            response = test_client.get("/api/v1/rules/", headers={"Authorization": "Bearer token"})

        assert response.status_code == 200
        assert [rule["name"] for rule in response.json()["data"]["items"]] == ["Mine"]


@pytest.mark.usefixtures("authenticated")
class TestAnalysisEndpoint:
    def test_uploaded_analysis_succeeds(
        self, test_client, analysis_service, make_engine, rule_repo, group_repo, document_repo, storage, session_repo
    ) -> None:
        group = group_repo.add()
        doc = document_repo.add(group, "invoice.pdf")
        storage.objects[storage_path_from_url(doc.file_url)] = b"%PDF"
        rule = rule_repo.add()
        analysis_service(
            make_engine(
                response={
                    "success": True,
                    "full_feedback": "ok",
                    "results": [
                        {
                            "document_id": str(doc.id),
                            "document_name": "invoice.pdf",
                            "ai_feedback": "fine",
                            "sequence_order": 1,
                        }
                    ],
                    "critical_checks_results": [],
                }
            )
        )

        response = test_client.post(
            "/api/v1/analysis/",
            json={
                "mode": "uploaded",
                "group_id": str(group.id),
                "document_ids": [str(doc.id)],
                "rule_id": str(rule.id),
            },
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["results"][0]["document_id"] == str(doc.id)
        assert data["session_id"] in {str(session_id) for session_id in session_repo.sessions}

    def test_engine_failure_reports_session(
        self, test_client, analysis_service, make_engine, rule_repo, provider, session_repo
    ) -> None:
        provider.add_document("S1", "D1", "invoice.pdf")
        rule = rule_repo.add()
        analysis_service(make_engine(error=AnalysisFailedError("Analysis failed (500): Internal Server Error")))

        response = test_client.post(
            "/api/v1/analysis/",
            json={"mode": "remote", "remote_set_id": "S1", "document_ids": ["D1"], "rule_id": str(rule.id)},
        )

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["title"] == "Analysis Failed"
        (session_id,) = session_repo.sessions
        assert detail["session_id"] == str(session_id)
        assert session_repo.sessions[session_id].status == "failed"

    def test_provider_down_is_service_unavailable(
        self, test_client, analysis_service, make_engine, rule_repo, provider
    ) -> None:
        provider.unreachable = True
        rule = rule_repo.add()
        analysis_service(make_engine(response={}))

        response = test_client.post(
            "/api/v1/analysis/",
            json={"mode": "remote", "remote_set_id": "S1", "document_ids": ["D1"], "rule_id": str(rule.id)},
        )

        assert response.status_code == 503
        assert response.json()["detail"]["session_id"] is not None

    def test_foreign_group_is_forbidden(
        self, test_client, analysis_service, make_engine, rule_repo, group_repo, session_repo
    ) -> None:
        group = group_repo.add(user_id="user-999")
        rule = rule_repo.add()
        analysis_service(make_engine(response={}))

        response = test_client.post(
            "/api/v1/analysis/",
            json={"mode": "uploaded", "group_id": str(group.id), "document_ids": ["x"], "rule_id": str(rule.id)},
        )

        assert response.status_code == 403
        assert response.json()["detail"]["session_id"] is None
        assert session_repo.sessions == {}

    def test_inconsistent_mode_is_bad_request(self, test_client, analysis_service, make_engine, rule_repo) -> None:
        rule = rule_repo.add()
        analysis_service(make_engine(response={}))

        response = test_client.post(
            "/api/v1/analysis/",
            json={"mode": "remote", "document_ids": ["D1"], "rule_id": str(rule.id)},
        )

        assert response.status_code == 400

    def test_missing_mode_fails_validation(self, test_client, analysis_service, make_engine) -> None:
        analysis_service(make_engine(response={}))

        response = test_client.post("/api/v1/analysis/", json={"document_ids": ["D1"]})

        assert response.status_code == 422


@pytest.mark.usefixtures("authenticated")
class TestSessionAndRemoteSetEndpoints:
    def test_unknown_session_is_not_found(self, test_client) -> None:
        session_service = MagicMock()
        session_service.get_session = AsyncMock(side_effect=NotFoundError("Session not found"))
        app.dependency_overrides[get_session_service] = lambda: session_service

        response = test_client.get("/api/v1/sessions/00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json()["detail"]["title"] == "Not Found"

    def test_remote_set_documents(self, test_client, provider) -> None:
        provider.add_document("S1", "D1", "ACME-invoice.pdf")
        app.dependency_overrides[get_provider_client] = lambda: provider

        response = test_client.get("/api/v1/remote-sets/S1/documents")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["remote_set_id"] == "S1"
        assert [doc["id"] for doc in data["documents"]] == ["D1"]

    def test_remote_set_documents_provider_down(self, test_client, provider) -> None:
        provider.unreachable = True
        app.dependency_overrides[get_provider_client] = lambda: provider

        response = test_client.get("/api/v1/remote-sets/S1/documents")

        assert response.status_code == 503


def test_root(test_client: TestClient) -> None:
    response = test_client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "Server is running"
