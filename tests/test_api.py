"""
Tests for the HTTP surface.

Every gated route answers 401 without a verified identity, scopes store
paths by the verified uid, and collapses collaborator failures to a bare
500.
"""

import logging

import pytest
from fastapi.testclient import TestClient

from tapvote.api.app import create_app

from conftest import FailingStore


GATED_ROUTES = [
    ("GET", "/api/v1/questionnaires"),
    ("GET", "/api/v1/questionnaires/q1"),
    ("POST", "/api/v1/questionnaires"),
    ("POST", "/api/v1/questionnaires2"),
    ("PUT", "/api/v1/questionnaires/q1"),
    ("DELETE", "/api/v1/questionnaires/q1"),
    ("PUT", "/api/v1/questionnaires/list/q1"),
    ("DELETE", "/api/v1/questionnaires/unlist/q1"),
]


# =============================================================================
# Public Routes
# =============================================================================


class TestPublicRoutes:
    def test_welcome(self, client):
        resp = client.get("/api/v1/welcome")
        assert resp.status_code == 200
        assert resp.json() == {"message": "hello"}

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"

    def test_missing_published_questionnaire_is_null(self, client, verifier):
        resp = client.get("/api/v1/questionnaires/published/nope")
        assert resp.status_code == 200
        assert resp.json() is None
        assert verifier.calls == []


# =============================================================================
# Authentication
# =============================================================================


class TestAuthentication:
    @pytest.mark.parametrize("method,path", GATED_ROUTES)
    def test_missing_header_is_401_without_store_access(self, client, store, verifier, method, path):
        resp = client.request(method, path, json={"name": "x"})
        
        assert resp.status_code == 401
        assert resp.content == b""
        assert store.operations == []
        assert verifier.calls == []

    @pytest.mark.parametrize("method,path", GATED_ROUTES)
    def test_unverifiable_token_is_401(self, client, store, method, path):
        resp = client.request(method, path, json={"name": "x"}, headers={"Authorization": "Bearer forged"})
        
        assert resp.status_code == 401
        assert store.operations == []

    def test_header_without_token_is_401(self, client, verifier):
        resp = client.get("/api/v1/questionnaires", headers={"Authorization": "Bearer"})
        assert resp.status_code == 401
        assert verifier.calls == []

    def test_scheme_is_not_checked(self, client):
        resp = client.get("/api/v1/questionnaires", headers={"Authorization": "Token token-alice"})
        assert resp.status_code == 200

    def test_paths_scoped_by_verified_subject(self, client, store, alice):
        client.get("/api/v1/questionnaires/q1", headers=alice)
        assert store.operations == [("read", "/questionnaires/alice/q1")]

    def test_every_request_is_verified(self, client, verifier, alice):
        client.get("/api/v1/questionnaires", headers=alice)
        client.get("/api/v1/questionnaires", headers=alice)
        assert verifier.calls == ["token-alice", "token-alice"]


# =============================================================================
# Owner's Questionnaires
# =============================================================================


class TestQuestionnaires:
    def test_create_then_get_round_trip(self, client, alice, questionnaire):
        resp = client.post("/api/v1/questionnaires", json=questionnaire, headers=alice)
        assert resp.status_code == 200
        key = resp.json()["key"]
        
        fetched = client.get(f"/api/v1/questionnaires/{key}", headers=alice)
        assert fetched.status_code == 200
        assert fetched.json() == questionnaire

    def test_create_with_id_round_trip(self, client, store, alice, questionnaire):
        resp = client.post("/api/v1/questionnaires2", json=questionnaire, headers=alice)
        assert resp.status_code == 200
        questionnaire_id = resp.json()["id"]
        
        fetched = client.get(f"/api/v1/questionnaires/{questionnaire_id}", headers=alice).json()
        assert fetched == {**questionnaire, "id": questionnaire_id}
        assert store.operations[0] == ("write", f"/questionnaires/alice/{questionnaire_id}")

    def test_create_with_id_assigns_fresh_ids(self, client, alice, questionnaire):
        first = client.post("/api/v1/questionnaires2", json=questionnaire, headers=alice).json()["id"]
        second = client.post("/api/v1/questionnaires2", json=questionnaire, headers=alice).json()["id"]
        assert first != second

    def test_list_mine_keyed_by_id(self, client, alice, questionnaire):
        key = client.post("/api/v1/questionnaires", json=questionnaire, headers=alice).json()["key"]
        
        resp = client.get("/api/v1/questionnaires", headers=alice)
        assert resp.json() == {key: questionnaire}

    def test_list_mine_empty_is_null(self, client, alice):
        resp = client.get("/api/v1/questionnaires", headers=alice)
        assert resp.status_code == 200
        assert resp.json() is None

    def test_users_do_not_see_each_other(self, client, alice, bob, questionnaire):
        key = client.post("/api/v1/questionnaires", json=questionnaire, headers=alice).json()["key"]
        
        assert client.get(f"/api/v1/questionnaires/{key}", headers=bob).json() is None
        assert client.get("/api/v1/questionnaires", headers=bob).json() is None

    def test_update_overwrites(self, client, alice, questionnaire):
        key = client.post("/api/v1/questionnaires", json=questionnaire, headers=alice).json()["key"]
        updated = {**questionnaire, "name": "Renamed"}
        
        resp = client.put(f"/api/v1/questionnaires/{key}", json=updated, headers=alice)
        assert resp.status_code == 200
        assert resp.content == b""
        assert resp.headers["content-type"] == "application/json"
        
        assert client.get(f"/api/v1/questionnaires/{key}", headers=alice).json() == updated

    def test_bodies_are_not_validated(self, client, alice):
        resp = client.put("/api/v1/questionnaires/odd", json={"anything": [1, 2]}, headers=alice)
        assert resp.status_code == 200
        assert client.get("/api/v1/questionnaires/odd", headers=alice).json() == {"anything": [1, 2]}

    def test_delete_removes(self, client, alice, questionnaire):
        key = client.post("/api/v1/questionnaires", json=questionnaire, headers=alice).json()["key"]
        
        resp = client.delete(f"/api/v1/questionnaires/{key}", headers=alice)
        assert resp.status_code == 200
        assert client.get(f"/api/v1/questionnaires/{key}", headers=alice).json() is None


# =============================================================================
# Publishing
# =============================================================================


class TestPublishing:
    def test_publish_then_read_without_auth(self, client, alice, questionnaire):
        resp = client.put("/api/v1/questionnaires/list/q1", json=questionnaire, headers=alice)
        assert resp.status_code == 200
        
        published = client.get("/api/v1/questionnaires/published/q1")
        assert published.status_code == 200
        assert published.json() == questionnaire

    def test_delete_keeps_published_copy(self, client, alice, questionnaire):
        client.put("/api/v1/questionnaires/q1", json=questionnaire, headers=alice)
        client.put("/api/v1/questionnaires/list/q1", json=questionnaire, headers=alice)
        
        client.delete("/api/v1/questionnaires/q1", headers=alice)
        
        assert client.get("/api/v1/questionnaires/q1", headers=alice).json() is None
        assert client.get("/api/v1/questionnaires/published/q1").json() == questionnaire

    def test_unlist_keeps_private_copy(self, client, alice, questionnaire):
        client.put("/api/v1/questionnaires/q1", json=questionnaire, headers=alice)
        client.put("/api/v1/questionnaires/list/q1", json=questionnaire, headers=alice)
        
        resp = client.delete("/api/v1/questionnaires/unlist/q1", headers=alice)
        assert resp.status_code == 200
        
        assert client.get("/api/v1/questionnaires/published/q1").json() is None
        assert client.get("/api/v1/questionnaires/q1", headers=alice).json() == questionnaire

    def test_publish_is_not_owner_checked(self, client, alice, bob, questionnaire):
        client.put("/api/v1/questionnaires/list/q1", json=questionnaire, headers=alice)
        
        resp = client.delete("/api/v1/questionnaires/unlist/q1", headers=bob)
        assert resp.status_code == 200
        assert client.get("/api/v1/questionnaires/published/q1").json() is None


# =============================================================================
# Collaborator Failures
# =============================================================================


class TestFailures:
    @pytest.fixture
    def failing_client(self, verifier, settings):
        return TestClient(create_app(verifier=verifier, store=FailingStore(), settings=settings))

    @pytest.mark.parametrize("method,path", GATED_ROUTES)
    def test_store_failure_is_bare_500(self, failing_client, alice, method, path):
        resp = failing_client.request(method, path, json={"name": "x"}, headers=alice)
        
        assert resp.status_code == 500
        assert resp.content == b""

    def test_public_read_failure_is_500(self, failing_client):
        resp = failing_client.get("/api/v1/questionnaires/published/q1")
        assert resp.status_code == 500
        assert resp.content == b""

    def test_malformed_body_is_500(self, client, store, alice):
        resp = client.post(
            "/api/v1/questionnaires",
            content=b"{not json",
            headers={**alice, "Content-Type": "application/json"},
        )
        assert resp.status_code == 500
        assert store.operations == []

    def test_failure_logged_once(self, failing_client, alice, caplog):
        with caplog.at_level(logging.INFO):
            failing_client.get("/api/v1/questionnaires", headers=alice)
        
        errors = [record for record in caplog.records if record.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert "operation=list_mine" in errors[0].getMessage()
