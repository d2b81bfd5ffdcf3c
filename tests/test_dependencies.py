"""
tests/test_dependencies.py -- FastAPI dependency helpers in auth/dependencies.py.

A throwaway app with one protected and one optional-auth route exercises the
helpers through the real ASGI stack:
  - Bearer and X-Auth-Token headers are both accepted
  - missing, unknown, expired and revoked tokens -> 401 with the AUTH_REQUIRED body
  - store outage -> 503
  - try_get_current_user() never raises
"""

from __future__ import annotations

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from auth.dependencies import get_current_user, try_get_current_user
from auth.sessions import SessionManager
from auth.verifier import StaticCredentialVerifier
from tests.conftest import CREDENTIALS, BrokenStore, FakeClock

AUTH_REQUIRED_BODY = {"detail": {"success": False, "error": "AUTH_REQUIRED", "authRequired": True}}


def _make_app(manager: SessionManager) -> FastAPI:
    app = FastAPI()
    app.state.session_manager = manager

    @app.get("/protected")
    def protected(user: str = Depends(get_current_user)) -> dict:
        return {"user": user}

    @app.get("/optional")
    def optional(user: str | None = Depends(try_get_current_user)) -> dict:
        return {"user": user}

    return app


@pytest.fixture
def client(manager: SessionManager) -> TestClient:
    return TestClient(_make_app(manager))


class TestGetCurrentUser:
    def test_bearer_token(self, client: TestClient, manager: SessionManager) -> None:
        token = manager.login("kyle", "CMF2025").token
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json() == {"user": "kyle"}

    def test_x_auth_token_header(self, client: TestClient, manager: SessionManager) -> None:
        token = manager.login("admin", "admin123").token
        resp = client.get("/protected", headers={"X-Auth-Token": token})
        assert resp.status_code == 200
        assert resp.json() == {"user": "admin"}

    def test_no_token(self, client: TestClient) -> None:
        resp = client.get("/protected")
        assert resp.status_code == 401
        assert resp.json() == AUTH_REQUIRED_BODY

    def test_unknown_token(self, client: TestClient) -> None:
        resp = client.get("/protected", headers={"Authorization": "Bearer never-issued"})
        assert resp.status_code == 401
        assert resp.json() == AUTH_REQUIRED_BODY

    def test_expired_token(self, client: TestClient, manager: SessionManager, clock: FakeClock) -> None:
        token = manager.login("kyle", "CMF2025").token
        clock.advance(manager.ttl_seconds)
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401
        assert resp.json() == AUTH_REQUIRED_BODY

    def test_revoked_token(self, client: TestClient, manager: SessionManager) -> None:
        token = manager.login("kyle", "CMF2025").token
        manager.logout(token)
        resp = client.get("/protected", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_store_outage_is_503(self) -> None:
        broken = SessionManager(StaticCredentialVerifier(CREDENTIALS), BrokenStore())
        resp = TestClient(_make_app(broken)).get("/protected", headers={"X-Auth-Token": "abc"})
        assert resp.status_code == 503
        assert resp.json() == {"detail": {"success": False, "error": "Session store unavailable."}}


class TestTryGetCurrentUser:
    def test_anonymous(self, client: TestClient) -> None:
        resp = client.get("/optional")
        assert resp.status_code == 200
        assert resp.json() == {"user": None}

    def test_authenticated(self, client: TestClient, manager: SessionManager) -> None:
        token = manager.login("kyle", "CMF2025").token
        resp = client.get("/optional", headers={"Authorization": f"Bearer {token}"})
        assert resp.json() == {"user": "kyle"}
