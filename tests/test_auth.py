"""Unit tests for AuthService and the bearer-token dependency."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from app.modules.auth import service as auth_service_module
from app.modules.auth.schemas import LoginRequest
from app.modules.auth.service import AuthService


@pytest.fixture(autouse=True)
def clear_token_cache():
    auth_service_module._AUTH_USER_CACHE.clear()
    yield
    auth_service_module._AUTH_USER_CACHE.clear()


def _supabase_user(user_id: str = "user-1"):
    return SimpleNamespace(id=user_id, email="owner@example.com", user_metadata={"full_name": "Owner"}, created_at="2024-01-01")


class TestGetCurrentUser:
    @pytest.mark.unit
    def test_resolves_and_caches_token(self):
        supabase = MagicMock()
        supabase.auth.get_user.return_value = SimpleNamespace(user=_supabase_user())
        service = AuthService(supabase)

        first = service.get_current_user("token-a")
        second = service.get_current_user("token-a")

        assert first == second
        assert first["id"] == "user-1"
        supabase.auth.get_user.assert_called_once_with(jwt="token-a")

    @pytest.mark.unit
    def test_expired_token(self):
        supabase = MagicMock()
        supabase.auth.get_user.side_effect = Exception("JWT expired")
        with pytest.raises(HTTPException) as exc:
            AuthService(supabase).get_current_user("old")
        assert exc.value.status_code == 401

    @pytest.mark.unit
    def test_logout_forgets_token(self):
        supabase = MagicMock()
        supabase.auth.get_user.return_value = SimpleNamespace(user=_supabase_user())
        service = AuthService(supabase)
        service.get_current_user("token-b")

        assert service.logout("token-b") is True
        service.get_current_user("token-b")
        assert supabase.auth.get_user.call_count == 2

    @pytest.mark.unit
    def test_describe_user(self):
        described = AuthService(MagicMock()).describe_user(
            {"id": "user-1", "email": "owner@example.com", "user_metadata": {"full_name": "Owner"}}
        )
        assert described.full_name == "Owner"


class TestLogin:
    @pytest.mark.unit
    def test_login_returns_token(self):
        supabase = MagicMock()
        supabase.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=_supabase_user(), session=SimpleNamespace(access_token="jwt")
        )
        token = AuthService(supabase).login(LoginRequest(email="owner@example.com", password="password1"))
        assert token.access_token == "jwt"
        assert token.user_id == "user-1"

    @pytest.mark.unit
    def test_bad_credentials(self):
        supabase = MagicMock()
        supabase.auth.sign_in_with_password.side_effect = Exception("Invalid login credentials")
        with pytest.raises(HTTPException) as exc:
            AuthService(supabase).login(LoginRequest(email="owner@example.com", password="nope"))
        assert exc.value.status_code == 401


class TestBearerDependency:
    @pytest.mark.unit
    def test_missing_token_is_rejected(self, fake_supabase):
        from fastapi.testclient import TestClient
        from app.database.supabase_client import get_supabase
        from app.main import app

        app.dependency_overrides[get_supabase] = lambda: fake_supabase
        try:
            response = TestClient(app).get("/api/v1/themes")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code in (401, 403)
