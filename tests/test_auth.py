"""Registration, login and bearer-token API tests."""

from datetime import timedelta
from uuid import uuid4

import pytest

from paytrack.core.errors import AuthenticationError, ConflictError
from paytrack.core.security import create_access_token
from paytrack.services.auth_service import AuthService
from tests.conftest import STAFF_PASSWORD


class TestAuthService:
    def test_register_lowercases_email(self, db_session):
        token, user = AuthService(db_session).register("Sam", "Sam@Acme.IO", "pw123456")
        assert token
        assert user.email == "sam@acme.io"
        assert user.password_hash != "pw123456"

    def test_register_duplicate_email_case_insensitive(self, db_session):
        service = AuthService(db_session)
        service.register("Sam", "sam@acme.io", "pw123456")
        with pytest.raises(ConflictError):
            service.register("Sam Again", "SAM@acme.io", "pw123456")

    def test_login_wrong_password(self, db_session, staff_user):
        with pytest.raises(AuthenticationError):
            AuthService(db_session).login(staff_user.email, "nope")

    def test_login_unknown_email(self, db_session):
        with pytest.raises(AuthenticationError):
            AuthService(db_session).login("ghost@acme.io", "whatever")


class TestAuthAPI:
    def test_register(self, client):
        response = client.post(
            "/api/auth/register",
            json={"name": "Sam", "email": "Sam@Acme.io", "password": "pw123456"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["token"]
        assert body["data"]["user"]["email"] == "sam@acme.io"
        assert body["data"]["user"]["role"] == "USER"
        assert "passwordHash" not in body["data"]["user"]

    def test_register_twice_conflicts(self, client):
        payload = {"name": "Sam", "email": "sam@acme.io", "password": "pw123456"}
        assert client.post("/api/auth/register", json=payload).status_code == 201

        payload["email"] = "SAM@ACME.IO"
        response = client.post("/api/auth/register", json=payload)
        assert response.status_code == 409
        assert response.json()["error"]["type"] == "CONFLICT_ERROR"

    def test_register_validation_error(self, client):
        response = client.post("/api/auth/register", json={"name": "Sam", "email": "nope"})
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"]["type"] == "VALIDATION_ERROR"
        assert body["error"]["details"]

    def test_login(self, client, staff_user):
        response = client.post(
            "/api/auth/login",
            json={"email": "DANA@acme.io", "password": STAFF_PASSWORD},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["user"]["id"] == str(staff_user.id)
        assert data["token"]

    def test_login_bad_password(self, client, staff_user):
        response = client.post(
            "/api/auth/login",
            json={"email": staff_user.email, "password": "wrong-password"},
        )
        assert response.status_code == 401
        assert response.json()["error"]["type"] == "AUTHENTICATION_ERROR"

    def test_login_token_authorizes_requests(self, client, staff_user):
        token = client.post(
            "/api/auth/login",
            json={"email": staff_user.email, "password": STAFF_PASSWORD},
        ).json()["data"]["token"]
        response = client.get(
            "/api/notifications", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 200


class TestBearerAuthentication:
    def test_missing_token(self, client):
        response = client.get("/api/customers/search")
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "No token provided"

    def test_malformed_header(self, client):
        response = client.get("/api/customers/search", headers={"Authorization": "Token abc"})
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "No token provided"

    def test_invalid_token(self, client):
        response = client.get(
            "/api/customers/search", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"

    def test_expired_token(self, client):
        token = create_access_token(
            str(uuid4()), "dana@acme.io", "USER", expires_delta=timedelta(minutes=-5)
        )
        response = client.get(
            "/api/customers/search", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Token has expired"

    def test_non_uuid_subject_rejected(self, client):
        token = create_access_token("not-a-uuid", "dana@acme.io", "USER")
        response = client.get(
            "/api/customers/search", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid token"
