"""Integration tests for registration, login and the health endpoints."""

import pytest
from fastapi.testclient import TestClient

from src.userhub.core import messages

REGISTRATION = {
    "first_name": "Ann",
    "last_name": "Lee",
    "email": "ann@x.io",
    "password": "secret-pw",
}


def _login(client: TestClient, email: str = "ann@x.io", password: str = "secret-pw"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


class TestRegister:
    def test_register(self, client: TestClient):
        response = client.post("/api/auth/register", json=REGISTRATION)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == messages.USER_REGISTERED
        assert body["data"] == {"user_id": body["id"]}

    def test_register_ignores_role(self, client: TestClient):
        client.post("/api/auth/register", json={**REGISTRATION, "role": 2})

        auth = _login(client).json()["data"]
        assert auth["role"] == 1

    def test_register_duplicate(self, client: TestClient):
        client.post("/api/auth/register", json=REGISTRATION)

        response = client.post(
            "/api/auth/register", json={**REGISTRATION, "email": "ANN@x.io"}
        )

        assert response.status_code == 409
        assert response.json()["message"] == messages.EMAIL_ALREADY_EXISTS

    def test_register_invalid(self, client: TestClient):
        response = client.post(
            "/api/auth/register", json={**REGISTRATION, "email": "nope"}
        )

        assert response.status_code == 422


class TestLogin:
    """Test password login and token use."""

    def test_login_and_myinfo(self, client: TestClient):
        user_id = client.post("/api/auth/register", json=REGISTRATION).json()["id"]

        response = _login(client, email="Ann@X.io")

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == messages.LOGIN_SUCCESSFUL
        auth = body["data"]
        assert auth["user_id"] == user_id
        assert auth["full_name"] == "Ann Lee"

        me = client.get(
            "/api/auth/myinfo", headers={"Authorization": f"Bearer {auth['token']}"}
        )
        assert me.status_code == 200
        assert me.json()["data"] == {"user_id": user_id, "full_name": "Ann Lee", "role": 1}

    @pytest.mark.parametrize(
        ("email", "password"),
        [("ann@x.io", "wrong-password"), ("ghost@x.io", "secret-pw")],
    )
    def test_bad_credentials(self, client: TestClient, email: str, password: str):
        client.post("/api/auth/register", json=REGISTRATION)

        response = _login(client, email, password)

        assert response.status_code == 401
        assert response.json()["message"] == messages.INVALID_CREDENTIALS

    def test_deleted_user_cannot_login(self, client: TestClient, admin_headers):
        user_id = client.post("/api/auth/register", json=REGISTRATION).json()["id"]
        client.delete(f"/api/user/{user_id}", headers=admin_headers)

        assert _login(client).status_code == 401

    def test_login_token_is_not_admin(self, client: TestClient):
        client.post("/api/auth/register", json=REGISTRATION)
        token = _login(client).json()["data"]["token"]

        response = client.get("/api/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403

    def test_myinfo_requires_token(self, client: TestClient):
        response = client.get("/api/auth/myinfo")

        assert response.status_code == 401


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "userhub"}

    def test_ready(self, client: TestClient):
        response = client.get("/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"] == {"status": "healthy", "type": "sqlite"}
        assert body["checks"]["cache"]["status"] == "healthy"
