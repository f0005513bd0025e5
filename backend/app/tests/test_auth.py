"""Tests for /api/auth endpoints."""

from fastapi.testclient import TestClient

from app.tests.conftest import auth_headers, register_user


class TestRegister:
    def test_register_success(self, client: TestClient):
        resp = register_user(client)
        assert resp.status_code == 200
        data = resp.json()
        assert "access_token" in data
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "reader@example.com"
        assert data["user"]["role"] == "user"

    def test_register_lowercases_email(self, client: TestClient):
        resp = register_user(client, email="Reader@Example.COM")
        assert resp.status_code == 200
        assert resp.json()["user"]["email"] == "reader@example.com"

    def test_register_duplicate_email(self, client: TestClient):
        register_user(client)
        resp = register_user(client, email="READER@example.com")
        assert resp.status_code == 409

    def test_register_password_too_short(self, client: TestClient):
        resp = register_user(client, password="abc1")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid request data"

    def test_register_password_without_number(self, client: TestClient):
        resp = register_user(client, password="NoNumberHere")
        assert resp.status_code == 400

    def test_register_invalid_email(self, client: TestClient):
        resp = register_user(client, email="not-an-email")
        assert resp.status_code == 400
        assert resp.json()["errors"]

    def test_register_missing_name(self, client: TestClient):
        resp = client.post("/api/auth/register", json={"email": "a@example.com", "password": "Password1"})
        assert resp.status_code == 400


class TestLogin:
    def test_login_success(self, client: TestClient):
        register_user(client)
        resp = client.post("/api/auth/login", json={"email": "reader@example.com", "password": "Password1"})
        assert resp.status_code == 200
        assert "access_token" in resp.json()

    def test_login_is_case_insensitive_on_email(self, client: TestClient):
        register_user(client)
        resp = client.post("/api/auth/login", json={"email": " Reader@Example.com ", "password": "Password1"})
        assert resp.status_code == 200

    def test_login_wrong_password(self, client: TestClient):
        register_user(client)
        resp = client.post("/api/auth/login", json={"email": "reader@example.com", "password": "WrongPass1"})
        assert resp.status_code == 400

    def test_login_unknown_user(self, client: TestClient):
        resp = client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "Password1"})
        assert resp.status_code == 400

    def test_login_inactive_user(self, client: TestClient, db):
        from app.models.user import User

        register_user(client)
        db.query(User).update({"is_active": False})
        db.commit()
        resp = client.post("/api/auth/login", json={"email": "reader@example.com", "password": "Password1"})
        assert resp.status_code == 401


class TestGetMe:
    def test_get_me_success(self, client: TestClient):
        headers = auth_headers(client)
        resp = client.get("/api/auth/me", headers=headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == "reader@example.com"
        assert data["first_name"] == "Test"
        assert "hashed_password" not in data

    def test_get_me_no_token(self, client: TestClient):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401

    def test_get_me_bad_token(self, client: TestClient):
        resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
