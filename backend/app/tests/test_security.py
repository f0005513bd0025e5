"""Token handling and authorization boundaries."""

from datetime import timedelta

from fastapi.testclient import TestClient
from jose import jwt

from app.config import settings
from app.models.user import User
from app.services import auth_service
from app.tests.conftest import admin_headers, auth_headers, make_story, user_id


class TestTokens:
    def test_expired_token_rejected(self, client: TestClient, db):
        auth_headers(client)
        user = db.query(User).first()
        token = auth_service.create_access_token(user, expires_delta=timedelta(minutes=-1))
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_token_signed_with_other_key_rejected(self, client: TestClient, db):
        auth_headers(client)
        token = jwt.encode({"sub": str(user_id(db))}, "some-other-secret-key", algorithm="HS256")
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_token_with_non_numeric_subject_rejected(self, client: TestClient):
        token = jwt.encode({"sub": "reader"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_token_for_deactivated_user_rejected(self, client: TestClient, db):
        headers = auth_headers(client)
        db.query(User).update({"is_active": False})
        db.commit()
        resp = client.get("/api/auth/me", headers=headers)
        assert resp.status_code == 401

    def test_role_is_read_from_database_not_token(self, client: TestClient, db):
        headers = admin_headers(client, db)
        assert client.get("/api/admin/stats", headers=headers).status_code == 200

        db.query(User).update({"role": "user"})
        db.commit()
        assert client.get("/api/admin/stats", headers=headers).status_code == 403


class TestAuthorization:
    def test_admin_routes_require_admin(self, client: TestClient):
        headers = auth_headers(client)
        resp = client.get("/api/admin/users", headers=headers)
        assert resp.status_code == 403

    def test_admin_routes_require_login(self, client: TestClient):
        assert client.get("/api/admin/stats").status_code == 401

    def test_tracking_routes_require_login(self, client: TestClient):
        assert client.get("/api/favorites").status_code == 401
        assert client.get("/api/reading-history").status_code == 401
        assert client.post("/api/comments", json={"story_id": 1, "content": "hi"}).status_code == 401

    def test_cannot_delete_someone_elses_comment(self, client: TestClient, db):
        story = make_story(db)
        owner = auth_headers(client, email="owner@example.com")
        other = auth_headers(client, email="other@example.com")
        comment = client.post("/api/comments", json={"story_id": story.id, "content": "Mine"}, headers=owner).json()

        resp = client.delete(f"/api/comments/{comment['id']}", headers=other)
        assert resp.status_code == 403

    def test_admin_can_delete_any_comment(self, client: TestClient, db):
        story = make_story(db)
        owner = auth_headers(client, email="owner@example.com")
        admin = admin_headers(client, db)
        comment = client.post("/api/comments", json={"story_id": story.id, "content": "Spam"}, headers=owner).json()

        resp = client.delete(f"/api/comments/{comment['id']}", headers=admin)
        assert resp.status_code == 200

    def test_cannot_view_other_profile(self, client: TestClient, db):
        auth_headers(client, email="first@example.com")
        headers = auth_headers(client, email="second@example.com")
        first_id = user_id(db, "first@example.com")
        assert client.get(f"/api/users/{first_id}", headers=headers).status_code == 403
        assert client.patch(f"/api/users/{first_id}", json={"first_name": "X"}, headers=headers).status_code == 403
