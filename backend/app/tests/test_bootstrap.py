"""Startup seeding of the admin account and default genres."""

from app.config import settings
from app.models.genre import Genre
from app.models.user import User
from app.services import auth_service, bootstrap


class TestEnsureAdmin:
    def test_creates_admin_once(self, db):
        admin = bootstrap.ensure_admin(db, "Boss@Example.com", "Secret123")
        assert admin is not None
        assert admin.role == "admin"
        assert admin.email == "boss@example.com"
        assert auth_service.verify_password("Secret123", admin.hashed_password)

        assert bootstrap.ensure_admin(db, "boss@example.com", "Other1234") is None
        assert db.query(User).count() == 1


class TestSeedGenres:
    def test_seeds_empty_table(self, db):
        assert bootstrap.seed_genres(db) == len(bootstrap.DEFAULT_GENRES)
        names = {g.name for g in db.query(Genre).all()}
        assert {"Action", "Romance", "Slice of Life"} <= names

    def test_leaves_existing_genres_alone(self, db):
        db.add(Genre(name="Wuxia"))
        db.commit()
        assert bootstrap.seed_genres(db) == 0
        assert db.query(Genre).count() == 1


class TestRun:
    def test_run_respects_settings(self, db, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", "Secret123")
        monkeypatch.setattr(settings, "ADMIN_EMAIL", "root@example.com")
        monkeypatch.setattr(settings, "SEED_GENRES", False)
        bootstrap.run(db)

        assert db.query(User).filter(User.email == "root@example.com").one().role == "admin"
        assert db.query(Genre).count() == 0

    def test_run_without_admin_password(self, db, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")
        monkeypatch.setattr(settings, "SEED_GENRES", True)
        bootstrap.run(db)

        assert db.query(User).count() == 0
        assert db.query(Genre).count() == len(bootstrap.DEFAULT_GENRES)
