"""
Pytest fixtures shared across all test modules.
Uses an in-memory SQLite database with StaticPool so all connections
share a single in-memory DB — no real Postgres required for tests.
"""

import os
import tempfile

# Set env vars BEFORE any app module is imported
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-min-32-chars-long!!"
os.environ["ALGORITHM"] = "HS256"
os.environ["TRACKING_BACKEND"] = "sql"
os.environ["ADMIN_PASSWORD"] = ""
os.environ["SEED_GENRES"] = "false"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="goctruyen-uploads-")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Import app modules AFTER env vars are set
from app.database import Base, get_db  # noqa: E402
from app.main import app  # noqa: E402
from app.models.chapter import Chapter  # noqa: E402
from app.models.genre import Genre  # noqa: E402
from app.models.story import Story, StoryGenre  # noqa: E402
from app.models.user import ROLE_ADMIN, User  # noqa: E402

# Single shared in-memory SQLite engine — StaticPool ensures all
# connections share the same DB instance.
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_db():
    """Create tables before each test, drop after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def register_user(
    client: TestClient,
    email="reader@example.com",
    password="Password1",
    first_name="Test",
    last_name="Reader",
):
    return client.post(
        "/api/auth/register",
        json={"first_name": first_name, "last_name": last_name, "email": email, "password": password},
    )


def auth_headers(client: TestClient, email="reader@example.com", password="Password1", **kwargs):
    resp = register_user(client, email=email, password=password, **kwargs)
    assert resp.status_code == 200, f"Registration failed: {resp.json()}"
    token = resp.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def admin_headers(client: TestClient, db: Session, email="admin@example.com", password="Password1"):
    """Register a user and promote it to admin directly in the database."""
    headers = auth_headers(client, email=email, password=password, first_name="Site", last_name="Admin")
    db.query(User).filter(User.email == email).update({"role": ROLE_ADMIN})
    db.commit()
    return headers


def make_story(db: Session, title="The Long Road", genres: list[Genre] | None = None, **kwargs) -> Story:
    story = Story(title=title, **kwargs)
    db.add(story)
    db.flush()
    for genre in genres or []:
        db.add(StoryGenre(story_id=story.id, genre_id=genre.id))
    db.commit()
    db.refresh(story)
    return story


def make_chapter(
    db: Session,
    story: Story,
    number: int,
    chapter_type="novel",
    content="Once upon a time.",
    images: list[str] | None = None,
) -> Chapter:
    chapter = Chapter(
        story_id=story.id,
        title=f"Chapter {number}",
        chapter_number=number,
        chapter_type=chapter_type,
        content=content,
        images=images or [],
    )
    db.add(chapter)
    db.commit()
    db.refresh(chapter)
    return chapter


def make_genre(db: Session, name="Fantasy") -> Genre:
    genre = Genre(name=name)
    db.add(genre)
    db.commit()
    db.refresh(genre)
    return genre


def user_id(db: Session, email="reader@example.com") -> int:
    return db.query(User.id).filter(User.email == email).scalar()
