"""
Startup seeding: the first admin account and the default genre list.

Both steps are idempotent and safe to run on every boot.
"""

import logging

from sqlalchemy.orm import Session

from app.config import settings
from app.models.genre import Genre
from app.models.user import ROLE_ADMIN, User
from app.services import auth_service

logger = logging.getLogger(__name__)

DEFAULT_GENRES = [
    ("Action", "Stories with fighting, violence, and physical feats"),
    ("Adventure", "Stories focused on journey and exploration"),
    ("Comedy", "Humorous stories designed to make you laugh"),
    ("Drama", "Stories with serious tone and emotional conflicts"),
    ("Fantasy", "Stories set in magical or supernatural worlds"),
    ("Horror", "Stories designed to frighten or disturb"),
    ("Mystery", "Stories involving a puzzle or crime to be solved"),
    ("Romance", "Stories centered around love relationships"),
    ("Sci-Fi", "Stories based on scientific or technological innovations"),
    ("Slice of Life", "Stories depicting everyday experiences"),
]


def ensure_admin(db: Session, email: str, password: str) -> User | None:
    """Create the admin account unless a user with *email* already exists.

    Returns the new user, or None when nothing was created.
    """
    email = email.lower()
    if db.query(User).filter(User.email == email).first():
        logger.info("Admin user already exists, skipping initialization")
        return None

    admin = User(
        first_name="Admin",
        last_name="User",
        email=email,
        hashed_password=auth_service.hash_password(password),
        role=ROLE_ADMIN,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Admin user created with id %s", admin.id)
    return admin


def seed_genres(db: Session) -> int:
    """Insert the default genres when the table is empty. Returns rows added."""
    if db.query(Genre.id).first() is not None:
        return 0

    for name, description in DEFAULT_GENRES:
        db.add(Genre(name=name, description=description))
    db.commit()
    logger.info("Seeded %d default genres", len(DEFAULT_GENRES))
    return len(DEFAULT_GENRES)


def run(db: Session) -> None:
    if settings.ADMIN_PASSWORD:
        ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
    if settings.SEED_GENRES:
        seed_genres(db)
