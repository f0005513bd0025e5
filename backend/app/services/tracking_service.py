"""
Reading progress and favorites.

Thin orchestration over a TrackingRepository: the repository owns the
one-row-per-(user, story) guarantee, this module owns logging and the
joined views the profile pages render.
"""

import logging

from sqlalchemy.orm import Session

from app.models.chapter import Chapter
from app.models.favorite import Favorite
from app.models.reading_history import ReadingHistory
from app.models.story import Story
from app.repositories.tracking import TrackingRepository

logger = logging.getLogger(__name__)


# ── Reading history ───────────────────────────────────────────────────────────


def record_progress(repo: TrackingRepository, user_id: int, story_id: int, chapter_id: int) -> ReadingHistory:
    history = repo.upsert_progress(user_id, story_id, chapter_id)
    logger.debug("progress user=%s story=%s chapter=%s", user_id, story_id, chapter_id)
    return history


def delete_progress(repo: TrackingRepository, user_id: int, story_id: int) -> bool:
    return repo.delete_progress(user_id, story_id)


def clear_progress(repo: TrackingRepository, user_id: int) -> int:
    removed = repo.clear_progress(user_id)
    logger.info("Cleared %d reading history entries for user %s", removed, user_id)
    return removed


def reading_history_view(repo: TrackingRepository, db: Session, user_id: int) -> list[dict]:
    """Return [{story, chapter, history}] newest first.

    Rows whose story or chapter no longer exists are left out, matching an
    inner join against the catalog tables.
    """
    histories = repo.list_progress(user_id)
    stories = _by_id(db, Story, {h.story_id for h in histories})
    chapters = _by_id(db, Chapter, {h.chapter_id for h in histories})

    entries = []
    for history in histories:
        story = stories.get(history.story_id)
        chapter = chapters.get(history.chapter_id)
        if story is None or chapter is None:
            continue
        entries.append({"story": story, "chapter": chapter, "history": history})
    return entries


# ── Favorites ─────────────────────────────────────────────────────────────────


def add_favorite(repo: TrackingRepository, user_id: int, story_id: int) -> Favorite:
    favorite = repo.add_favorite(user_id, story_id)
    logger.debug("favorite added user=%s story=%s", user_id, story_id)
    return favorite


def remove_favorite(repo: TrackingRepository, user_id: int, story_id: int) -> bool:
    """Returns False when the pair was not a favorite; that is not an error."""
    return repo.remove_favorite(user_id, story_id)


def is_favorite(repo: TrackingRepository, user_id: int, story_id: int) -> bool:
    return repo.get_favorite(user_id, story_id) is not None


def favorites_view(repo: TrackingRepository, db: Session, user_id: int) -> list[dict]:
    """Return [{story, favorite}] newest first, skipping deleted stories."""
    favorites = repo.list_favorites(user_id)
    stories = _by_id(db, Story, {f.story_id for f in favorites})
    return [
        {"story": stories[f.story_id], "favorite": f}
        for f in favorites
        if f.story_id in stories
    ]


def _by_id(db: Session, model, ids: set[int]) -> dict:
    if not ids:
        return {}
    return {row.id: row for row in db.query(model).filter(model.id.in_(ids)).all()}
