"""
Storage for per-user tracking rows: reading history and favorites.

Two implementations share the ``TrackingRepository`` interface:

  SqlTrackingRepository     production; rows live in the main database and
                            both tables carry a (user_id, story_id) unique
                            constraint.
  MemoryTrackingRepository  per-instance dicts, used by tests and by
                            TRACKING_BACKEND=memory deployments.

Both enforce the same invariant: at most one reading-history row and at most
one favorite row per (user_id, story_id).
"""

import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.favorite import Favorite
from app.models.reading_history import ReadingHistory
from app.services.errors import DuplicateFavoriteError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TrackingRepository(ABC):
    # ── Reading history ──────────────────────────────────────────────────────

    @abstractmethod
    def get_progress(self, user_id: int, story_id: int) -> ReadingHistory | None: ...

    @abstractmethod
    def upsert_progress(self, user_id: int, story_id: int, chapter_id: int) -> ReadingHistory:
        """Point the (user, story) row at *chapter_id*, creating it if needed."""

    @abstractmethod
    def delete_progress(self, user_id: int, story_id: int) -> bool: ...

    @abstractmethod
    def clear_progress(self, user_id: int) -> int:
        """Delete every history row for *user_id*; return how many went."""

    @abstractmethod
    def list_progress(self, user_id: int) -> list[ReadingHistory]:
        """Most recently read first."""

    # ── Favorites ────────────────────────────────────────────────────────────

    @abstractmethod
    def get_favorite(self, user_id: int, story_id: int) -> Favorite | None: ...

    @abstractmethod
    def add_favorite(self, user_id: int, story_id: int) -> Favorite:
        """Raises DuplicateFavoriteError if the pair is already a favorite."""

    @abstractmethod
    def remove_favorite(self, user_id: int, story_id: int) -> bool: ...

    @abstractmethod
    def list_favorites(self, user_id: int) -> list[Favorite]:
        """Most recently added first."""

    @abstractmethod
    def count_favorites(self, story_ids: list[int] | None = None) -> dict[int, int]:
        """Return {story_id: favorite_count}, restricted to *story_ids* when given."""


class SqlTrackingRepository(TrackingRepository):
    def __init__(self, db: Session):
        self.db = db

    def get_progress(self, user_id: int, story_id: int) -> ReadingHistory | None:
        return (
            self.db.query(ReadingHistory)
            .filter(ReadingHistory.user_id == user_id, ReadingHistory.story_id == story_id)
            .first()
        )

    def upsert_progress(self, user_id: int, story_id: int, chapter_id: int) -> ReadingHistory:
        history = self.get_progress(user_id, story_id)
        if history is None:
            history = ReadingHistory(
                user_id=user_id,
                story_id=story_id,
                chapter_id=chapter_id,
                last_read_at=_utcnow(),
            )
            self.db.add(history)
            try:
                self.db.commit()
            except IntegrityError:
                # A concurrent request inserted the row first; update theirs.
                self.db.rollback()
                history = self.get_progress(user_id, story_id)
                if history is None:
                    raise
                logger.info("reading history insert raced for user=%s story=%s", user_id, story_id)
                history.chapter_id = chapter_id
                history.last_read_at = _utcnow()
                self.db.commit()
        else:
            history.chapter_id = chapter_id
            history.last_read_at = _utcnow()
            self.db.commit()
        self.db.refresh(history)
        return history

    def delete_progress(self, user_id: int, story_id: int) -> bool:
        removed = (
            self.db.query(ReadingHistory)
            .filter(ReadingHistory.user_id == user_id, ReadingHistory.story_id == story_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return removed > 0

    def clear_progress(self, user_id: int) -> int:
        removed = (
            self.db.query(ReadingHistory)
            .filter(ReadingHistory.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return removed

    def list_progress(self, user_id: int) -> list[ReadingHistory]:
        return (
            self.db.query(ReadingHistory)
            .filter(ReadingHistory.user_id == user_id)
            .order_by(ReadingHistory.last_read_at.desc(), ReadingHistory.id.desc())
            .all()
        )

    def get_favorite(self, user_id: int, story_id: int) -> Favorite | None:
        return self.db.query(Favorite).filter(Favorite.user_id == user_id, Favorite.story_id == story_id).first()

    def add_favorite(self, user_id: int, story_id: int) -> Favorite:
        if self.get_favorite(user_id, story_id) is not None:
            raise DuplicateFavoriteError(user_id, story_id)

        favorite = Favorite(user_id=user_id, story_id=story_id, created_at=_utcnow())
        self.db.add(favorite)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            if self.get_favorite(user_id, story_id) is not None:
                raise DuplicateFavoriteError(user_id, story_id) from exc
            raise
        self.db.refresh(favorite)
        return favorite

    def remove_favorite(self, user_id: int, story_id: int) -> bool:
        removed = (
            self.db.query(Favorite)
            .filter(Favorite.user_id == user_id, Favorite.story_id == story_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return removed > 0

    def list_favorites(self, user_id: int) -> list[Favorite]:
        return (
            self.db.query(Favorite)
            .filter(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .all()
        )

    def count_favorites(self, story_ids: list[int] | None = None) -> dict[int, int]:
        query = self.db.query(Favorite.story_id, func.count(Favorite.id).label("cnt"))
        if story_ids is not None:
            if not story_ids:
                return {}
            query = query.filter(Favorite.story_id.in_(story_ids))
        rows = query.group_by(Favorite.story_id).all()
        return {row.story_id: row.cnt for row in rows}


class MemoryTrackingRepository(TrackingRepository):
    """Dict-backed repository. Each instance is an isolated store.

    Returned rows are transient ORM instances, never attached to a session,
    so callers can serialize them exactly like SQL-backed rows.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._history: dict[tuple[int, int], ReadingHistory] = {}
        self._favorites: dict[tuple[int, int], Favorite] = {}
        self._history_seq = 0
        self._favorite_seq = 0

    def get_progress(self, user_id: int, story_id: int) -> ReadingHistory | None:
        return self._history.get((user_id, story_id))

    def upsert_progress(self, user_id: int, story_id: int, chapter_id: int) -> ReadingHistory:
        with self._lock:
            history = self._history.get((user_id, story_id))
            if history is None:
                self._history_seq += 1
                history = ReadingHistory(
                    id=self._history_seq,
                    user_id=user_id,
                    story_id=story_id,
                    chapter_id=chapter_id,
                    last_read_at=_utcnow(),
                )
                self._history[(user_id, story_id)] = history
            else:
                history.chapter_id = chapter_id
                history.last_read_at = _utcnow()
            return history

    def delete_progress(self, user_id: int, story_id: int) -> bool:
        with self._lock:
            return self._history.pop((user_id, story_id), None) is not None

    def clear_progress(self, user_id: int) -> int:
        with self._lock:
            keys = [key for key in self._history if key[0] == user_id]
            for key in keys:
                del self._history[key]
            return len(keys)

    def list_progress(self, user_id: int) -> list[ReadingHistory]:
        rows = [h for (uid, _), h in self._history.items() if uid == user_id]
        return sorted(rows, key=lambda h: (h.last_read_at, h.id), reverse=True)

    def get_favorite(self, user_id: int, story_id: int) -> Favorite | None:
        return self._favorites.get((user_id, story_id))

    def add_favorite(self, user_id: int, story_id: int) -> Favorite:
        with self._lock:
            if (user_id, story_id) in self._favorites:
                raise DuplicateFavoriteError(user_id, story_id)
            self._favorite_seq += 1
            favorite = Favorite(
                id=self._favorite_seq,
                user_id=user_id,
                story_id=story_id,
                created_at=_utcnow(),
            )
            self._favorites[(user_id, story_id)] = favorite
            return favorite

    def remove_favorite(self, user_id: int, story_id: int) -> bool:
        with self._lock:
            return self._favorites.pop((user_id, story_id), None) is not None

    def list_favorites(self, user_id: int) -> list[Favorite]:
        rows = [f for (uid, _), f in self._favorites.items() if uid == user_id]
        return sorted(rows, key=lambda f: (f.created_at, f.id), reverse=True)

    def count_favorites(self, story_ids: list[int] | None = None) -> dict[int, int]:
        counts: dict[int, int] = {}
        for _, story_id in self._favorites:
            if story_ids is None or story_id in story_ids:
                counts[story_id] = counts.get(story_id, 0) + 1
        return counts
