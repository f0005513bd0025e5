"""Both TrackingRepository implementations must behave identically."""

import pytest

from app.models.favorite import Favorite
from app.models.reading_history import ReadingHistory
from app.repositories.tracking import MemoryTrackingRepository, SqlTrackingRepository
from app.services import tracking_service
from app.services.errors import DuplicateFavoriteError


@pytest.fixture(params=["sql", "memory"])
def repo(request, db):
    if request.param == "sql":
        return SqlTrackingRepository(db)
    return MemoryTrackingRepository()


class TestProgress:
    def test_upsert_keeps_one_row_per_story(self, repo):
        for chapter_id in (1, 2, 3, 4, 5):
            repo.upsert_progress(user_id=1, story_id=10, chapter_id=chapter_id)

        rows = repo.list_progress(1)
        assert len(rows) == 1
        assert rows[0].chapter_id == 5

    def test_upsert_returns_same_row(self, repo):
        first = repo.upsert_progress(1, 10, 100)
        second = repo.upsert_progress(1, 10, 101)
        assert first.id == second.id
        assert second.chapter_id == 101

    def test_switching_stories_keeps_both(self, repo):
        repo.upsert_progress(1, 10, 100)
        repo.upsert_progress(1, 11, 200)
        rows = repo.list_progress(1)
        assert {(r.story_id, r.chapter_id) for r in rows} == {(10, 100), (11, 200)}

    def test_list_is_most_recent_first(self, repo):
        repo.upsert_progress(1, 10, 100)
        repo.upsert_progress(1, 11, 200)
        repo.upsert_progress(1, 10, 101)
        assert [r.story_id for r in repo.list_progress(1)] == [10, 11]

    def test_rows_are_per_user(self, repo):
        repo.upsert_progress(1, 10, 100)
        repo.upsert_progress(2, 10, 105)
        assert repo.get_progress(1, 10).chapter_id == 100
        assert repo.get_progress(2, 10).chapter_id == 105

    def test_delete_progress(self, repo):
        repo.upsert_progress(1, 10, 100)
        assert repo.delete_progress(1, 10) is True
        assert repo.get_progress(1, 10) is None
        assert repo.delete_progress(1, 10) is False

    def test_clear_progress_only_touches_one_user(self, repo):
        repo.upsert_progress(1, 10, 100)
        repo.upsert_progress(1, 11, 200)
        repo.upsert_progress(2, 10, 100)
        assert repo.clear_progress(1) == 2
        assert repo.list_progress(1) == []
        assert len(repo.list_progress(2)) == 1


class TestFavorites:
    def test_add_and_get(self, repo):
        favorite = repo.add_favorite(1, 10)
        assert favorite.user_id == 1
        assert favorite.story_id == 10
        assert repo.get_favorite(1, 10) is not None

    def test_duplicate_add_raises(self, repo):
        repo.add_favorite(1, 10)
        with pytest.raises(DuplicateFavoriteError):
            repo.add_favorite(1, 10)
        assert len(repo.list_favorites(1)) == 1

    def test_remove_missing_returns_false(self, repo):
        assert repo.remove_favorite(1, 10) is False

    def test_add_then_remove_leaves_nothing(self, repo):
        repo.add_favorite(1, 10)
        assert repo.remove_favorite(1, 10) is True
        assert repo.get_favorite(1, 10) is None
        assert repo.list_favorites(1) == []

    def test_list_is_newest_first(self, repo):
        repo.add_favorite(1, 10)
        repo.add_favorite(1, 11)
        repo.add_favorite(1, 12)
        assert [f.story_id for f in repo.list_favorites(1)] == [12, 11, 10]

    def test_count_favorites(self, repo):
        repo.add_favorite(1, 10)
        repo.add_favorite(2, 10)
        repo.add_favorite(1, 11)
        assert repo.count_favorites() == {10: 2, 11: 1}
        assert repo.count_favorites([11]) == {11: 1}
        assert repo.count_favorites([]) == {}


def _stale_once(real_lookup):
    """Lookup that misses once, as if another request inserted the row
    between our read and our write."""
    calls = []

    def lookup(user_id, story_id):
        if not calls:
            calls.append((user_id, story_id))
            return None
        return real_lookup(user_id, story_id)

    return lookup


class TestSqlInsertRace:
    def test_progress_insert_race_updates_existing_row(self, db, monkeypatch):
        repo = SqlTrackingRepository(db)
        repo.upsert_progress(1, 5, 10)
        monkeypatch.setattr(repo, "get_progress", _stale_once(repo.get_progress))

        history = repo.upsert_progress(1, 5, 11)

        assert history.chapter_id == 11
        rows = db.query(ReadingHistory).filter(ReadingHistory.user_id == 1).all()
        assert [(r.story_id, r.chapter_id) for r in rows] == [(5, 11)]

    def test_favorite_insert_race_raises_duplicate(self, db, monkeypatch):
        repo = SqlTrackingRepository(db)
        repo.add_favorite(1, 5)
        monkeypatch.setattr(repo, "get_favorite", _stale_once(repo.get_favorite))

        with pytest.raises(DuplicateFavoriteError):
            repo.add_favorite(1, 5)
        assert db.query(Favorite).count() == 1

    def test_session_usable_after_race(self, db, monkeypatch):
        repo = SqlTrackingRepository(db)
        repo.add_favorite(1, 5)
        monkeypatch.setattr(repo, "get_favorite", _stale_once(repo.get_favorite))
        with pytest.raises(DuplicateFavoriteError):
            repo.add_favorite(1, 5)

        repo.add_favorite(1, 6)
        assert [f.story_id for f in repo.list_favorites(1)] == [6, 5]


class TestMemoryRepositoryIsolation:
    def test_instances_do_not_share_state(self):
        a = MemoryTrackingRepository()
        b = MemoryTrackingRepository()
        a.add_favorite(1, 10)
        a.upsert_progress(1, 10, 100)
        assert b.list_favorites(1) == []
        assert b.list_progress(1) == []


class TestTrackingService:
    def test_is_favorite(self):
        repo = MemoryTrackingRepository()
        assert tracking_service.is_favorite(repo, 1, 10) is False
        tracking_service.add_favorite(repo, 1, 10)
        assert tracking_service.is_favorite(repo, 1, 10) is True

    def test_remove_missing_favorite_is_not_an_error(self):
        repo = MemoryTrackingRepository()
        assert tracking_service.remove_favorite(repo, 1, 10) is False

    def test_clear_progress_logs_count(self, caplog):
        repo = MemoryTrackingRepository()
        tracking_service.record_progress(repo, 1, 10, 100)
        with caplog.at_level("INFO", logger="app.services.tracking_service"):
            assert tracking_service.clear_progress(repo, 1) == 1
        assert "Cleared 1 reading history entries" in caplog.text
