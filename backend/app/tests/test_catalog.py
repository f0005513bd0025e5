"""Public catalog: genres, stories, chapters."""

from fastapi.testclient import TestClient

from app.models.author import Author
from app.tests.conftest import make_chapter, make_genre, make_story


class TestGenres:
    def test_list_sorted_by_name(self, client: TestClient, db):
        make_genre(db, "Romance")
        make_genre(db, "Action")
        resp = client.get("/api/genres")
        assert resp.status_code == 200
        assert [g["name"] for g in resp.json()] == ["Action", "Romance"]

    def test_get_genre_404(self, client: TestClient):
        assert client.get("/api/genres/5").status_code == 404

    def test_genre_stories(self, client: TestClient, db):
        fantasy = make_genre(db, "Fantasy")
        make_story(db, title="Dragons", genres=[fantasy])
        make_story(db, title="Office Life")

        resp = client.get(f"/api/genres/{fantasy.id}/stories")
        assert resp.status_code == 200
        assert [s["title"] for s in resp.json()] == ["Dragons"]

    def test_genre_stories_unknown_genre(self, client: TestClient):
        assert client.get("/api/genres/9/stories").status_code == 404


class TestStoryList:
    def test_newest_first_with_chapter_counts(self, client: TestClient, db):
        older = make_story(db, title="Older")
        newer = make_story(db, title="Newer")
        make_chapter(db, older, 1)
        make_chapter(db, older, 2)

        data = client.get("/api/stories").json()
        assert [s["id"] for s in data] == [newer.id, older.id]
        assert {s["id"]: s["chapter_count"] for s in data} == {newer.id: 0, older.id: 2}

    def test_pagination(self, client: TestClient, db):
        for i in range(5):
            make_story(db, title=f"Story {i}")
        page1 = client.get("/api/stories", params={"page": 1, "limit": 2}).json()
        page3 = client.get("/api/stories", params={"page": 3, "limit": 2}).json()
        assert len(page1) == 2
        assert len(page3) == 1

    def test_search_matches_title_and_alternative_title(self, client: TestClient, db):
        make_story(db, title="The Silver Fox")
        make_story(db, title="Cáo Bạc", alternative_title="Silver Fox (VN)")
        make_story(db, title="Unrelated")

        data = client.get("/api/stories", params={"search": "silver"}).json()
        assert len(data) == 2

    def test_filter_by_author_and_genre(self, client: TestClient, db):
        author = Author(name="Nguyen Van A")
        db.add(author)
        db.commit()
        horror = make_genre(db, "Horror")
        make_story(db, title="Ghosts", author_id=author.id, genres=[horror])
        make_story(db, title="Ghosts Two", author_id=author.id)
        make_story(db, title="Someone Else", genres=[horror])

        by_author = client.get("/api/stories", params={"author_id": author.id}).json()
        assert {s["title"] for s in by_author} == {"Ghosts", "Ghosts Two"}
        both = client.get("/api/stories", params={"author_id": author.id, "genre_id": horror.id}).json()
        assert [s["title"] for s in both] == ["Ghosts"]
        assert both[0]["genres"][0]["name"] == "Horror"

    def test_sort_by_title(self, client: TestClient, db):
        for title in ("Charlie", "Alpha", "Bravo"):
            make_story(db, title=title)
        data = client.get("/api/stories", params={"sort": "title"}).json()
        assert [s["title"] for s in data] == ["Alpha", "Bravo", "Charlie"]

    def test_sort_by_updated(self, client: TestClient, db):
        stale = make_story(db, title="Stale")
        fresh = make_story(db, title="Fresh")
        empty = make_story(db, title="Empty")
        make_chapter(db, stale, 1)
        make_chapter(db, fresh, 1)

        ids = [s["id"] for s in client.get("/api/stories", params={"sort": "updated"}).json()]
        assert ids[-1] == empty.id
        assert set(ids[:2]) == {stale.id, fresh.id}

    def test_invalid_sort_is_400(self, client: TestClient):
        assert client.get("/api/stories", params={"sort": "random"}).status_code == 400


class TestStoryDetail:
    def test_detail_includes_genres_and_chapters(self, client: TestClient, db):
        genre = make_genre(db, "Drama")
        story = make_story(db, title="Rain", genres=[genre], description="Wet days")
        make_chapter(db, story, 1)
        make_chapter(db, story, 2)

        resp = client.get(f"/api/stories/{story.id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["description"] == "Wet days"
        assert [g["name"] for g in data["genres"]] == ["Drama"]
        assert [c["chapter_number"] for c in data["chapters"]] == [2, 1]
        assert data["author"] is None

    def test_detail_404(self, client: TestClient):
        assert client.get("/api/stories/404").status_code == 404

    def test_chapter_list_order(self, client: TestClient, db):
        story = make_story(db)
        for n in (2, 3, 1):
            make_chapter(db, story, n)

        desc = client.get(f"/api/stories/{story.id}/chapters").json()
        asc = client.get(f"/api/stories/{story.id}/chapters", params={"order": "asc"}).json()
        assert [c["chapter_number"] for c in desc] == [3, 2, 1]
        assert [c["chapter_number"] for c in asc] == [1, 2, 3]


class TestChapters:
    def test_chapter_detail_with_navigation(self, client: TestClient, db):
        story = make_story(db)
        first = make_chapter(db, story, 1)
        second = make_chapter(db, story, 2, content="The middle.")
        third = make_chapter(db, story, 5)

        data = client.get(f"/api/chapters/{second.id}").json()
        assert data["content"] == "The middle."
        assert data["prev_chapter_id"] == first.id
        assert data["next_chapter_id"] == third.id

        edge = client.get(f"/api/chapters/{first.id}").json()
        assert edge["prev_chapter_id"] is None

    def test_comic_chapter_returns_images(self, client: TestClient, db):
        story = make_story(db)
        chapter = make_chapter(db, story, 1, chapter_type="comic", content="", images=["/uploads/p1.png"])
        data = client.get(f"/api/chapters/{chapter.id}").json()
        assert data["chapter_type"] == "comic"
        assert data["images"] == ["/uploads/p1.png"]

    def test_chapter_404(self, client: TestClient):
        assert client.get("/api/chapters/31").status_code == 404

    def test_recent_chapters(self, client: TestClient, db):
        story = make_story(db, title="Serial")
        make_chapter(db, story, 1)
        latest = make_chapter(db, story, 2)

        data = client.get("/api/chapters/recent", params={"limit": 1}).json()
        assert len(data) == 1
        assert data[0]["id"] == latest.id
        assert data[0]["story_title"] == "Serial"


class TestHealth:
    def test_health(self, client: TestClient):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy", "database": "connected"}
