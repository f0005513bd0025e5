"""Catalog queries shared by the public and admin story endpoints."""

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from app.models.chapter import Chapter
from app.models.favorite import Favorite
from app.models.genre import Genre
from app.models.story import Story, StoryGenre

STORY_SORTS = ("newest", "updated", "popular", "title")


def list_stories(
    db: Session,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    author_id: int | None = None,
    group_id: int | None = None,
    genre_id: int | None = None,
    sort: str = "newest",
) -> list[Story]:
    """Filtered, sorted, paginated story listing.

    ``popular`` ranks by favorite count from the SQL favorites table.
    """
    query = db.query(Story).options(selectinload(Story.genre_links).selectinload(StoryGenre.genre))

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Story.title.ilike(pattern),
                Story.alternative_title.ilike(pattern),
                Story.description.ilike(pattern),
            )
        )
    if author_id is not None:
        query = query.filter(Story.author_id == author_id)
    if group_id is not None:
        query = query.filter(Story.group_id == group_id)
    if genre_id is not None:
        query = query.join(StoryGenre, StoryGenre.story_id == Story.id).filter(StoryGenre.genre_id == genre_id)

    if sort == "updated":
        latest = (
            db.query(Chapter.story_id, func.max(Chapter.created_at).label("latest"))
            .group_by(Chapter.story_id)
            .subquery()
        )
        query = query.outerjoin(latest, latest.c.story_id == Story.id).order_by(
            latest.c.latest.desc().nulls_last(), Story.id.desc()
        )
    elif sort == "popular":
        fav_counts = (
            db.query(Favorite.story_id, func.count(Favorite.id).label("cnt"))
            .group_by(Favorite.story_id)
            .subquery()
        )
        query = query.outerjoin(fav_counts, fav_counts.c.story_id == Story.id).order_by(
            func.coalesce(fav_counts.c.cnt, 0).desc(), Story.id.desc()
        )
    elif sort == "title":
        query = query.order_by(Story.title.asc(), Story.id.asc())
    else:
        query = query.order_by(Story.created_at.desc(), Story.id.desc())

    return query.offset((page - 1) * limit).limit(limit).all()


def chapter_counts(db: Session, story_ids: list[int]) -> dict[int, int]:
    """Return {story_id: chapter_count} for the given stories."""
    if not story_ids:
        return {}
    rows = (
        db.query(Chapter.story_id, func.count(Chapter.id).label("cnt"))
        .filter(Chapter.story_id.in_(story_ids))
        .group_by(Chapter.story_id)
        .all()
    )
    return {row.story_id: row.cnt for row in rows}


def list_chapters(db: Session, story_id: int, order: str = "desc") -> list[Chapter]:
    number = Chapter.chapter_number.asc() if order == "asc" else Chapter.chapter_number.desc()
    return db.query(Chapter).filter(Chapter.story_id == story_id).order_by(number).all()


def neighbour_chapter_ids(db: Session, chapter: Chapter) -> tuple[int | None, int | None]:
    """Return (previous_id, next_id) around *chapter* by chapter_number."""
    prev_row = (
        db.query(Chapter.id)
        .filter(Chapter.story_id == chapter.story_id, Chapter.chapter_number < chapter.chapter_number)
        .order_by(Chapter.chapter_number.desc())
        .first()
    )
    next_row = (
        db.query(Chapter.id)
        .filter(Chapter.story_id == chapter.story_id, Chapter.chapter_number > chapter.chapter_number)
        .order_by(Chapter.chapter_number.asc())
        .first()
    )
    return (prev_row[0] if prev_row else None, next_row[0] if next_row else None)


def set_story_genres(db: Session, story: Story, genre_ids: list[int]) -> None:
    """Replace the story's genre links. Raises ValueError on unknown ids.

    Does not commit.
    """
    wanted = list(dict.fromkeys(genre_ids))
    if wanted:
        found = {g.id for g in db.query(Genre).filter(Genre.id.in_(wanted)).all()}
        missing = [gid for gid in wanted if gid not in found]
        if missing:
            raise ValueError(f"Unknown genre ids: {missing}")

    story.genre_links.clear()
    db.flush()
    for genre_id in wanted:
        story.genre_links.append(StoryGenre(genre_id=genre_id))
