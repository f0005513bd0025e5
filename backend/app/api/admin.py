"""
Admin back-office endpoints — every route requires role == "admin".

Content management for the catalog (authors, groups, genres, stories,
chapters) plus moderation of users, comments and reports.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from app.api.deps import get_tracking_repository, require_admin
from app.api.stories import get_story_or_404
from app.config import settings
from app.database import get_db
from app.models.author import Author
from app.models.chapter import Chapter
from app.models.comment import Comment
from app.models.genre import Genre
from app.models.report import Report
from app.models.story import Story
from app.models.translation_group import TranslationGroup
from app.models.user import User
from app.repositories.tracking import TrackingRepository
from app.schemas.admin import SiteStats, UploadResponse
from app.schemas.catalog import (
    AuthorCreate,
    AuthorResponse,
    AuthorUpdate,
    GenreCreate,
    GenreResponse,
    GenreUpdate,
    GroupCreate,
    GroupResponse,
    GroupUpdate,
)
from app.schemas.chapter import ChapterCreate, ChapterResponse, ChapterUpdate, check_chapter_body
from app.schemas.comment import AdminCommentList, CommentResponse
from app.schemas.report import ReportResponse
from app.schemas.story import StoryCreate, StoryDetail, StoryGenresUpdate, StoryUpdate
from app.schemas.user import AdminUserResponse, AdminUserUpdate
from app.services import story_service
from app.storage import save_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


def _get_or_404(db: Session, model, obj_id: int, label: str):
    obj = db.query(model).filter(model.id == obj_id).first()
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return obj


def _apply(obj, updates, nullable: tuple[str, ...] = ()) -> None:
    """Copy the fields sent in a PATCH body onto *obj*.

    An explicit null only clears columns listed in *nullable*; elsewhere it
    is ignored, same as an omitted field.
    """
    for field, value in updates.model_dump(exclude_unset=True).items():
        if value is None and field not in nullable:
            continue
        setattr(obj, field, value)


# ── Users ─────────────────────────────────────────────────────────────────────


@router.get("/users", response_model=list[AdminUserResponse])
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, description="Matches first name, last name or email"),
    db: Session = Depends(get_db),
) -> list[AdminUserResponse]:
    query = db.query(User)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(User.first_name.ilike(pattern), User.last_name.ilike(pattern), User.email.ilike(pattern))
        )
    users = query.order_by(User.id).offset((page - 1) * limit).limit(limit).all()
    return [AdminUserResponse.model_validate(u) for u in users]


@router.patch("/users/{user_id}", response_model=AdminUserResponse)
async def update_user(
    user_id: int,
    updates: AdminUserUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AdminUserResponse:
    """Change a user's role or deactivate the account. Admins cannot demote
    or deactivate themselves."""
    user = _get_or_404(db, User, user_id, "User")
    if user.id == admin.id and (updates.role == "user" or updates.is_active is False):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot demote or deactivate yourself")

    _apply(user, updates)
    db.commit()
    db.refresh(user)
    return AdminUserResponse.model_validate(user)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    admin: User = Depends(require_admin),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: Session = Depends(get_db),
) -> dict:
    if user_id == admin.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    user = _get_or_404(db, User, user_id, "User")
    db.delete(user)
    db.commit()
    # The memory backend holds no FK; drop the user's rows explicitly.
    repo.clear_progress(user_id)
    for favorite in repo.list_favorites(user_id):
        repo.remove_favorite(user_id, favorite.story_id)
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return {"detail": "User deleted successfully"}


# ── Authors ───────────────────────────────────────────────────────────────────


@router.post("/authors", response_model=AuthorResponse, status_code=status.HTTP_201_CREATED)
async def create_author(author_in: AuthorCreate, db: Session = Depends(get_db)) -> AuthorResponse:
    author = Author(**author_in.model_dump())
    db.add(author)
    db.commit()
    db.refresh(author)
    return AuthorResponse.model_validate(author)


@router.patch("/authors/{author_id}", response_model=AuthorResponse)
async def update_author(author_id: int, updates: AuthorUpdate, db: Session = Depends(get_db)) -> AuthorResponse:
    author = _get_or_404(db, Author, author_id, "Author")
    _apply(author, updates)
    db.commit()
    db.refresh(author)
    return AuthorResponse.model_validate(author)


@router.delete("/authors/{author_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_author(author_id: int, db: Session = Depends(get_db)) -> None:
    author = _get_or_404(db, Author, author_id, "Author")
    db.delete(author)
    db.commit()


# ── Translation groups ────────────────────────────────────────────────────────


@router.post("/groups", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(group_in: GroupCreate, db: Session = Depends(get_db)) -> GroupResponse:
    group = TranslationGroup(**group_in.model_dump())
    db.add(group)
    db.commit()
    db.refresh(group)
    return GroupResponse.model_validate(group)


@router.patch("/groups/{group_id}", response_model=GroupResponse)
async def update_group(group_id: int, updates: GroupUpdate, db: Session = Depends(get_db)) -> GroupResponse:
    group = _get_or_404(db, TranslationGroup, group_id, "Group")
    _apply(group, updates)
    db.commit()
    db.refresh(group)
    return GroupResponse.model_validate(group)


@router.delete("/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_group(group_id: int, db: Session = Depends(get_db)) -> None:
    group = _get_or_404(db, TranslationGroup, group_id, "Group")
    db.delete(group)
    db.commit()


# ── Genres ────────────────────────────────────────────────────────────────────


@router.post("/genres", response_model=GenreResponse, status_code=status.HTTP_201_CREATED)
async def create_genre(genre_in: GenreCreate, db: Session = Depends(get_db)) -> GenreResponse:
    if db.query(Genre).filter(Genre.name == genre_in.name).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A genre with this name already exists")
    genre = Genre(**genre_in.model_dump())
    db.add(genre)
    db.commit()
    db.refresh(genre)
    return GenreResponse.model_validate(genre)


@router.patch("/genres/{genre_id}", response_model=GenreResponse)
async def update_genre(genre_id: int, updates: GenreUpdate, db: Session = Depends(get_db)) -> GenreResponse:
    genre = _get_or_404(db, Genre, genre_id, "Genre")
    if updates.name and updates.name != genre.name:
        if db.query(Genre).filter(Genre.name == updates.name).first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="A genre with this name already exists")
    _apply(genre, updates)
    db.commit()
    db.refresh(genre)
    return GenreResponse.model_validate(genre)


@router.delete("/genres/{genre_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_genre(genre_id: int, db: Session = Depends(get_db)) -> None:
    genre = _get_or_404(db, Genre, genre_id, "Genre")
    db.delete(genre)
    db.commit()


# ── Stories ───────────────────────────────────────────────────────────────────


def _check_story_refs(db: Session, author_id: int | None, group_id: int | None) -> None:
    if author_id is not None:
        _get_or_404(db, Author, author_id, "Author")
    if group_id is not None:
        _get_or_404(db, TranslationGroup, group_id, "Group")


@router.post("/stories", response_model=StoryDetail, status_code=status.HTTP_201_CREATED)
async def create_story(story_in: StoryCreate, db: Session = Depends(get_db)) -> StoryDetail:
    _check_story_refs(db, story_in.author_id, story_in.group_id)

    story = Story(**story_in.model_dump(exclude={"genre_ids"}))
    db.add(story)
    db.flush()
    story_service.set_story_genres(db, story, story_in.genre_ids)
    db.commit()
    db.refresh(story)
    return StoryDetail.model_validate(story)


@router.patch("/stories/{story_id}", response_model=StoryDetail)
async def update_story(story_id: int, updates: StoryUpdate, db: Session = Depends(get_db)) -> StoryDetail:
    story = get_story_or_404(story_id, db)
    _check_story_refs(db, updates.author_id, updates.group_id)
    _apply(story, updates, nullable=("author_id", "group_id", "release_year"))
    db.commit()
    db.refresh(story)
    return StoryDetail.model_validate(story)


@router.put("/stories/{story_id}/genres", response_model=StoryDetail)
async def replace_story_genres(
    story_id: int,
    body: StoryGenresUpdate,
    db: Session = Depends(get_db),
) -> StoryDetail:
    story = get_story_or_404(story_id, db)
    story_service.set_story_genres(db, story, body.genre_ids)
    db.commit()
    db.refresh(story)
    return StoryDetail.model_validate(story)


@router.delete("/stories/{story_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_story(story_id: int, db: Session = Depends(get_db)) -> None:
    """Deletes the story with its chapters, comments, genre links,
    favorites and reading history."""
    story = get_story_or_404(story_id, db)
    db.delete(story)
    db.commit()


# ── Chapters ──────────────────────────────────────────────────────────────────


def _chapter_number_taken(db: Session, story_id: int, number: int, exclude_id: int | None = None) -> bool:
    query = db.query(Chapter.id).filter(Chapter.story_id == story_id, Chapter.chapter_number == number)
    if exclude_id is not None:
        query = query.filter(Chapter.id != exclude_id)
    return query.first() is not None


@router.post("/chapters", response_model=ChapterResponse, status_code=status.HTTP_201_CREATED)
async def create_chapter(chapter_in: ChapterCreate, db: Session = Depends(get_db)) -> ChapterResponse:
    get_story_or_404(chapter_in.story_id, db)
    if _chapter_number_taken(db, chapter_in.story_id, chapter_in.chapter_number):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A chapter with this number already exists in the story",
        )

    chapter = Chapter(**chapter_in.model_dump())
    db.add(chapter)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A chapter with this number already exists in the story",
        )
    db.refresh(chapter)
    return ChapterResponse.model_validate(chapter)


@router.patch("/chapters/{chapter_id}", response_model=ChapterResponse)
async def update_chapter(chapter_id: int, updates: ChapterUpdate, db: Session = Depends(get_db)) -> ChapterResponse:
    chapter = _get_or_404(db, Chapter, chapter_id, "Chapter")
    if updates.chapter_number is not None and _chapter_number_taken(
        db, chapter.story_id, updates.chapter_number, exclude_id=chapter.id
    ):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A chapter with this number already exists in the story",
        )

    # Re-check the type/body pairing against the merged result
    merged = {
        "chapter_type": chapter.chapter_type,
        "content": chapter.content,
        "images": chapter.images or [],
        **updates.model_dump(exclude_unset=True, exclude_none=True),
    }
    check_chapter_body(merged["chapter_type"], merged["content"], merged["images"])

    _apply(chapter, updates)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A chapter with this number already exists in the story",
        )
    db.refresh(chapter)
    return ChapterResponse.model_validate(chapter)


@router.delete("/chapters/{chapter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chapter(chapter_id: int, db: Session = Depends(get_db)) -> None:
    chapter = _get_or_404(db, Chapter, chapter_id, "Chapter")
    db.delete(chapter)
    db.commit()


# ── Moderation ────────────────────────────────────────────────────────────────


@router.get("/comments", response_model=AdminCommentList)
async def list_comments(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    story_id: int | None = None,
    db: Session = Depends(get_db),
) -> AdminCommentList:
    query = db.query(Comment)
    if story_id is not None:
        query = query.filter(Comment.story_id == story_id)
    total = query.count()
    comments = (
        query.options(joinedload(Comment.user))
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return AdminCommentList(
        comments=[CommentResponse.model_validate(c) for c in comments],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    target_type: str | None = Query(None, pattern="^(story|chapter|comment)$"),
    db: Session = Depends(get_db),
) -> list[ReportResponse]:
    query = db.query(Report)
    if target_type:
        query = query.filter(Report.target_type == target_type)
    reports = query.order_by(Report.created_at.desc(), Report.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return [ReportResponse.model_validate(r) for r in reports]


@router.delete("/reports/{report_id}")
async def delete_report(report_id: int, db: Session = Depends(get_db)) -> dict:
    report = _get_or_404(db, Report, report_id, "Report")
    db.delete(report)
    db.commit()
    return {"detail": "Report deleted successfully"}


@router.get("/stats", response_model=SiteStats)
async def site_stats(
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: Session = Depends(get_db),
) -> SiteStats:
    def count(model) -> int:
        return db.query(func.count(model.id)).scalar() or 0

    return SiteStats(
        users=count(User),
        stories=count(Story),
        chapters=count(Chapter),
        comments=count(Comment),
        reports=count(Report),
        favorites=sum(repo.count_favorites().values()),
    )


# ── Uploads ───────────────────────────────────────────────────────────────────


@router.post("/uploads", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_image(file: UploadFile = File(...)) -> UploadResponse:
    """Store a cover image or comic page and return its public URL."""
    if file.content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"File type '{file.content_type}' is not allowed",
        )

    content = await file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB limit",
        )

    stored_filename, _ = save_upload(
        content=content,
        original_filename=file.filename,
        upload_dir=settings.UPLOAD_DIR,
    )
    return UploadResponse(url=f"/uploads/{stored_filename}", size=len(content), content_type=file.content_type)
