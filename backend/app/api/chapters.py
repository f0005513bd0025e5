from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload

from app.database import get_db
from app.models.chapter import Chapter
from app.schemas.chapter import ChapterDetail, ChapterSummary, RecentChapter
from app.schemas.comment import CommentResponse, ThreadedCommentResponse
from app.services import comment_service, story_service

router = APIRouter(prefix="/chapters", tags=["chapters"])


@router.get("/recent", response_model=list[RecentChapter])
async def list_recent_chapters(
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> list[RecentChapter]:
    """Latest chapter releases across all stories."""
    chapters = (
        db.query(Chapter)
        .options(joinedload(Chapter.story))
        .order_by(Chapter.created_at.desc(), Chapter.id.desc())
        .limit(limit)
        .all()
    )
    return [
        RecentChapter(**ChapterSummary.model_validate(c).model_dump(), story_title=c.story.title)
        for c in chapters
    ]


@router.get("/{chapter_id}", response_model=ChapterDetail)
async def get_chapter(chapter_id: int, db: Session = Depends(get_db)) -> ChapterDetail:
    chapter = db.query(Chapter).filter(Chapter.id == chapter_id).first()
    if not chapter:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found")

    resp = ChapterDetail.model_validate(chapter)
    resp.prev_chapter_id, resp.next_chapter_id = story_service.neighbour_chapter_ids(db, chapter)
    return resp


@router.get("/{chapter_id}/comments", response_model=list[CommentResponse])
async def list_chapter_comments(
    chapter_id: int,
    db: Session = Depends(get_db),
) -> list[CommentResponse]:
    comments = comment_service.list_chapter_comments(db, chapter_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.get("/{chapter_id}/comments/threaded", response_model=list[ThreadedCommentResponse])
async def list_chapter_comments_threaded(
    chapter_id: int,
    db: Session = Depends(get_db),
) -> list[ThreadedCommentResponse]:
    """Top-level comments with their direct replies nested under `replies`."""
    comments = comment_service.list_chapter_comments(db, chapter_id)
    return [ThreadedCommentResponse.model_validate(c) for c in comment_service.thread_comments(comments)]
