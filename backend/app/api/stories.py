from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.story import Story
from app.schemas.chapter import ChapterSummary
from app.schemas.comment import CommentResponse, ThreadedCommentResponse
from app.schemas.story import StoryDetail, StoryListItem
from app.services import comment_service, story_service

router = APIRouter(prefix="/stories", tags=["stories"])


def story_list_items(db: Session, stories: list[Story]) -> list[StoryListItem]:
    counts = story_service.chapter_counts(db, [s.id for s in stories])
    results = []
    for story in stories:
        item = StoryListItem.model_validate(story)
        item.chapter_count = counts.get(story.id, 0)
        results.append(item)
    return results


def get_story_or_404(story_id: int, db: Session) -> Story:
    story = db.query(Story).filter(Story.id == story_id).first()
    if not story:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Story not found")
    return story


@router.get("", response_model=list[StoryListItem])
async def list_stories(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: str | None = Query(None, description="Matches title, alternative title or description"),
    author_id: int | None = None,
    group_id: int | None = None,
    genre_id: int | None = None,
    sort: str = Query("newest", pattern="^(newest|updated|popular|title)$"),
    db: Session = Depends(get_db),
) -> list[StoryListItem]:
    stories = story_service.list_stories(
        db,
        page=page,
        limit=limit,
        search=search,
        author_id=author_id,
        group_id=group_id,
        genre_id=genre_id,
        sort=sort,
    )
    return story_list_items(db, stories)


@router.get("/{story_id}", response_model=StoryDetail)
async def get_story(story_id: int, db: Session = Depends(get_db)) -> StoryDetail:
    return StoryDetail.model_validate(get_story_or_404(story_id, db))


@router.get("/{story_id}/chapters", response_model=list[ChapterSummary])
async def list_story_chapters(
    story_id: int,
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
) -> list[ChapterSummary]:
    get_story_or_404(story_id, db)
    chapters = story_service.list_chapters(db, story_id, order)
    return [ChapterSummary.model_validate(c) for c in chapters]


@router.get("/{story_id}/comments", response_model=list[CommentResponse])
async def list_story_comments(
    story_id: int,
    db: Session = Depends(get_db),
) -> list[CommentResponse]:
    """Story-level comments (not attached to a chapter), newest first."""
    comments = comment_service.list_story_comments(db, story_id)
    return [CommentResponse.model_validate(c) for c in comments]


@router.get("/{story_id}/comments/threaded", response_model=list[ThreadedCommentResponse])
async def list_story_comments_threaded(
    story_id: int,
    db: Session = Depends(get_db),
) -> list[ThreadedCommentResponse]:
    """Top-level comments with their direct replies nested under `replies`."""
    comments = comment_service.list_story_comments(db, story_id)
    return [ThreadedCommentResponse.model_validate(c) for c in comment_service.thread_comments(comments)]
