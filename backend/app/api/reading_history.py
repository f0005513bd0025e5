from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_tracking_repository
from app.api.stories import get_story_or_404
from app.database import get_db
from app.models.chapter import Chapter
from app.models.user import User
from app.repositories.tracking import TrackingRepository
from app.schemas.tracking import ReadingHistoryEntry, ReadingHistoryResponse, ReadingHistoryUpdate
from app.services import tracking_service

router = APIRouter(prefix="/reading-history", tags=["reading-history"])


@router.get("", response_model=list[ReadingHistoryEntry])
async def list_reading_history(
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: Session = Depends(get_db),
) -> list[ReadingHistoryEntry]:
    """Last-read chapter per story, most recently read first."""
    entries = tracking_service.reading_history_view(repo, db, current_user.id)
    return [ReadingHistoryEntry.model_validate(e) for e in entries]


@router.post("", response_model=ReadingHistoryResponse)
async def record_reading_progress(
    body: ReadingHistoryUpdate,
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: Session = Depends(get_db),
) -> ReadingHistoryResponse:
    """Called each time a chapter is opened. Keeps one entry per story."""
    get_story_or_404(body.story_id, db)
    chapter = db.query(Chapter).filter(Chapter.id == body.chapter_id).first()
    if not chapter:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Chapter not found")
    if chapter.story_id != body.story_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Chapter does not belong to this story")

    history = tracking_service.record_progress(repo, current_user.id, body.story_id, body.chapter_id)
    return ReadingHistoryResponse.model_validate(history)


@router.get("/{story_id}", response_model=ReadingHistoryResponse)
async def get_reading_progress(
    story_id: int,
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
) -> ReadingHistoryResponse:
    history = repo.get_progress(current_user.id, story_id)
    if history is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reading history entry not found")
    return ReadingHistoryResponse.model_validate(history)


@router.delete("/{story_id}")
async def delete_reading_progress(
    story_id: int,
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
) -> dict:
    if not tracking_service.delete_progress(repo, current_user.id, story_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reading history entry not found")
    return {"detail": "Reading history entry deleted successfully"}


@router.delete("")
async def clear_reading_history(
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
) -> dict:
    removed = tracking_service.clear_progress(repo, current_user.id)
    return {"detail": "Reading history cleared successfully", "removed": removed}
