from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_tracking_repository
from app.api.stories import get_story_or_404
from app.database import get_db
from app.models.user import User
from app.repositories.tracking import TrackingRepository
from app.schemas.tracking import FavoriteCreate, FavoriteEntry, FavoriteResponse, FavoriteStatus
from app.services import tracking_service

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=list[FavoriteEntry])
async def list_favorites(
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: Session = Depends(get_db),
) -> list[FavoriteEntry]:
    entries = tracking_service.favorites_view(repo, db, current_user.id)
    return [FavoriteEntry.model_validate(e) for e in entries]


@router.post("", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
async def add_favorite(
    favorite_in: FavoriteCreate,
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
    db: Session = Depends(get_db),
) -> FavoriteResponse:
    """Bookmark a story. Adding the same story twice is a 409."""
    get_story_or_404(favorite_in.story_id, db)
    favorite = tracking_service.add_favorite(repo, current_user.id, favorite_in.story_id)
    return FavoriteResponse.model_validate(favorite)


@router.get("/{story_id}", response_model=FavoriteStatus)
async def get_favorite_status(
    story_id: int,
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
) -> FavoriteStatus:
    return FavoriteStatus(
        story_id=story_id,
        is_favorite=tracking_service.is_favorite(repo, current_user.id, story_id),
    )


@router.delete("/{story_id}")
async def remove_favorite(
    story_id: int,
    current_user: User = Depends(get_current_user),
    repo: TrackingRepository = Depends(get_tracking_repository),
) -> dict:
    if not tracking_service.remove_favorite(repo, current_user.id, story_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite not found")
    return {"detail": "Favorite removed successfully"}
