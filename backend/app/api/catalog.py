from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.api.stories import story_list_items
from app.database import get_db
from app.models.author import Author
from app.models.genre import Genre
from app.models.translation_group import TranslationGroup
from app.schemas.catalog import AuthorResponse, GenreResponse, GroupResponse
from app.schemas.story import StoryListItem
from app.services import story_service

router = APIRouter(tags=["catalog"])


@router.get("/genres", response_model=list[GenreResponse])
async def list_genres(db: Session = Depends(get_db)) -> list[GenreResponse]:
    genres = db.query(Genre).order_by(Genre.name).all()
    return [GenreResponse.model_validate(g) for g in genres]


@router.get("/genres/{genre_id}", response_model=GenreResponse)
async def get_genre(genre_id: int, db: Session = Depends(get_db)) -> GenreResponse:
    genre = db.query(Genre).filter(Genre.id == genre_id).first()
    if not genre:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Genre not found")
    return GenreResponse.model_validate(genre)


@router.get("/genres/{genre_id}/stories", response_model=list[StoryListItem])
async def list_genre_stories(
    genre_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort: str = Query("newest", pattern="^(newest|updated|popular|title)$"),
    db: Session = Depends(get_db),
) -> list[StoryListItem]:
    if not db.query(Genre.id).filter(Genre.id == genre_id).first():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Genre not found")
    stories = story_service.list_stories(db, page=page, limit=limit, genre_id=genre_id, sort=sort)
    return story_list_items(db, stories)


@router.get("/authors", response_model=list[AuthorResponse])
async def list_authors(db: Session = Depends(get_db)) -> list[AuthorResponse]:
    authors = db.query(Author).order_by(Author.name).all()
    return [AuthorResponse.model_validate(a) for a in authors]


@router.get("/groups", response_model=list[GroupResponse])
async def list_groups(db: Session = Depends(get_db)) -> list[GroupResponse]:
    groups = db.query(TranslationGroup).order_by(TranslationGroup.name).all()
    return [GroupResponse.model_validate(g) for g in groups]
