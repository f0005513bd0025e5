from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.catalog import AuthorResponse, GenreResponse, GroupResponse
from app.schemas.chapter import ChapterSummary


class StoryCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    alternative_title: str = Field("", max_length=255)
    cover_image: str = Field("", max_length=500)
    author_id: int | None = None
    group_id: int | None = None
    release_year: int | None = Field(None, ge=0, le=9999)
    description: str = ""
    genre_ids: list[int] = []


class StoryUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    alternative_title: str | None = Field(None, max_length=255)
    cover_image: str | None = Field(None, max_length=500)
    author_id: int | None = None
    group_id: int | None = None
    release_year: int | None = Field(None, ge=0, le=9999)
    description: str | None = None


class StoryGenresUpdate(BaseModel):
    genre_ids: list[int]


class StoryResponse(BaseModel):
    id: int
    title: str
    alternative_title: str = ""
    cover_image: str = ""
    author_id: int | None = None
    group_id: int | None = None
    release_year: int | None = None
    description: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}


class StoryListItem(StoryResponse):
    genres: list[GenreResponse] = []
    # Computed per-request, not stored as columns
    chapter_count: int = 0


class StoryDetail(StoryResponse):
    author: AuthorResponse | None = None
    group: GroupResponse | None = None
    genres: list[GenreResponse] = []
    chapters: list[ChapterSummary] = []
