from datetime import datetime

from pydantic import BaseModel

from app.schemas.chapter import ChapterSummary
from app.schemas.story import StoryResponse


class ReadingHistoryUpdate(BaseModel):
    story_id: int
    chapter_id: int


class ReadingHistoryResponse(BaseModel):
    id: int
    user_id: int
    story_id: int
    chapter_id: int
    last_read_at: datetime

    model_config = {"from_attributes": True}


class ReadingHistoryEntry(BaseModel):
    story: StoryResponse
    chapter: ChapterSummary
    history: ReadingHistoryResponse


class FavoriteCreate(BaseModel):
    story_id: int


class FavoriteResponse(BaseModel):
    id: int
    user_id: int
    story_id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class FavoriteEntry(BaseModel):
    story: StoryResponse
    favorite: FavoriteResponse


class FavoriteStatus(BaseModel):
    story_id: int
    is_favorite: bool
