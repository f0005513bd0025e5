from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.models.chapter import IMAGE_CHAPTER_TYPES

ChapterType = Literal["novel", "oneshot", "comic"]


def check_chapter_body(chapter_type: str, content: str, images: list[str]) -> None:
    if chapter_type in IMAGE_CHAPTER_TYPES:
        if not images:
            raise ValueError(f"A {chapter_type} chapter needs at least one image")
    elif not content.strip():
        raise ValueError("A novel chapter needs text content")


class ChapterCreate(BaseModel):
    story_id: int
    title: str = Field(..., min_length=1, max_length=255)
    chapter_number: int = Field(..., ge=0)
    chapter_type: ChapterType = "novel"
    content: str = ""
    images: list[str] = []
    font_family: str = Field("Arial, sans-serif", max_length=100)

    @model_validator(mode="after")
    def require_body_for_type(self) -> "ChapterCreate":
        check_chapter_body(self.chapter_type, self.content, self.images)
        return self


class ChapterUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    chapter_number: int | None = Field(None, ge=0)
    chapter_type: ChapterType | None = None
    content: str | None = None
    images: list[str] | None = None
    font_family: str | None = Field(None, max_length=100)


class ChapterSummary(BaseModel):
    id: int
    story_id: int
    title: str
    chapter_number: int
    chapter_type: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ChapterResponse(ChapterSummary):
    content: str = ""
    images: list[str] = []
    font_family: str


class ChapterDetail(ChapterResponse):
    # Navigation within the story, ordered by chapter_number
    prev_chapter_id: int | None = None
    next_chapter_id: int | None = None


class RecentChapter(ChapterSummary):
    story_title: str
