from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.user import UserBrief


class CommentCreate(BaseModel):
    story_id: int
    chapter_id: int | None = None
    parent_id: int | None = None
    content: str = Field(..., min_length=1, max_length=5000)


class CommentResponse(BaseModel):
    id: int
    user_id: int
    story_id: int
    chapter_id: int | None = None
    parent_id: int | None = None
    content: str
    created_at: datetime
    user: UserBrief | None = None

    model_config = {"from_attributes": True}


class ThreadedCommentResponse(CommentResponse):
    replies: list[CommentResponse] = []


class AdminCommentList(BaseModel):
    comments: list[CommentResponse]
    total: int
    page: int
    limit: int
