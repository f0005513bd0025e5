from pydantic import BaseModel


class SiteStats(BaseModel):
    users: int
    stories: int
    chapters: int
    comments: int
    reports: int
    favorites: int


class UploadResponse(BaseModel):
    url: str
    size: int
    content_type: str
