from datetime import datetime

from pydantic import BaseModel, Field


class AuthorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    bio: str = ""


class AuthorUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    bio: str | None = None


class AuthorResponse(BaseModel):
    id: int
    name: str
    bio: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""


class GroupUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


class GroupResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}


class GenreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""


class GenreUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None


class GenreResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    created_at: datetime

    model_config = {"from_attributes": True}
