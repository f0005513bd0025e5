from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class ReportCreate(BaseModel):
    target_type: Literal["story", "chapter", "comment"]
    target_id: int
    reason: str = Field(..., min_length=1, max_length=2000)


class ReportResponse(BaseModel):
    id: int
    user_id: int
    target_type: str
    target_id: int
    reason: str
    created_at: datetime

    model_config = {"from_attributes": True}
