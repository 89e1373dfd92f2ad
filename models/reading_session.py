from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ReadingSessionCreate(BaseModel):
    child_id: int
    book_id: Optional[int] = None
    minutes: int = Field(..., ge=1)
    pages: Optional[int] = Field(default=None, ge=0)
    mood: Optional[int] = Field(default=None, ge=1, le=5)
    date: Optional[datetime] = None
