from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Genre(str, Enum):
    FANTASIA = "FANTASIA"
    AVENTURA = "AVENTURA"
    ESPACO = "ESPACO"
    NATUREZA = "NATUREZA"
    MISTERIO = "MISTERIO"
    OCEANO = "OCEANO"
    CIENCIA = "CIENCIA"
    HISTORIA = "HISTORIA"


class BookStatus(str, Enum):
    TO_READ = "to-read"
    READING = "reading"
    FINISHED = "finished"


class BookCreate(BaseModel):
    child_id: int
    title: str = Field(..., min_length=1, max_length=200)
    author: Optional[str] = Field(default=None, max_length=100)
    isbn: Optional[str] = Field(default=None, max_length=20)
    genre: Genre
    total_pages: Optional[int] = Field(default=None, gt=0)
    status: BookStatus = BookStatus.TO_READ
    current_page: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = Field(default=None, max_length=1000)
    favorite_character: Optional[str] = Field(default=None, max_length=100)
    recommended: bool = False


class BookUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    author: Optional[str] = Field(default=None, min_length=1, max_length=100)
    genre: Optional[Genre] = None
    total_pages: Optional[int] = Field(default=None, gt=0)
    status: Optional[BookStatus] = None
    current_page: Optional[int] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    notes: Optional[str] = Field(default=None, max_length=1000)
    favorite_character: Optional[str] = Field(default=None, max_length=100)
    recommended: Optional[bool] = None
