from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LevelCategory(str, Enum):
    MAGIC = "MAGIC"
    EXPLORERS = "EXPLORERS"
    KNIGHTS = "KNIGHTS"
    SPACE = "SPACE"


def check_birth_year(value: Optional[int]) -> Optional[int]:
    if value is not None and value > date.today().year:
        raise ValueError("Birth year cannot be in the future")
    return value


class ChildCreate(BaseModel):
    family_id: int
    name: str = Field(..., min_length=1, max_length=50)
    avatar: str = Field(default="🧒", max_length=10)
    birth_year: Optional[int] = Field(default=None, ge=2000)
    level_category: Optional[LevelCategory] = None

    @field_validator("birth_year")
    @classmethod
    def validate_birth_year(cls, v):
        return check_birth_year(v)


class ChildUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    avatar: Optional[str] = Field(default=None, max_length=10)
    birth_year: Optional[int] = Field(default=None, ge=2000)
    level_category: Optional[LevelCategory] = None

    @field_validator("birth_year")
    @classmethod
    def validate_birth_year(cls, v):
        return check_birth_year(v)
