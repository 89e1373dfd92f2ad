from pydantic import BaseModel, Field
from typing import Optional


class FamilyBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class FamilyCreate(FamilyBase):
    email: Optional[str] = Field(default=None, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class FamilyUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class Family(FamilyBase):
    id: int
    email: Optional[str] = None

    class Config:
        from_attributes = True
