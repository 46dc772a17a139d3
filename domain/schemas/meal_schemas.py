from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.enums import DifficultyLevel, MealType


def _normalize_tags(tags: List[str]) -> List[str]:
    """Lowercase, strip and de-duplicate tags, keeping order"""
    seen = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class MealBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    meal_type: MealType
    ingredients: List[str] = Field(default_factory=list)
    instructions: List[str] = Field(default_factory=list)
    preparation_time: Optional[int] = Field(default=None, ge=0)
    difficulty: DifficultyLevel = DifficultyLevel.MEDIUM
    calories: Optional[int] = Field(default=None, ge=0)
    protein: Optional[int] = Field(default=None, ge=0)
    carbs: Optional[int] = Field(default=None, ge=0)
    fats: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return _normalize_tags(v)


class MealCreate(MealBase):
    is_favorite: bool = False


class MealUpdate(BaseModel):
    """Partial update; only fields that are set are written"""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    meal_type: Optional[MealType] = None
    ingredients: Optional[List[str]] = None
    instructions: Optional[List[str]] = None
    preparation_time: Optional[int] = Field(default=None, ge=0)
    difficulty: Optional[DifficultyLevel] = None
    calories: Optional[int] = Field(default=None, ge=0)
    protein: Optional[int] = Field(default=None, ge=0)
    carbs: Optional[int] = Field(default=None, ge=0)
    fats: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    tags: Optional[List[str]] = None
    is_favorite: Optional[bool] = None

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return None if v is None else _normalize_tags(v)


class MealResponse(MealBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
