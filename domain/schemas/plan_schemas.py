from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.enums import MealType


class MealPlanCreate(BaseModel):
    week_start_date: date
    notes: Optional[str] = None


class MealPlanUpdate(BaseModel):
    notes: Optional[str] = None


class PlannedMealCreate(BaseModel):
    meal_id: UUID
    scheduled_date: date
    meal_type: MealType
    servings: int = Field(default=1, ge=1, le=50)
    notes: Optional[str] = None


class PlannedMealUpdate(BaseModel):
    meal_id: Optional[UUID] = None
    scheduled_date: Optional[date] = None
    meal_type: Optional[MealType] = None
    servings: Optional[int] = Field(default=None, ge=1, le=50)
    notes: Optional[str] = None


class PlannedMealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    meal_plan_id: UUID
    meal_id: UUID
    scheduled_date: date
    meal_type: MealType
    servings: int
    notes: Optional[str] = None
    created_at: datetime


class MealPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    week_start_date: date
    notes: Optional[str] = None
    planned_meals: List[PlannedMealResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
