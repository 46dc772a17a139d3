from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class GroceryItem(BaseModel):
    """One line of a grocery list, as stored in grocery_lists.items"""

    name: str = Field(min_length=1)
    quantity: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    checked: bool = False


class GroceryListCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    meal_plan_id: Optional[UUID] = None
    items: List[GroceryItem] = Field(default_factory=list)


class GroceryListUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    items: Optional[List[GroceryItem]] = None
    is_completed: Optional[bool] = None


class GroceryListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    meal_plan_id: Optional[UUID] = None
    name: str
    items: List[GroceryItem] = Field(default_factory=list)
    is_completed: bool
    created_at: datetime
    updated_at: datetime
