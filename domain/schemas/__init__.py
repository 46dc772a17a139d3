"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.profile_schemas import (
    RegisterPrincipal,
    UserProfileUpdate,
    UserProfileResponse,
)
from domain.schemas.meal_schemas import (
    MealCreate,
    MealUpdate,
    MealResponse,
)
from domain.schemas.plan_schemas import (
    MealPlanCreate,
    MealPlanUpdate,
    MealPlanResponse,
    PlannedMealCreate,
    PlannedMealUpdate,
    PlannedMealResponse,
)
from domain.schemas.grocery_schemas import (
    GroceryItem,
    GroceryListCreate,
    GroceryListUpdate,
    GroceryListResponse,
)

__all__ = [
    # Profile schemas
    "RegisterPrincipal",
    "UserProfileUpdate",
    "UserProfileResponse",
    # Meal schemas
    "MealCreate",
    "MealUpdate",
    "MealResponse",
    # Plan schemas
    "MealPlanCreate",
    "MealPlanUpdate",
    "MealPlanResponse",
    "PlannedMealCreate",
    "PlannedMealUpdate",
    "PlannedMealResponse",
    # Grocery schemas
    "GroceryItem",
    "GroceryListCreate",
    "GroceryListUpdate",
    "GroceryListResponse",
]
