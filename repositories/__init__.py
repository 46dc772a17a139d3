"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository, translate_integrity_error
from repositories.user_repository import AuthUserRepository, UserProfileRepository
from repositories.meal_repository import MealRepository
from repositories.meal_plan_repository import MealPlanRepository, PlannedMealRepository
from repositories.grocery_repository import GroceryListRepository

__all__ = [
    "BaseRepository",
    "translate_integrity_error",
    "AuthUserRepository",
    "UserProfileRepository",
    "MealRepository",
    "MealPlanRepository",
    "PlannedMealRepository",
    "GroceryListRepository",
]
