"""
Domain models package - SQLAlchemy ORM models.

Engine and sessions live in domain.models.database, which also loads the
row policies attached to its session class.
"""

from domain.models.base import Base
from domain.models.user import AuthUser, UserProfile, DEFAULT_CALORIE_GOAL
from domain.models.meal import Meal
from domain.models.meal_plan import MealPlan, PlannedMeal, GroceryList

__all__ = [
    "Base",
    # Identity and profile models
    "AuthUser",
    "UserProfile",
    "DEFAULT_CALORIE_GOAL",
    # Meal models
    "Meal",
    # Planning models
    "MealPlan",
    "PlannedMeal",
    "GroceryList",
]
