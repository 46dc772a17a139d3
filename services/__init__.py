"""Services package - Business logic layer"""

from services.identity_service import IdentityService
from services.profile_service import ProfileService
from services.meal_service import MealService
from services.planner_service import PlannerService
from services.grocery_service import GroceryService

__all__ = [
    "IdentityService",
    "ProfileService",
    "MealService",
    "PlannerService",
    "GroceryService",
]
