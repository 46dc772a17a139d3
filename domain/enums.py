"""
Domain enums for the MealPlanner store.
Values are the exact strings persisted in the database.
"""

import enum


class MealType(str, enum.Enum):
    """Slot of the day a meal is eaten in"""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class DifficultyLevel(str, enum.Enum):
    """Recipe difficulty"""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class DietaryPreference(str, enum.Enum):
    """Dietary preferences a profile can declare"""

    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    GLUTEN_FREE = "gluten-free"
    DAIRY_FREE = "dairy-free"
    KETO = "keto"
    NONE = "none"


def enum_values(enum_cls):
    """values_callable for SQLAlchemy Enum columns: persist values, not member names."""
    return [member.value for member in enum_cls]
