"""
Domain layer: the meal planner's tables, row policies, enums and payload schemas.
"""

from domain import enums, models, schemas

__all__ = ["enums", "models", "schemas"]
