"""
Meal Repository - Data access layer for meals (recipes)
"""

from typing import List
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.enums import MealType
from domain.models import Meal


class MealRepository(BaseRepository[Meal]):
    """Repository for meal data access"""

    def __init__(self, db: Session):
        super().__init__(db, Meal)

    def list_by_type(self, meal_type: MealType) -> List[Meal]:
        """Get visible meals of one meal type, by name"""
        return (
            self.db.query(Meal)
            .filter(Meal.meal_type == meal_type)
            .order_by(Meal.name)
            .all()
        )

    def list_favorites(self) -> List[Meal]:
        """Get meals flagged as favorite"""
        return (
            self.db.query(Meal)
            .filter(Meal.is_favorite.is_(True))
            .order_by(Meal.name)
            .all()
        )

    def search_by_tag(self, tag: str) -> List[Meal]:
        """Get meals carrying a tag (case-insensitive)"""
        tag = tag.strip().lower()
        meals = self.db.query(Meal).order_by(Meal.name).all()
        # tags are TEXT[] on PostgreSQL and JSON elsewhere; match in Python
        return [meal for meal in meals if tag in [t.lower() for t in meal.tags or []]]

    def set_favorite(self, meal_id: UUID, is_favorite: bool) -> bool:
        """
        Flag or unflag a meal with a single UPDATE statement.

        Returns:
            True if a visible meal was updated, False otherwise
        """
        updated = (
            self.db.query(Meal)
            .filter(Meal.id == meal_id)
            .update({Meal.is_favorite: is_favorite}, synchronize_session=False)
        )
        self.commit()
        return updated > 0
