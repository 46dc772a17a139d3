"""
Grocery Repository - Data access layer for grocery lists
"""

from typing import List
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import GroceryList


class GroceryListRepository(BaseRepository[GroceryList]):
    """Repository for grocery lists"""

    def __init__(self, db: Session):
        super().__init__(db, GroceryList)

    def get_by_plan_id(self, plan_id: UUID) -> List[GroceryList]:
        """Get lists generated from a meal plan"""
        return (
            self.db.query(GroceryList)
            .filter(GroceryList.meal_plan_id == plan_id)
            .order_by(GroceryList.created_at)
            .all()
        )

    def list_open(self) -> List[GroceryList]:
        """Get lists not yet completed, newest first"""
        return (
            self.db.query(GroceryList)
            .filter(GroceryList.is_completed.is_(False))
            .order_by(GroceryList.created_at.desc())
            .all()
        )
