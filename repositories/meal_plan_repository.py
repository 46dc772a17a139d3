"""
Meal plan repositories - weekly plans and their scheduled meals
"""

from datetime import date
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import MealPlan, PlannedMeal


class MealPlanRepository(BaseRepository[MealPlan]):
    """Repository for meal plans"""

    def __init__(self, db: Session):
        super().__init__(db, MealPlan)

    def get_by_week(self, week_start_date: date) -> Optional[MealPlan]:
        """Get the principal's plan for the week starting on week_start_date"""
        return (
            self.db.query(MealPlan)
            .filter(MealPlan.week_start_date == week_start_date)
            .first()
        )

    def list_recent(self, limit: int = 20) -> List[MealPlan]:
        """Get plans, most recent week first"""
        return (
            self.db.query(MealPlan)
            .order_by(MealPlan.week_start_date.desc())
            .limit(limit)
            .all()
        )


class PlannedMealRepository(BaseRepository[PlannedMeal]):
    """Repository for planned meals"""

    def __init__(self, db: Session):
        super().__init__(db, PlannedMeal)

    def get_by_plan_id(self, plan_id: UUID) -> List[PlannedMeal]:
        """Get a plan's planned meals in calendar order"""
        return (
            self.db.query(PlannedMeal)
            .filter(PlannedMeal.meal_plan_id == plan_id)
            .order_by(PlannedMeal.scheduled_date, PlannedMeal.created_at)
            .all()
        )

    def get_for_date(self, scheduled_date: date) -> List[PlannedMeal]:
        """Get every planned meal on a given day across the principal's plans"""
        return (
            self.db.query(PlannedMeal)
            .filter(PlannedMeal.scheduled_date == scheduled_date)
            .order_by(PlannedMeal.created_at)
            .all()
        )
