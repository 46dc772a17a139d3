"""Meal (recipe) service"""

import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from domain.enums import MealType
from domain.models import Meal
from domain.policies import require_principal
from domain.schemas.meal_schemas import MealCreate, MealUpdate
from repositories import MealRepository
from app.exceptions import NotFoundError

logger = logging.getLogger("mealplanner.meals")

# Columns that reject NULL; an explicit null in an update leaves them unchanged
REQUIRED_FIELDS = ("name", "meal_type", "ingredients", "instructions", "tags", "is_favorite")


class MealService:
    """Business logic for the principal's recipe collection"""

    @staticmethod
    def create_meal(db: Session, payload: MealCreate) -> Meal:
        """Create a meal owned by the session's principal"""
        user_id = require_principal(db)
        meal = Meal(user_id=user_id, **payload.model_dump())
        meal = MealRepository(db).create(meal)
        logger.info(f"meal_created meal_id={meal.id} user_id={user_id}")
        return meal

    @staticmethod
    def get_meal(db: Session, meal_id: UUID) -> Meal:
        meal = MealRepository(db).get_by_id(meal_id)
        if meal is None:
            logger.warning(f"meal_not_found meal_id={meal_id}")
            raise NotFoundError()
        return meal

    @staticmethod
    def list_meals(
        db: Session,
        meal_type: Optional[MealType] = None,
        favorites_only: bool = False,
        tag: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Meal]:
        """
        List visible meals, optionally narrowed by meal type, favorite flag
        or tag. Filters combine; pagination applies only when none is given.
        """
        repo = MealRepository(db)
        if meal_type is None and not favorites_only and tag is None:
            return repo.get_all(skip=skip, limit=limit)

        if tag is not None:
            meals = repo.search_by_tag(tag)
        elif favorites_only:
            meals = repo.list_favorites()
        else:
            meals = repo.list_by_type(meal_type)

        if meal_type is not None:
            meals = [m for m in meals if m.meal_type == meal_type]
        if favorites_only:
            meals = [m for m in meals if m.is_favorite]
        return meals

    @staticmethod
    def update_meal(db: Session, meal_id: UUID, payload: MealUpdate) -> Meal:
        """Apply a partial update; updated_at is stamped by the store"""
        repo = MealRepository(db)
        meal = repo.get_by_id(meal_id)
        if meal is None:
            logger.warning(f"meal_not_found meal_id={meal_id}")
            raise NotFoundError()

        fields = payload.model_dump(exclude_unset=True)
        for key, value in fields.items():
            if value is None and key in REQUIRED_FIELDS:
                continue
            setattr(meal, key, value)

        meal = repo.update(meal)
        logger.info(f"meal_updated meal_id={meal_id} fields={sorted(fields)}")
        return meal

    @staticmethod
    def toggle_favorite(db: Session, meal_id: UUID) -> Meal:
        """Flip the favorite flag"""
        repo = MealRepository(db)
        meal = repo.get_by_id(meal_id)
        if meal is None:
            raise NotFoundError()

        if not repo.set_favorite(meal_id, not meal.is_favorite):
            raise NotFoundError()
        db.refresh(meal)
        logger.info(f"meal_favorite_toggled meal_id={meal_id} is_favorite={meal.is_favorite}")
        return meal

    @staticmethod
    def delete_meal(db: Session, meal_id: UUID) -> None:
        """Delete a meal; its planned meals go with it"""
        if not MealRepository(db).delete(meal_id):
            logger.warning(f"meal_not_found meal_id={meal_id}")
            raise NotFoundError()
        logger.info(f"meal_deleted meal_id={meal_id}")
