"""Grocery list service"""

import logging
from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from domain.models import GroceryList
from domain.policies import require_principal
from domain.schemas.grocery_schemas import (
    GroceryItem,
    GroceryListCreate,
    GroceryListUpdate,
)
from repositories import GroceryListRepository, MealPlanRepository, PlannedMealRepository
from app.exceptions import NotFoundError, ServiceValidationError

logger = logging.getLogger("mealplanner.grocery")


def _dump_items(items: List[GroceryItem]) -> List[dict]:
    return [item.model_dump() for item in items]


class GroceryService:
    """Business logic for grocery lists."""

    @staticmethod
    def create_list(db: Session, payload: GroceryListCreate) -> GroceryList:
        """
        Create a grocery list, optionally linked to one of the principal's plans.

        Raises:
            NotFoundError: If meal_plan_id is given but not visible
        """
        user_id = require_principal(db)
        if payload.meal_plan_id is not None and not MealPlanRepository(db).exists(
            payload.meal_plan_id
        ):
            logger.warning(f"plan_not_found plan_id={payload.meal_plan_id}")
            raise NotFoundError()

        grocery = GroceryList(
            user_id=user_id,
            meal_plan_id=payload.meal_plan_id,
            name=payload.name,
            items=_dump_items(payload.items),
        )
        grocery = GroceryListRepository(db).create(grocery)
        logger.info(
            f"grocery_list_created list_id={grocery.id} items={len(payload.items)}"
        )
        return grocery

    @staticmethod
    def get_list(db: Session, list_id: UUID) -> GroceryList:
        grocery = GroceryListRepository(db).get_by_id(list_id)
        if grocery is None:
            logger.warning(f"grocery_list_not_found list_id={list_id}")
            raise NotFoundError()
        return grocery

    @staticmethod
    def list_lists(db: Session, open_only: bool = False) -> List[GroceryList]:
        repo = GroceryListRepository(db)
        return repo.list_open() if open_only else repo.get_all()

    @staticmethod
    def update_list(db: Session, list_id: UUID, payload: GroceryListUpdate) -> GroceryList:
        grocery = GroceryService.get_list(db, list_id)
        fields = payload.model_dump(exclude_unset=True)
        if fields.get("name") is not None:
            grocery.name = fields["name"]
        if fields.get("items") is not None:
            grocery.items = _dump_items(payload.items)
        if fields.get("is_completed") is not None:
            grocery.is_completed = fields["is_completed"]
        grocery = GroceryListRepository(db).update(grocery)
        logger.info(f"grocery_list_updated list_id={list_id} fields={sorted(fields)}")
        return grocery

    @staticmethod
    def update_items(db: Session, list_id: UUID, items: List[GroceryItem]) -> GroceryList:
        """Replace the list's items"""
        grocery = GroceryService.get_list(db, list_id)
        grocery.items = _dump_items(items)
        return GroceryListRepository(db).update(grocery)

    @staticmethod
    def set_item_checked(
        db: Session, list_id: UUID, index: int, checked: bool = True
    ) -> GroceryList:
        """Check or uncheck the item at a position of the list"""
        grocery = GroceryService.get_list(db, list_id)
        items = [dict(item) for item in grocery.items or []]
        if not 0 <= index < len(items):
            raise ServiceValidationError(
                f"Item index {index} out of range", details={"field": "index"}
            )
        items[index]["checked"] = checked
        # JSON columns track reassignment, not in-place mutation
        grocery.items = items
        return GroceryListRepository(db).update(grocery)

    @staticmethod
    def complete_list(db: Session, list_id: UUID) -> GroceryList:
        grocery = GroceryService.get_list(db, list_id)
        grocery.is_completed = True
        grocery = GroceryListRepository(db).update(grocery)
        logger.info(f"grocery_list_completed list_id={list_id}")
        return grocery

    @staticmethod
    def delete_list(db: Session, list_id: UUID) -> None:
        if not GroceryListRepository(db).delete(list_id):
            logger.warning(f"grocery_list_not_found list_id={list_id}")
            raise NotFoundError()
        logger.info(f"grocery_list_deleted list_id={list_id}")

    @staticmethod
    def build_from_plan(
        db: Session, plan_id: UUID, name: Optional[str] = None
    ) -> GroceryList:
        """
        Create a grocery list from a meal plan.

        Algorithm:
        1. Load the plan's planned meals in calendar order
        2. Collect the ingredients of each scheduled meal
        3. De-duplicate case-insensitively, keeping first-seen order
        4. Store them as unchecked items linked to the plan

        Raises:
            NotFoundError: If the plan is not visible
        """
        plan = MealPlanRepository(db).get_by_id(plan_id)
        if plan is None:
            logger.warning(f"plan_not_found plan_id={plan_id}")
            raise NotFoundError()

        planned_meals = PlannedMealRepository(db).get_by_plan_id(plan_id)
        if not planned_meals:
            logger.warning(f"No planned meals found for plan {plan_id}")

        seen = set()
        items = []
        for planned in planned_meals:
            for ingredient in planned.meal.ingredients or []:
                key = ingredient.strip().lower()
                if not key or key in seen:
                    continue
                seen.add(key)
                items.append(GroceryItem(name=ingredient.strip()))

        payload = GroceryListCreate(
            name=name or f"Groceries for week of {plan.week_start_date.isoformat()}",
            meal_plan_id=plan.id,
            items=items,
        )
        grocery = GroceryService.create_list(db, payload)
        logger.info(f"grocery_list_built plan_id={plan_id} items={len(items)}")
        return grocery
