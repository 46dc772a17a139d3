"""Weekly meal planning service"""

import logging
from datetime import date, timedelta
from typing import List
from uuid import UUID
from sqlalchemy.orm import Session

from domain.models import MealPlan, PlannedMeal
from domain.policies import require_principal
from domain.schemas.plan_schemas import (
    MealPlanCreate,
    MealPlanUpdate,
    PlannedMealCreate,
    PlannedMealUpdate,
)
from repositories import MealRepository, MealPlanRepository, PlannedMealRepository
from app.exceptions import NotFoundError, ServiceValidationError

logger = logging.getLogger("mealplanner.planner")

DAYS_PER_WEEK = 7


def week_start(day: date) -> date:
    """Monday of the week containing day"""
    return day - timedelta(days=day.weekday())


class PlannerService:
    """Business logic for meal plans and the meals scheduled in them."""

    @staticmethod
    def create_plan(db: Session, payload: MealPlanCreate) -> MealPlan:
        """
        Create the principal's plan for a week.

        Args:
            db: Principal-scoped session
            payload: week_start_date may be any day of the week; it is
                normalized to that week's Monday

        Raises:
            ConflictError: If the principal already has a plan for that week
        """
        user_id = require_principal(db)
        start = week_start(payload.week_start_date)
        plan = MealPlan(user_id=user_id, week_start_date=start, notes=payload.notes)
        plan = MealPlanRepository(db).create(plan)
        logger.info(f"plan_created plan_id={plan.id} user_id={user_id} week={start}")
        return plan

    @staticmethod
    def get_plan(db: Session, plan_id: UUID) -> MealPlan:
        plan = MealPlanRepository(db).get_by_id(plan_id)
        if plan is None:
            logger.warning(f"plan_not_found plan_id={plan_id}")
            raise NotFoundError()
        return plan

    @staticmethod
    def get_plan_for_week(db: Session, day: date) -> MealPlan:
        """Plan of the week containing day"""
        plan = MealPlanRepository(db).get_by_week(week_start(day))
        if plan is None:
            raise NotFoundError()
        return plan

    @staticmethod
    def list_plans(db: Session, limit: int = 20) -> List[MealPlan]:
        return MealPlanRepository(db).list_recent(limit=limit)

    @staticmethod
    def update_plan(db: Session, plan_id: UUID, payload: MealPlanUpdate) -> MealPlan:
        repo = MealPlanRepository(db)
        plan = repo.get_by_id(plan_id)
        if plan is None:
            logger.warning(f"plan_not_found plan_id={plan_id}")
            raise NotFoundError()

        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(plan, key, value)
        plan = repo.update(plan)
        logger.info(f"plan_updated plan_id={plan_id}")
        return plan

    @staticmethod
    def delete_plan(db: Session, plan_id: UUID) -> None:
        """Delete a plan; planned meals are removed, grocery lists are unlinked"""
        if not MealPlanRepository(db).delete(plan_id):
            logger.warning(f"plan_not_found plan_id={plan_id}")
            raise NotFoundError()
        logger.info(f"plan_deleted plan_id={plan_id}")

    @staticmethod
    def schedule_meal(db: Session, plan_id: UUID, payload: PlannedMealCreate) -> PlannedMeal:
        """
        Put a meal into a plan slot.

        Raises:
            NotFoundError: If the plan or the meal is not visible
            ServiceValidationError: If the date is outside the plan's week
            ConflictError: If the date / meal-type slot is already taken
        """
        plan = PlannerService.get_plan(db, plan_id)
        PlannerService._check_in_week(plan, payload.scheduled_date)
        PlannerService._check_meal_visible(db, payload.meal_id)

        planned = PlannedMeal(meal_plan_id=plan.id, **payload.model_dump())
        planned = PlannedMealRepository(db).create(planned)
        logger.info(
            f"meal_scheduled plan_id={plan_id} meal_id={payload.meal_id} "
            f"date={payload.scheduled_date} meal_type={payload.meal_type.value}"
        )
        return planned

    @staticmethod
    def list_planned_meals(db: Session, plan_id: UUID) -> List[PlannedMeal]:
        PlannerService.get_plan(db, plan_id)
        return PlannedMealRepository(db).get_by_plan_id(plan_id)

    @staticmethod
    def update_planned_meal(
        db: Session, planned_meal_id: UUID, payload: PlannedMealUpdate
    ) -> PlannedMeal:
        """Move or edit a planned meal; the same checks as schedule_meal apply"""
        repo = PlannedMealRepository(db)
        planned = repo.get_by_id(planned_meal_id)
        if planned is None:
            logger.warning(f"planned_meal_not_found planned_meal_id={planned_meal_id}")
            raise NotFoundError()

        fields = payload.model_dump(exclude_unset=True)
        if fields.get("scheduled_date") is not None:
            PlannerService._check_in_week(planned.meal_plan, fields["scheduled_date"])
        if fields.get("meal_id") is not None:
            PlannerService._check_meal_visible(db, fields["meal_id"])

        for key, value in fields.items():
            if value is None and key != "notes":
                continue
            setattr(planned, key, value)
        planned = repo.update(planned)
        logger.info(f"planned_meal_updated planned_meal_id={planned_meal_id}")
        return planned

    @staticmethod
    def unschedule_meal(db: Session, planned_meal_id: UUID) -> None:
        if not PlannedMealRepository(db).delete(planned_meal_id):
            logger.warning(f"planned_meal_not_found planned_meal_id={planned_meal_id}")
            raise NotFoundError()
        logger.info(f"meal_unscheduled planned_meal_id={planned_meal_id}")

    @staticmethod
    def _check_in_week(plan: MealPlan, day: date) -> None:
        end = plan.week_start_date + timedelta(days=DAYS_PER_WEEK - 1)
        if not plan.week_start_date <= day <= end:
            raise ServiceValidationError(
                f"scheduled_date must fall between {plan.week_start_date} and {end}",
                details={"field": "scheduled_date"},
            )

    @staticmethod
    def _check_meal_visible(db: Session, meal_id: UUID) -> None:
        if not MealRepository(db).exists(meal_id):
            logger.warning(f"meal_not_found meal_id={meal_id}")
            raise NotFoundError()
