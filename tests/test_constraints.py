"""
Tests for uniqueness and foreign-key constraints and their translation into
application errors.
"""

import uuid
from datetime import timedelta
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError

from test_fixtures import (
    WEEK_START,
    make_meal,
    make_plan,
    make_user,
    principal_db,
    system_db,
    unique_email,
)
from app.exceptions import (
    ConflictError,
    InvalidReferenceError,
    ServiceValidationError,
)
from domain.enums import MealType
from domain.models import MealPlan, PlannedMeal
from domain.schemas.plan_schemas import MealPlanCreate, PlannedMealCreate
from domain.schemas.profile_schemas import RegisterPrincipal
from repositories import PlannedMealRepository, translate_integrity_error
from services.identity_service import IdentityService
from services.planner_service import PlannerService


class FakeDriverError(Exception):
    """Stands in for a psycopg2 error carrying a SQLSTATE"""

    def __init__(self, message, pgcode=None, constraint_name=None):
        super().__init__(message)
        self.pgcode = pgcode
        self.diag = Mock(constraint_name=constraint_name)


def _integrity_error(orig):
    return IntegrityError("INSERT ...", {}, orig)


# =============================================================================
# MEAL PLAN UNIQUENESS
# =============================================================================


def test_duplicate_week_plan_is_a_conflict(system_db, principal_db):
    alice = make_user(system_db)
    db = principal_db(alice.id)

    plan = PlannerService.create_plan(db, MealPlanCreate(week_start_date=WEEK_START, notes="first"))

    with pytest.raises(ConflictError) as exc_info:
        PlannerService.create_plan(db, MealPlanCreate(week_start_date=WEEK_START, notes="second"))
    assert exc_info.value.http_status == 409

    # nothing was overwritten
    plans = PlannerService.list_plans(db)
    assert [p.id for p in plans] == [plan.id]
    assert plans[0].notes == "first"


def test_same_week_in_another_day_is_still_a_conflict(system_db, principal_db):
    """Week starts are normalized, so any day of an existing week collides"""
    alice = make_user(system_db)
    db = principal_db(alice.id)

    PlannerService.create_plan(db, MealPlanCreate(week_start_date=WEEK_START))
    with pytest.raises(ConflictError):
        PlannerService.create_plan(
            db, MealPlanCreate(week_start_date=WEEK_START + timedelta(days=3))
        )


def test_two_users_may_plan_the_same_week(system_db, principal_db):
    alice = make_user(system_db, "default")
    bob = make_user(system_db, "athlete")

    PlannerService.create_plan(principal_db(alice.id), MealPlanCreate(week_start_date=WEEK_START))
    PlannerService.create_plan(principal_db(bob.id), MealPlanCreate(week_start_date=WEEK_START))

    assert system_db.query(MealPlan).count() == 2


# =============================================================================
# PLANNED MEAL SLOT UNIQUENESS
# =============================================================================


def test_duplicate_slot_is_a_conflict(system_db, principal_db):
    alice = make_user(system_db)
    meal = make_meal(system_db, alice.id)
    other = make_meal(system_db, alice.id, name="Lentil Soup")
    plan = make_plan(system_db, alice.id)
    db = principal_db(alice.id)

    first = PlannerService.schedule_meal(
        db,
        plan.id,
        PlannedMealCreate(meal_id=meal.id, scheduled_date=WEEK_START, meal_type=MealType.DINNER),
    )

    with pytest.raises(ConflictError):
        PlannerService.schedule_meal(
            db,
            plan.id,
            PlannedMealCreate(
                meal_id=other.id, scheduled_date=WEEK_START, meal_type=MealType.DINNER
            ),
        )

    slots = PlannerService.list_planned_meals(db, plan.id)
    assert [s.id for s in slots] == [first.id]
    assert slots[0].meal_id == meal.id


def test_same_day_different_meal_type_is_allowed(system_db, principal_db):
    alice = make_user(system_db)
    meal = make_meal(system_db, alice.id)
    plan = make_plan(system_db, alice.id)
    db = principal_db(alice.id)

    for meal_type in (MealType.BREAKFAST, MealType.LUNCH, MealType.DINNER):
        PlannerService.schedule_meal(
            db,
            plan.id,
            PlannedMealCreate(meal_id=meal.id, scheduled_date=WEEK_START, meal_type=meal_type),
        )

    assert len(PlannerService.list_planned_meals(db, plan.id)) == 3


# =============================================================================
# FOREIGN KEYS AND IDENTITY
# =============================================================================


def test_missing_parent_is_an_invalid_reference(system_db):
    alice = make_user(system_db)
    plan = make_plan(system_db, alice.id)

    planned = PlannedMeal(
        meal_plan_id=plan.id,
        meal_id=uuid.uuid4(),
        scheduled_date=WEEK_START,
        meal_type=MealType.LUNCH,
    )
    with pytest.raises(InvalidReferenceError) as exc_info:
        PlannedMealRepository(system_db).create(planned)
    assert exc_info.value.http_status == 422


def test_duplicate_registration_is_a_conflict(system_db):
    email = unique_email("sarah")
    make_user(system_db, email=email)

    with pytest.raises(ConflictError):
        IdentityService.register_principal(system_db, RegisterPrincipal(email=email))


# =============================================================================
# ERROR TRANSLATION
# =============================================================================


def test_translate_postgres_unique_violation():
    db = Mock()
    orig = FakeDriverError("duplicate key", pgcode="23505", constraint_name="uq_meal_plans_user_week")

    error = translate_integrity_error(db, _integrity_error(orig))

    db.rollback.assert_called_once()
    assert isinstance(error, ConflictError)
    assert error.details == {"constraint": "uq_meal_plans_user_week"}


def test_translate_postgres_foreign_key_violation():
    db = Mock()
    orig = FakeDriverError("violates foreign key", pgcode="23503", constraint_name="planned_meals_meal_id_fkey")

    error = translate_integrity_error(db, _integrity_error(orig))

    assert isinstance(error, InvalidReferenceError)
    assert error.details == {"constraint": "planned_meals_meal_id_fkey"}


def test_translate_sqlite_messages():
    unique = translate_integrity_error(
        Mock(),
        _integrity_error(
            Exception("UNIQUE constraint failed: meal_plans.user_id, meal_plans.week_start_date")
        ),
    )
    assert isinstance(unique, ConflictError)
    assert unique.details == {"constraint": "meal_plans.user_id, meal_plans.week_start_date"}

    foreign = translate_integrity_error(
        Mock(), _integrity_error(Exception("FOREIGN KEY constraint failed"))
    )
    assert isinstance(foreign, InvalidReferenceError)

    not_null = translate_integrity_error(
        Mock(), _integrity_error(Exception("NOT NULL constraint failed: meals.name"))
    )
    assert isinstance(not_null, ServiceValidationError)


def test_translate_unknown_integrity_error():
    error = translate_integrity_error(
        Mock(), _integrity_error(FakeDriverError("check violation", pgcode="23514"))
    )
    assert isinstance(error, ServiceValidationError)
    assert error.message == "Database integrity error"
