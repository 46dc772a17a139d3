"""
Tests for lifecycle cascades: principal deletion, plan deletion and meal
deletion, executed by the database's ON DELETE rules.
"""

import uuid

import pytest

from test_fixtures import (
    WEEK_START,
    make_grocery_list,
    make_meal,
    make_plan,
    make_planned_meal,
    make_user,
    principal_db,
    system_db,
)
from app.exceptions import NotFoundError
from domain.enums import MealType
from domain.models import AuthUser, GroceryList, Meal, MealPlan, PlannedMeal, UserProfile
from services.identity_service import IdentityService
from services.meal_service import MealService
from services.planner_service import PlannerService


def _build_graph(db, profile):
    meal = make_meal(db, profile.id)
    plan = make_plan(db, profile.id)
    planned = make_planned_meal(db, plan, meal)
    grocery = make_grocery_list(db, profile.id, plan)
    return dict(meal=meal.id, plan=plan.id, planned=planned.id, grocery=grocery.id)


def test_deleting_principal_removes_everything_it_owns(system_db):
    alice = make_user(system_db, "default")
    bob = make_user(system_db, "athlete")
    alice_id = alice.id
    alice_rows = _build_graph(system_db, alice)
    bob_rows = _build_graph(system_db, bob)

    IdentityService.delete_principal(system_db, alice_id)
    system_db.expire_all()

    assert system_db.query(AuthUser).filter(AuthUser.id == alice_id).count() == 0
    assert system_db.query(UserProfile).filter(UserProfile.id == alice_id).count() == 0
    assert system_db.query(Meal).filter(Meal.user_id == alice_id).count() == 0
    assert system_db.query(MealPlan).filter(MealPlan.user_id == alice_id).count() == 0
    assert system_db.query(GroceryList).filter(GroceryList.user_id == alice_id).count() == 0
    assert (
        system_db.query(PlannedMeal)
        .filter(PlannedMeal.meal_plan_id == alice_rows["plan"])
        .count()
        == 0
    )

    # the other tenant is untouched
    assert system_db.get(Meal, bob_rows["meal"]) is not None
    assert system_db.get(MealPlan, bob_rows["plan"]) is not None
    assert system_db.get(PlannedMeal, bob_rows["planned"]) is not None
    assert system_db.get(GroceryList, bob_rows["grocery"]) is not None


def test_deleting_unknown_principal_is_not_found(system_db):
    with pytest.raises(NotFoundError):
        IdentityService.delete_principal(system_db, uuid.uuid4())


def test_deleting_plan_keeps_grocery_list_unlinked(system_db, principal_db):
    alice = make_user(system_db)
    rows = _build_graph(system_db, alice)
    db = principal_db(alice.id)

    PlannerService.delete_plan(db, rows["plan"])
    system_db.expire_all()

    grocery = system_db.get(GroceryList, rows["grocery"])
    assert grocery is not None
    assert grocery.meal_plan_id is None
    assert grocery.name == "Weekly shop"
    assert system_db.get(PlannedMeal, rows["planned"]) is None
    # the meal itself outlives the plan
    assert system_db.get(Meal, rows["meal"]) is not None


def test_deleting_plan_with_loaded_lists_unlinks_them(system_db, principal_db):
    alice = make_user(system_db)
    rows = _build_graph(system_db, alice)
    db = principal_db(alice.id)

    plan = PlannerService.get_plan(db, rows["plan"])
    assert [g.id for g in plan.grocery_lists] == [rows["grocery"]]
    assert len(plan.planned_meals) == 1

    PlannerService.delete_plan(db, rows["plan"])
    system_db.expire_all()

    assert system_db.get(GroceryList, rows["grocery"]).meal_plan_id is None
    assert system_db.get(PlannedMeal, rows["planned"]) is None


def test_deleting_meal_removes_its_planned_meals(system_db, principal_db):
    alice = make_user(system_db)
    rows = _build_graph(system_db, alice)
    keep = make_meal(system_db, alice.id, name="Greek Salad")
    kept_slot = make_planned_meal(
        system_db,
        system_db.get(MealPlan, rows["plan"]),
        keep,
        scheduled_date=WEEK_START,
        meal_type=MealType.LUNCH,
    )
    db = principal_db(alice.id)

    MealService.delete_meal(db, rows["meal"])
    system_db.expire_all()

    assert system_db.get(PlannedMeal, rows["planned"]) is None
    assert system_db.get(PlannedMeal, kept_slot.id) is not None
    assert system_db.get(MealPlan, rows["plan"]) is not None
