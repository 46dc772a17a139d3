"""
Shared test fixtures and utilities for the MealPlanner test suite.

Tests run against TEST_DATABASE_URL, an in-memory SQLite database by default.
Every test gets a fresh schema. Fixtures come in two flavours, mirroring the
two kinds of session the store hands out:

- system_db: a privileged session that bypasses row policies, used to set up
  principals and rows owned by anyone
- principal_db: a factory opening sessions scoped to one principal
"""

import os
import uuid
from datetime import date
from typing import Callable, Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from domain.enums import MealType
from domain.models import Base, GroceryList, Meal, MealPlan, PlannedMeal
from domain.models.database import init_database, principal_session, system_session
from domain.policies import PolicySession
from domain.schemas.profile_schemas import RegisterPrincipal
from services.identity_service import IdentityService

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite://")


def _make_engine(url: str):
    if url.startswith("sqlite"):
        # one shared connection so every session sees the same in-memory database
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url)


testing_engine = _make_engine(TEST_DATABASE_URL)
TestingSessionLocal = sessionmaker(bind=testing_engine, class_=PolicySession)


# Helper function to generate unique emails
def unique_email(prefix: str = "test") -> str:
    """Generate unique email address using UUID to avoid conflicts"""
    return f"{prefix}-{uuid.uuid4()}@example.com"


# Realistic default user profiles
REALISTIC_USERS = {
    "default": {"full_name": "Sarah Martinez", "email_prefix": "sarah.martinez"},
    "athlete": {"full_name": "Michael Chen", "email_prefix": "michael.chen"},
    "casual": {"full_name": "Emma Johnson", "email_prefix": "emma.johnson"},
}

# A Monday
WEEK_START = date(2024, 1, 1)


@pytest.fixture(scope="function")
def system_db() -> Generator[Session, None, None]:
    """
    Create a fresh schema and a privileged session on it.

    Yields:
        Session: system session, row policies bypassed
    """
    Base.metadata.drop_all(bind=testing_engine)
    init_database(testing_engine)
    with system_session(TestingSessionLocal) as session:
        yield session


@pytest.fixture(scope="function")
def principal_db(system_db) -> Callable[[uuid.UUID], Session]:
    """
    Factory for principal-scoped sessions on the schema created by system_db.

    Example:
        >>> db = principal_db(alice.id)
        >>> MealRepository(db).get_all()  # only Alice's meals
    """
    opened = []

    def _open(principal_id):
        context = principal_session(principal_id, TestingSessionLocal)
        opened.append(context)
        return context.__enter__()

    yield _open

    for context in reversed(opened):
        context.__exit__(None, None, None)


def make_user(db: Session, profile_type: str = "default", email: str = None):
    """
    Register a principal through the identity hook and return its profile.

    Args:
        db: system session
        profile_type: key of REALISTIC_USERS
        email: explicit email, generated when omitted
    """
    profile = REALISTIC_USERS.get(profile_type, REALISTIC_USERS["default"])
    payload = RegisterPrincipal(
        email=email or unique_email(profile["email_prefix"]),
        full_name=profile["full_name"],
    )
    return IdentityService.register_principal(db, payload)


def make_meal(db: Session, user_id, name: str = "Chicken Stir Fry", **overrides) -> Meal:
    """Insert a meal owned by user_id with realistic defaults"""
    fields = dict(
        user_id=user_id,
        name=name,
        meal_type=MealType.DINNER,
        ingredients=["200g chicken breast", "1 bell pepper", "2 tbsp soy sauce"],
        instructions=["Slice the chicken", "Stir fry with vegetables", "Add sauce"],
        preparation_time=25,
        calories=450,
        tags=["quick", "high-protein"],
    )
    fields.update(overrides)
    meal = Meal(**fields)
    db.add(meal)
    db.commit()
    db.refresh(meal)
    return meal


def make_plan(db: Session, user_id, week_start_date: date = WEEK_START, **overrides) -> MealPlan:
    plan = MealPlan(user_id=user_id, week_start_date=week_start_date, **overrides)
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return plan


def make_planned_meal(
    db: Session,
    plan: MealPlan,
    meal: Meal,
    scheduled_date: date = WEEK_START,
    meal_type: MealType = MealType.DINNER,
) -> PlannedMeal:
    planned = PlannedMeal(
        meal_plan_id=plan.id,
        meal_id=meal.id,
        scheduled_date=scheduled_date,
        meal_type=meal_type,
    )
    db.add(planned)
    db.commit()
    db.refresh(planned)
    return planned


def make_grocery_list(db: Session, user_id, plan: MealPlan = None, **overrides) -> GroceryList:
    fields = dict(
        user_id=user_id,
        meal_plan_id=plan.id if plan is not None else None,
        name="Weekly shop",
        items=[{"name": "rice", "quantity": 1.0, "unit": "kg", "checked": False}],
    )
    fields.update(overrides)
    grocery = GroceryList(**fields)
    db.add(grocery)
    db.commit()
    db.refresh(grocery)
    return grocery
