"""
Meal planning models: weekly plans, their scheduled meals, and grocery lists.
"""

from sqlalchemy import (
    Column,
    Text,
    TIMESTAMP,
    ForeignKey,
    Integer,
    Date,
    Boolean,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import uuid

from domain.models.base import Base
from domain.models.meal import meal_type_enum
from domain.models.mixins import TimestampMixin
from domain.models.types import GUID, JSONList, server_now


class MealPlan(TimestampMixin, Base):
    """Weekly meal plan, one per user per week"""

    __tablename__ = "meal_plans"
    __table_args__ = (
        UniqueConstraint("user_id", "week_start_date", name="uq_meal_plans_user_week"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        GUID(),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    week_start_date = Column(Date, nullable=False)
    notes = Column(Text)

    user = relationship("UserProfile", back_populates="meal_plans")
    planned_meals = relationship(
        "PlannedMeal",
        back_populates="meal_plan",
        cascade="all",
        passive_deletes=True,
        order_by="PlannedMeal.scheduled_date",
    )
    grocery_lists = relationship(
        "GroceryList", back_populates="meal_plan", passive_deletes=True
    )


class PlannedMeal(Base):
    """A meal assigned to a date / meal-type slot of a plan.

    Join record without a revision timestamp.
    """

    __tablename__ = "planned_meals"
    __table_args__ = (
        UniqueConstraint(
            "meal_plan_id",
            "scheduled_date",
            "meal_type",
            name="uq_planned_meals_slot",
        ),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    meal_plan_id = Column(
        GUID(),
        ForeignKey("meal_plans.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    meal_id = Column(
        GUID(),
        ForeignKey("meals.id", ondelete="CASCADE"),
        nullable=False,
    )
    scheduled_date = Column(Date, nullable=False)
    meal_type = Column(
        meal_type_enum,
        nullable=False,
    )
    servings = Column(Integer, nullable=False, default=1)
    notes = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=server_now())

    meal_plan = relationship("MealPlan", back_populates="planned_meals")
    meal = relationship("Meal", back_populates="planned_meals")


class GroceryList(TimestampMixin, Base):
    """Shopping list, optionally generated from a meal plan"""

    __tablename__ = "grocery_lists"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        GUID(),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # the list outlives its plan
    meal_plan_id = Column(
        GUID(),
        ForeignKey("meal_plans.id", ondelete="SET NULL"),
        nullable=True,
    )
    name = Column(Text, nullable=False)
    items = Column(JSONList(), nullable=False, default=list)
    is_completed = Column(Boolean, nullable=False, default=False)

    user = relationship("UserProfile", back_populates="grocery_lists")
    meal_plan = relationship("MealPlan", back_populates="grocery_lists")
