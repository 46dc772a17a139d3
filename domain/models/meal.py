"""
Meal (recipe) model.
"""

from sqlalchemy import Column, Text, ForeignKey, Integer, Boolean, Enum as SQLEnum
from sqlalchemy.orm import relationship
import uuid

from domain.enums import MealType, DifficultyLevel, enum_values
from domain.models.base import Base
from domain.models.mixins import TimestampMixin
from domain.models.types import GUID, StringList

meal_type_enum = SQLEnum(MealType, name="meal_type", values_callable=enum_values)


class Meal(TimestampMixin, Base):
    """A recipe owned by one user"""

    __tablename__ = "meals"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        GUID(),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(Text, nullable=False)
    description = Column(Text)
    meal_type = Column(
        meal_type_enum,
        nullable=False,
    )
    ingredients = Column(StringList(), nullable=False)
    instructions = Column(StringList(), nullable=False)
    preparation_time = Column(Integer)  # minutes
    difficulty = Column(
        SQLEnum(DifficultyLevel, name="difficulty_level", values_callable=enum_values),
        default=DifficultyLevel.MEDIUM,
    )
    calories = Column(Integer)
    protein = Column(Integer)
    carbs = Column(Integer)
    fats = Column(Integer)
    image_url = Column(Text)
    tags = Column(StringList(), nullable=False, default=list)
    is_favorite = Column(Boolean, nullable=False, default=False)

    user = relationship("UserProfile", back_populates="meals")
    planned_meals = relationship(
        "PlannedMeal", back_populates="meal", cascade="all", passive_deletes=True
    )
