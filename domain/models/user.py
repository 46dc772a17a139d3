"""
Identity principal and user profile models.
"""

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Integer, event, insert
from sqlalchemy.orm import relationship
import uuid

from domain.enums import DietaryPreference
from domain.models.base import Base
from domain.models.mixins import TimestampMixin
from domain.models.types import GUID, EnumList, server_now

DEFAULT_CALORIE_GOAL = 2000


class AuthUser(Base):
    """Identity principal, the store-side stand-in for the identity provider's users"""

    __tablename__ = "auth_users"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    email = Column(Text, unique=True, nullable=False)
    full_name = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=server_now())

    profile = relationship(
        "UserProfile",
        back_populates="principal",
        uselist=False,
        cascade="all",
        passive_deletes=True,
    )


class UserProfile(TimestampMixin, Base):
    """Application profile, 1:1 with an AuthUser"""

    __tablename__ = "user_profiles"

    id = Column(
        GUID(),
        ForeignKey("auth_users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    email = Column(Text, unique=True, nullable=False)
    full_name = Column(Text)
    daily_calorie_goal = Column(Integer, default=DEFAULT_CALORIE_GOAL)
    dietary_preferences = Column(
        EnumList(DietaryPreference),
        nullable=False,
        default=lambda: [DietaryPreference.NONE],
    )

    # Relationships; the database performs the cascades
    principal = relationship("AuthUser", back_populates="profile")
    meals = relationship(
        "Meal", back_populates="user", cascade="all", passive_deletes=True
    )
    meal_plans = relationship(
        "MealPlan", back_populates="user", cascade="all", passive_deletes=True
    )
    grocery_lists = relationship(
        "GroceryList", back_populates="user", cascade="all", passive_deletes=True
    )


@event.listens_for(AuthUser, "after_insert")
def create_profile_for_principal(mapper, connection, target):
    """Registration hook: every new principal gets its profile in the same transaction."""
    connection.execute(
        insert(UserProfile.__table__).values(
            id=target.id,
            email=target.email,
            full_name=target.full_name,
        )
    )
