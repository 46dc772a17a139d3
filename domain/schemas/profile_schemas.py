from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from domain.enums import DietaryPreference


class RegisterPrincipal(BaseModel):
    """Identity-provider signup payload"""

    email: EmailStr
    full_name: Optional[str] = None


class UserProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    daily_calorie_goal: Optional[int] = Field(default=None, ge=0, le=20000)
    dietary_preferences: Optional[List[DietaryPreference]] = None


class UserProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    full_name: Optional[str] = None
    daily_calorie_goal: Optional[int] = None
    dietary_preferences: List[DietaryPreference] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
