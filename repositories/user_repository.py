"""
User Repository - Data access layer for identity principals and profiles
"""

from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import AuthUser, UserProfile
from domain.policies import current_principal


class AuthUserRepository(BaseRepository[AuthUser]):
    """Repository for identity principals.

    Principals cannot read identity rows; use a system session.
    """

    def __init__(self, db: Session):
        super().__init__(db, AuthUser)

    def get_by_email(self, email: str) -> Optional[AuthUser]:
        """Get principal by email"""
        return self.db.query(AuthUser).filter(AuthUser.email == email).first()

    def create_principal(self, email: str, full_name: str = None) -> AuthUser:
        """Create a principal; the registration hook adds its profile"""
        principal = AuthUser(email=email, full_name=full_name)
        return self.create(principal)


class UserProfileRepository(BaseRepository[UserProfile]):
    """Repository for user profile data access"""

    def __init__(self, db: Session):
        super().__init__(db, UserProfile)

    def get_current(self) -> Optional[UserProfile]:
        """Get the profile of the session's principal"""
        return self.get_by_id(current_principal(self.db))

    def get_by_email(self, email: str) -> Optional[UserProfile]:
        """Get profile by email"""
        return self.db.query(UserProfile).filter(UserProfile.email == email).first()

    def update_profile(self, profile_id: UUID, **fields) -> Optional[UserProfile]:
        """Apply field updates to a profile; None if it is not visible"""
        profile = self.get_by_id(profile_id)
        if profile is None:
            return None
        for key, value in fields.items():
            if hasattr(profile, key):
                setattr(profile, key, value)
        return self.update(profile)
