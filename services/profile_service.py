import logging
from sqlalchemy.orm import Session

from domain.enums import DietaryPreference
from domain.models import UserProfile
from domain.policies import require_principal
from domain.schemas.profile_schemas import UserProfileUpdate
from repositories import UserProfileRepository
from app.exceptions import NotFoundError

logger = logging.getLogger("mealplanner.profile")


class ProfileService:
    """Business logic for profile management"""

    @staticmethod
    def get_profile(db: Session) -> UserProfile:
        """Retrieve the profile of the session's principal"""
        principal_id = require_principal(db)
        profile = UserProfileRepository(db).get_current()

        if profile is None:
            logger.warning(f"profile_not_found user_id={principal_id}")
            raise NotFoundError()

        logger.info(f"profile_fetched user_id={principal_id}")
        return profile

    @staticmethod
    def update_profile(db: Session, payload: UserProfileUpdate) -> UserProfile:
        """
        Update the principal's profile. Only fields present in the payload
        are written; email is owned by the identity provider and not editable.
        """
        principal_id = require_principal(db)
        fields = payload.model_dump(exclude_unset=True)
        if "dietary_preferences" in fields and not fields["dietary_preferences"]:
            fields["dietary_preferences"] = [DietaryPreference.NONE]

        profile = UserProfileRepository(db).update_profile(principal_id, **fields)
        if profile is None:
            logger.warning(f"profile_not_found user_id={principal_id}")
            raise NotFoundError()

        logger.info(
            f"profile_updated user_id={principal_id} fields={sorted(fields)}"
        )
        return profile
