"""Identity provider integration: principal signup and removal"""

import logging
from uuid import UUID
from sqlalchemy.orm import Session

from domain.models import UserProfile
from domain.schemas.profile_schemas import RegisterPrincipal
from repositories import AuthUserRepository
from app.exceptions import ConflictError, NotFoundError

logger = logging.getLogger("mealplanner.identity")


class IdentityService:
    """Principal lifecycle. Runs on a system session."""

    @staticmethod
    def register_principal(db: Session, payload: RegisterPrincipal) -> UserProfile:
        """
        Create an identity principal. The registration hook creates its
        profile in the same transaction.

        Raises:
            ConflictError: If the email is already registered
        """
        auth_repo = AuthUserRepository(db)
        if auth_repo.get_by_email(payload.email):
            logger.warning(f"principal_register_conflict email={payload.email}")
            raise ConflictError(
                "Email already registered", details={"field": "email"}
            )

        principal = auth_repo.create_principal(payload.email, payload.full_name)
        profile = db.get(UserProfile, principal.id)
        logger.info(f"principal_registered principal_id={principal.id}")
        return profile

    @staticmethod
    def delete_principal(db: Session, principal_id: UUID) -> None:
        """Delete a principal; the database cascades through everything it owns"""
        auth_repo = AuthUserRepository(db)
        if not auth_repo.delete(principal_id):
            logger.warning(f"principal_not_found principal_id={principal_id}")
            raise NotFoundError()
        logger.info(f"principal_deleted principal_id={principal_id}")
