"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.

Repositories run on a policy-scoped session, so every query below only ever
sees the rows the session's principal owns.
"""

import logging
from typing import Generic, TypeVar, Optional, List, Type
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from abc import ABC

from app.exceptions import (
    AppError,
    ConflictError,
    InvalidReferenceError,
    ServiceValidationError,
)

logger = logging.getLogger("mealplanner.repositories")

ModelType = TypeVar("ModelType")

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"


def _constraint_name(orig) -> Optional[str]:
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    # SQLite: "UNIQUE constraint failed: meal_plans.user_id, meal_plans.week_start_date"
    message = str(orig)
    if "constraint failed:" in message:
        return message.split("constraint failed:", 1)[1].strip()
    return None


def translate_integrity_error(db: Session, exc: IntegrityError) -> AppError:
    """
    Roll back the session and map a database integrity error to the
    application's error taxonomy.

    Args:
        db: Session whose flush or commit failed
        exc: The IntegrityError raised by the driver

    Returns:
        ConflictError for uniqueness violations, InvalidReferenceError for
        foreign-key violations, ServiceValidationError otherwise
    """
    db.rollback()
    orig = getattr(exc, "orig", None)
    pgcode = getattr(orig, "pgcode", None)
    message = str(orig if orig is not None else exc)
    constraint = _constraint_name(orig)
    details = {"constraint": constraint} if constraint else None

    if pgcode == UNIQUE_VIOLATION or "UNIQUE constraint failed" in message:
        logger.info(f"unique_violation constraint={constraint}")
        return ConflictError("A row with the same unique values already exists", details=details)
    if pgcode == FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in message:
        logger.info(f"foreign_key_violation constraint={constraint}")
        return InvalidReferenceError(details=details)
    if pgcode == NOT_NULL_VIOLATION or "NOT NULL constraint failed" in message:
        return ServiceValidationError("A required field is missing", details=details)

    logger.error(f"integrity_error error={message}")
    return ServiceValidationError("Database integrity error")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """
        Get entity by ID.

        Args:
            entity_id: Entity UUID

        Returns:
            Entity or None if not found or not visible to the principal
        """
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def get_all(self, skip: int = 0, limit: int = 100) -> List[ModelType]:
        """Get all visible entities with pagination"""
        return (
            self.db.query(self.model)
            .order_by(self.model.created_at, self.model.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def create(self, entity: ModelType) -> ModelType:
        """Create new entity"""
        self.db.add(entity)
        self.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: ModelType) -> ModelType:
        """Update existing entity"""
        self.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: UUID) -> bool:
        """Delete entity by ID"""
        entity = self.get_by_id(entity_id)
        if entity:
            self.db.delete(entity)
            self.commit()
            return True
        return False

    def exists(self, entity_id: UUID) -> bool:
        """Check if entity exists"""
        return self.get_by_id(entity_id) is not None

    def commit(self) -> None:
        """Commit the session, rolling back and translating any failure"""
        try:
            self.db.commit()
        except IntegrityError as e:
            raise translate_integrity_error(self.db, e) from e
        except AppError:
            # policy rejections raised from before_flush
            self.db.rollback()
            raise
