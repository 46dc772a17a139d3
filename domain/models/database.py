"""
Database configuration and session management.
"""

import logging
import sqlite3
import time
from contextlib import contextmanager
from typing import Generator, Optional
from uuid import UUID

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from app.config import settings
from domain.models.base import Base
from domain.policies import BYPASS_KEY, PRINCIPAL_KEY, PolicySession
from domain.rls_ddl import row_security_statements

logger = logging.getLogger("mealplanner.database")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE clauses unless foreign keys are switched on per connection"""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create engine
engine = create_engine(settings.database_url, echo=settings.db_echo, future=True)

# Create session factory
SessionLocal = sessionmaker(bind=engine, class_=PolicySession, future=True)


def install_row_security(bind: Engine) -> None:
    """Install PostgreSQL policies and updated_at triggers"""
    with bind.begin() as conn:
        for statement in row_security_statements():
            conn.exec_driver_sql(statement)
    if settings.app_role:
        logger.info(f"Row-level security installed app_role={settings.app_role}")
    else:
        logger.warning(
            "Row-level security installed without app_role; sessions connected as "
            "the table owner are not checked by the database policies"
        )


def init_database(bind: Optional[Engine] = None) -> None:
    """Initialize database schema, retrying while the server comes up"""
    bind = bind or engine
    for attempt in range(1, settings.db_init_attempts + 1):
        try:
            Base.metadata.create_all(bind=bind)
            break
        except Exception as exc:
            logger.warning(
                "Database init attempt %d/%d failed: %s",
                attempt,
                settings.db_init_attempts,
                exc,
            )
            if attempt == settings.db_init_attempts:
                logger.error("Database initialization failed after %d attempts", attempt)
                raise
            time.sleep(settings.db_init_delay_sec)
    logger.info("Database tables created successfully")

    if bind.dialect.name == "postgresql" and settings.install_row_security:
        install_row_security(bind)
    elif bind.dialect.name != "postgresql":
        logger.info(
            "Dialect %s has no row-level security; policies enforced by the ORM layer "
            "only, and updated_at has millisecond resolution",
            bind.dialect.name,
        )


def drop_database(bind: Optional[Engine] = None) -> None:
    """Drop every table owned by the schema"""
    Base.metadata.drop_all(bind=bind or engine)
    logger.info("Database tables dropped")


@contextmanager
def principal_session(
    principal_id: UUID, factory: sessionmaker = None
) -> Generator[Session, None, None]:
    """Session acting as principal_id; every statement is filtered by row policies."""
    db = (factory or SessionLocal)(info={PRINCIPAL_KEY: principal_id})
    try:
        yield db
    finally:
        db.close()


@contextmanager
def system_session(factory: sessionmaker = None) -> Generator[Session, None, None]:
    """Privileged session that bypasses row policies (identity hooks, maintenance)."""
    db = (factory or SessionLocal)(info={BYPASS_KEY: True})
    try:
        yield db
    finally:
        db.close()


def get_db_session(principal_id: UUID) -> Generator[Session, None, None]:
    """Get a principal-scoped database session (for dependency injection)"""
    with principal_session(principal_id) as db:
        yield db
