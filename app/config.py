"""
Store configuration, read from the environment (or a .env file) through
pydantic-settings. Every module reads the shared `settings` instance.
"""

from enum import Enum
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Connection, row-security and logging settings for the meal planner store.
    """

    app_name: str = Field(default="MealPlanner", description="Name used in log lines")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Deployment environment"
    )

    # Connection
    database_url: str = Field(
        default="postgresql+psycopg2://postgres@localhost:5432/mealplanner",
        description="SQLAlchemy URL of the store; SQLite URLs are accepted for tests",
    )
    db_echo: bool = Field(default=False, description="Echo emitted SQL")
    db_init_attempts: int = Field(
        default=8, ge=1, description="create_all attempts before init_database gives up"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Seconds between init attempts"
    )

    # Row-level security
    principal_setting: str = Field(
        default="app.current_user_id",
        pattern=r"^[a-z_]+\.[a-z_]+$",
        description="Transaction-local PostgreSQL setting holding the principal id",
    )
    app_role: Optional[str] = Field(
        default="mealplanner_app",
        pattern=r"^[a-z_][a-z0-9_]*$",
        description=(
            "Non-owner PostgreSQL role principal transactions switch to; table "
            "owners skip row-level security, so unset means no database backstop"
        ),
    )
    install_row_security: bool = Field(
        default=True,
        description="Install PostgreSQL policies and updated_at triggers in init_database",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level for scripts")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging.basicConfig format",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator("database_url")
    @classmethod
    def use_psycopg2_driver(cls, v: str) -> str:
        """Hosted PostgreSQL URLs come as postgres:// or postgresql://; pin the driver."""
        for prefix in ("postgres://", "postgresql://"):
            if v.startswith(prefix):
                return "postgresql+psycopg2://" + v[len(prefix):]
        return v

    @field_validator("app_role", mode="before")
    @classmethod
    def blank_role_disables(cls, v):
        return v or None

    def is_production(self) -> bool:
        return self.environment == Environment.PRODUCTION


settings = Settings()
