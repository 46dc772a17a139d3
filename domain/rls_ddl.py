"""
PostgreSQL row-level security DDL, rendered from the policy registry.

Installed by init_database(). PostgreSQL skips row-level security for a
table's owner, and init_database() runs as the owner, so principal
transactions switch to the non-owner app role (settings.app_role) granted
here. Raw SQL run in those transactions, and clients connecting as that role,
then see the same ownership rules. Owner connections (system sessions) keep
bypassing them. updated_at stamping applies to every connection.
"""

from typing import List, Optional

from app.config import settings
from domain.models.mixins import TimestampMixin
from domain.policies import ALL_OPERATIONS, PROTECTED_MODELS, ROW_POLICIES, RowPolicy


def _policy_command(policy: RowPolicy) -> str:
    if policy.operations == ALL_OPERATIONS:
        return "ALL"
    if len(policy.operations) != 1:
        raise ValueError(f"Policy {policy.name!r} must cover one operation or all of them")
    return next(iter(policy.operations)).value


def current_user_function(principal_setting: str) -> str:
    return f"""
CREATE OR REPLACE FUNCTION app_current_user_id() RETURNS uuid
LANGUAGE sql STABLE AS $$
  SELECT NULLIF(current_setting('{principal_setting}', true), '')::uuid
$$
"""


UPDATED_AT_FUNCTION = """
CREATE OR REPLACE FUNCTION update_updated_at_column()
RETURNS TRIGGER AS $$
BEGIN
  NEW.updated_at = clock_timestamp();
  RETURN NEW;
END;
$$ LANGUAGE plpgsql
"""


def policy_statements() -> List[str]:
    statements = []
    for model in PROTECTED_MODELS:
        statements.append(f"ALTER TABLE {model.__tablename__} ENABLE ROW LEVEL SECURITY")
    for policy in ROW_POLICIES:
        statements.append(f'DROP POLICY IF EXISTS "{policy.name}" ON {policy.table}')
        statements.append(
            f'CREATE POLICY "{policy.name}" ON {policy.table}\n'
            f"  FOR {_policy_command(policy)} USING ({policy.sql_using()})"
        )
    return statements


def trigger_statements() -> List[str]:
    statements = [UPDATED_AT_FUNCTION]
    for model in PROTECTED_MODELS:
        if not issubclass(model, TimestampMixin):
            continue
        table = model.__tablename__
        statements.append(f"DROP TRIGGER IF EXISTS update_{table}_updated_at ON {table}")
        statements.append(
            f"CREATE TRIGGER update_{table}_updated_at\n"
            f"  BEFORE UPDATE ON {table}\n"
            f"  FOR EACH ROW EXECUTE FUNCTION update_updated_at_column()"
        )
    return statements


def role_statements(app_role: str) -> List[str]:
    """Create the non-owner role if missing, let the owner switch to it, grant DML."""
    tables = ", ".join(model.__tablename__ for model in PROTECTED_MODELS)
    return [
        f"""
DO $$
BEGIN
  IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = '{app_role}') THEN
    CREATE ROLE {app_role} NOLOGIN;
  END IF;
END
$$
""",
        f"GRANT {app_role} TO CURRENT_USER",
        f"GRANT SELECT, INSERT, UPDATE, DELETE ON {tables} TO {app_role}",
    ]


def row_security_statements(
    principal_setting: Optional[str] = None, app_role: Optional[str] = None
) -> List[str]:
    """Every statement needed to (re)install policies, triggers and the app role; idempotent."""
    principal_setting = principal_setting or settings.principal_setting
    app_role = app_role or settings.app_role
    statements = (
        [current_user_function(principal_setting)]
        + policy_statements()
        + trigger_statements()
    )
    if app_role:
        statements += role_statements(app_role)
    return statements
