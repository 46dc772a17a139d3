"""
Row-level access policies.

Every table is owned, directly or through a parent row, by a UserProfile.
One registry (ROW_POLICIES) drives both enforcement layers:

- the ORM layer below, attached to PolicySession: reads and bulk UPDATE/DELETE
  statements get the ownership predicate added to their own WHERE clause, and
  unit-of-work writes are checked in before_flush against the stored row,
  re-read and locked, and against the row about to be written;
- the PostgreSQL layer in domain/rls_ddl.py, which renders the same registry as
  CREATE POLICY statements. pin_principal() switches each principal
  transaction to the non-owner app role and pins the principal for them.

A table with no policy for an operation rejects it. A rejected write raises
AccessDeniedError, which callers cannot tell apart from NotFoundError.
"""

import enum
import logging
import uuid
from dataclasses import dataclass
from typing import FrozenSet, Optional

from sqlalchemy import event, false, inspect, select, text
from sqlalchemy.orm import Session, with_loader_criteria

from app.config import settings
from app.exceptions import AccessDeniedError, UnauthorizedError
from domain.models.meal import Meal
from domain.models.meal_plan import GroceryList, MealPlan, PlannedMeal
from domain.models.mixins import stamp_bulk_update, stamp_dirty_rows
from domain.models.user import AuthUser, UserProfile

logger = logging.getLogger("mealplanner.policies")

PRINCIPAL_KEY = "principal_id"
BYPASS_KEY = "bypass_row_security"

# Principal of a session that has none; owns nothing
ANONYMOUS = uuid.UUID(int=0)


class Operation(str, enum.Enum):
    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


ALL_OPERATIONS: FrozenSet[Operation] = frozenset(Operation)


@dataclass(frozen=True)
class RowPolicy:
    """Ownership rule for one table and a set of operations.

    owner_key is either the column holding the owner's profile id, or, when
    parent is set, the foreign key to the parent row whose policy decides;
    parent_attr names the relationship to that parent.
    """

    name: str
    model: type
    operations: FrozenSet[Operation]
    owner_key: str
    parent: Optional[type] = None
    parent_attr: Optional[str] = None

    @property
    def table(self) -> str:
        return self.model.__tablename__

    def predicate(self, principal_id: uuid.UUID):
        """SQL expression true for the rows principal_id may see under this policy."""
        column = getattr(self.model, self.owner_key)
        if self.parent is None:
            return column == principal_id
        parent_policy = policy_for(self.parent, Operation.SELECT)
        return column.in_(
            select(self.parent.id).where(parent_policy.predicate(principal_id))
        )

    def sql_using(self, qualifier: str = "") -> str:
        """The predicate as PostgreSQL policy text, for CREATE POLICY ... USING."""
        if self.parent is None:
            return f"{qualifier}{self.owner_key} = app_current_user_id()"
        parent_policy = policy_for(self.parent, Operation.SELECT)
        return (
            f"EXISTS (SELECT 1 FROM {parent_policy.table} p "
            f"WHERE p.id = {self.table}.{self.owner_key} "
            f"AND {parent_policy.sql_using('p.')})"
        )


ROW_POLICIES = (
    RowPolicy(
        "Users can view own profile",
        UserProfile,
        frozenset({Operation.SELECT}),
        owner_key="id",
    ),
    RowPolicy(
        "Users can update own profile",
        UserProfile,
        frozenset({Operation.UPDATE}),
        owner_key="id",
    ),
    RowPolicy("Users can manage own meals", Meal, ALL_OPERATIONS, owner_key="user_id"),
    RowPolicy(
        "Users can manage own meal plans", MealPlan, ALL_OPERATIONS, owner_key="user_id"
    ),
    RowPolicy(
        "Users can manage own planned meals",
        PlannedMeal,
        ALL_OPERATIONS,
        owner_key="meal_plan_id",
        parent=MealPlan,
        parent_attr="meal_plan",
    ),
    RowPolicy(
        "Users can manage own grocery lists",
        GroceryList,
        ALL_OPERATIONS,
        owner_key="user_id",
    ),
)

# Tables under row-level security. AuthUser has no policy: principals can
# neither see nor write identity rows.
PROTECTED_MODELS = (AuthUser, UserProfile, Meal, MealPlan, PlannedMeal, GroceryList)


def policy_for(model: type, operation: Operation) -> Optional[RowPolicy]:
    for policy in ROW_POLICIES:
        if policy.model is model and operation in policy.operations:
            return policy
    return None


def current_principal(session: Session) -> uuid.UUID:
    return session.info.get(PRINCIPAL_KEY) or ANONYMOUS


def bypasses_row_security(session: Session) -> bool:
    return bool(session.info.get(BYPASS_KEY))


def require_principal(session: Session) -> uuid.UUID:
    """The session's principal, for operations that stamp ownership on new rows."""
    principal_id = session.info.get(PRINCIPAL_KEY)
    if principal_id is None:
        raise UnauthorizedError()
    return principal_id


def _visibility_predicate(model: type, operation: Operation, principal_id: uuid.UUID):
    policy = policy_for(model, operation)
    if policy is None:
        return false()
    return policy.predicate(principal_id)


def _statement_model(orm_execute_state) -> Optional[type]:
    mapper = orm_execute_state.bind_mapper
    return mapper.class_ if mapper is not None else None


def _assigned_keys(orm_execute_state) -> set:
    """Column names an ORM UPDATE statement assigns."""
    keys = set()
    for key in (getattr(orm_execute_state.statement, "_values", None) or {}):
        keys.add(getattr(key, "key", key))
    return keys


def _stored_row_passes(session: Session, obj, operation: Operation, principal_id) -> bool:
    """Whether the stored row behind obj passes the operation's policy.

    Read from the database and locked until the transaction ends, so the
    in-memory image (which a caller can forge) never decides.
    """
    model = type(obj)
    identity = inspect(obj).identity
    if identity is None:
        return False
    policy = policy_for(model, operation)
    found = session.execute(
        select(model.id)
        .where(model.id == identity[0], policy.predicate(principal_id))
        .with_for_update()
    ).scalar_one_or_none()
    return found is not None


def _model_policy(model: type) -> Optional[RowPolicy]:
    for policy in ROW_POLICIES:
        if policy.model is model:
            return policy
    return None


def _owns(session: Session, obj, principal_id) -> bool:
    """Whether obj, as it is about to be written, belongs to principal_id."""
    policy = _model_policy(type(obj))
    if policy.parent is None:
        return getattr(obj, policy.owner_key) == principal_id

    # A pending parent is judged on its own row; a stored one is looked up
    # through the filtered session by the foreign key about to be written.
    parent = getattr(obj, policy.parent_attr)
    if parent is not None and inspect(parent).identity is None:
        return _owns(session, parent, principal_id)
    if parent is not None and inspect(obj).attrs[policy.parent_attr].history.added:
        parent_id = parent.id
    else:
        parent_id = getattr(obj, policy.owner_key)
    if parent_id is None:
        return False
    found = session.execute(
        select(policy.parent.id).where(policy.parent.id == parent_id)
    ).scalar_one_or_none()
    return found is not None


def _authorize_write(session: Session, obj, operation: Operation, principal_id) -> None:
    model = type(obj)
    if model not in PROTECTED_MODELS:
        return
    if policy_for(model, operation) is None:
        _deny(model, operation, principal_id)

    # USING applies to the stored row, WITH CHECK to the row being written
    if operation in (Operation.UPDATE, Operation.DELETE):
        if not _stored_row_passes(session, obj, operation, principal_id):
            _deny(model, operation, principal_id)
    if operation in (Operation.INSERT, Operation.UPDATE):
        if not _owns(session, obj, principal_id):
            _deny(model, operation, principal_id)


def _deny(model: type, operation: Operation, principal_id) -> None:
    logger.warning(
        "row_policy_denied table=%s operation=%s principal=%s",
        model.__tablename__,
        operation.value,
        principal_id,
    )
    raise AccessDeniedError()


class PolicySession(Session):
    """Session whose every statement is filtered by ROW_POLICIES.

    session.info[PRINCIPAL_KEY] carries the principal; session.info[BYPASS_KEY]
    marks a privileged session (identity hooks, schema setup) that skips the
    policies, like a database role with BYPASSRLS.
    """


@event.listens_for(PolicySession, "do_orm_execute")
def apply_row_policies(orm_execute_state):
    session = orm_execute_state.session
    model = _statement_model(orm_execute_state)

    if orm_execute_state.is_update and not isinstance(orm_execute_state.parameters, list):
        orm_execute_state.statement = stamp_bulk_update(orm_execute_state.statement, model)

    if bypasses_row_security(session):
        return

    principal_id = current_principal(session)

    if orm_execute_state.is_select:
        orm_execute_state.statement = orm_execute_state.statement.options(
            *[
                with_loader_criteria(
                    protected,
                    _visibility_predicate(protected, Operation.SELECT, principal_id),
                )
                for protected in PROTECTED_MODELS
            ]
        )
        return

    if model not in PROTECTED_MODELS:
        return

    # ORM bulk INSERT and executemany-style statements carry one row image per
    # parameter set and cannot be filtered; principals write through the unit of work
    if orm_execute_state.is_insert:
        _deny(model, Operation.INSERT, principal_id)

    operation = Operation.UPDATE if orm_execute_state.is_update else Operation.DELETE
    if isinstance(orm_execute_state.parameters, list):
        _deny(model, operation, principal_id)
    policy = policy_for(model, operation)
    if policy is None:
        _deny(model, operation, principal_id)
    if operation is Operation.UPDATE and policy.owner_key in _assigned_keys(orm_execute_state):
        _deny(model, operation, principal_id)

    orm_execute_state.statement = orm_execute_state.statement.where(
        policy.predicate(principal_id)
    )


@event.listens_for(PolicySession, "before_flush")
def check_row_policies(session, flush_context, instances):
    stamp_dirty_rows(session, flush_context, instances)

    if bypasses_row_security(session):
        return

    principal_id = current_principal(session)
    with session.no_autoflush:
        for obj in list(session.new):
            _authorize_write(session, obj, Operation.INSERT, principal_id)
        for obj in list(session.dirty):
            if session.is_modified(obj, include_collections=False):
                _authorize_write(session, obj, Operation.UPDATE, principal_id)
        for obj in list(session.deleted):
            _authorize_write(session, obj, Operation.DELETE, principal_id)


@event.listens_for(PolicySession, "after_begin")
def pin_principal(session, transaction, connection):
    """Put this transaction under PostgreSQL row security as the session's principal.

    Both the role switch and the setting end with the transaction.
    """
    if connection.dialect.name != "postgresql" or bypasses_row_security(session):
        return
    if settings.app_role:
        connection.exec_driver_sql(f"SET LOCAL ROLE {settings.app_role}")
    connection.execute(
        text("SELECT set_config(:name, :value, true)"),
        {"name": settings.principal_setting, "value": str(current_principal(session))},
    )
