"""
Timestamp columns and the write-time stamping interceptor.
"""

from sqlalchemy import Column, TIMESTAMP

from domain.models.types import server_now


class TimestampMixin:
    """created_at / updated_at maintained by the database clock"""

    created_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=server_now())
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, server_default=server_now())


def stamp_dirty_rows(session, flush_context, instances):
    """before_flush hook: overwrite updated_at on every modified timestamped row.

    Any value the caller assigned to updated_at is discarded; the column is
    rendered as the server clock inside the UPDATE statement itself.
    """
    for obj in session.dirty:
        if isinstance(obj, TimestampMixin) and session.is_modified(
            obj, include_collections=False
        ):
            obj.updated_at = server_now()


def stamp_bulk_update(statement, model):
    """Add updated_at = <server clock> to an ORM-enabled UPDATE statement.

    A caller-assigned updated_at is replaced under its own key.
    """
    if not (isinstance(model, type) and issubclass(model, TimestampMixin)):
        return statement
    key = "updated_at"
    for assigned in getattr(statement, "_values", None) or {}:
        if getattr(assigned, "key", assigned) == "updated_at":
            key = assigned
    return statement.values({key: server_now()})
