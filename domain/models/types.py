"""
Portable column types and SQL functions.

PostgreSQL gets native types (UUID, TEXT[], JSONB); every other dialect
(SQLite in the test suite) gets CHAR/JSON equivalents with the same Python
values on both sides.
"""

import uuid

from sqlalchemy import DateTime, Text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.expression import FunctionElement
from sqlalchemy.types import CHAR, JSON, TypeDecorator


class GUID(TypeDecorator):
    """Platform-independent GUID.

    - PostgreSQL: UUID(as_uuid=True)
    - Others: CHAR(36) storing the UUID string
    """

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(CHAR(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        return value if dialect.name == "postgresql" else str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


class StringList(TypeDecorator):
    """Ordered list of strings: TEXT[] on PostgreSQL, JSON array elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(ARRAY(Text))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return [str(v) for v in value]

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return list(value)


class JSONList(TypeDecorator):
    """Schema-flexible list of records: JSONB on PostgreSQL, JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return [dict(v) for v in value]

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return list(value)


class EnumList(TypeDecorator):
    """Set of enum members stored as a list of their values."""

    impl = JSON
    cache_ok = True

    def __init__(self, enum_cls, *args, **kwargs):
        self.enum_cls = enum_cls
        super().__init__(*args, **kwargs)

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(ARRAY(Text))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        members = []
        for item in value:
            member = self.enum_cls(item)
            if member not in members:
                members.append(member)
        return [m.value for m in members]

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return [self.enum_cls(v) for v in value]


class server_now(FunctionElement):
    """The database server's clock, read at statement execution time."""

    type = DateTime(timezone=True)
    inherit_cache = True
    name = "server_now"


@compiles(server_now)
def _compile_server_now(element, compiler, **kw):
    return "CURRENT_TIMESTAMP"


@compiles(server_now, "postgresql")
def _compile_server_now_pg(element, compiler, **kw):
    # now() is frozen per transaction; clock_timestamp() keeps advancing
    return "clock_timestamp()"


@compiles(server_now, "sqlite")
def _compile_server_now_sqlite(element, compiler, **kw):
    # CURRENT_TIMESTAMP has one-second resolution on SQLite. This one has
    # milliseconds: two updates of a row inside the same millisecond get equal
    # updated_at values, so strictly increasing stamps need writes >= 1ms apart.
    return "(STRFTIME('%Y-%m-%d %H:%M:%f', 'now'))"
