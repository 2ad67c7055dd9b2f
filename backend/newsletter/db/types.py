"""Column types that behave the same on PostgreSQL and SQLite."""

import base64
from uuid import UUID

from sqlalchemy import JSON, String, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PostgreSQLUUID

HeaderPair = tuple[str, bytes]


class UniversalUUID(TypeDecorator):
    """UUID type that works with both PostgreSQL and SQLite."""

    impl = String
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PostgreSQLUUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return UUID(value) if isinstance(value, str) else value


class HeaderPairs(TypeDecorator):
    """Ordered list of HTTP header (name, raw value) pairs.

    Stored as a JSON array of ``{"name": ..., "value": <base64>}`` objects so
    that repeated headers keep their position and values keep their exact
    bytes.
    """

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value: list[HeaderPair] | None, dialect):
        if value is None:
            return None
        return [
            {"name": name, "value": base64.b64encode(raw).decode("ascii")}
            for name, raw in value
        ]

    def process_result_value(self, value, dialect) -> list[HeaderPair] | None:
        if value is None:
            return None
        return [(item["name"], base64.b64decode(item["value"])) for item in value]
