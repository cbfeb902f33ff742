"""Custom SQLAlchemy types for embedding vectors."""

from __future__ import annotations

import json

from sqlalchemy.types import JSON, TypeDecorator, UserDefinedType


class _PgVector(UserDefinedType):
    """pgvector column type (``vector(n)``)."""

    cache_ok = True

    def __init__(self, dimensions: int):
        self.dimensions = dimensions

    def get_col_spec(self, **kw):
        return f"VECTOR({self.dimensions})"


class EmbeddingVector(TypeDecorator):
    """Store float vectors as pgvector on PostgreSQL and JSON arrays elsewhere."""

    impl = JSON
    cache_ok = True

    def __init__(self, dimensions: int):
        super().__init__()
        self.dimensions = dimensions

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(_PgVector(self.dimensions))
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        values = [float(v) for v in value]
        if dialect.name == "postgresql":
            return to_vector_literal(values)
        return values

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            # pgvector text form: "[0.1,0.2,...]"
            return [float(v) for v in json.loads(value)]
        return [float(v) for v in value]


def to_vector_literal(values: list[float]) -> str:
    """Render a vector in pgvector's text input format."""
    return "[" + ",".join(repr(float(v)) for v in values) + "]"
