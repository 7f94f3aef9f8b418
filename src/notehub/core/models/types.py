"""Custom SQLAlchemy types for NoteHub models with cross-DB support."""

import json
import uuid
from typing import Iterable, List, Optional

from sqlalchemy import String, Text, TypeDecorator


def normalize_tags(values: Optional[Iterable[str]]) -> List[str]:
    """Strip, drop empties and dedupe tag labels. Result is sorted so equal sets compare equal."""
    if not values:
        return []
    return sorted({str(v).strip() for v in values if str(v).strip()})


class TagSetType(TypeDecorator):
    """
    Store a set of text labels.

    - On PostgreSQL: ARRAY(String(50))
    - On SQLite (and others): JSON text in a TEXT column

    Always hands back a sorted, deduplicated List[str].
    """

    cache_ok = True
    impl = Text  # placeholder, real impl decided per-dialect

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import ARRAY

            return dialect.type_descriptor(ARRAY(String(50)))
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value: Optional[Iterable[str]], dialect):
        values = normalize_tags(value)
        if dialect.name == "postgresql":
            return values
        return json.dumps(values)

    def process_result_value(self, value, dialect) -> List[str]:
        if value is None:
            return []
        if dialect.name == "postgresql":
            return normalize_tags(value)
        return normalize_tags(json.loads(value) if isinstance(value, str) else value)


class GUID(TypeDecorator):
    """
    Platform-independent GUID/UUID type.

    - Uses PostgreSQL UUID type when available
    - Falls back to CHAR(36) storing hex string form on other DBs (e.g., SQLite)
    """

    impl = String(36)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID as PG_UUID

            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(String(36))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, uuid.UUID):
            value = uuid.UUID(str(value))
        # PostgreSQL expects uuid.UUID when as_uuid=True, others expect string
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))
