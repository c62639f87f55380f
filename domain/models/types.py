"""
Shared column helpers for the ORM models.
"""

from datetime import datetime, timezone

from sqlalchemy import Enum as SQLEnum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_column_type(enum_cls, name: str) -> SQLEnum:
    """Store enum *values* (``"received"``) rather than member names."""
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )
