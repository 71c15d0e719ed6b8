"""SQLAlchemy declarative Base and shared model configuration."""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utc_now() -> datetime:
    """Python-side default for created_at columns.

    SQLite stores it with microseconds, the same text format as bound datetime
    parameters; CURRENT_TIMESTAMP alone has whole seconds only.
    """
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    pass
