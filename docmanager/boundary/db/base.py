"""
SQLAlchemy declarative base, shared mixins and column helpers.

Keeps the schema portable between PostgreSQL (production) and sqlite
(tests, local runs).

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_values(enum_cls) -> list[str]:
    """Persist str enums by value rather than member name."""
    return [member.value for member in enum_cls]


def as_utc(value: datetime | None) -> datetime | None:
    """
    Attach UTC to naive datetimes read back from the database.

    sqlite drops tzinfo on round trip; PostgreSQL returns aware values.
    """
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class Base(DeclarativeBase):
    """Declarative base; create_tables builds every table registered here."""


class UUIDMixin:
    """UUID v4 primary key. Generic Uuid maps to native UUID on PostgreSQL and CHAR(32) on sqlite."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )


class TimestampMixin:
    """
    Aware UTC creation and modification timestamps.

    Bulk UPDATE statements bypass onupdate, so conditional writes set
    updated_at explicitly.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
