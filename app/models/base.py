from datetime import datetime, UTC
from sqlalchemy import DateTime, inspect
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all database models"""

    pass


class TimestampMixin:
    """created_at is written once at insert; updated_at tracks the last write."""

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )


def column_values(entity: Base) -> dict:
    """Plain mapping of an entity's column attributes (its stored image)"""
    return {attr.key: getattr(entity, attr.key) for attr in inspect(entity).mapper.column_attrs}


# Narrowest Integer every supported backend accepts (Postgres int4)
INTEGER_MIN = -(2**31)
INTEGER_MAX = 2**31 - 1


def fits_integer(value: int) -> bool:
    return INTEGER_MIN <= value <= INTEGER_MAX
