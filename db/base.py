"""
db/base.py

Declarative base and shared mixins for the compliance schema.
"""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Project-wide declarative base.
    Every table registered here is checked at startup and by Alembic.
    """

    type_annotation_map: dict[type, Any] = {}


class TimestampMixin:
    """
    Adds created_at and updated_at columns.

    created_at is also the tie-break input for "latest document wins",
    so it is set by the database, never by the client.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
