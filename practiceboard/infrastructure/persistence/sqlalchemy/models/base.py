"""
Base SQLAlchemy models module.

This module defines the declarative base class used for all ORM models of the
assessment store, and the common timestamp mixin.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from practiceboard.domain.utils.datetime_utils import now_utc


def new_id() -> str:
    return str(uuid.uuid4())


class Base(AsyncAttrs, DeclarativeBase):
    """SQLAlchemy 2.0 declarative base with async support."""


class TimestampMixin:
    """Mixin to add created_at and updated_at timestamps to models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now_utc, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False
    )
