"""
Base Model Classes

Declarative base and the timestamp mixin shared by every ReelCore model.

Model Hierarchy:
================
    Base                    ← SQLAlchemy declarative base
       │
       └── TimestampMixin   ← Automatic created_at/updated_at

Usage:
======
    from reelcore.shared.models.base import Base, TimestampMixin

    class Category(Base, TimestampMixin):
        __tablename__ = "categories"
        name: Mapped[ContentCategory] = mapped_column(SQLEnum(ContentCategory), primary_key=True)

Column types are kept dialect-neutral (``Uuid`` rather than the PostgreSQL
UUID type) so the same metadata runs on PostgreSQL in production and on
SQLite in the test suite.
"""

from datetime import datetime

from sqlalchemy import DateTime, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from reelcore.shared.utils.time import utcnow


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    All models inherit from this class either directly or through
    TimestampMixin.
    """


class TimestampMixin:
    """
    Mixin that adds automatic timestamp tracking to models.

    - created_at: set on INSERT (Python-side, with a server default as backup)
    - updated_at: refreshed by SQLAlchemy on every ORM or Core UPDATE

    Both are stored timezone-aware and always written in UTC, so windowed
    comparisons can be pushed into SQL with plain ``<``/``>`` operators.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=utcnow,
        nullable=False,
    )
