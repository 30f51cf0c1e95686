"""
SQLAlchemy declarative base for the CENOV catalog.

Catalog tables live in two PostgreSQL schemas: produit (categories,
attributes, kits, prices) and public (suppliers, products, documents).

Dependencies: sqlalchemy
System role: Foundation for all database models
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

PRODUIT_SCHEMA = "produit"
PUBLIC_SCHEMA = "public"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Registry of every catalog model; Base.metadata lists all tables."""


class TimestampMixin:
    """
    created_at / updated_at columns shared by the catalog tables.

    updated_at is what the explorer detects as the auto-updated column
    and never offers for edition.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
