"""
Database Models - SQLAlchemy ORM mapping of the external users table.

The table is owned by the system of record. Only the columns this service
reads or writes are mapped, and no migrations are shipped for it.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class User(Base):
    """
    ORM model for the users table.

    Holds the Stripe linkage and the boosted entitlement flag.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(Text, primary_key=True)

    # Stripe linkage
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    stripe_subscription_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )

    # Entitlement (column name kept from the existing users table)
    is_boosted: Mapped[bool] = mapped_column(
        "est_booste", Boolean, nullable=False, default=False
    )

    # Public profile (sitemap)
    public_slug: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
