"""
SubTrack Backend — Subscription SQLAlchemy Model
=================================================

What:  ORM model for the `subscriptions` table.
Who:   Used by SubscriptionService and DashboardService, and by Alembic.

Table Design:
    - amount / actual_amount: DECIMAL(10,2). `amount` is the monthly
      equivalent, `actual_amount` is billed per period after any split.
    - billing_date: day-of-month anchor 1-31 (CHECK constraint).
    - total_amount / shared_with: only set for shared subscriptions;
      shared_with must be at least 2 (CHECK constraint).
    - user_id: owner reference. Every query filters on it, so one user can
      never read or modify another user's rows.

    Index on (user_id, billing_date):
        Serves the list screen query: one user's rows ordered by billing day.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from subtrack.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Subscription(Base):
    """
    A recurring subscription owned by one user.

    Lifecycle:
        1. Created from the add form
        2. Overwritten in place by the edit form (updated_at refreshed)
        3. Deleted outright on confirmation; no soft delete, no history
    """

    __tablename__ = "subscriptions"

    # ── Identity & Ownership ──────────────────────────────────────────────
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        comment="Owner: the authenticated user's id (token `sub` claim)",
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    # ── Amounts ───────────────────────────────────────────────────────────
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Monthly equivalent amount",
    )

    actual_amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Actual billed amount per period (after split if shared)",
    )

    # ── Billing Schedule ──────────────────────────────────────────────────
    # Values: monthly, quarterly, half-yearly, yearly
    billing_frequency: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="monthly",
        server_default=text("'monthly'"),
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    billing_date: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Day of month the charge occurs (1-31)",
    )

    category: Mapped[str] = mapped_column(Text, nullable=False)

    reminder_days: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=3,
        server_default=text("3"),
    )

    # ── Sharing ───────────────────────────────────────────────────────────
    is_shared: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    total_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Total amount before split (shared subscriptions only)",
    )

    shared_with: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Number of people sharing the cost (shared subscriptions only)",
    )

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("billing_date BETWEEN 1 AND 31", name="ck_subscriptions_billing_date"),
        CheckConstraint(
            "shared_with IS NULL OR shared_with >= 2",
            name="ck_subscriptions_shared_with",
        ),
        CheckConstraint(
            "amount >= 0 AND actual_amount >= 0",
            name="ck_subscriptions_amounts_non_negative",
        ),
        Index("idx_subscriptions_user_billing_date", "user_id", "billing_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Subscription(id={self.id}, name='{self.name}', "
            f"frequency='{self.billing_frequency}', billing_date={self.billing_date})>"
        )
