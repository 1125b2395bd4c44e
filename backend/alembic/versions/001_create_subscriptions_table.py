"""Create subscriptions table

Revision ID: 001
Revises: None
Create Date: 2025-01-25 18:12:25.000000+00:00

What:  Creates the `subscriptions` table with billing, sharing and
       ownership columns, check constraints, and the list-screen index.
How:   PostgreSQL UUID primary key, DECIMAL(10,2) amounts, TIMESTAMPTZ.

Rollback: downgrade() drops the table entirely (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the subscriptions table. Column docs: subtrack/models/subscription.py."""
    op.create_table(
        "subscriptions",

        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            comment="Owner: the authenticated user's id (token `sub` claim)",
        ),
        sa.Column("name", sa.Text(), nullable=False),

        # Amounts
        sa.Column(
            "amount",
            sa.Numeric(10, 2),
            nullable=False,
            comment="Monthly equivalent amount",
        ),
        sa.Column(
            "actual_amount",
            sa.Numeric(10, 2),
            nullable=False,
            comment="Actual billed amount per period (after split if shared)",
        ),

        # Billing schedule
        sa.Column(
            "billing_frequency",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'monthly'"),
        ),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column(
            "billing_date",
            sa.Integer(),
            nullable=False,
            comment="Day of month the charge occurs (1-31)",
        ),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column(
            "reminder_days",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("3"),
        ),

        # Sharing
        sa.Column(
            "is_shared",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column(
            "total_amount",
            sa.Numeric(10, 2),
            nullable=True,
            comment="Total amount before split (shared subscriptions only)",
        ),
        sa.Column(
            "shared_with",
            sa.Integer(),
            nullable=True,
            comment="Number of people sharing the cost (shared subscriptions only)",
        ),

        # Timestamps
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),

        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("billing_date BETWEEN 1 AND 31", name="ck_subscriptions_billing_date"),
        sa.CheckConstraint(
            "shared_with IS NULL OR shared_with >= 2",
            name="ck_subscriptions_shared_with",
        ),
        sa.CheckConstraint(
            "amount >= 0 AND actual_amount >= 0",
            name="ck_subscriptions_amounts_non_negative",
        ),
    )

    op.create_index(
        "idx_subscriptions_user_billing_date",
        "subscriptions",
        ["user_id", "billing_date"],
    )


def downgrade() -> None:
    """Drop the subscriptions table (all subscription data is lost)."""
    op.drop_index("idx_subscriptions_user_billing_date", table_name="subscriptions")
    op.drop_table("subscriptions")
