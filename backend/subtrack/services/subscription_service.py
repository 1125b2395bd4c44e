"""
SubTrack Backend — Subscription Service (Business Logic)
=========================================================

What:  Create, read, update and delete subscriptions for one user.
How:   Validates and normalizes the submitted form with the billing module,
       then issues a single owner-filtered query through the session.
Who:   Called by the /api/subscriptions route handlers.

Write Flow (POST / PUT):
    ┌──────────┐    ┌─────────────────┐    ┌─────────────────┐    ┌──────────┐
    │   Form   │───▶│    Validate     │───▶│    Normalize    │───▶│  Store   │
    │  (Route) │    │  name/date/cat  │    │ split + monthly │    │   (DB)   │
    └──────────┘    └─────────────────┘    └─────────────────┘    └──────────┘

    Validation and normalization finish before the session is touched, so a
    rejected form never writes anything.

Ownership:
    Every statement carries `WHERE user_id = :current_user`. A row owned by
    someone else is indistinguishable from a missing row (404).

Error Handling Strategy:
    ValidationError and NotFoundError propagate unchanged. SQLAlchemy errors
    are logged with their traceback and wrapped in DatabaseError, which the
    global handler reports as a generic "try again" message. Nothing retries.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from sqlalchemy import asc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from subtrack.config import settings
from subtrack.exceptions import DatabaseError, NotFoundError, ValidationError
from subtrack.models.subscription import Subscription
from subtrack.schemas.subscription import (
    AmountPreviewRequest,
    AmountPreviewResponse,
    FrequencyOption,
    SubscriptionForm,
    SubscriptionListResponse,
    SubscriptionOptionsResponse,
    SubscriptionResponse,
)
from subtrack.services import billing

logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Business logic layer for subscription operations.

    Responsibilities:
        - create_subscription() / update_subscription(): form → stored row
        - get_subscription() / list_subscriptions(): owner-scoped reads
        - delete_subscription(): hard delete
        - preview_amount() / get_options(): form helpers, no database
    """

    # ── Form Handling ─────────────────────────────────────────────────────

    def build_values(self, form: SubscriptionForm) -> Dict[str, Any]:
        """
        Validate a submitted form and compute the column values to store.

        Raises:
            ValidationError: for the first rule the form breaks.
        """
        name = form.name.strip()
        if not name:
            raise ValidationError(message="Please enter a subscription name", field="name")

        if form.start_date is None:
            raise ValidationError(message="Please select a start date", field="start_date")

        if form.category not in billing.CATEGORIES:
            raise ValidationError(
                message=f"Unknown category '{form.category}'",
                field="category",
                context={"allowed": list(billing.CATEGORIES)},
            )

        if form.is_shared:
            normalized = billing.normalize_amount(
                form.total_amount,
                form.billing_frequency,
                shared_with=billing.parse_participants(form.shared_with),
            )
        else:
            normalized = billing.normalize_amount(form.amount, form.billing_frequency)

        reminder_days = form.reminder_days
        if reminder_days is None:
            reminder_days = settings.default_reminder_days

        return {
            "name": name,
            "amount": normalized.monthly_amount,
            "actual_amount": normalized.actual_amount,
            "billing_frequency": form.billing_frequency,
            "start_date": form.start_date,
            "billing_date": form.billing_date,
            "category": form.category,
            "reminder_days": reminder_days,
            "is_shared": normalized.is_shared,
            "total_amount": normalized.input_amount if normalized.is_shared else None,
            "shared_with": normalized.shared_with,
        }

    def to_response(self, subscription: Subscription, today: date) -> SubscriptionResponse:
        """Serialize a row together with its projected next billing."""
        due = billing.next_billing_date(
            subscription.start_date,
            subscription.billing_date,
            subscription.billing_frequency,
            today,
        )
        form_amount = (
            subscription.total_amount
            if subscription.is_shared and subscription.total_amount is not None
            else subscription.actual_amount
        )
        return SubscriptionResponse(
            id=subscription.id,
            name=subscription.name,
            amount=subscription.amount,
            actual_amount=subscription.actual_amount,
            billing_frequency=subscription.billing_frequency,
            frequency_label=billing.frequency_label(subscription.billing_frequency),
            start_date=subscription.start_date,
            billing_date=subscription.billing_date,
            category=subscription.category,
            reminder_days=subscription.reminder_days,
            is_shared=subscription.is_shared,
            total_amount=subscription.total_amount,
            shared_with=subscription.shared_with,
            form_amount=form_amount,
            next_billing_date=due,
            days_until_billing=billing.days_until(due, today),
            created_at=subscription.created_at,
            updated_at=subscription.updated_at,
        )

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_subscription(
        self,
        db: AsyncSession,
        user_id: UUID,
        form: SubscriptionForm,
        today: date,
    ) -> SubscriptionResponse:
        """
        Store a new subscription from the add form.

        Raises:
            ValidationError: Form rejected (nothing written)
            DatabaseError: Insert failed
        """
        values = self.build_values(form)
        subscription = Subscription(id=uuid4(), user_id=user_id, **values)

        try:
            db.add(subscription)
            await db.flush()
            await db.refresh(subscription)
        except SQLAlchemyError as e:
            logger.error("Failed to add subscription for user %s", user_id, exc_info=True)
            raise DatabaseError(
                message="Failed to add subscription. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "Subscription %s added (%s, %s, %s/month)",
            subscription.id,
            subscription.name,
            subscription.billing_frequency,
            subscription.amount,
        )
        return self.to_response(subscription, today)

    async def update_subscription(
        self,
        db: AsyncSession,
        user_id: UUID,
        subscription_id: UUID,
        form: SubscriptionForm,
        today: date,
    ) -> SubscriptionResponse:
        """
        Overwrite every mutable field of an existing subscription.

        Raises:
            ValidationError: Form rejected (nothing written)
            NotFoundError: No such subscription for this user
            DatabaseError: Update failed
        """
        values = self.build_values(form)
        subscription = await self._get_owned(db, user_id, subscription_id)

        for column, value in values.items():
            setattr(subscription, column, value)
        # onupdate only fires when a column changed; a re-save still counts
        subscription.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
            await db.refresh(subscription)
        except SQLAlchemyError as e:
            logger.error("Failed to update subscription %s", subscription_id, exc_info=True)
            raise DatabaseError(
                message="Failed to update subscription. Please try again.",
                context={"subscription_id": str(subscription_id), "error_type": type(e).__name__},
            )

        logger.info("Subscription %s updated", subscription_id)
        return self.to_response(subscription, today)

    async def delete_subscription(
        self,
        db: AsyncSession,
        user_id: UUID,
        subscription_id: UUID,
    ) -> None:
        """
        Permanently delete a subscription.

        Raises:
            NotFoundError: No such subscription for this user
            DatabaseError: Delete failed
        """
        subscription = await self._get_owned(db, user_id, subscription_id)
        try:
            await db.delete(subscription)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete subscription %s", subscription_id, exc_info=True)
            raise DatabaseError(
                message="Failed to delete subscription. Please try again.",
                context={"subscription_id": str(subscription_id), "error_type": type(e).__name__},
            )
        logger.info("Subscription %s deleted", subscription_id)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_subscription(
        self,
        db: AsyncSession,
        user_id: UUID,
        subscription_id: UUID,
        today: date,
    ) -> SubscriptionResponse:
        """Load one subscription for the edit form."""
        subscription = await self._get_owned(db, user_id, subscription_id)
        return self.to_response(subscription, today)

    async def list_subscriptions(
        self,
        db: AsyncSession,
        user_id: UUID,
        today: date,
    ) -> SubscriptionListResponse:
        """
        All subscriptions of the user, ordered by billing day.

        Query plan:
            SELECT * FROM subscriptions WHERE user_id = :uid
            ORDER BY billing_date ASC, created_at ASC
            → idx_subscriptions_user_billing_date
        """
        subscriptions = await self.fetch_all(db, user_id)
        return SubscriptionListResponse(
            subscriptions=[self.to_response(s, today) for s in subscriptions],
            total_count=len(subscriptions),
        )

    async def fetch_all(self, db: AsyncSession, user_id: UUID) -> list:
        """Raw owner-scoped rows; shared with the dashboard."""
        try:
            result = await db.execute(
                select(Subscription)
                .where(Subscription.user_id == user_id)
                .order_by(asc(Subscription.billing_date), asc(Subscription.created_at))
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Error fetching subscriptions for user %s", user_id, exc_info=True)
            raise DatabaseError(
                message="Failed to load subscriptions. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def _get_owned(
        self,
        db: AsyncSession,
        user_id: UUID,
        subscription_id: UUID,
    ) -> Subscription:
        try:
            result = await db.execute(
                select(Subscription).where(
                    Subscription.id == subscription_id,
                    Subscription.user_id == user_id,
                )
            )
            subscription: Optional[Subscription] = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Error fetching subscription %s", subscription_id, exc_info=True)
            raise DatabaseError(
                message="Failed to load subscription. Please try again.",
                context={"subscription_id": str(subscription_id), "error_type": type(e).__name__},
            )

        if subscription is None:
            raise NotFoundError(resource="subscription", resource_id=str(subscription_id))
        return subscription

    # ── Form Helpers ──────────────────────────────────────────────────────

    def preview_amount(self, request: AmountPreviewRequest) -> AmountPreviewResponse:
        """Your share and monthly equivalent for the amount being typed."""
        participants = billing.parse_participants(request.shared_with) if request.is_shared else None
        normalized = billing.normalize_amount(
            request.amount, request.billing_frequency, shared_with=participants
        )
        return AmountPreviewResponse(
            actual_amount=normalized.actual_amount,
            monthly_amount=normalized.monthly_amount,
            months=normalized.months,
            is_shared=normalized.is_shared,
            shared_with=normalized.shared_with,
            actual_amount_formatted=billing.format_inr(normalized.actual_amount),
            monthly_amount_formatted=billing.format_inr(normalized.monthly_amount),
        )

    def get_options(self) -> SubscriptionOptionsResponse:
        return SubscriptionOptionsResponse(
            categories=list(billing.CATEGORIES),
            billing_frequencies=[
                FrequencyOption(id=tag, label=billing.frequency_label(tag), months=months)
                for tag, months in billing.FREQUENCY_MONTHS.items()
            ],
            billing_days=list(range(1, 32)),
            default_reminder_days=settings.default_reminder_days,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
subscription_service = SubscriptionService()
