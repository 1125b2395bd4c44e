"""
SubTrack Backend — Dashboard Service (Read Aggregation)
========================================================

What:  Builds the home screen figures from the user's subscriptions.
How:   Loads the owner's rows, projects every next billing date, and sums
       monthly-equivalent amounts. Recomputed on each request.
Who:   Called by GET /api/dashboard.

Aggregation:
    next_due         = earliest projected billing (stable ascending sort)
    monthly_spending = Σ amount (monthly equivalents)
    yearly_spending  = monthly_spending × 12
    reminders        = billings where days_until_billing ≤ reminder_days
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from subtrack.models.subscription import Subscription
from subtrack.schemas.dashboard import DashboardResponse, UpcomingBillingItem
from subtrack.services import billing
from subtrack.services.subscription_service import subscription_service

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


def _upcoming_item(upcoming: billing.UpcomingBilling) -> UpcomingBillingItem:
    sub = upcoming.subscription
    return UpcomingBillingItem(
        id=sub.id,
        name=sub.name,
        category=sub.category,
        actual_amount=sub.actual_amount,
        actual_amount_formatted=billing.format_inr(sub.actual_amount),
        billing_frequency=sub.billing_frequency,
        frequency_label=billing.frequency_label(sub.billing_frequency),
        next_billing_date=upcoming.next_billing_date,
        days_until_billing=upcoming.days_until,
        reminder_days=sub.reminder_days,
    )


class DashboardService:
    """Read-only aggregation over one user's subscriptions."""

    def summarize(self, subscriptions: Sequence[Subscription], today: date) -> DashboardResponse:
        """
        Compute the dashboard for an in-memory list of subscriptions.

        Pure: no database access, `today` is supplied by the caller.
        """
        upcoming = billing.project_upcoming(subscriptions, today)

        monthly = billing.monthly_total(sub.amount for sub in subscriptions)
        yearly = billing.quantize(monthly * Decimal(MONTHS_PER_YEAR))

        reminders = [
            _upcoming_item(item)
            for item in upcoming
            if item.days_until <= item.subscription.reminder_days
        ]

        return DashboardResponse(
            next_due=_upcoming_item(upcoming[0]) if upcoming else None,
            monthly_spending=monthly,
            yearly_spending=yearly,
            monthly_spending_formatted=billing.format_inr(monthly),
            yearly_spending_formatted=billing.format_inr(yearly),
            subscription_count=len(subscriptions),
            reminders=reminders,
            as_of=today,
        )

    async def get_dashboard(
        self,
        db: AsyncSession,
        user_id: UUID,
        today: date,
    ) -> DashboardResponse:
        """
        Load the user's subscriptions and summarize them.

        Raises:
            DatabaseError: Fetch failed (propagated from SubscriptionService)
        """
        subscriptions = await subscription_service.fetch_all(db, user_id)
        summary = self.summarize(subscriptions, today)
        logger.debug(
            "Dashboard for %s: %d subscriptions, %s/month",
            user_id,
            summary.subscription_count,
            summary.monthly_spending,
        )
        return summary


# ── Singleton Instance ────────────────────────────────────────────────────
dashboard_service = DashboardService()
