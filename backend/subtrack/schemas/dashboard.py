"""
SubTrack Backend — Dashboard Response Schemas
==============================================

What:  Shapes returned by GET /api/dashboard: the "Next Due" card, the
       monthly and yearly spending cards, and the reminders list.
When:  Recomputed on every read; nothing here is stored.
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class UpcomingBillingItem(BaseModel):
    """A subscription with its projected next billing date."""
    id: uuid.UUID
    name: str
    category: str
    actual_amount: Decimal
    actual_amount_formatted: str
    billing_frequency: str
    frequency_label: str
    next_billing_date: date
    days_until_billing: int
    reminder_days: int


class DashboardResponse(BaseModel):
    """
    What:  Aggregate view of the current user's subscriptions.

    Fields:
        next_due:         Soonest upcoming billing (null with no subscriptions)
        monthly_spending: Sum of monthly-equivalent amounts
        yearly_spending:  monthly_spending × 12
        reminders:        Billings inside their own reminder window, soonest first
    """
    next_due: Optional[UpcomingBillingItem] = None
    monthly_spending: Decimal
    yearly_spending: Decimal
    monthly_spending_formatted: str
    yearly_spending_formatted: str
    subscription_count: int
    reminders: List[UpcomingBillingItem] = Field(default_factory=list)
    as_of: date = Field(description="The date treated as today")
