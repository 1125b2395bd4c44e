"""
SubTrack Backend — Subscription Request/Response Schemas
=========================================================

What:  Pydantic models for the add/edit forms, the subscription list and
       detail views, the live amount preview, and the form options.
How:   FastAPI validates request bodies against the form models and
       serializes service results through the response models.

Form amounts are accepted as raw text (numbers are coerced to text) and
parsed by the billing module, so "abc" or "-5" reach the service and come
back as a 400 validation notice instead of a schema error.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, List, Optional, Union

from pydantic import BaseModel, Field, field_validator


def _amount_as_text(v: Any) -> Any:
    if isinstance(v, (int, float, Decimal)) and not isinstance(v, bool):
        return str(v)
    return v


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SubscriptionForm(BaseModel):
    """
    What:  Body of POST /api/subscriptions and PUT /api/subscriptions/{id}.
    Who:   Sent by the add and edit screens.

    Amount fields:
        - Not shared: `amount` is the amount billed per period.
        - Shared: `total_amount` is the amount before the split and
          `shared_with` the number of people splitting it.

    An update overwrites every mutable field with the submitted values.
    """
    name: str = Field(default="", max_length=200, description="Subscription name, e.g. Netflix")
    amount: Optional[str] = Field(
        default=None,
        description="Amount per billing period (ignored when shared)",
    )
    billing_frequency: str = Field(
        default="monthly",
        description="monthly, quarterly, half-yearly or yearly",
    )
    start_date: Optional[date] = Field(default=None, description="First day of the subscription")
    billing_date: int = Field(default=1, ge=1, le=31, description="Day of month billed (1-31)")
    category: str = Field(default="Streaming", description="One of the category options")
    reminder_days: Optional[int] = Field(
        default=None, ge=0, le=30,
        description="Days before billing to remind (server default when omitted)",
    )
    is_shared: bool = Field(default=False, description="Whether the cost is split")
    total_amount: Optional[str] = Field(
        default=None,
        description="Total amount per billing period before the split (shared only)",
    )
    shared_with: Optional[Union[int, str]] = Field(
        default=2,
        description="Number of people sharing the cost (shared only, at least 2)",
    )

    @field_validator("amount", "total_amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        return _amount_as_text(v)


class AmountPreviewRequest(BaseModel):
    """
    What:  Body of POST /api/subscriptions/preview.
    Who:   Sent by the forms while the user types, to show "Your share"
           and "Monthly equivalent" before anything is saved.
    """
    amount: Optional[str] = Field(default=None, description="Per-period amount, or total when shared")
    billing_frequency: str = Field(default="monthly")
    is_shared: bool = Field(default=False)
    shared_with: Optional[Union[int, str]] = Field(default=2)

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount(cls, v: Any) -> Any:
        return _amount_as_text(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SubscriptionResponse(BaseModel):
    """
    What:  One subscription as stored, plus its projected next billing.
    Who:   Returned by the list, detail, create and update endpoints.

    `form_amount` is what the edit form shows in its amount box: the total
    for a shared subscription, otherwise the actual amount.
    """
    id: uuid.UUID
    name: str
    amount: Decimal = Field(description="Monthly equivalent amount")
    actual_amount: Decimal = Field(description="Amount billed per period (post-split)")
    billing_frequency: str
    frequency_label: str = Field(description="Display label, e.g. 'Half Yearly'")
    start_date: date
    billing_date: int
    category: str
    reminder_days: int
    is_shared: bool
    total_amount: Optional[Decimal] = None
    shared_with: Optional[int] = None
    form_amount: Decimal
    next_billing_date: date
    days_until_billing: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SubscriptionListResponse(BaseModel):
    """Subscriptions of the current user, ordered by billing day."""
    subscriptions: List[SubscriptionResponse]
    total_count: int


class AmountPreviewResponse(BaseModel):
    """Normalized figures for a form amount; nothing is persisted."""
    actual_amount: Decimal = Field(description="Your share per billing period")
    monthly_amount: Decimal = Field(description="Monthly equivalent of your share")
    months: int = Field(description="Months per billing period")
    is_shared: bool
    shared_with: Optional[int] = None
    actual_amount_formatted: str
    monthly_amount_formatted: str


class FrequencyOption(BaseModel):
    id: str
    label: str
    months: int


class SubscriptionOptionsResponse(BaseModel):
    """Choices offered by the add and edit forms."""
    categories: List[str]
    billing_frequencies: List[FrequencyOption]
    billing_days: List[int]
    default_reminder_days: int
