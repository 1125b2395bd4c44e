"""
SubTrack Backend — Billing Calculations
=======================================

What:  Pure functions for the money and calendar arithmetic behind every
       screen: amount normalization, shared-cost splitting, next billing
       date projection, and Indian-style currency formatting.
How:   Amounts are `Decimal` quantized to paise (2 places, ROUND_HALF_UP),
       matching the `decimal(10,2)` storage columns. Dates are plain
       `datetime.date`; the caller supplies "today".
Who:   SubscriptionService (write path), DashboardService (read path),
       the preview endpoint, and tests.

Nothing here touches the database or the clock, so every function gives the
same answer for the same arguments.

Day-of-month policy:
    A billing day of 29, 30 or 31 in a shorter month is clamped to that
    month's last day (31 → Apr 30, 30 → Feb 28/29). The anchor is re-applied
    to every period, so Jan 31 → Feb 28 → Mar 31 rather than drifting to
    Mar 28.
"""

import calendar
import math
import re
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, List, Optional, Sequence

from subtrack.exceptions import ValidationError

# ── Reference Data ────────────────────────────────────────────────────────

FREQUENCY_MONTHS = {
    "monthly": 1,
    "quarterly": 3,
    "half-yearly": 6,
    "yearly": 12,
}

FREQUENCY_LABELS = {
    "monthly": "Monthly",
    "quarterly": "Quarterly",
    "half-yearly": "Half Yearly",
    "yearly": "Yearly",
}

CATEGORIES = (
    "Streaming",
    "Gaming",
    "Music",
    "Cloud Storage",
    "Software",
    "News",
    "Fitness",
    "Other",
)

MIN_PARTICIPANTS = 2
# Largest value a decimal(10,2) column holds
MAX_AMOUNT = Decimal("99999999.99")
CURRENCY_SYMBOL = "₹"

_CENT = Decimal("0.01")
_INDIAN_GROUPS = re.compile(r"\B(?=(\d{2})+(?!\d))")


# ── Amounts ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class NormalizedAmount:
    """Result of normalizing a form amount.

    input_amount:   What the user typed (the total when shared).
    actual_amount:  Billed per period for this user (post-split).
    monthly_amount: actual_amount spread over one month.
    shared_with:    Participant count, None when not shared.
    """
    input_amount: Decimal
    actual_amount: Decimal
    monthly_amount: Decimal
    months: int
    shared_with: Optional[int] = None

    @property
    def is_shared(self) -> bool:
        return self.shared_with is not None


def quantize(value: Decimal) -> Decimal:
    """Round to paise."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def months_in_frequency(frequency: str) -> int:
    """Number of months one billing period covers."""
    try:
        return FREQUENCY_MONTHS[frequency]
    except KeyError:
        raise ValidationError(
            message="Invalid billing frequency",
            field="billing_frequency",
            context={"allowed": list(FREQUENCY_MONTHS)},
        )


def frequency_label(frequency: str) -> str:
    """Display label for a frequency tag; unknown tags are shown as-is."""
    return FREQUENCY_LABELS.get(frequency, frequency)


def parse_amount(value: Any, field: str = "amount") -> Decimal:
    """
    Parse a form amount into a positive Decimal.

    Accepts numbers and numeric strings up to MAX_AMOUNT. Anything else
    (text, blanks, NaN, infinity, booleans, zero, negatives, amounts too
    large to store) raises ValidationError.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(message="Please enter a valid amount", field=field)

    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(message="Please enter a valid amount", field=field)
        value = repr(value)

    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(message="Please enter a valid amount", field=field)

    if not amount.is_finite() or amount <= 0:
        raise ValidationError(message="Please enter a valid amount", field=field)
    if amount > MAX_AMOUNT:
        raise ValidationError(
            message="Amount is too large",
            field=field,
            context={"max": str(MAX_AMOUNT)},
        )
    return amount


def parse_participants(value: Any) -> int:
    """Participant count of a shared subscription; must be an integer >= 2."""
    invalid = ValidationError(
        message="Enter how many people share this subscription", field="shared_with"
    )
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise invalid
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise invalid
    if count < MIN_PARTICIPANTS:
        raise ValidationError(
            message=f"A shared subscription needs at least {MIN_PARTICIPANTS} people",
            field="shared_with",
        )
    return count


def split_shared_cost(total: Decimal, participants: int) -> Decimal:
    """Each participant's share of a shared subscription."""
    return quantize(total / Decimal(participants))


def monthly_equivalent(actual: Decimal, frequency: str) -> Decimal:
    """Cost of one billing period spread over a single month."""
    return quantize(actual / Decimal(months_in_frequency(frequency)))


def normalize_amount(
    amount: Any,
    frequency: str,
    shared_with: Any = None,
) -> NormalizedAmount:
    """
    Turn a form amount into the stored actual and monthly-equivalent figures.

    Args:
        amount:      Per-period amount, or the total before split when shared.
        frequency:   One of FREQUENCY_MONTHS.
        shared_with: Participant count for shared subscriptions, else None.

    Raises:
        ValidationError: bad or oversized amount, unknown frequency, fewer
            than 2 people, or a share that rounds to 0.00.

    Example:
        >>> normalize_amount("1200", "yearly").monthly_amount
        Decimal('100.00')
        >>> n = normalize_amount(900, "monthly", shared_with=3)
        >>> n.actual_amount, n.monthly_amount
        (Decimal('300.00'), Decimal('300.00'))
    """
    field = "total_amount" if shared_with is not None else "amount"
    input_amount = parse_amount(amount, field=field)
    months = months_in_frequency(frequency)

    participants: Optional[int] = None
    if shared_with is not None:
        participants = parse_participants(shared_with)
        actual = split_shared_cost(input_amount, participants)
    else:
        actual = quantize(input_amount)

    # Rounds to zero paise per period
    if actual == 0:
        raise ValidationError(message="Please enter a valid amount", field=field)

    return NormalizedAmount(
        input_amount=quantize(input_amount),
        actual_amount=actual,
        monthly_amount=quantize(actual / Decimal(months)),
        months=months,
        shared_with=participants,
    )


def format_inr(amount: Any) -> str:
    """
    Format an amount as rupees with Indian digit grouping.

    The last three digits form one group, every group above that has two:
    1234567.5 → "₹12,34,567.50". Missing or non-numeric input renders as
    "₹0.00".
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        value = Decimal(0)
    if not value.is_finite():
        value = Decimal(0)

    value = quantize(value)
    sign = "-" if value < 0 else ""
    whole, fraction = f"{abs(value):.2f}".split(".")

    last_three, others = whole[-3:], whole[:-3]
    if others:
        whole = _INDIAN_GROUPS.sub(",", others) + "," + last_three

    return f"{sign}{CURRENCY_SYMBOL}{whole}.{fraction}"


# ── Dates ─────────────────────────────────────────────────────────────────

def _shift_month(year: int, month: int, months: int):
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def anchored_date(year: int, month: int, billing_day: int) -> date:
    """The billing day in the given month, clamped to the month's last day."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(billing_day, last_day))


def next_billing_date(
    start_date: date,
    billing_day: int,
    frequency: str,
    today: date,
) -> date:
    """
    Project the next billing date strictly after `today`.

    The first candidate is the billing day in the start date's month; each
    further candidate is one frequency step (1, 3, 6 or 12 months) later.
    The first candidate that falls after `today` is returned.
    """
    if not 1 <= billing_day <= 31:
        raise ValidationError(message="Billing day must be between 1 and 31", field="billing_date")
    step = months_in_frequency(frequency)

    offset = 0
    candidate = anchored_date(start_date.year, start_date.month, billing_day)
    if candidate <= today:
        # Jump to the last period starting in or before today's month
        elapsed = (today.year - start_date.year) * 12 + (today.month - start_date.month)
        offset = (elapsed // step) * step
        candidate = anchored_date(*_shift_month(start_date.year, start_date.month, offset), billing_day)

    while candidate <= today:
        offset += step
        candidate = anchored_date(*_shift_month(start_date.year, start_date.month, offset), billing_day)
    return candidate


def days_until(target: date, today: date) -> int:
    """Whole days from `today` to `target`."""
    return (target - today).days


@dataclass(frozen=True)
class UpcomingBilling:
    """A subscription paired with its projected next billing date."""
    subscription: Any
    next_billing_date: date
    days_until: int


def project_upcoming(subscriptions: Iterable[Any], today: date) -> List[UpcomingBilling]:
    """
    Project and sort subscriptions by next billing date, soonest first.

    Items need `start_date`, `billing_date` and `billing_frequency`
    attributes (ORM rows or schemas). The sort is stable: subscriptions due
    on the same day keep their input order.
    """
    projected = []
    for sub in subscriptions:
        due = next_billing_date(sub.start_date, sub.billing_date, sub.billing_frequency, today)
        projected.append(UpcomingBilling(sub, due, days_until(due, today)))
    return sorted(projected, key=lambda item: item.next_billing_date)


def next_due(subscriptions: Sequence[Any], today: date) -> Optional[UpcomingBilling]:
    """The soonest upcoming billing, or None when there are no subscriptions."""
    upcoming = project_upcoming(subscriptions, today)
    return upcoming[0] if upcoming else None


def monthly_total(amounts: Iterable[Optional[Decimal]]) -> Decimal:
    """Sum of monthly-equivalent amounts; missing values count as zero."""
    return quantize(sum((Decimal(a) for a in amounts if a is not None), Decimal(0)))
