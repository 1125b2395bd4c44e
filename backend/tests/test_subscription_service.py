"""
SubTrack Backend — Subscription Service Unit Tests
===================================================

What:  Tests for SubscriptionService (create, get, list, update, delete,
       preview, options).
How:   Uses mock DB sessions (no real database).

What we test:
    ✅ Create stores normalized amounts (plain and shared)
    ✅ Invalid forms are rejected before the session is touched
    ✅ Missing / foreign rows raise NotFoundError
    ✅ Update overwrites every mutable field
    ✅ SQLAlchemy failures surface as DatabaseError
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from subtrack.exceptions import DatabaseError, NotFoundError, ValidationError
from subtrack.schemas.subscription import AmountPreviewRequest, SubscriptionForm
from subtrack.services.subscription_service import SubscriptionService

TODAY = date(2026, 10, 19)


def _form(**overrides) -> SubscriptionForm:
    values = {
        "name": "  Spotify  ",
        "amount": "119",
        "billing_frequency": "monthly",
        "start_date": date(2026, 3, 1),
        "billing_date": 1,
        "category": "Music",
        "reminder_days": 2,
    }
    values.update(overrides)
    return SubscriptionForm(**values)


def _returning(mock_db_session, subscription):
    result = MagicMock()
    result.scalar_one_or_none.return_value = subscription
    mock_db_session.execute.return_value = result


class TestCreateSubscription:
    """Tests for create_subscription."""

    def setup_method(self):
        self.service = SubscriptionService()

    @pytest.mark.asyncio
    async def test_create_plain(self, mock_db_session, user_id):
        result = await self.service.create_subscription(mock_db_session, user_id, _form(), TODAY)

        mock_db_session.add.assert_called_once()
        stored = mock_db_session.add.call_args.args[0]
        assert stored.user_id == user_id
        assert stored.name == "Spotify"
        assert stored.amount == Decimal("119.00")
        assert stored.actual_amount == Decimal("119.00")
        assert stored.is_shared is False
        assert stored.total_amount is None
        assert stored.shared_with is None

        assert result.id == stored.id
        assert result.next_billing_date == date(2026, 11, 1)
        assert result.days_until_billing == 13
        assert result.frequency_label == "Monthly"

    @pytest.mark.asyncio
    async def test_create_yearly_normalizes_to_monthly(self, mock_db_session, user_id):
        form = _form(amount=1200, billing_frequency="yearly", category="Software")
        result = await self.service.create_subscription(mock_db_session, user_id, form, TODAY)
        assert result.actual_amount == Decimal("1200.00")
        assert result.amount == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_create_shared(self, mock_db_session, user_id):
        form = _form(amount=None, is_shared=True, total_amount="900", shared_with=3)
        result = await self.service.create_subscription(mock_db_session, user_id, form, TODAY)

        stored = mock_db_session.add.call_args.args[0]
        assert stored.is_shared is True
        assert stored.total_amount == Decimal("900.00")
        assert stored.shared_with == 3
        assert stored.actual_amount == Decimal("300.00")
        assert stored.amount == Decimal("300.00")
        assert result.form_amount == Decimal("900.00")

    @pytest.mark.asyncio
    async def test_default_reminder_days(self, mock_db_session, user_id):
        await self.service.create_subscription(
            mock_db_session, user_id, _form(reminder_days=None), TODAY
        )
        assert mock_db_session.add.call_args.args[0].reminder_days == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["abc", "-5", "0", None])
    async def test_invalid_amount_not_stored(self, mock_db_session, user_id, amount):
        with pytest.raises(ValidationError, match="valid amount"):
            await self.service.create_subscription(
                mock_db_session, user_id, _form(amount=amount), TODAY
            )
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"name": "   "}, "name"),
            ({"start_date": None}, "start_date"),
            ({"category": "Groceries"}, "category"),
            ({"billing_frequency": "weekly"}, "billing_frequency"),
            ({"is_shared": True, "total_amount": "500", "shared_with": 1}, "shared_with"),
            ({"is_shared": True, "total_amount": "500", "shared_with": None}, "shared_with"),
            ({"amount": "1000000000000"}, "amount"),
        ],
    )
    async def test_rule_violations_not_stored(self, mock_db_session, user_id, overrides, field):
        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_subscription(
                mock_db_session, user_id, _form(**overrides), TODAY
            )
        assert exc_info.value.field == field
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self, mock_db_session, user_id):
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection reset"))
        )
        with pytest.raises(DatabaseError, match="Failed to add subscription"):
            await self.service.create_subscription(mock_db_session, user_id, _form(), TODAY)


class TestGetAndListSubscriptions:
    """Tests for owner-scoped reads."""

    def setup_method(self):
        self.service = SubscriptionService()

    @pytest.mark.asyncio
    async def test_get_found(self, mock_db_session, user_id, make_subscription):
        sub = make_subscription()
        _returning(mock_db_session, sub)

        result = await self.service.get_subscription(mock_db_session, user_id, sub.id, TODAY)

        assert result.id == sub.id
        assert result.form_amount == Decimal("499.00")
        assert result.next_billing_date == date(2026, 11, 5)

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session, user_id):
        _returning(mock_db_session, None)
        with pytest.raises(NotFoundError):
            await self.service.get_subscription(mock_db_session, user_id, uuid4(), TODAY)

    @pytest.mark.asyncio
    async def test_query_filters_by_owner(self, mock_db_session, user_id):
        _returning(mock_db_session, None)
        with pytest.raises(NotFoundError):
            await self.service.get_subscription(mock_db_session, user_id, uuid4(), TODAY)

        statement = mock_db_session.execute.call_args.args[0]
        compiled = statement.compile()
        assert "subscriptions.user_id" in str(compiled)
        assert user_id in compiled.params.values()

    @pytest.mark.asyncio
    async def test_list(self, mock_db_session, user_id, make_subscription):
        subs = [
            make_subscription(name="Netflix", billing_date=5),
            make_subscription(name="iCloud", billing_date=20, amount=Decimal("75.00"),
                              actual_amount=Decimal("75.00"), category="Cloud Storage"),
        ]
        result = MagicMock()
        result.scalars.return_value.all.return_value = subs
        mock_db_session.execute.return_value = result

        listing = await self.service.list_subscriptions(mock_db_session, user_id, TODAY)

        assert listing.total_count == 2
        assert [s.name for s in listing.subscriptions] == ["Netflix", "iCloud"]
        assert listing.subscriptions[1].days_until_billing == 1

    @pytest.mark.asyncio
    async def test_list_failure_wrapped(self, mock_db_session, user_id):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("timeout"))
        )
        with pytest.raises(DatabaseError, match="Failed to load subscriptions"):
            await self.service.list_subscriptions(mock_db_session, user_id, TODAY)


class TestUpdateAndDelete:
    """Tests for update_subscription and delete_subscription."""

    def setup_method(self):
        self.service = SubscriptionService()

    @pytest.mark.asyncio
    async def test_update_overwrites_all_fields(self, mock_db_session, user_id, make_subscription):
        sub = make_subscription(
            is_shared=True,
            total_amount=Decimal("998.00"),
            shared_with=2,
            actual_amount=Decimal("499.00"),
        )
        _returning(mock_db_session, sub)

        form = _form(name="Netflix Premium", amount="1947", billing_frequency="quarterly",
                     category="Streaming", billing_date=31, reminder_days=7)
        result = await self.service.update_subscription(mock_db_session, user_id, sub.id, form, TODAY)

        assert sub.name == "Netflix Premium"
        assert sub.actual_amount == Decimal("1947.00")
        assert sub.amount == Decimal("649.00")
        assert sub.billing_frequency == "quarterly"
        assert sub.billing_date == 31
        assert sub.reminder_days == 7
        assert sub.is_shared is False
        assert sub.total_amount is None
        assert sub.shared_with is None
        mock_db_session.flush.assert_awaited()
        # Start Mar 2026, quarterly on the 31st: Mar 31, Jun 30, Sep 30, Dec 31
        assert result.next_billing_date == date(2026, 12, 31)

    @pytest.mark.asyncio
    async def test_update_refreshes_timestamp_on_unchanged_resave(
        self, mock_db_session, user_id, make_subscription
    ):
        saved_at = datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc)
        sub = make_subscription(updated_at=saved_at)
        _returning(mock_db_session, sub)

        form = _form(name="Netflix", amount="499", category="Streaming",
                     start_date=date(2026, 1, 5), billing_date=5, reminder_days=3)
        await self.service.update_subscription(mock_db_session, user_id, sub.id, form, TODAY)

        assert sub.updated_at > saved_at

    @pytest.mark.asyncio
    async def test_update_invalid_form_skips_lookup(self, mock_db_session, user_id):
        with pytest.raises(ValidationError):
            await self.service.update_subscription(
                mock_db_session, user_id, uuid4(), _form(amount="abc"), TODAY
            )
        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_not_found(self, mock_db_session, user_id):
        _returning(mock_db_session, None)
        with pytest.raises(NotFoundError):
            await self.service.update_subscription(mock_db_session, user_id, uuid4(), _form(), TODAY)

    @pytest.mark.asyncio
    async def test_delete(self, mock_db_session, user_id, make_subscription):
        sub = make_subscription()
        _returning(mock_db_session, sub)

        await self.service.delete_subscription(mock_db_session, user_id, sub.id)

        mock_db_session.delete.assert_awaited_once_with(sub)

    @pytest.mark.asyncio
    async def test_delete_not_found(self, mock_db_session, user_id):
        _returning(mock_db_session, None)
        with pytest.raises(NotFoundError):
            await self.service.delete_subscription(mock_db_session, user_id, uuid4())
        mock_db_session.delete.assert_not_awaited()


class TestFormHelpers:
    """Tests for preview_amount and get_options."""

    def setup_method(self):
        self.service = SubscriptionService()

    def test_preview_shared(self):
        preview = self.service.preview_amount(
            AmountPreviewRequest(amount="1800", billing_frequency="half-yearly", is_shared=True, shared_with=3)
        )
        assert preview.actual_amount == Decimal("600.00")
        assert preview.monthly_amount == Decimal("100.00")
        assert preview.actual_amount_formatted == "₹600.00"
        assert preview.shared_with == 3

    def test_preview_ignores_participants_when_not_shared(self):
        preview = self.service.preview_amount(
            AmountPreviewRequest(amount=300, billing_frequency="quarterly", shared_with=5)
        )
        assert preview.actual_amount == Decimal("300.00")
        assert preview.monthly_amount == Decimal("100.00")
        assert preview.is_shared is False

    def test_preview_shared_without_participants(self):
        with pytest.raises(ValidationError) as exc_info:
            self.service.preview_amount(
                AmountPreviewRequest(amount="900", is_shared=True, shared_with=None)
            )
        assert exc_info.value.field == "shared_with"

    def test_preview_invalid_amount(self):
        with pytest.raises(ValidationError):
            self.service.preview_amount(AmountPreviewRequest(amount="abc"))

    def test_options(self):
        options = self.service.get_options()
        assert "Cloud Storage" in options.categories
        assert [(f.id, f.months) for f in options.billing_frequencies] == [
            ("monthly", 1), ("quarterly", 3), ("half-yearly", 6), ("yearly", 12),
        ]
        assert options.billing_days[0] == 1 and options.billing_days[-1] == 31
