import pytest
from datetime import date

from property_api.core.dates import last_twelve_months_start, month_start
from property_api.core.exceptions import InvalidStateException
from property_api.core.transitions import can_transition, ensure_transition
from property_api.models.enums import InvoiceStatus, LeaseStatus, UnitStatus


class TestCanTransition:
    @pytest.mark.parametrize(
        "current,target",
        [
            (LeaseStatus.PENDING, LeaseStatus.ACTIVE),
            (LeaseStatus.ACTIVE, LeaseStatus.TERMINATED),
            (LeaseStatus.EXPIRED, LeaseStatus.ACTIVE),
            (UnitStatus.VACANT, UnitStatus.MAINTENANCE),
            (InvoiceStatus.DRAFT, InvoiceStatus.PAID),
            (InvoiceStatus.CANCELLED, InvoiceStatus.DRAFT),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (LeaseStatus.TERMINATED, LeaseStatus.ACTIVE),
            (LeaseStatus.COMPLETED, LeaseStatus.PENDING),
            (LeaseStatus.ACTIVE, LeaseStatus.PENDING),
            (InvoiceStatus.CANCELLED, InvoiceStatus.PAID),
            (InvoiceStatus.PAID, InvoiceStatus.DRAFT),
        ],
    )
    def test_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_staying_put_is_always_allowed(self):
        assert can_transition(LeaseStatus.TERMINATED, LeaseStatus.TERMINATED)
        assert can_transition(InvoiceStatus.CANCELLED, InvoiceStatus.CANCELLED)

    def test_mixed_enums(self):
        with pytest.raises(TypeError):
            can_transition(LeaseStatus.ACTIVE, UnitStatus.OCCUPIED)

    def test_ensure_transition_message(self):
        with pytest.raises(InvalidStateException) as exc_info:
            ensure_transition(InvoiceStatus.PAID, InvoiceStatus.CANCELLED, "invoice")

        assert str(exc_info.value) == "Cannot change invoice status from 'paid' to 'cancelled'"


class TestMonthStart:
    @pytest.mark.parametrize(
        "day,months_back,expected",
        [
            (date(2024, 3, 15), 0, date(2024, 3, 1)),
            (date(2024, 3, 15), 2, date(2024, 1, 1)),
            (date(2024, 3, 15), 3, date(2023, 12, 1)),
            (date(2024, 3, 15), 11, date(2023, 4, 1)),
            (date(2024, 1, 31), 13, date(2022, 12, 1)),
        ],
    )
    def test_month_start(self, day, months_back, expected):
        assert month_start(day, months_back) == expected

    def test_last_twelve_months(self):
        assert last_twelve_months_start(date(2024, 12, 31)) == date(2024, 1, 1)
