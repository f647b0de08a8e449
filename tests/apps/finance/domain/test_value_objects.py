import pytest
from datetime import date
from decimal import Decimal

from apps.exchange.domain.errors import ValidationError
from apps.finance.domain.value_objects import DateRange, Recurrence, RecurrenceType


class TestDateRange:
    """Tests for DateRange."""

    def test_create_valid(self):
        period = DateRange.create(date(2024, 1, 1), date(2024, 1, 31))

        assert period.duration_in_days == 30
        assert str(period) == "2024-01-01 to 2024-01-31"

    def test_single_day_range_is_valid(self):
        assert DateRange.create(date(2024, 2, 29), date(2024, 2, 29)).duration_in_days == 0

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            DateRange.create(date(2024, 2, 1), date(2024, 1, 1))

        assert exc_info.value.field == "date_range"

    def test_non_date_rejected(self):
        with pytest.raises(ValidationError):
            DateRange("2024-01-01", date(2024, 1, 2))

    def test_from_strings(self):
        assert DateRange.from_strings("2024-03-01", "2024-03-15") == DateRange(date(2024, 3, 1), date(2024, 3, 15))

    @pytest.mark.parametrize("start, end", [("03/01/2024", "2024-03-15"), ("2024-03-01", None), ("", "")])
    def test_from_strings_bad_format(self, start, end):
        with pytest.raises(ValidationError, match="Use YYYY-MM-DD"):
            DateRange.from_strings(start, end)

    def test_from_strings_keeps_order_error(self):
        with pytest.raises(ValidationError, match="Start date must be before end date"):
            DateRange.from_strings("2024-03-15", "2024-03-01")

    def test_current_month(self):
        period = DateRange.current_month(date(2024, 2, 10))

        assert period == DateRange(date(2024, 2, 1), date(2024, 2, 29))

    def test_last_n_months_clamps_day(self):
        period = DateRange.last_n_months(1, today=date(2024, 3, 31))

        assert period.start_date == date(2024, 2, 29)
        assert period.end_date == date(2024, 3, 31)

    def test_last_n_months_crosses_year(self):
        assert DateRange.last_n_months(3, today=date(2024, 1, 15)).start_date == date(2023, 10, 15)

    def test_includes_and_overlaps(self):
        january = DateRange(date(2024, 1, 1), date(2024, 1, 31))
        mid = DateRange(date(2024, 1, 20), date(2024, 2, 10))
        march = DateRange(date(2024, 3, 1), date(2024, 3, 31))

        assert january.includes(date(2024, 1, 31))
        assert not january.includes(date(2024, 2, 1))
        assert january.overlaps(mid)
        assert not january.overlaps(march)


class TestRecurrence:
    """Tests for Recurrence."""

    def test_create_from_string(self):
        recurrence = Recurrence.create("weekly", date(2024, 1, 1))

        assert recurrence.type is RecurrenceType.WEEKLY
        assert str(recurrence) == "weekly"

    def test_invalid_type(self):
        with pytest.raises(ValidationError) as exc_info:
            Recurrence.create("fortnightly", date(2024, 1, 1))

        assert exc_info.value.field == "recurrence"

    def test_once_applies_only_to_its_month(self):
        recurrence = Recurrence.once(date(2024, 5, 20))

        assert recurrence.is_applicable_for_month(2024, 5)
        assert not recurrence.is_applicable_for_month(2024, 6)
        assert not recurrence.is_applicable_for_month(2024, 4)

    def test_recurring_applies_from_start_month(self):
        recurrence = Recurrence.monthly(date(2024, 5, 20))

        assert not recurrence.is_applicable_for_month(2024, 4)
        assert recurrence.is_applicable_for_month(2024, 5)
        assert recurrence.is_applicable_for_month(2025, 1)

    @pytest.mark.parametrize("recurrence_type, expected", [
        ("once", Decimal("1200")),
        ("daily", Decimal("36000")),
        ("weekly", Decimal("4800")),
        ("monthly", Decimal("1200")),
        ("yearly", Decimal("100")),
    ])
    def test_monthly_amount(self, recurrence_type, expected):
        recurrence = Recurrence.create(recurrence_type, date(2024, 1, 1))

        assert recurrence.monthly_amount(Decimal("1200")).quantize(Decimal("0.000001")) == expected
