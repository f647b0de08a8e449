import pytest
from decimal import Decimal

from apps.exchange.domain.errors import CurrencyMismatchError, InvalidRateError, ValidationError
from apps.exchange.domain.models import ExchangeRate, Money, normalize_currency


class TestMoneyCreate:
    """Tests for Money construction and validation."""

    def test_create_normalizes_currency(self):
        money = Money.create("12.5", "usd")

        assert money.amount == Decimal("12.5")
        assert money.currency == "USD"

    @pytest.mark.parametrize("amount", [10, 10.25, "10.25", Decimal("10.25")])
    def test_create_accepts_numeric_inputs(self, amount):
        assert Money.create(amount, "EUR").amount == Decimal(str(amount))

    @pytest.mark.parametrize("code", ["US", "USDX", "12A", "", None, "u$d"])
    def test_create_rejects_invalid_currency(self, code):
        with pytest.raises(ValidationError) as exc_info:
            Money.create(1, code)

        assert exc_info.value.field == "currency"

    @pytest.mark.parametrize("amount", ["abc", "NaN", "Infinity", float("inf"), None, True])
    def test_create_rejects_non_finite_amount(self, amount):
        with pytest.raises(ValidationError):
            Money.create(amount, "USD")

    def test_validation_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            Money.create("x", "USD")

    def test_money_is_immutable(self):
        money = Money.create(1, "USD")

        with pytest.raises(Exception):
            money.amount = Decimal("2")

    def test_normalize_currency_strips_whitespace(self):
        assert normalize_currency(" gbp ") == "GBP"


class TestMoneyArithmetic:
    """Tests for Money arithmetic and comparison."""

    def test_add_same_currency(self):
        total = Money.create("10.10", "USD").add(Money.create("5.05", "USD"))

        assert total == Money.create("15.15", "USD")

    def test_subtract_same_currency(self):
        result = Money.create(10, "EUR").subtract(Money.create(15, "EUR"))

        assert result.amount == Decimal("-5")

    def test_add_different_currencies_raises(self):
        with pytest.raises(CurrencyMismatchError):
            Money.create(1, "USD").add(Money.create(1, "EUR"))

    def test_subtract_different_currencies_raises(self):
        with pytest.raises(CurrencyMismatchError):
            Money.create(1, "USD").subtract(Money.create(1, "EUR"))

    def test_operations_return_new_instances(self):
        original = Money.create(10, "USD")
        original.add(Money.create(5, "USD"))

        assert original.amount == Decimal("10")

    def test_multiply_and_divide(self):
        money = Money.create(10, "USD")

        assert money.multiply(3).amount == Decimal("30")
        assert money.divide(4).amount == Decimal("2.5")

    def test_divide_by_zero_raises(self):
        with pytest.raises(ValidationError):
            Money.create(10, "USD").divide(0)

    def test_comparisons(self):
        small, big = Money.create(1, "USD"), Money.create(2, "USD")

        assert big.is_greater_than(small)
        assert small.is_less_than(big)
        with pytest.raises(CurrencyMismatchError):
            small.is_less_than(Money.create(2, "EUR"))

    def test_zero(self):
        assert Money.zero("JPY") == Money.create(0, "JPY")

    def test_zero_needs_a_currency(self):
        with pytest.raises(TypeError):
            Money.zero()


class TestMoneyEquals:
    """Tests for tolerant equality."""

    def test_equals_within_epsilon(self):
        assert Money.create("100.0000000001", "USD").equals(Money.create(100, "USD"))

    def test_equals_is_relative_for_large_amounts(self):
        a = Money.create("1000000000", "USD")
        b = Money.create("1000000000.5", "USD")

        assert a.equals(b)

    def test_not_equal_beyond_epsilon(self):
        assert not Money.create("100.01", "USD").equals(Money.create(100, "USD"))

    def test_not_equal_across_currencies(self):
        assert not Money.create(1, "USD").equals(Money.create(1, "EUR"))

    def test_dataclass_equality_is_exact(self):
        assert Money.create("1.0000000001", "USD") != Money.create(1, "USD")


class TestMoneyFormatting:

    def test_str(self):
        assert str(Money.create("12.5", "usd")) == "12.50 USD"

    def test_to_dict(self):
        assert Money.create("3.25", "EUR").to_dict() == {"amount": "3.25", "currency": "EUR"}

    def test_quantized(self):
        assert Money.create("1.23456789", "USD").quantized(4).amount == Decimal("1.2346")


class TestExchangeRate:

    def test_rejects_non_positive_rate(self):
        with pytest.raises(InvalidRateError):
            ExchangeRate(currency_code="EUR", rate=Decimal("0"))

    def test_defaults(self):
        rate = ExchangeRate(currency_code="eur", rate="0.92")

        assert rate.currency_code == "EUR"
        assert rate.rate == Decimal("0.92")
        assert rate.is_manual is False
        assert rate.last_updated is not None
