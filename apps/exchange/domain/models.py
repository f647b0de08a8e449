"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from apps.exchange.domain.errors import (
    CurrencyMismatchError,
    InvalidRateError,
    ValidationError,
)


# Tolerance used by Money.equals to absorb rounding from two-hop conversions
MONEY_EPSILON = Decimal("1e-9")

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


def normalize_currency(code) -> str:
    """Upper-case and validate an ISO 4217-like code (3 letters)."""
    if not isinstance(code, str):
        raise ValidationError(f"Currency must be a 3-letter code, got {code!r}", "currency")
    normalized = code.strip().upper()
    if not _CURRENCY_CODE.match(normalized):
        raise ValidationError(f"Currency must be a 3-letter code, got '{code}'", "currency")
    return normalized


def to_decimal(value, field_name: str = "amount") -> Decimal:
    """Coerce int/float/str/Decimal to a finite Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a valid number", field_name)
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            raise ValidationError(f"{field_name} must be a valid number, got {value!r}", field_name)
    if not result.is_finite():
        raise ValidationError(f"{field_name} must be a finite number, got {value!r}", field_name)
    return result


@dataclass(frozen=True)
class Money:
    """
    Immutable amount + currency pair.

    Build it with Money.create(), which coerces the amount and normalizes
    the code; direct construction runs the same validation.
    """

    amount: Decimal
    currency: str

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "currency", normalize_currency(self.currency))

    @classmethod
    def create(cls, amount, currency: str) -> "Money":
        return cls(to_decimal(amount), normalize_currency(currency))

    @classmethod
    def zero(cls, currency: str) -> "Money":
        return cls(Decimal("0"), currency)

    def add(self, other: "Money") -> "Money":
        self._ensure_same_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def subtract(self, other: "Money") -> "Money":
        self._ensure_same_currency(other, "subtract")
        return Money(self.amount - other.amount, self.currency)

    def multiply(self, factor) -> "Money":
        return Money(self.amount * to_decimal(factor, "factor"), self.currency)

    def divide(self, divisor) -> "Money":
        divisor = to_decimal(divisor, "divisor")
        if divisor == 0:
            raise ValidationError("Cannot divide by zero", "divisor")
        return Money(self.amount / divisor, self.currency)

    def is_greater_than(self, other: "Money") -> bool:
        self._ensure_same_currency(other, "compare")
        return self.amount > other.amount

    def is_less_than(self, other: "Money") -> bool:
        self._ensure_same_currency(other, "compare")
        return self.amount < other.amount

    def equals(self, other: "Money") -> bool:
        """Same currency and amounts equal within MONEY_EPSILON (relative above 1)."""
        if not isinstance(other, Money) or self.currency != other.currency:
            return False
        scale = max(Decimal("1"), abs(self.amount), abs(other.amount))
        return abs(self.amount - other.amount) <= MONEY_EPSILON * scale

    def quantized(self, places: int = 6) -> "Money":
        return Money(self.amount.quantize(Decimal(1).scaleb(-places)), self.currency)

    def to_dict(self) -> dict:
        return {"amount": str(self.amount), "currency": self.currency}

    def _ensure_same_currency(self, other: "Money", operation: str):
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency, operation)

    def __str__(self):
        return f"{self.amount.quantize(Decimal('0.01'))} {self.currency}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ExchangeRate:
    """
    Latest known rate for one currency against the base currency.

    rate is expressed as units of currency_code per 1 base unit, so
    amount_in_base = amount / rate.
    """

    currency_code: str
    rate: Decimal
    last_updated: datetime = field(default_factory=_utc_now)
    is_manual: bool = False

    def __post_init__(self):
        object.__setattr__(self, "currency_code", normalize_currency(self.currency_code))
        rate = to_decimal(self.rate, "rate")
        if rate <= 0:
            raise InvalidRateError(self.currency_code, rate)
        object.__setattr__(self, "rate", rate)


@dataclass(frozen=True)
class ValuationLineItem:
    """Any record contributing a Money value to an aggregate total."""

    user_id: Optional[object]
    money: Money
    occurred_on: Optional[date] = None
    kind: str = "other"
    category: Optional[str] = None
