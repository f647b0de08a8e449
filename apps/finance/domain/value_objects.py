"""
Immutable value objects for the finance domain.
Always valid once constructed; build them through the classmethod factories.
"""

import calendar
import enum
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from apps.exchange.domain.errors import ValidationError


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


@dataclass(frozen=True)
class DateRange:
    start_date: date
    end_date: date

    def __post_init__(self):
        if not isinstance(self.start_date, date):
            raise ValidationError("Invalid start date", "start_date")
        if not isinstance(self.end_date, date):
            raise ValidationError("Invalid end date", "end_date")
        if self.start_date > self.end_date:
            raise ValidationError("Start date must be before end date", "date_range")

    @classmethod
    def create(cls, start_date: date, end_date: date) -> "DateRange":
        return cls(start_date, end_date)

    @classmethod
    def from_strings(cls, start: str, end: str) -> "DateRange":
        try:
            return cls(date.fromisoformat(start), date.fromisoformat(end))
        except (TypeError, ValueError) as e:
            if isinstance(e, ValidationError):
                raise
            raise ValidationError("Invalid date format. Use YYYY-MM-DD", "date_range") from e

    @classmethod
    def current_month(cls, today: Optional[date] = None) -> "DateRange":
        today = today or date.today()
        last_day = calendar.monthrange(today.year, today.month)[1]
        return cls(today.replace(day=1), today.replace(day=last_day))

    @classmethod
    def last_n_months(cls, months: int, today: Optional[date] = None) -> "DateRange":
        if months < 0:
            raise ValidationError("months must not be negative", "months")
        today = today or date.today()
        return cls(_add_months(today, -months), today)

    def includes(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def overlaps(self, other: "DateRange") -> bool:
        return self.start_date <= other.end_date and self.end_date >= other.start_date

    @property
    def duration_in_days(self) -> int:
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} to {self.end_date.isoformat()}"


class RecurrenceType(str, enum.Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Approximate occurrences per month
MONTHLY_FACTORS = {
    RecurrenceType.ONCE: Decimal("1"),
    RecurrenceType.DAILY: Decimal("30"),
    RecurrenceType.WEEKLY: Decimal("4"),
    RecurrenceType.MONTHLY: Decimal("1"),
    RecurrenceType.YEARLY: Decimal("1") / Decimal("12"),
}


@dataclass(frozen=True)
class Recurrence:
    type: RecurrenceType
    start_date: date

    def __post_init__(self):
        try:
            object.__setattr__(self, "type", RecurrenceType(self.type))
        except ValueError as e:
            raise ValidationError(f"Invalid recurrence type: {self.type}", "recurrence") from e
        if not isinstance(self.start_date, date):
            raise ValidationError("Invalid start date", "start_date")

    @classmethod
    def create(cls, recurrence_type, start_date: date) -> "Recurrence":
        return cls(recurrence_type, start_date)

    @classmethod
    def once(cls, day: date) -> "Recurrence":
        return cls(RecurrenceType.ONCE, day)

    @classmethod
    def monthly(cls, start_date: date) -> "Recurrence":
        return cls(RecurrenceType.MONTHLY, start_date)

    def is_applicable_for_month(self, year: int, month: int) -> bool:
        """One-off entries count only in their own month; recurring ones from their start onward."""
        if self.type is RecurrenceType.ONCE:
            return (self.start_date.year, self.start_date.month) == (year, month)
        return (self.start_date.year, self.start_date.month) <= (year, month)

    def monthly_amount(self, base_amount: Decimal) -> Decimal:
        return base_amount * MONTHLY_FACTORS[self.type]

    def __str__(self):
        return self.type.value
