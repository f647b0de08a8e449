"""
Data Transfer Objects returned by the finance use cases.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List

from apps.exchange.domain.models import Money


def _display(money: Money) -> str:
    return str(money.quantized(2).amount)


@dataclass
class DashboardSummaryDTO:
    """Monthly overview; every amount is in `currency`."""
    currency: str
    base_currency: str
    period_start: date
    period_end: date
    total_income: Money
    total_expenses: Money
    total_savings: Money
    total_investments: Money
    net_worth: Money
    expenses_by_category: Dict[str, Money] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "currency": self.currency,
            "base_currency": self.base_currency,
            "period": {
                "start": self.period_start.isoformat(),
                "end": self.period_end.isoformat(),
            },
            "total_income": _display(self.total_income),
            "total_expenses": _display(self.total_expenses),
            "total_savings": _display(self.total_savings),
            "total_investments": _display(self.total_investments),
            "net_worth": _display(self.net_worth),
            "expenses_by_category": {
                category: _display(money)
                for category, money in sorted(self.expenses_by_category.items())
            },
        }


@dataclass
class PriceRefreshResultDTO:
    """Outcome of refreshing the market prices of one user's investments."""
    updated: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "updated": self.updated,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }
