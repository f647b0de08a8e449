"""
Investment calculations.
Per-position figures stay in the position's own currency; portfolio figures
are aggregated in the base currency.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from apps.exchange.domain.errors import CurrencyMismatchError, ValidationError
from apps.exchange.domain.models import Money, ValuationLineItem, to_decimal
from apps.exchange.domain.services import ValuationAggregator

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class InvestmentPosition:
    """Read-only snapshot of one investment, decoupled from the ORM row."""

    asset_type: str
    quantity: Decimal
    buy_price: Money
    current_price: Money
    is_active: bool = True
    user_id: Optional[object] = None
    purchase_date: Optional[date] = None

    def __post_init__(self):
        quantity = to_decimal(self.quantity, "quantity")
        if quantity < 0:
            raise ValidationError("quantity must not be negative", "quantity")
        object.__setattr__(self, "quantity", quantity)
        if self.buy_price.currency != self.current_price.currency:
            raise CurrencyMismatchError(self.buy_price.currency, self.current_price.currency, "price")

    @property
    def currency(self) -> str:
        return self.buy_price.currency


def total_invested(position: InvestmentPosition) -> Money:
    return position.buy_price.multiply(position.quantity)


def market_value(position: InvestmentPosition) -> Money:
    return position.current_price.multiply(position.quantity)


def profit_loss(position: InvestmentPosition) -> Money:
    return market_value(position).subtract(total_invested(position))


def return_on_investment(position: InvestmentPosition) -> Decimal:
    """ROI in percent; 0 when nothing was invested."""
    invested = total_invested(position)
    if invested.amount == 0:
        return Decimal("0")
    return profit_loss(position).amount / invested.amount * HUNDRED


@dataclass
class PortfolioMetrics:
    base_currency: str
    total_invested: Money
    total_market_value: Money
    total_profit_loss: Money
    roi_percent: Decimal
    active_positions: int
    closed_positions: int
    by_asset_type: Dict[str, Money] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "base_currency": self.base_currency,
            "total_invested": str(self.total_invested.quantized().amount),
            "total_market_value": str(self.total_market_value.quantized().amount),
            "total_profit_loss": str(self.total_profit_loss.quantized().amount),
            "roi_percent": str(self.roi_percent.quantize(Decimal("0.01"))),
            "active_positions": self.active_positions,
            "closed_positions": self.closed_positions,
            "by_asset_type": {
                asset_type: str(money.quantized().amount)
                for asset_type, money in sorted(self.by_asset_type.items())
            },
        }


class PortfolioCalculator:
    """
    Portfolio-level metrics across positions held in different currencies.

    Active positions contribute market value and profit/loss; closed ones
    only count towards the amount invested. Conversion is fail-fast.
    """

    def __init__(self, aggregator: ValuationAggregator):
        self.aggregator = aggregator

    def _items(self, positions: Iterable[InvestmentPosition], figure) -> List[ValuationLineItem]:
        return [
            ValuationLineItem(
                user_id=p.user_id,
                money=figure(p),
                occurred_on=p.purchase_date,
                kind="investment",
                category=p.asset_type,
            )
            for p in positions
        ]

    def market_value_in_base(self, positions: Iterable[InvestmentPosition]) -> Money:
        active = [p for p in positions if p.is_active]
        return self.aggregator.total_in_base(self._items(active, market_value))

    def calculate(self, positions: Iterable[InvestmentPosition]) -> PortfolioMetrics:
        positions = list(positions)
        active = [p for p in positions if p.is_active]

        invested = self.aggregator.total_in_base(self._items(positions, total_invested))
        active_value_items = self._items(active, market_value)
        value = self.aggregator.total_in_base(active_value_items)
        pnl = self.aggregator.total_in_base(self._items(active, profit_loss))
        by_type = self.aggregator.group_by(active_value_items, lambda item: item.category)

        roi = Decimal("0")
        if invested.amount != 0:
            roi = pnl.amount / invested.amount * HUNDRED

        return PortfolioMetrics(
            base_currency=self.aggregator.base_currency,
            total_invested=invested,
            total_market_value=value,
            total_profit_loss=pnl,
            roi_percent=roi,
            active_positions=len(active),
            closed_positions=len(positions) - len(active),
            by_asset_type=by_type,
        )
