"""
Domain services - Core business logic.
Conversion between arbitrary currencies routed through the base currency,
and aggregation of heterogeneous line items into base-currency totals.
"""

import logging
from decimal import Decimal
from typing import Callable, Dict, Hashable, Iterable, Optional

from django.conf import settings

from apps.exchange.domain.errors import InvalidRateError
from apps.exchange.domain.interfaces import ExchangeRateStore
from apps.exchange.domain.models import Money, ValuationLineItem, normalize_currency, to_decimal

logger = logging.getLogger(__name__)


class CurrencyConverter:
    """
    Converts amounts between currencies via the base currency.

    Only base-relative rates are stored (one per currency), so every cross
    rate is derived from two of them and they always stay consistent.
    Rates are read from the store on each call; nothing is cached here.

    Example:
        >>> converter = CurrencyConverter(store)          # store: EUR -> 0.92
        >>> str(converter.convert_to_base(92, "EUR"))
        '100.00 USD'
        >>> str(converter.convert(100, "USD", "EUR"))
        '92.00 EUR'
    """

    def __init__(self, store: ExchangeRateStore, base_currency: Optional[str] = None):
        self.store = store
        self.base_currency = normalize_currency(base_currency or store.base_currency)

    def get_rate(self, currency_code: str) -> Decimal:
        rate = self.store.get_rate(currency_code)
        if rate <= 0:
            raise InvalidRateError(currency_code, rate)
        return rate

    def convert_to_base(self, amount, from_currency: str) -> Money:
        from_currency = normalize_currency(from_currency)
        if from_currency == self.base_currency:
            return Money.create(amount, self.base_currency)

        rate = self.get_rate(from_currency)
        return Money(to_decimal(amount) / rate, self.base_currency)

    def convert_from_base(self, amount_in_base, to_currency: str) -> Money:
        to_currency = normalize_currency(to_currency)
        if to_currency == self.base_currency:
            return Money.create(amount_in_base, self.base_currency)

        rate = self.get_rate(to_currency)
        return Money(to_decimal(amount_in_base) * rate, to_currency)

    def convert(self, amount, from_currency: str, to_currency: str) -> Money:
        from_currency = normalize_currency(from_currency)
        to_currency = normalize_currency(to_currency)
        if from_currency == to_currency:
            return Money.create(amount, to_currency)

        in_base = self.convert_to_base(amount, from_currency)
        return self.convert_from_base(in_base.amount, to_currency)

    def convert_money(self, money: Money, to_currency: str) -> Money:
        return self.convert(money.amount, money.currency, to_currency)


class ValuationAggregator:
    """
    Sums line items in mixed currencies into base-currency totals.

    Fail-fast: the first item that cannot be converted aborts the whole
    aggregation; no partial total is ever returned.
    """

    def __init__(self, converter: CurrencyConverter):
        self.converter = converter

    @property
    def base_currency(self) -> str:
        return self.converter.base_currency

    def _to_base(self, item: ValuationLineItem) -> Money:
        money = item.money
        if money.currency == self.base_currency:
            return money
        return self.converter.convert_to_base(money.amount, money.currency)

    def total_in_base(self, items: Iterable[ValuationLineItem]) -> Money:
        total = Money.zero(self.base_currency)
        for item in items:
            total = total.add(self._to_base(item))
        return total

    def group_by(
        self,
        items: Iterable[ValuationLineItem],
        key_fn: Callable[[ValuationLineItem], Hashable],
    ) -> Dict[Hashable, Money]:
        groups: Dict[Hashable, Money] = {}
        for item in items:
            key = key_fn(item)
            subtotal = groups.get(key, Money.zero(self.base_currency))
            groups[key] = subtotal.add(self._to_base(item))
        return groups


def total_in_base(items: Iterable[ValuationLineItem], converter: CurrencyConverter) -> Money:
    return ValuationAggregator(converter).total_in_base(items)


def group_by(
    items: Iterable[ValuationLineItem],
    key_fn: Callable[[ValuationLineItem], Hashable],
    converter: CurrencyConverter,
) -> Dict[Hashable, Money]:
    return ValuationAggregator(converter).group_by(items, key_fn)


def default_base_currency() -> str:
    return normalize_currency(getattr(settings, "BASE_CURRENCY", "USD"))
