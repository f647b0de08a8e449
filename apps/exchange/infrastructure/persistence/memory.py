"""
In-process Exchange Rate Store.
Used by tests and by callers that do not need durable rates.
"""

from typing import Dict, List, Optional

from apps.exchange.domain.interfaces import ExchangeRateStore
from apps.exchange.domain.models import ExchangeRate


class InMemoryExchangeRateStore(ExchangeRateStore):

    def __init__(self, base_currency: str = "USD", rates: Optional[Dict[str, object]] = None):
        super().__init__(base_currency)
        self._rates: Dict[str, ExchangeRate] = {}
        if rates:
            self.bulk_merge_automatic_rates(rates)

    def get(self, currency_code: str) -> Optional[ExchangeRate]:
        return self._rates.get(currency_code.upper())

    def all(self) -> List[ExchangeRate]:
        return sorted(self._rates.values(), key=lambda r: r.currency_code)

    def _save(self, rate: ExchangeRate) -> None:
        # single dict assignment: readers see the old or the new entry, never a mix
        self._rates[rate.currency_code] = rate

    def _save_many(self, rates: List[ExchangeRate]) -> None:
        updated = dict(self._rates)
        for rate in rates:
            updated[rate.currency_code] = rate
        self._rates = updated
