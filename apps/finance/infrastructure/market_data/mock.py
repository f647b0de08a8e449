from decimal import Decimal

from apps.exchange.domain.errors import ExternalServiceError
from apps.finance.domain.interfaces import BaseMarketDataProvider


class MockMarketDataProvider(BaseMarketDataProvider):
    """Static USD prices for development and tests."""

    service_name = "MockMarketData"
    quote_currency = "USD"

    USD_PRICES = {
        "AAPL": Decimal("190.00"),
        "MSFT": Decimal("420.00"),
        "GOOGL": Decimal("170.00"),
        "BITCOIN": Decimal("60000.00"),
        "ETHEREUM": Decimal("3000.00"),
    }

    def __init__(self, prices=None):
        self.prices = {k.upper(): Decimal(str(v)) for k, v in (prices or self.USD_PRICES).items()}

    def get_asset_price(self, symbol: str, asset_type: str, currency: str) -> Decimal:
        if currency.upper() != "USD":
            raise ExternalServiceError(self.service_name, "prices are only available in USD")
        try:
            return self.prices[symbol.upper()]
        except KeyError:
            raise ExternalServiceError(self.service_name, f"unknown symbol {symbol}")
