from abc import ABC, abstractmethod
from decimal import Decimal


class BaseMarketDataProvider(ABC):
    """
    Abstract interface for market price providers.

    Implementations:
    - FinnhubMarketDataProvider (stocks, ETFs, bonds)
    - CoinGeckoMarketDataProvider (crypto)
    - MockMarketDataProvider (static prices)
    """

    service_name = "MarketData"
    # Set when the provider can only quote in one currency
    quote_currency = None

    @abstractmethod
    def get_asset_price(self, symbol: str, asset_type: str, currency: str) -> Decimal:
        """
        Current price of one unit of the asset, expressed in `currency`.

        Raises ExternalServiceError when the price cannot be obtained.
        """
        raise NotImplementedError

    def supports(self, asset_type: str) -> bool:
        return True
