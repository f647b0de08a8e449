"""
Market data routing - picks the price source for each asset type.
Assets without a source (real estate, other) are valued manually.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from django.conf import settings

from apps.exchange.domain.errors import ExternalServiceError
from apps.exchange.domain.services import CurrencyConverter
from apps.finance.domain.interfaces import BaseMarketDataProvider
from apps.finance.infrastructure.market_data.coingecko import CoinGeckoMarketDataProvider
from apps.finance.infrastructure.market_data.finnhub import FinnhubMarketDataProvider
from apps.finance.infrastructure.market_data.mock import MockMarketDataProvider
from apps.finance.infrastructure.persistence.models import AssetType

logger = logging.getLogger(__name__)


class MarketDataRouter(BaseMarketDataProvider):
    """
    Dispatches by asset type. When the chosen source only quotes in one
    currency, the price is converted with the currency converter.
    """

    service_name = "MarketData"

    def __init__(self, providers: Dict[str, BaseMarketDataProvider], converter: Optional[CurrencyConverter] = None):
        self.providers = providers
        self.converter = converter

    def supports(self, asset_type: str) -> bool:
        return asset_type in self.providers

    def get_asset_price(self, symbol: str, asset_type: str, currency: str) -> Decimal:
        provider = self.providers.get(asset_type)
        if provider is None:
            raise ExternalServiceError(self.service_name, f"no price source for asset type '{asset_type}'")

        currency = currency.upper()
        quote_currency = provider.quote_currency
        if quote_currency is None or quote_currency == currency:
            return provider.get_asset_price(symbol, asset_type, currency)

        if self.converter is None:
            raise ExternalServiceError(
                self.service_name,
                f"{provider.service_name} quotes in {quote_currency} and no converter is configured",
            )
        price = provider.get_asset_price(symbol, asset_type, quote_currency)
        logger.debug("Converting %s price of %s from %s to %s", provider.service_name, symbol, quote_currency, currency)
        return self.converter.convert(price, quote_currency, currency).amount


def get_market_data_provider(converter: Optional[CurrencyConverter] = None) -> MarketDataRouter:
    """Router configured from the MARKET_DATA_PROVIDER setting ("live" or "mock")."""
    if getattr(settings, "MARKET_DATA_PROVIDER", "live") == "mock":
        mock = MockMarketDataProvider()
        providers = {AssetType.STOCKS.value: mock, AssetType.BONDS.value: mock, AssetType.CRYPTO.value: mock}
    else:
        stocks = FinnhubMarketDataProvider()
        providers = {
            AssetType.STOCKS.value: stocks,
            AssetType.BONDS.value: stocks,
            AssetType.CRYPTO.value: CoinGeckoMarketDataProvider(),
        }
    return MarketDataRouter(providers, converter)
