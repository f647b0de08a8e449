import pytest
from decimal import Decimal
from unittest.mock import MagicMock

from apps.exchange.domain.errors import ExternalServiceError, RateNotFoundError
from apps.exchange.domain.services import CurrencyConverter
from apps.exchange.infrastructure.persistence.memory import InMemoryExchangeRateStore
from apps.finance.domain.interfaces import BaseMarketDataProvider
from apps.finance.infrastructure.market_data.coingecko import CoinGeckoMarketDataProvider
from apps.finance.infrastructure.market_data.finnhub import FinnhubMarketDataProvider
from apps.finance.infrastructure.market_data.mock import MockMarketDataProvider
from apps.finance.infrastructure.market_data.registry import MarketDataRouter, get_market_data_provider


class AnyCurrencyProvider(BaseMarketDataProvider):
    service_name = "AnyCurrency"

    def get_asset_price(self, symbol, asset_type, currency):
        return Decimal("7")


@pytest.fixture
def converter():
    return CurrencyConverter(InMemoryExchangeRateStore("USD", {"EUR": Decimal("0.92")}))


class TestMarketDataRouter:
    """Tests for routing by asset type."""

    def test_same_currency_is_not_converted(self, converter):
        spy = MagicMock(wraps=converter)
        router = MarketDataRouter({"stocks": MockMarketDataProvider()}, spy)

        assert router.get_asset_price("AAPL", "stocks", "usd") == Decimal("190")
        spy.convert.assert_not_called()

    def test_converts_from_quote_currency(self, converter):
        router = MarketDataRouter({"stocks": MockMarketDataProvider()}, converter)

        assert router.get_asset_price("AAPL", "stocks", "EUR") == Decimal("174.8")

    def test_missing_rate_propagates(self, converter):
        router = MarketDataRouter({"stocks": MockMarketDataProvider()}, converter)

        with pytest.raises(RateNotFoundError):
            router.get_asset_price("AAPL", "stocks", "JPY")

    def test_provider_without_quote_currency_gets_target_currency(self):
        provider = AnyCurrencyProvider()
        router = MarketDataRouter({"crypto": provider})

        assert router.get_asset_price("bitcoin", "crypto", "CHF") == Decimal("7")

    def test_unsupported_asset_type(self):
        router = MarketDataRouter({"stocks": MockMarketDataProvider()})

        assert router.supports("stocks")
        assert not router.supports("real_estate")
        with pytest.raises(ExternalServiceError, match="no price source"):
            router.get_asset_price("HOUSE", "real_estate", "USD")

    def test_conversion_needs_a_converter(self):
        router = MarketDataRouter({"stocks": MockMarketDataProvider()})

        with pytest.raises(ExternalServiceError, match="no converter"):
            router.get_asset_price("AAPL", "stocks", "EUR")


class TestGetMarketDataProvider:

    def test_mock_mode(self, settings):
        settings.MARKET_DATA_PROVIDER = "mock"

        router = get_market_data_provider()

        assert isinstance(router.providers["stocks"], MockMarketDataProvider)
        assert isinstance(router.providers["crypto"], MockMarketDataProvider)
        assert not router.supports("real_estate")

    def test_live_mode(self, settings, converter):
        settings.MARKET_DATA_PROVIDER = "live"

        router = get_market_data_provider(converter)

        assert isinstance(router.providers["stocks"], FinnhubMarketDataProvider)
        assert isinstance(router.providers["bonds"], FinnhubMarketDataProvider)
        assert isinstance(router.providers["crypto"], CoinGeckoMarketDataProvider)
        assert router.converter is converter
