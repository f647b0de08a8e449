import pytest
import requests
from unittest.mock import Mock
from decimal import Decimal

from apps.exchange.domain.errors import ExternalServiceError
from apps.finance.infrastructure.market_data.coingecko import CoinGeckoMarketDataProvider
from apps.finance.infrastructure.market_data.finnhub import FinnhubMarketDataProvider
from apps.finance.infrastructure.market_data.mock import MockMarketDataProvider


@pytest.fixture
def mock_requests_get(mocker):
    return mocker.patch("requests.get")


def _response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestFinnhubMarketDataProvider:

    @pytest.fixture
    def provider(self, settings):
        settings.FINNHUB_URL = "https://finnhub.test/api/v1"
        settings.FINNHUB_API_KEY = "token"
        return FinnhubMarketDataProvider()

    def test_quote(self, provider, mock_requests_get):
        mock_requests_get.return_value = _response({"c": 189.5, "h": 191, "l": 187, "o": 188, "pc": 188.2})

        price = provider.get_asset_price("aapl", "stocks", "USD")

        assert price == Decimal("189.5")
        mock_requests_get.assert_called_once_with(
            "https://finnhub.test/api/v1/quote",
            params={"symbol": "AAPL", "token": "token"},
            timeout=10,
        )

    def test_unknown_symbol_answers_zero(self, provider, mock_requests_get):
        mock_requests_get.return_value = _response({"c": 0, "h": 0, "l": 0})

        with pytest.raises(ExternalServiceError, match="no quote for symbol"):
            provider.get_asset_price("NOPE", "stocks", "USD")

    def test_only_usd_quotes(self, provider, mock_requests_get):
        with pytest.raises(ExternalServiceError):
            provider.get_asset_price("AAPL", "stocks", "EUR")

        mock_requests_get.assert_not_called()

    def test_missing_api_key(self, provider, settings, mock_requests_get):
        settings.FINNHUB_API_KEY = ""

        with pytest.raises(ExternalServiceError, match="FINNHUB_API_KEY"):
            provider.get_asset_price("AAPL", "stocks", "USD")

    def test_timeout(self, provider, mock_requests_get):
        mock_requests_get.side_effect = requests.exceptions.Timeout()

        with pytest.raises(ExternalServiceError, match="timed out"):
            provider.get_asset_price("AAPL", "stocks", "USD")

    def test_invalid_payload(self, provider, mock_requests_get):
        mock_requests_get.return_value = _response({"error": "API limit reached"})

        with pytest.raises(ExternalServiceError, match="invalid response payload"):
            provider.get_asset_price("AAPL", "stocks", "USD")


class TestCoinGeckoMarketDataProvider:

    @pytest.fixture
    def provider(self, settings):
        settings.COINGECKO_URL = "https://coingecko.test/api/v3"
        return CoinGeckoMarketDataProvider()

    def test_price_in_requested_currency(self, provider, mock_requests_get):
        mock_requests_get.return_value = _response({"bitcoin": {"eur": 55123.4}})

        price = provider.get_asset_price("Bitcoin", "crypto", "EUR")

        assert price == Decimal("55123.4")
        mock_requests_get.assert_called_once_with(
            "https://coingecko.test/api/v3/simple/price",
            params={"ids": "bitcoin", "vs_currencies": "eur"},
            timeout=10,
        )

    def test_unknown_coin(self, provider, mock_requests_get):
        mock_requests_get.return_value = _response({})

        with pytest.raises(ExternalServiceError, match="no price for dogecoin in USD"):
            provider.get_asset_price("dogecoin", "crypto", "USD")

    def test_http_error(self, provider, mock_requests_get):
        response = Mock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("429 Too Many Requests")
        mock_requests_get.return_value = response

        with pytest.raises(ExternalServiceError, match="request failed"):
            provider.get_asset_price("bitcoin", "crypto", "USD")

    def test_non_positive_price(self, provider, mock_requests_get):
        mock_requests_get.return_value = _response({"bitcoin": {"usd": 0}})

        with pytest.raises(ExternalServiceError, match="invalid price"):
            provider.get_asset_price("bitcoin", "crypto", "USD")


class TestMockMarketDataProvider:

    def test_static_prices(self):
        assert MockMarketDataProvider().get_asset_price("msft", "stocks", "USD") == Decimal("420")

    def test_custom_prices(self):
        provider = MockMarketDataProvider({"vwrl": "105.2"})

        assert provider.get_asset_price("VWRL", "stocks", "usd") == Decimal("105.2")

    def test_unknown_symbol(self):
        with pytest.raises(ExternalServiceError, match="unknown symbol"):
            MockMarketDataProvider().get_asset_price("ZZZ", "stocks", "USD")

    def test_usd_only(self):
        with pytest.raises(ExternalServiceError):
            MockMarketDataProvider().get_asset_price("AAPL", "stocks", "EUR")
