import pytest
import requests
from unittest.mock import Mock
from decimal import Decimal

from apps.exchange.domain.errors import ExternalServiceError
from apps.exchange.infrastructure.providers.currency_beacon import CurrencyBeaconProvider


@pytest.fixture
def provider(settings):
    settings.CURRENCY_BEACON_URL = "https://api.currencybeacon.test/v1"
    settings.CURRENCY_BEACON_API_KEY = "secret"
    return CurrencyBeaconProvider()


@pytest.fixture
def mock_requests_get(mocker):
    return mocker.patch("requests.get")


def test_fetch_rates_success(provider, mock_requests_get):
    """
    Test that fetch_rates returns Decimal rates keyed by upper-case code
    when the /latest call succeeds.
    """
    mock_response = Mock()
    mock_response.json.return_value = {
        "meta": {"code": 200},
        "response": {
            "base": "USD",
            "rates": {"eur": 0.92, "GBP": 0.7854}
        }
    }
    mock_response.raise_for_status.return_value = None
    mock_requests_get.return_value = mock_response

    rates = provider.fetch_rates("USD")

    assert rates == {"EUR": Decimal("0.92"), "GBP": Decimal("0.7854")}
    url = mock_requests_get.call_args[0][0]
    assert url.startswith("https://api.currencybeacon.test/v1/latest")
    assert "api_key=secret" in url
    assert "base=USD" in url


def test_fetch_rates_timeout(provider, mock_requests_get):
    mock_requests_get.side_effect = requests.exceptions.Timeout()

    with pytest.raises(ExternalServiceError, match="timed out"):
        provider.fetch_rates("USD")


def test_fetch_rates_http_error(provider, mock_requests_get):
    mock_response = Mock()
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("401 Unauthorized")
    mock_requests_get.return_value = mock_response

    with pytest.raises(ExternalServiceError) as exc_info:
        provider.fetch_rates("USD")

    assert exc_info.value.service_name == "CurrencyBeacon"


def test_fetch_rates_missing_key(provider, mock_requests_get):
    """
    A payload without the response/rates keys is reported as an invalid
    payload, never as an empty result.
    """
    mock_response = Mock()
    mock_response.json.return_value = {"meta": {"code": 200}}
    mock_response.raise_for_status.return_value = None
    mock_requests_get.return_value = mock_response

    with pytest.raises(ExternalServiceError, match="invalid response payload"):
        provider.fetch_rates("USD")


def test_fetch_rates_non_numeric_value(provider, mock_requests_get):
    mock_response = Mock()
    mock_response.json.return_value = {"response": {"rates": {"EUR": "n/a"}}}
    mock_response.raise_for_status.return_value = None
    mock_requests_get.return_value = mock_response

    with pytest.raises(ExternalServiceError):
        provider.fetch_rates("USD")
