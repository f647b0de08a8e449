import pytest
import requests
from unittest.mock import Mock
from decimal import Decimal

from apps.exchange.domain.errors import ExternalServiceError
from apps.exchange.infrastructure.providers.exchange_rate import ExchangeRateProvider


@pytest.fixture
def provider(settings):
    settings.EXCHANGERATE_URL = "https://v6.exchangerate.test/v6"
    settings.EXCHANGERATE_API_KEY = "key123"
    return ExchangeRateProvider()


@pytest.fixture
def mock_requests_get(mocker):
    return mocker.patch("requests.get")


def _response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def test_fetch_rates_success(provider, mock_requests_get):
    mock_requests_get.return_value = _response({
        "result": "success",
        "base_code": "USD",
        "conversion_rates": {"USD": 1, "EUR": 0.92, "JPY": 147.5},
    })

    rates = provider.fetch_rates("USD")

    assert rates["EUR"] == Decimal("0.92")
    assert rates["JPY"] == Decimal("147.5")
    mock_requests_get.assert_called_once_with("https://v6.exchangerate.test/v6/key123/latest/USD", timeout=10)


def test_missing_configuration_raises_without_calling_api(settings, mock_requests_get):
    settings.EXCHANGERATE_API_KEY = ""

    with pytest.raises(ExternalServiceError, match="not configured"):
        ExchangeRateProvider().fetch_rates("USD")

    mock_requests_get.assert_not_called()


def test_error_result_raises(provider, mock_requests_get):
    mock_requests_get.return_value = _response({"result": "error", "error-type": "invalid-key"})

    with pytest.raises(ExternalServiceError, match="invalid-key"):
        provider.fetch_rates("USD")


def test_request_exception_raises(provider, mock_requests_get):
    mock_requests_get.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(ExternalServiceError, match="request failed"):
        provider.fetch_rates("USD")


def test_missing_rates_key_raises(provider, mock_requests_get):
    mock_requests_get.return_value = _response({"result": "success"})

    with pytest.raises(ExternalServiceError, match="invalid response payload"):
        provider.fetch_rates("USD")
