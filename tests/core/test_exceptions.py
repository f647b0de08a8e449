import pytest
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated

from apps.exchange.domain.errors import (
    BusinessRuleViolationError,
    CurrencyMismatchError,
    DomainError,
    ExternalServiceError,
    InvalidRateError,
    NotFoundError,
    RateNotFoundError,
    ValidationError,
)
from core.exceptions import domain_exception_handler


class DummyView:
    pass


@pytest.fixture
def context():
    return {"view": DummyView()}


class TestDomainExceptionHandler:
    """Tests for the mapping of domain errors to HTTP responses."""

    @pytest.mark.parametrize("exc, expected_status", [
        (ValidationError("bad amount", "amount"), status.HTTP_400_BAD_REQUEST),
        (CurrencyMismatchError("USD", "EUR", "add"), status.HTTP_400_BAD_REQUEST),
        (NotFoundError("Investment", 42), status.HTTP_404_NOT_FOUND),
        (BusinessRuleViolationError("Investment is already closed"), status.HTTP_409_CONFLICT),
        (RateNotFoundError("JPY"), status.HTTP_422_UNPROCESSABLE_ENTITY),
        (InvalidRateError("EUR", 0), status.HTTP_422_UNPROCESSABLE_ENTITY),
        (ExternalServiceError("Finnhub", "timeout"), status.HTTP_502_BAD_GATEWAY),
        (DomainError("unexpected"), status.HTTP_500_INTERNAL_SERVER_ERROR),
    ])
    def test_status_mapping(self, context, exc, expected_status):
        response = domain_exception_handler(exc, context)

        assert response.status_code == expected_status
        assert response.data["type"] == exc.__class__.__name__
        assert response.data["error"] == str(exc)

    def test_field_is_included_when_known(self, context):
        response = domain_exception_handler(ValidationError("bad", "currency"), context)

        assert response.data["field"] == "currency"

    def test_server_errors_are_logged(self, context, caplog):
        domain_exception_handler(ExternalServiceError("CoinGecko", "down"), context)

        assert "CoinGecko: down" in caplog.text
        assert "DummyView" in caplog.text

    def test_non_domain_errors_use_drf_default(self, context):
        response = domain_exception_handler(NotAuthenticated(), context)

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)
        assert "type" not in response.data

    def test_unhandled_errors_are_left_alone(self, context):
        assert domain_exception_handler(KeyError("x"), context) is None
