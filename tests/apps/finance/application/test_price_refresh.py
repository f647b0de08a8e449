import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

from apps.exchange.application.factories import get_converter
from apps.exchange.domain.errors import ExternalServiceError
from apps.finance.application.use_cases import CloseInvestment, CreateInvestment, RefreshInvestmentPrices
from apps.finance.domain.interfaces import BaseMarketDataProvider
from apps.finance.infrastructure.market_data.mock import MockMarketDataProvider
from apps.finance.infrastructure.market_data.registry import MarketDataRouter
from apps.finance.infrastructure.persistence.models import Investment


def add(user, name, asset_type, symbol, currency="USD", buy_price="100"):
    return CreateInvestment().execute(
        user.id, name, asset_type, "2", buy_price, currency,
        purchase_date=date(2024, 1, 10), symbol=symbol,
    )


@pytest.fixture
def router(rates):
    mock = MockMarketDataProvider()
    return MarketDataRouter({"stocks": mock, "crypto": mock}, get_converter())


@pytest.mark.django_db(transaction=True)
class TestRefreshInvestmentPrices:
    """Tests for the batch price refresh."""

    def test_updates_prices_and_waits_between_calls(self, user, router):
        apple = add(user, "Apple", "stocks", "AAPL")
        bitcoin = add(user, "Bitcoin", "crypto", "bitcoin")
        sleep = MagicMock()

        result = RefreshInvestmentPrices(router, delay_seconds=1.5, sleep=sleep).execute(user.id)

        assert result.to_dict() == {"updated": 2, "failed": 0, "skipped": 0, "errors": []}
        apple.refresh_from_db()
        bitcoin.refresh_from_db()
        assert apple.current_value == Decimal("190")
        assert bitcoin.current_value == Decimal("60000")
        assert apple.last_price_update is not None
        assert sleep.call_count == 2
        sleep.assert_called_with(1.5)

    def test_price_is_converted_to_investment_currency(self, user, router):
        investment = add(user, "Microsoft", "stocks", "MSFT", currency="EUR")

        RefreshInvestmentPrices(router, delay_seconds=0).execute(user.id)

        investment.refresh_from_db()
        assert investment.current_value == Decimal("386.400000")  # 420 USD * 0.92

    def test_skips_unpriced_assets(self, user, router):
        house = add(user, "Flat", "real_estate", "")
        add(user, "Gold bar", "other", "XAU")
        add(user, "Private loan", "stocks", "")

        result = RefreshInvestmentPrices(router, delay_seconds=0).execute(user.id)

        assert result.skipped == 3
        assert result.updated == 0
        house.refresh_from_db()
        assert house.current_value == Decimal("100")

    def test_one_failure_does_not_abort_the_batch(self, user, router):
        add(user, "Unknown Corp", "stocks", "ZZZZ")
        apple = add(user, "Apple", "stocks", "AAPL")
        sleep = MagicMock()

        result = RefreshInvestmentPrices(router, delay_seconds=1, sleep=sleep).execute(user.id)

        assert result.updated == 1
        assert result.failed == 1
        assert "Unknown Corp" in result.errors[0]
        apple.refresh_from_db()
        assert apple.current_value == Decimal("190")
        assert sleep.call_count == 1

    def test_provider_error_leaves_value_untouched(self, user, rates):
        investment = add(user, "Apple", "stocks", "AAPL")
        provider = MagicMock(spec=BaseMarketDataProvider)
        provider.supports.return_value = True
        provider.get_asset_price.side_effect = ExternalServiceError("Finnhub", "request timed out")

        result = RefreshInvestmentPrices(provider, delay_seconds=0).execute(user.id)

        assert result.failed == 1
        investment.refresh_from_db()
        assert investment.current_value == Decimal("100")
        assert investment.last_price_update is None

    def test_non_positive_price_counts_as_failure(self, user, rates):
        add(user, "Apple", "stocks", "AAPL")
        provider = MagicMock(spec=BaseMarketDataProvider)
        provider.supports.return_value = True
        provider.get_asset_price.return_value = Decimal("0")

        result = RefreshInvestmentPrices(provider, delay_seconds=0).execute(user.id)

        assert result.failed == 1

    def test_closed_and_foreign_investments_are_ignored(self, user, other_user, router):
        closed = add(user, "Apple", "stocks", "AAPL")
        CloseInvestment().execute(user.id, closed.id, "150")
        add(other_user, "Microsoft", "stocks", "MSFT")

        result = RefreshInvestmentPrices(router, delay_seconds=0).execute(user.id)

        assert result.to_dict()["updated"] == 0
        assert Investment.objects.get(pk=closed.pk).current_value == Decimal("150")

    def test_default_provider_follows_settings(self, user, rates, settings):
        settings.MARKET_DATA_PROVIDER = "mock"
        add(user, "Apple", "stocks", "AAPL")

        result = RefreshInvestmentPrices(sleep=MagicMock()).execute(user.id)

        assert result.updated == 1
