import pytest


@pytest.fixture(autouse=True)
def test_settings(settings):
    """Deterministic settings for every test."""
    settings.BASE_CURRENCY = "USD"
    settings.MARKET_DATA_PROVIDER = "mock"
    settings.MARKET_DATA_REQUEST_DELAY = 0
    return settings


@pytest.fixture(autouse=True)
def fresh_exchange_services():
    """Stores and sync services are cached per process; start every test with new ones."""
    from apps.exchange.application import factories

    factories._store_for.cache_clear()
    factories._sync_service_for.cache_clear()
    yield
    factories._store_for.cache_clear()
    factories._sync_service_for.cache_clear()
