"""
Wiring of the exchange core against Django settings and the database.

One store and one sync service per base currency per process, so the store's
write lock and the sync lock are shared by every caller in the process.
"""

from functools import lru_cache
from typing import List, Optional

from django.conf import settings

from apps.exchange.application.sync import RateSyncService
from apps.exchange.domain.models import normalize_currency
from apps.exchange.domain.services import CurrencyConverter, ValuationAggregator, default_base_currency
from apps.exchange.infrastructure.persistence.repositories import CurrencyRepository, DjangoExchangeRateStore
from apps.exchange.infrastructure.providers.registry import get_active_providers_ordered


def _base(base_currency: Optional[str]) -> str:
    return normalize_currency(base_currency) if base_currency else default_base_currency()


@lru_cache(maxsize=None)
def _store_for(base_currency: str) -> DjangoExchangeRateStore:
    return DjangoExchangeRateStore(base_currency)


def get_rate_store(base_currency: Optional[str] = None) -> DjangoExchangeRateStore:
    return _store_for(_base(base_currency))


def get_converter(base_currency: Optional[str] = None) -> CurrencyConverter:
    return CurrencyConverter(get_rate_store(base_currency))


def get_aggregator(base_currency: Optional[str] = None) -> ValuationAggregator:
    return ValuationAggregator(get_converter(base_currency))


def get_supported_currencies() -> List[str]:
    """Currencies registered in the database, else the SUPPORTED_CURRENCIES setting."""
    codes = CurrencyRepository.get_codes()
    if codes:
        return codes
    return list(getattr(settings, "SUPPORTED_CURRENCIES", []))


@lru_cache(maxsize=None)
def _sync_service_for(base_currency: str) -> RateSyncService:
    return RateSyncService(
        _store_for(base_currency),
        providers=[],
        base_currency=base_currency,
        provider_loader=get_active_providers_ordered,
        currency_loader=get_supported_currencies,
    )


def get_sync_service(base_currency: Optional[str] = None) -> RateSyncService:
    """Shared sync service; each cycle reloads the providers and currencies from the database."""
    return _sync_service_for(_base(base_currency))
