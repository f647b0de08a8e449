"""
Maps the provider names stored in the database to their adapter classes.
"""

import logging

from apps.exchange.infrastructure.persistence.models import ProviderName
from apps.exchange.domain.interfaces import BaseExchangeRateProvider
from apps.exchange.infrastructure.providers.currency_beacon import CurrencyBeaconProvider
from apps.exchange.infrastructure.providers.exchange_rate import ExchangeRateProvider
from apps.exchange.infrastructure.providers.mock import MockProvider
from apps.exchange.infrastructure.persistence.repositories import ProviderRepository

logger = logging.getLogger(__name__)


PROVIDER_REGISTRY: dict[str, type[BaseExchangeRateProvider]] = {
    ProviderName.CURRENCY_BEACON.value: CurrencyBeaconProvider,
    ProviderName.EXCHANGE_RATE.value: ExchangeRateProvider,
    ProviderName.MOCK.value: MockProvider,
}


def get_provider_instance(provider_name: str) -> BaseExchangeRateProvider | None:
    """Instantiate the adapter registered under `provider_name`, or None if there is none."""
    provider_class = PROVIDER_REGISTRY.get(provider_name)
    if provider_class is None:
        logger.warning("Provider '%s' is not registered; skipping it", provider_name)
        return None
    return provider_class()


def get_active_providers_ordered() -> list[BaseExchangeRateProvider]:
    """
    Adapters for the active providers, in fallback order.

    Providers whose name has no registered adapter are left out.
    """
    instances = (get_provider_instance(p.name) for p in ProviderRepository.get_active_ordered())
    return [instance for instance in instances if instance is not None]
