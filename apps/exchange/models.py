"""
Django discovers models here; they live in the persistence layer.
"""

from apps.exchange.infrastructure.persistence.models import (  # noqa: F401
    Currency,
    CurrencyExchangeRate,
    Provider,
    ProviderName,
)
