"""
Repository pattern implementation.
Abstracts database access to decouple domain logic from persistence.
"""

from typing import List, Optional
from decimal import Context, Decimal, InvalidOperation

from django.db import transaction

from apps.exchange.domain.errors import InvalidRateError
from apps.exchange.domain.interfaces import ExchangeRateStore
from apps.exchange.domain.models import ExchangeRate
from apps.exchange.infrastructure.persistence.models import (
    RATE_DECIMAL_PLACES,
    RATE_MAX_DIGITS,
    Currency,
    CurrencyExchangeRate,
    Provider,
)

RATE_QUANTUM = Decimal(1).scaleb(-RATE_DECIMAL_PLACES)
RATE_LIMIT = Decimal(10) ** (RATE_MAX_DIGITS - RATE_DECIMAL_PLACES)
RATE_CONTEXT = Context(prec=RATE_MAX_DIGITS)


class CurrencyRepository:
    """Repository for Currency aggregate."""

    @staticmethod
    def get_codes() -> List[str]:
        return list(Currency.objects.values_list("code", flat=True))


class DjangoExchangeRateStore(ExchangeRateStore):
    """Exchange Rate Store backed by the CurrencyExchangeRate table."""

    @staticmethod
    def _to_domain(row: CurrencyExchangeRate) -> ExchangeRate:
        return ExchangeRate(
            currency_code=row.currency_code,
            rate=row.rate,
            last_updated=row.last_updated,
            is_manual=row.is_manual,
        )

    def get(self, currency_code: str) -> Optional[ExchangeRate]:
        row = CurrencyExchangeRate.objects.filter(currency_code=currency_code.upper()).first()
        return self._to_domain(row) if row else None

    def all(self) -> List[ExchangeRate]:
        return [self._to_domain(row) for row in CurrencyExchangeRate.objects.all()]

    @staticmethod
    def _column_value(rate: ExchangeRate) -> Decimal:
        """The rate as the column stores it; out-of-range or vanishing rates are invalid."""
        if rate.rate >= RATE_LIMIT:
            raise InvalidRateError(rate.currency_code, rate.rate)
        try:
            stored_rate = rate.rate.quantize(RATE_QUANTUM, context=RATE_CONTEXT)
        except InvalidOperation as e:
            raise InvalidRateError(rate.currency_code, rate.rate) from e
        if stored_rate <= 0:
            raise InvalidRateError(rate.currency_code, rate.rate)
        return stored_rate

    def _save(self, rate: ExchangeRate) -> None:
        stored_rate = self._column_value(rate)

        CurrencyExchangeRate.objects.update_or_create(
            currency_code=rate.currency_code,
            defaults={
                "rate": stored_rate,
                "last_updated": rate.last_updated,
                "is_manual": rate.is_manual,
            },
        )

    def _save_many(self, rates: List[ExchangeRate]) -> None:
        with transaction.atomic():
            for rate in rates:
                self._save(rate)

    def get_last_sync_time(self):
        latest = (
            CurrencyExchangeRate.objects
            .filter(is_manual=False)
            .order_by("-last_updated")
            .first()
        )
        return latest.last_updated if latest else None


class ProviderRepository:
    """Repository for Provider aggregate."""

    @staticmethod
    def get_active_ordered() -> List[Provider]:
        """Get all active providers ordered by priority."""
        return list(
            Provider.objects
            .filter(is_active=True)
            .order_by('priority')
        )

