import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from apps.exchange.domain.errors import InvalidRateError, RateNotFoundError, ValidationError
from apps.exchange.domain.models import ExchangeRate, normalize_currency, to_decimal


RateEntries = Union[Mapping[str, object], Iterable[Tuple[str, object]]]


class BaseExchangeRateProvider(ABC):
    @abstractmethod
    def fetch_rates(self, base_currency: str) -> dict[str, Decimal]:
        """
        Return {currency_code: units of currency per 1 base unit}.
        Raise ExternalServiceError when the provider is unreachable or
        answers with something unusable.
        """
        pass


@dataclass
class MergeResult:
    merged: List[str] = field(default_factory=list)
    skipped_manual: List[str] = field(default_factory=list)


class ExchangeRateStore(ABC):
    """
    Authoritative mapping currency_code -> ExchangeRate.

    The base currency never has an explicit entry; looking it up returns 1
    without consulting storage. Every mutation goes through the write lock,
    so there is a single writer at a time; reads do not lock.
    """

    def __init__(self, base_currency: str):
        self.base_currency = normalize_currency(base_currency)
        self._write_lock = threading.Lock()

    # -- storage primitives -------------------------------------------------

    @abstractmethod
    def get(self, currency_code: str) -> Optional[ExchangeRate]:
        pass

    @abstractmethod
    def all(self) -> List[ExchangeRate]:
        pass

    @abstractmethod
    def _save(self, rate: ExchangeRate) -> None:
        pass

    @abstractmethod
    def _save_many(self, rates: List[ExchangeRate]) -> None:
        """Persist every entry or none of them."""
        pass

    # -- public API ---------------------------------------------------------

    def is_base(self, currency_code: str) -> bool:
        return normalize_currency(currency_code) == self.base_currency

    def get_rate(self, currency_code: str) -> Decimal:
        code = normalize_currency(currency_code)
        if code == self.base_currency:
            return Decimal("1")

        exchange_rate = self.get(code)
        if exchange_rate is None:
            raise RateNotFoundError(code)
        return exchange_rate.rate

    def set_rate(self, currency_code: str, rate, is_manual: bool = True) -> ExchangeRate:
        """Replace the stored rate unconditionally, manual or not."""
        code = normalize_currency(currency_code)
        if code == self.base_currency:
            raise ValidationError(f"{code} is the base currency; its rate is always 1", "currency_code")

        exchange_rate = ExchangeRate(
            currency_code=code,
            rate=to_decimal(rate, "rate"),
            is_manual=is_manual,
        )
        with self._write_lock:
            self._save(exchange_rate)
            return self.get(code)

    def clear_manual_override(self, currency_code: str) -> ExchangeRate:
        """Hand a manually set rate back to automatic sync."""
        code = normalize_currency(currency_code)
        with self._write_lock:
            current = self.get(code)
            if current is None:
                raise RateNotFoundError(code)
            cleared = ExchangeRate(
                currency_code=code,
                rate=current.rate,
                last_updated=current.last_updated,
                is_manual=False,
            )
            self._save(cleared)
        return cleared

    def bulk_merge_automatic_rates(self, rates: RateEntries) -> MergeResult:
        """
        Merge automatically fetched rates.

        Manual entries are sticky and skipped. All entries are validated
        before anything is written.
        """
        entries = rates.items() if isinstance(rates, Mapping) else rates

        validated: List[Tuple[str, Decimal]] = []
        for currency_code, rate in entries:
            code = normalize_currency(currency_code)
            value = to_decimal(rate, "rate")
            if value <= 0:
                raise InvalidRateError(code, value)
            if code != self.base_currency:
                validated.append((code, value))

        result = MergeResult()
        with self._write_lock:
            to_save: List[ExchangeRate] = []
            for code, value in validated:
                current = self.get(code)
                if current is not None and current.is_manual:
                    result.skipped_manual.append(code)
                    continue
                to_save.append(ExchangeRate(currency_code=code, rate=value, is_manual=False))
                result.merged.append(code)
            if to_save:
                self._save_many(to_save)
        return result

    def get_last_sync_time(self) -> Optional[datetime]:
        automatic = [r.last_updated for r in self.all() if not r.is_manual]
        return max(automatic) if automatic else None
