"""
Rate synchronization: fetch the latest rates from the providers and merge
them into the Exchange Rate Store.

State machine per cycle: IDLE -> FETCHING -> MERGING -> IDLE, or FAILED when
every provider fails. FAILED only describes the last cycle; the next one
starts normally.
"""

import enum
import logging
import threading
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from apps.exchange.application.dto import RateSyncResultDTO
from apps.exchange.domain.errors import DomainError, ExternalServiceError
from apps.exchange.domain.interfaces import BaseExchangeRateProvider, ExchangeRateStore
from apps.exchange.domain.models import normalize_currency, to_decimal

logger = logging.getLogger(__name__)


class SyncState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    MERGING = "merging"
    FAILED = "failed"


class RateSyncService:
    """
    Fetches rates with a fallback chain of providers and merges them.

    At most one sync runs at a time: a call made while another one is in
    flight returns immediately with skipped=True and touches nothing.

    With `provider_loader` / `currency_loader` set, the provider chain and the
    supported currencies are reloaded at the start of each cycle, under the
    sync lock.
    """

    def __init__(
        self,
        store: ExchangeRateStore,
        providers: Sequence[BaseExchangeRateProvider],
        base_currency: Optional[str] = None,
        supported_currencies: Optional[Iterable[str]] = None,
        provider_loader: Optional[Callable[[], Sequence[BaseExchangeRateProvider]]] = None,
        currency_loader: Optional[Callable[[], Iterable[str]]] = None,
    ):
        self.store = store
        self.providers = list(providers)
        self.base_currency = normalize_currency(base_currency or store.base_currency)
        self.supported_currencies = self._currency_set(supported_currencies)
        self.provider_loader = provider_loader
        self.currency_loader = currency_loader
        self.state = SyncState.IDLE
        self.last_result: Optional[RateSyncResultDTO] = None
        self._lock = threading.Lock()

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    @staticmethod
    def _currency_set(codes: Optional[Iterable[str]]):
        codes = list(codes or [])
        return {normalize_currency(code) for code in codes} if codes else None

    def _reload(self) -> None:
        if self.provider_loader is not None:
            self.providers = list(self.provider_loader())
        if self.currency_loader is not None:
            self.supported_currencies = self._currency_set(self.currency_loader())

    def sync_now(self) -> RateSyncResultDTO:
        """
        Run one synchronization cycle.

        Returns:
            RateSyncResultDTO (skipped=True if another cycle was running)

        Raises:
            ExternalServiceError: every provider failed; the store is unchanged
        """
        if not self._lock.acquire(blocking=False):
            logger.info("Rate sync already in progress, skipping trigger")
            return RateSyncResultDTO(
                success=False,
                rates_synced=0,
                currencies_processed=[],
                errors=["Sync already in progress"],
                skipped=True,
            )

        try:
            self._reload()
            self.state = SyncState.FETCHING
            rates, provider_name, errors = self._fetch()

            self.state = SyncState.MERGING
            merge = self.store.bulk_merge_automatic_rates(rates)

            self.state = SyncState.IDLE
            result = RateSyncResultDTO(
                success=True,
                rates_synced=len(merge.merged),
                currencies_processed=sorted(merge.merged),
                errors=errors,
                provider_used=provider_name,
                skipped_manual=sorted(merge.skipped_manual),
                finished_at=datetime.now(timezone.utc),
            )
            logger.info(
                "Exchange rates synced from %s: %d updated, %d manual overrides kept",
                provider_name,
                result.rates_synced,
                len(result.skipped_manual),
            )
            self.last_result = result
            return result

        except DomainError as e:
            self.state = SyncState.FAILED
            self.last_result = RateSyncResultDTO(
                success=False,
                rates_synced=0,
                currencies_processed=[],
                errors=[str(e)],
                finished_at=datetime.now(timezone.utc),
            )
            if isinstance(e, ExternalServiceError):
                raise
            raise ExternalServiceError("RateSync", str(e)) from e

        except Exception:
            self.state = SyncState.FAILED
            raise

        finally:
            self._lock.release()

    def _fetch(self):
        """Try each provider in priority order until one returns usable rates."""
        if not self.providers:
            raise ExternalServiceError("RateSync", "No active providers configured")

        errors: List[str] = []
        for provider in self.providers:
            provider_name = provider.__class__.__name__
            try:
                raw = provider.fetch_rates(self.base_currency)
                rates = self._clean(raw, provider_name)
            except ExternalServiceError as e:
                logger.warning("%s failed, trying next provider: %s", provider_name, e)
                errors.append(str(e))
                continue
            return rates, provider_name, errors

        raise ExternalServiceError("RateSync", "All providers failed: " + "; ".join(errors))

    def _clean(self, raw, provider_name: str) -> Dict[str, Decimal]:
        """Validate a provider payload and keep only supported currencies."""
        if not isinstance(raw, dict) or not raw:
            raise ExternalServiceError(provider_name, "returned no rates")

        rates: Dict[str, Decimal] = {}
        for code, value in raw.items():
            try:
                code = normalize_currency(code)
                rate = to_decimal(value, "rate")
            except DomainError as e:
                raise ExternalServiceError(provider_name, f"malformed rate entry {code!r}: {e}") from e
            if rate <= 0:
                raise ExternalServiceError(provider_name, f"non-positive rate for {code}: {rate}")
            if code == self.base_currency:
                continue
            if self.supported_currencies is not None and code not in self.supported_currencies:
                continue
            rates[code] = rate

        if not rates:
            raise ExternalServiceError(provider_name, "returned none of the supported currencies")
        return rates


class RateSyncScheduler:
    """
    Runs RateSyncService.sync_now on a fixed interval in a background thread.

    Lifecycle is owned by the entry point: nothing starts until start() is
    called, and stop() waits for the thread. A failing cycle is logged and
    the next one still runs.
    """

    def __init__(self, service: RateSyncService, interval_seconds: float, run_immediately: bool = True):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.service = service
        self.interval_seconds = interval_seconds
        self.run_immediately = run_immediately
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.cycles_run = 0
        self.cycles_failed = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="rate-sync-scheduler", daemon=True)
        self._thread.start()
        logger.info("Rate sync scheduler started, interval=%ss", self.interval_seconds)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
        self._thread = None
        logger.info("Rate sync scheduler stopped")

    def trigger(self) -> None:
        """Run a cycle as soon as possible instead of waiting for the interval."""
        self._wake_event.set()

    def run_cycle(self) -> Optional[RateSyncResultDTO]:
        self.cycles_run += 1
        try:
            return self.service.sync_now()
        except ExternalServiceError as e:
            self.cycles_failed += 1
            logger.error("Scheduled rate sync failed, will retry next cycle: %s", e)
        except Exception:
            self.cycles_failed += 1
            logger.exception("Unexpected error during scheduled rate sync")
        return None

    def _run(self) -> None:
        if self.run_immediately:
            self.run_cycle()
        while not self._stop_event.is_set():
            self._wake_event.wait(self.interval_seconds)
            self._wake_event.clear()
            if self._stop_event.is_set():
                break
            self.run_cycle()
