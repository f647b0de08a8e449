"""
Celery tasks for background processing.
"""

import logging
from typing import Dict

from celery import shared_task
from django.conf import settings
from django.core.cache import cache

from apps.exchange.application.dto import ProviderHealthDTO
from apps.exchange.application.factories import get_sync_service
from apps.exchange.domain.errors import DomainError, ExternalServiceError
from apps.exchange.domain.services import default_base_currency
from apps.exchange.infrastructure.persistence.repositories import ProviderRepository
from apps.exchange.infrastructure.providers.registry import get_provider_instance

logger = logging.getLogger(__name__)

SYNC_LOCK_KEY = "exchange:rate-sync-lock"


@shared_task(name="sync_exchange_rates")
def sync_exchange_rates() -> Dict:
    """
    Refresh the automatic exchange rates from the active providers.

    Scheduled by Celery beat every RATE_SYNC_INTERVAL_HOURS. A failed cycle
    is logged and reported in the result; it never raises, so the next
    scheduled run is unaffected.

    Returns:
        Dict with operation results
    """
    lock_timeout = getattr(settings, "RATE_SYNC_LOCK_TIMEOUT", 10 * 60)
    if not cache.add(SYNC_LOCK_KEY, "locked", lock_timeout):
        logger.info("Another worker is already syncing exchange rates, skipping")
        return {
            "success": False,
            "skipped": True,
            "message": "Sync already in progress",
            "rates_synced": 0,
        }

    try:
        service = get_sync_service()
        result = service.sync_now()
    except DomainError as e:
        logger.error("Exchange rate sync failed: %s", e)
        return {
            "success": False,
            "skipped": False,
            "message": str(e),
            "rates_synced": 0,
        }
    finally:
        cache.delete(SYNC_LOCK_KEY)

    return {
        **result.to_dict(),
        "message": "Sync already in progress" if result.skipped else "OK",
    }


@shared_task(name="check_providers_health")
def check_providers_health() -> Dict:
    """
    Probe every active provider once and report its status.

    Returns:
        Dict with one entry per provider: healthy / unhealthy / error
    """
    base_currency = default_base_currency()
    providers = ProviderRepository.get_active_ordered()
    results = {}

    for provider_model in providers:
        instance = get_provider_instance(provider_model.name)
        if instance is None:
            health = ProviderHealthDTO(
                name=provider_model.name,
                status="error",
                message="Provider not registered",
            )
        else:
            try:
                rates = instance.fetch_rates(base_currency)
                health = ProviderHealthDTO(
                    name=provider_model.name,
                    status="healthy" if rates else "unhealthy",
                    currencies_returned=len(rates or {}),
                )
            except ExternalServiceError as e:
                health = ProviderHealthDTO(name=provider_model.name, status="unhealthy", message=str(e))
            except Exception as e:
                logger.exception("Provider %s raised while probing", provider_model.name)
                health = ProviderHealthDTO(name=provider_model.name, status="error", message=str(e))

        results[provider_model.name] = {
            "status": health.status,
            "message": health.message,
            "currencies_returned": health.currencies_returned,
        }

    return {
        "success": True,
        "providers_checked": len(providers),
        "results": results,
    }
