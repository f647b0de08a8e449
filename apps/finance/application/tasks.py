"""
Celery tasks for the finance ledger.
"""

import logging
from typing import Dict, Optional

from celery import shared_task

from apps.finance.application.use_cases import RefreshInvestmentPrices
from apps.finance.infrastructure.persistence.models import Investment, InvestmentStatus

logger = logging.getLogger(__name__)


@shared_task(name="refresh_investment_prices")
def refresh_investment_prices(user_id: Optional[int] = None) -> Dict:
    """
    Refresh market prices for one user, or for every user holding an active investment.

    Returns:
        Dict with per-user counters (updated / failed / skipped)
    """
    if user_id is None:
        user_ids = list(
            Investment.objects
            .filter(status=InvestmentStatus.ACTIVE)
            .exclude(symbol="")
            .values_list("user_id", flat=True)
            .distinct()
        )
    else:
        user_ids = [user_id]

    use_case = RefreshInvestmentPrices()
    results = {}
    for uid in user_ids:
        results[str(uid)] = use_case.execute(uid).to_dict()

    logger.info("Investment prices refreshed for %s user(s)", len(user_ids))
    return {
        "success": True,
        "users_processed": len(user_ids),
        "results": results,
    }
