"""
Django discovers models here; they live in the persistence layer.
"""

from apps.finance.infrastructure.persistence.models import (  # noqa: F401
    Expense,
    Income,
    Investment,
    Notification,
    Saving,
)
