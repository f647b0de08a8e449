"""
Receivers turning ledger events into in-app notifications.
Connected in FinanceConfig.ready().
"""

import logging

from django.dispatch import receiver

from apps.finance.application.signals import record_created
from apps.finance.domain.notifications import build_record_message
from apps.finance.infrastructure.persistence.models import Notification, NotificationType

logger = logging.getLogger(__name__)


@receiver(record_created, dispatch_uid="finance.create_record_notification")
def create_record_notification(sender, user_id, kind, label, amount, currency, **kwargs):
    title, message = build_record_message(kind, label, amount, currency)
    notification = Notification.objects.create(
        user_id=user_id,
        type=NotificationType.INFO,
        category=kind,
        title=title,
        message=message,
    )
    logger.debug("Notification %s created for user %s", notification.pk, user_id)
    return notification
