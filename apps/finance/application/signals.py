"""
Post-commit events of the finance ledger.

record_created is sent once the transaction that created the record has
committed. Receivers get: user_id, kind, record_id, label, amount, currency.
A failing receiver is logged and never affects the write.
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

record_created = Signal()


def emit_record_created(sender, user_id, kind: str, record_id, label: str, amount, currency: str) -> None:
    def _send():
        responses = record_created.send_robust(
            sender=sender,
            user_id=user_id,
            kind=kind,
            record_id=record_id,
            label=label,
            amount=amount,
            currency=currency,
        )
        for receiver, response in responses:
            if isinstance(response, Exception):
                logger.error("record_created receiver %r failed for %s %s: %s", receiver, kind, record_id, response)

    transaction.on_commit(_send)
