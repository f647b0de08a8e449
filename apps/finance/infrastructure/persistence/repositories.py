"""
Query helpers for the finance ledger, scoped to one user.
"""

from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError

from apps.exchange.domain.models import Money
from apps.finance.domain.services import InvestmentPosition
from apps.finance.domain.value_objects import DateRange
from apps.finance.infrastructure.persistence.models import (
    Expense,
    Income,
    Investment,
    InvestmentStatus,
    Notification,
    Saving,
)


class IncomeRepository:

    @staticmethod
    def get_active_by_user(user_id) -> List[Income]:
        return list(Income.objects.filter(user_id=user_id, is_active=True))


class ExpenseRepository:

    @staticmethod
    def get_by_user_in_range(user_id, date_range: DateRange) -> List[Expense]:
        """Expenses dated inside the range, both ends included."""
        return list(
            Expense.objects.filter(
                user_id=user_id,
                expense_date__gte=date_range.start_date,
                expense_date__lte=date_range.end_date,
            )
        )


class SavingRepository:

    @staticmethod
    def get_by_user(user_id) -> List[Saving]:
        return list(Saving.objects.filter(user_id=user_id))


class InvestmentRepository:

    @staticmethod
    def to_position(investment: Investment) -> InvestmentPosition:
        return InvestmentPosition(
            asset_type=investment.asset_type,
            quantity=investment.quantity,
            buy_price=Money.create(investment.buy_price, investment.currency),
            current_price=Money.create(investment.current_value, investment.currency),
            is_active=investment.is_active,
            user_id=investment.user_id,
            purchase_date=investment.purchase_date,
        )

    @staticmethod
    def get_for_user(user_id, investment_id) -> Optional[Investment]:
        try:
            return Investment.objects.get(pk=investment_id, user_id=user_id)
        except (Investment.DoesNotExist, DjangoValidationError):
            return None

    @staticmethod
    def get_by_user(user_id) -> List[Investment]:
        return list(Investment.objects.filter(user_id=user_id))

    @staticmethod
    def get_active_by_user(user_id) -> List[Investment]:
        return list(Investment.objects.filter(user_id=user_id, status=InvestmentStatus.ACTIVE))


class NotificationRepository:

    @staticmethod
    def unread_count(user_id) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).count()

    @staticmethod
    def mark_all_read(user_id) -> int:
        """Returns the number of notifications updated."""
        return Notification.objects.filter(user_id=user_id, is_read=False).update(is_read=True)
