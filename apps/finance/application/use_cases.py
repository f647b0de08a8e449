"""
Finance use cases.

Income, expenses and savings are converted to the base currency when they
are written and the amount as entered is kept next to it; a missing rate
aborts the write. Investments stay in their own currency and are valued at
read time. Every creation emits record_created once committed.
"""

import logging
import time
from datetime import date
from decimal import Decimal
from typing import Callable, Dict, Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.exchange.application.factories import get_aggregator, get_converter
from apps.exchange.domain.errors import BusinessRuleViolationError, NotFoundError, ValidationError
from apps.exchange.domain.models import Money, ValuationLineItem, normalize_currency, to_decimal
from apps.exchange.domain.services import CurrencyConverter, ValuationAggregator
from apps.finance.application.dto import DashboardSummaryDTO, PriceRefreshResultDTO
from apps.finance.application.signals import emit_record_created
from apps.finance.domain.interfaces import BaseMarketDataProvider
from apps.finance.domain.services import PortfolioCalculator, PortfolioMetrics
from apps.finance.domain.value_objects import DateRange, Recurrence
from apps.finance.infrastructure.market_data.registry import get_market_data_provider
from apps.finance.infrastructure.persistence.models import (
    AssetType,
    Expense,
    ExpenseCategory,
    Income,
    Investment,
    InvestmentStatus,
    Saving,
    SavingType,
)
from apps.finance.infrastructure.persistence.repositories import (
    ExpenseRepository,
    IncomeRepository,
    InvestmentRepository,
    SavingRepository,
)

logger = logging.getLogger(__name__)

STORED_QUANTUM = Decimal("0.000001")


def _positive(value, field_name: str) -> Decimal:
    number = to_decimal(value, field_name)
    if number <= 0:
        raise ValidationError(f"{field_name} must be greater than zero", field_name)
    return number


def _required(value, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required", field_name)
    return str(value).strip()


def _choice(value, choices, field_name: str) -> str:
    if value not in choices.values:
        raise ValidationError(f"Invalid {field_name}: {value}", field_name)
    return value


class ConvertingUseCase:
    """Base for records normalized to the base currency at write time."""

    def __init__(self, converter: Optional[CurrencyConverter] = None):
        self.converter = converter or get_converter()

    def normalize_amount(self, amount, currency) -> Dict:
        money = Money.create(_positive(amount, "amount"), currency)
        in_base = self.converter.convert_to_base(money.amount, money.currency)
        return {
            "amount": money.amount.quantize(STORED_QUANTUM),
            "currency": money.currency,
            "amount_in_base": in_base.amount.quantize(STORED_QUANTUM),
            "base_currency": in_base.currency,
        }


class CreateIncome(ConvertingUseCase):

    def execute(
        self,
        user_id,
        source_name: str,
        amount,
        currency: str,
        recurrence: str = "monthly",
        start_date: Optional[date] = None,
        is_active: bool = True,
    ) -> Income:
        source_name = _required(source_name, "source_name")
        recurrence = Recurrence.create(recurrence, start_date or timezone.localdate())
        amounts = self.normalize_amount(amount, currency)

        with transaction.atomic():
            income = Income.objects.create(
                user_id=user_id,
                source_name=source_name,
                recurrence=recurrence.type.value,
                start_date=recurrence.start_date,
                is_active=is_active,
                **amounts,
            )
            emit_record_created(Income, user_id, "income", income.pk, income.source_name, income.amount, income.currency)

        logger.info("Income %s created for user %s (%s %s)", income.pk, user_id, income.amount, income.currency)
        return income


class CreateExpense(ConvertingUseCase):

    def execute(
        self,
        user_id,
        amount,
        currency: str,
        category: str = ExpenseCategory.OTHER,
        expense_date: Optional[date] = None,
        description: str = "",
        is_recurring: bool = False,
        recurrence_type: Optional[str] = None,
    ) -> Expense:
        category = _choice(category, ExpenseCategory, "category")
        expense_date = expense_date or timezone.localdate()
        if is_recurring:
            if not recurrence_type:
                raise ValidationError("recurrence_type is required for recurring expenses", "recurrence_type")
            recurrence_type = Recurrence.create(recurrence_type, expense_date).type.value
        else:
            recurrence_type = None
        amounts = self.normalize_amount(amount, currency)

        with transaction.atomic():
            expense = Expense.objects.create(
                user_id=user_id,
                category=category,
                description=(description or "").strip(),
                expense_date=expense_date,
                is_recurring=is_recurring,
                recurrence_type=recurrence_type,
                **amounts,
            )
            emit_record_created(Expense, user_id, "expense", expense.pk, expense.category, expense.amount, expense.currency)

        logger.info("Expense %s created for user %s (%s %s)", expense.pk, user_id, expense.amount, expense.currency)
        return expense


class CreateSaving(ConvertingUseCase):

    def execute(
        self,
        user_id,
        amount,
        currency: str,
        saving_type: str = SavingType.MANUAL,
        saving_date: Optional[date] = None,
        notes: str = "",
        goal_name: str = "",
        target_amount=None,
    ) -> Saving:
        saving_type = _choice(saving_type, SavingType, "saving_type")
        if saving_type == SavingType.GOAL:
            goal_name = _required(goal_name, "goal_name")
        if target_amount is not None:
            target_amount = _positive(target_amount, "target_amount").quantize(STORED_QUANTUM)
        amounts = self.normalize_amount(amount, currency)

        with transaction.atomic():
            saving = Saving.objects.create(
                user_id=user_id,
                saving_type=saving_type,
                saving_date=saving_date or timezone.localdate(),
                notes=notes or "",
                goal_name=(goal_name or "").strip(),
                target_amount=target_amount,
                **amounts,
            )
            emit_record_created(Saving, user_id, "saving", saving.pk, saving.goal_name, saving.amount, saving.currency)

        logger.info("Saving %s created for user %s (%s %s)", saving.pk, user_id, saving.amount, saving.currency)
        return saving


class UpdateConvertedRecord(ConvertingUseCase):
    """Applies field changes to an income, expense or saving; a new amount or currency is converted again."""

    def execute(self, record, changes: Dict):
        changes = dict(changes)
        if "amount" in changes or "currency" in changes:
            changes.update(self.normalize_amount(
                changes.pop("amount", record.amount),
                changes.pop("currency", record.currency),
            ))
        for field_name, value in changes.items():
            setattr(record, field_name, value)
        record.save()
        return record


class CreateInvestment:

    def execute(
        self,
        user_id,
        asset_name: str,
        asset_type: str,
        quantity,
        buy_price,
        currency: str,
        purchase_date: Optional[date] = None,
        symbol: str = "",
        current_value=None,
        notes: str = "",
    ) -> Investment:
        asset_name = _required(asset_name, "asset_name")
        asset_type = _choice(asset_type, AssetType, "asset_type")
        quantity = _positive(quantity, "quantity")
        buy_price = _positive(buy_price, "buy_price")
        current_value = buy_price if current_value is None else _positive(current_value, "current_value")
        currency = normalize_currency(currency)

        with transaction.atomic():
            investment = Investment.objects.create(
                user_id=user_id,
                asset_name=asset_name,
                asset_type=asset_type,
                symbol=(symbol or "").strip(),
                quantity=quantity,
                buy_price=buy_price.quantize(STORED_QUANTUM),
                current_value=current_value.quantize(STORED_QUANTUM),
                currency=currency,
                purchase_date=purchase_date or timezone.localdate(),
                notes=notes or "",
            )
            emit_record_created(
                Investment,
                user_id,
                "investment",
                investment.pk,
                f"{investment.asset_name} ({investment.asset_type})",
                (buy_price * quantity).quantize(STORED_QUANTUM),
                currency,
            )

        logger.info("Investment %s created for user %s", investment.pk, user_id)
        return investment


class UpdateInvestment:

    def execute(self, investment: Investment, changes: Dict) -> Investment:
        if not investment.is_active:
            raise BusinessRuleViolationError("Closed investments cannot be modified")

        changes = dict(changes)
        for field_name in ("quantity", "buy_price", "current_value"):
            if field_name in changes:
                changes[field_name] = _positive(changes[field_name], field_name)
        if "currency" in changes:
            changes["currency"] = normalize_currency(changes["currency"])
        for field_name, value in changes.items():
            setattr(investment, field_name, value)
        investment.save()
        return investment


class CloseInvestment:

    def execute(self, user_id, investment_id, sell_price, close_date: Optional[date] = None) -> Investment:
        investment = InvestmentRepository.get_for_user(user_id, investment_id)
        if investment is None:
            raise NotFoundError("Investment", investment_id)
        if not investment.is_active:
            raise BusinessRuleViolationError("Investment is already closed")

        sell_price = _positive(sell_price, "sell_price").quantize(STORED_QUANTUM)
        close_date = close_date or timezone.localdate()
        if close_date < investment.purchase_date:
            raise ValidationError("close_date cannot be before purchase_date", "close_date")

        investment.status = InvestmentStatus.CLOSED
        investment.sell_price = sell_price
        investment.current_value = sell_price
        investment.close_date = close_date
        investment.save(update_fields=["status", "sell_price", "current_value", "close_date", "updated_at"])

        logger.info("Investment %s closed at %s %s", investment.pk, sell_price, investment.currency)
        return investment


class RefreshInvestmentPrices:
    """
    Updates the unit price of every active investment of a user.

    One failing asset never aborts the batch: it is counted and reported.
    Providers are rate limited, so MARKET_DATA_REQUEST_DELAY seconds are
    waited after each successful call.
    """

    def __init__(
        self,
        provider: Optional[BaseMarketDataProvider] = None,
        delay_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.provider = provider or get_market_data_provider(get_converter())
        if delay_seconds is None:
            delay_seconds = getattr(settings, "MARKET_DATA_REQUEST_DELAY", 1)
        self.delay_seconds = delay_seconds
        self.sleep = sleep

    def execute(self, user_id) -> PriceRefreshResultDTO:
        result = PriceRefreshResultDTO()

        for investment in InvestmentRepository.get_active_by_user(user_id):
            if not investment.symbol or not self.provider.supports(investment.asset_type):
                result.skipped += 1
                continue

            try:
                price = self.provider.get_asset_price(investment.symbol, investment.asset_type, investment.currency)
                price = _positive(price, "price").quantize(STORED_QUANTUM)
            except Exception as e:
                logger.warning("Price refresh failed for %s (%s): %s", investment.asset_name, investment.symbol, e)
                result.failed += 1
                result.errors.append(f"{investment.asset_name}: {e}")
                continue

            investment.current_value = price
            investment.last_price_update = timezone.now()
            investment.save(update_fields=["current_value", "last_price_update", "updated_at"])
            result.updated += 1

            if self.delay_seconds:
                self.sleep(self.delay_seconds)

        logger.info(
            "Price refresh for user %s: %s updated, %s failed, %s skipped",
            user_id, result.updated, result.failed, result.skipped,
        )
        return result


class GetPortfolioMetrics:

    def __init__(self, aggregator: Optional[ValuationAggregator] = None):
        self.calculator = PortfolioCalculator(aggregator or get_aggregator())

    def execute(self, user_id) -> PortfolioMetrics:
        positions = [InvestmentRepository.to_position(i) for i in InvestmentRepository.get_by_user(user_id)]
        return self.calculator.calculate(positions)


class GetDashboardSummary:
    """
    Monthly overview of a user's finances.

    - income: monthly equivalent of the active incomes applicable this month
    - expenses: expenses dated in the current month
    - savings: all savings
    - investments: market value of the active investments
    - net worth = income - expenses + savings + investments
    """

    def __init__(self, aggregator: Optional[ValuationAggregator] = None):
        self.aggregator = aggregator or get_aggregator()

    def _income_items(self, user_id, today: date):
        items = []
        for income in IncomeRepository.get_active_by_user(user_id):
            recurrence = Recurrence.create(income.recurrence, income.start_date)
            if not recurrence.is_applicable_for_month(today.year, today.month):
                continue
            monthly = recurrence.monthly_amount(income.amount_in_base)
            items.append(ValuationLineItem(user_id, Money(monthly, income.base_currency), income.start_date, "income", income.recurrence))
        return items

    def _expense_items(self, user_id, period: DateRange):
        return [
            ValuationLineItem(user_id, Money(e.amount_in_base, e.base_currency), e.expense_date, "expense", e.category)
            for e in ExpenseRepository.get_by_user_in_range(user_id, period)
        ]

    def _saving_items(self, user_id):
        return [
            ValuationLineItem(user_id, Money(s.amount_in_base, s.base_currency), s.saving_date, "saving", s.saving_type)
            for s in SavingRepository.get_by_user(user_id)
        ]

    def execute(self, user_id, currency: Optional[str] = None, today: Optional[date] = None) -> DashboardSummaryDTO:
        today = today or timezone.localdate()
        period = DateRange.current_month(today)
        base = self.aggregator.base_currency
        target = normalize_currency(currency) if currency else base

        expense_items = self._expense_items(user_id, period)
        income = self.aggregator.total_in_base(self._income_items(user_id, today))
        expenses = self.aggregator.total_in_base(expense_items)
        savings = self.aggregator.total_in_base(self._saving_items(user_id))
        positions = [InvestmentRepository.to_position(i) for i in InvestmentRepository.get_active_by_user(user_id)]
        investments = PortfolioCalculator(self.aggregator).market_value_in_base(positions)
        net_worth = income.subtract(expenses).add(savings).add(investments)
        by_category = self.aggregator.group_by(expense_items, lambda item: item.category)

        def show(money: Money) -> Money:
            if target == base:
                return money
            return self.aggregator.converter.convert_from_base(money.amount, target)

        return DashboardSummaryDTO(
            currency=target,
            base_currency=base,
            period_start=period.start_date,
            period_end=period.end_date,
            total_income=show(income),
            total_expenses=show(expenses),
            total_savings=show(savings),
            total_investments=show(investments),
            net_worth=show(net_worth),
            expenses_by_category={category: show(money) for category, money in by_category.items()},
        )
