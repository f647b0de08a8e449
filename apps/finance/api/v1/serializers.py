"""
Serializers for the finance ledger.
Input is validated here; conversion and business rules run in the use cases.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.exchange.api.v1.serializers import validate_currency_code
from apps.exchange.domain.models import Money
from apps.finance.domain import services as investment_math
from apps.finance.domain.value_objects import Recurrence
from apps.finance.infrastructure.persistence.models import (
    Expense,
    Income,
    Investment,
    Notification,
    Saving,
)
from apps.finance.infrastructure.persistence.repositories import InvestmentRepository

POSITIVE = Decimal("0.000001")

CONVERTED_FIELDS = ["amount", "currency", "amount_in_base", "base_currency"]
READ_ONLY = ["id", "amount_in_base", "base_currency", "created_at", "updated_at"]


class ConvertedRecordSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=20, decimal_places=6, min_value=POSITIVE)

    def validate_currency(self, value: str) -> str:
        return validate_currency_code(value)


class IncomeSerializer(ConvertedRecordSerializer):
    monthly_amount_in_base = serializers.SerializerMethodField()

    class Meta:
        model = Income
        fields = ["id", "source_name", *CONVERTED_FIELDS, "recurrence", "start_date", "is_active",
                  "monthly_amount_in_base", "created_at", "updated_at"]
        read_only_fields = READ_ONLY

    def get_monthly_amount_in_base(self, obj) -> str:
        return str(Recurrence.create(obj.recurrence, obj.start_date).monthly_amount(obj.amount_in_base).quantize(POSITIVE))


class ExpenseSerializer(ConvertedRecordSerializer):

    class Meta:
        model = Expense
        fields = ["id", *CONVERTED_FIELDS, "category", "description", "expense_date", "is_recurring",
                  "recurrence_type", "created_at", "updated_at"]
        read_only_fields = READ_ONLY

    def validate(self, attrs):
        is_recurring = attrs.get("is_recurring", getattr(self.instance, "is_recurring", False))
        recurrence_type = attrs.get("recurrence_type", getattr(self.instance, "recurrence_type", None))
        if is_recurring and not recurrence_type:
            raise serializers.ValidationError({"recurrence_type": "Required for recurring expenses."})
        return attrs


class SavingSerializer(ConvertedRecordSerializer):
    target_amount = serializers.DecimalField(
        max_digits=20, decimal_places=6, min_value=POSITIVE, required=False, allow_null=True,
    )

    class Meta:
        model = Saving
        fields = ["id", *CONVERTED_FIELDS, "saving_type", "saving_date", "notes", "goal_name",
                  "target_amount", "created_at", "updated_at"]
        read_only_fields = READ_ONLY


class InvestmentSerializer(serializers.ModelSerializer):
    quantity = serializers.DecimalField(max_digits=20, decimal_places=8, min_value=Decimal("0.00000001"))
    buy_price = serializers.DecimalField(max_digits=20, decimal_places=6, min_value=POSITIVE)
    current_value = serializers.DecimalField(max_digits=20, decimal_places=6, min_value=POSITIVE, required=False)
    market_value = serializers.SerializerMethodField()
    profit_loss = serializers.SerializerMethodField()
    roi_percent = serializers.SerializerMethodField()

    class Meta:
        model = Investment
        fields = [
            "id", "asset_name", "asset_type", "symbol", "quantity", "buy_price", "current_value",
            "currency", "purchase_date", "status", "sell_price", "close_date", "last_price_update",
            "notes", "market_value", "profit_loss", "roi_percent", "created_at", "updated_at",
        ]
        read_only_fields = [
            "id", "status", "sell_price", "close_date", "last_price_update", "created_at", "updated_at",
        ]

    def validate_currency(self, value: str) -> str:
        return validate_currency_code(value)

    @staticmethod
    def _display(money: Money) -> str:
        return str(money.quantized(2).amount)

    def get_market_value(self, obj) -> str:
        return self._display(investment_math.market_value(InvestmentRepository.to_position(obj)))

    def get_profit_loss(self, obj) -> str:
        return self._display(investment_math.profit_loss(InvestmentRepository.to_position(obj)))

    def get_roi_percent(self, obj) -> str:
        return str(investment_math.return_on_investment(InvestmentRepository.to_position(obj)).quantize(Decimal("0.01")))


class CloseInvestmentSerializer(serializers.Serializer):
    sell_price = serializers.DecimalField(max_digits=20, decimal_places=6, min_value=POSITIVE)
    close_date = serializers.DateField(required=False)


class NotificationSerializer(serializers.ModelSerializer):

    class Meta:
        model = Notification
        fields = ["id", "type", "category", "title", "message", "is_read", "created_at"]
        read_only_fields = fields
