"""
Serializers for the exchange bounded context.
Handles validation and transformation between API and ORM layers.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.exchange.domain.errors import ValidationError as DomainValidationError
from apps.exchange.domain.models import normalize_currency
from apps.exchange.infrastructure.persistence.models import (
    RATE_DECIMAL_PLACES,
    RATE_MAX_DIGITS,
    Currency,
    CurrencyExchangeRate,
    Provider,
)


def validate_currency_code(value: str) -> str:
    try:
        return normalize_currency(value)
    except DomainValidationError as e:
        raise serializers.ValidationError(str(e))


class CurrencySerializer(serializers.ModelSerializer):
    class Meta:
        model = Currency
        fields = ["id", "code", "name", "symbol", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_code(self, value: str) -> str:
        return validate_currency_code(value)


class CurrencyExchangeRateSerializer(serializers.ModelSerializer):
    class Meta:
        model = CurrencyExchangeRate
        fields = [
            "id",
            "currency_code",
            "rate",
            "last_updated",
            "is_manual",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ManualRateSerializer(serializers.Serializer):
    currency_code = serializers.CharField(max_length=3)
    rate = serializers.DecimalField(
        max_digits=RATE_MAX_DIGITS,
        decimal_places=RATE_DECIMAL_PLACES,
        min_value=Decimal(1).scaleb(-RATE_DECIMAL_PLACES),
    )

    def validate_currency_code(self, value: str) -> str:
        return validate_currency_code(value)


class ProviderSerializer(serializers.ModelSerializer):
    name_display = serializers.CharField(
        source="get_name_display",
        read_only=True,
    )

    class Meta:
        model = Provider
        fields = ["id", "name", "name_display", "priority", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_priority(self, value):
        instance = self.instance
        existing = Provider.objects.filter(priority=value)

        if instance:
            existing = existing.exclude(pk=instance.pk)

        if existing.exists():
            existing_provider = existing.first()
            raise serializers.ValidationError(
                f"Priority {value} is already assigned to {existing_provider.get_name_display()}. "
                f"Please choose a different priority or update the existing provider first."
            )

        return value
