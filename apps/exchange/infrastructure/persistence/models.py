"""
ORM models backing the exchange rate store, the currency catalogue and the provider chain.
"""

import uuid
from django.db import models
from django.utils import timezone


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Currency(BaseModel):

    code = models.CharField(max_length=3, unique=True)
    name = models.CharField(max_length=40, db_index=True)
    symbol = models.CharField(max_length=10)

    class Meta:
        verbose_name_plural = "currencies"
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} ({self.symbol})"


RATE_MAX_DIGITS = 30
RATE_DECIMAL_PLACES = 18


class CurrencyExchangeRate(BaseModel):
    """
    Latest rate of one currency against the base currency.
    rate = units of currency_code per 1 base unit.
    """

    currency_code = models.CharField(max_length=3, unique=True)
    rate = models.DecimalField(
        decimal_places=RATE_DECIMAL_PLACES,
        max_digits=RATE_MAX_DIGITS,
    )
    last_updated = models.DateTimeField(default=timezone.now, db_index=True)
    is_manual = models.BooleanField(
        default=False,
        help_text="Manual overrides are never replaced by automatic sync.",
    )

    class Meta:
        ordering = ["currency_code"]

    def __str__(self):
        origin = "manual" if self.is_manual else "auto"
        return f"{self.currency_code} | {self.rate} | {origin} | {self.last_updated:%Y-%m-%d %H:%M}"


class ProviderName(models.TextChoices):
    """Rate sources known to the registry. Each value needs a PROVIDER_REGISTRY entry."""

    CURRENCY_BEACON = "currency_beacon", "CurrencyBeacon"
    MOCK = "mock", "Mock"
    EXCHANGE_RATE = "exchange_rate", "ExchangeRate"


class Provider(BaseModel):

    name = models.CharField(
        max_length=50,
        choices=ProviderName.choices,
        unique=True,
    )
    priority = models.PositiveSmallIntegerField(
        unique=True,
        help_text="Lower number = higher priority. Determines the fallback order.",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Uncheck to exclude this provider from rate synchronization.",
    )

    class Meta:
        ordering = ["priority"]

    def __str__(self):
        state = "active" if self.is_active else "inactive"
        return f"#{self.priority} {self.get_name_display()} ({state})"
