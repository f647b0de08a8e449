"""
Django ORM models for the finance ledger.
Income, expenses and savings keep the amount as entered plus its base
currency equivalent computed at write time. Investments stay in their own
currency and are valued at read time.
"""

from django.conf import settings
from django.db import models

from apps.exchange.infrastructure.persistence.models import BaseModel


class Recurrence(models.TextChoices):
    ONCE = "once", "Once"
    DAILY = "daily", "Daily"
    WEEKLY = "weekly", "Weekly"
    MONTHLY = "monthly", "Monthly"
    YEARLY = "yearly", "Yearly"


class ExpenseCategory(models.TextChoices):
    FOOD = "food", "Food"
    TRANSPORT = "transport", "Transport"
    ENTERTAINMENT = "entertainment", "Entertainment"
    UTILITIES = "utilities", "Utilities"
    HEALTHCARE = "healthcare", "Healthcare"
    EDUCATION = "education", "Education"
    SHOPPING = "shopping", "Shopping"
    HOUSING = "housing", "Housing"
    OTHER = "other", "Other"


class SavingType(models.TextChoices):
    MANUAL = "manual", "Manual"
    AUTOMATIC = "automatic", "Automatic"
    GOAL = "goal", "Goal"


class AssetType(models.TextChoices):
    STOCKS = "stocks", "Stocks"
    CRYPTO = "crypto", "Crypto"
    BONDS = "bonds", "Bonds"
    REAL_ESTATE = "real_estate", "Real estate"
    OTHER = "other", "Other"


class InvestmentStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    CLOSED = "closed", "Closed"


class NotificationType(models.TextChoices):
    INFO = "info", "Info"
    WARNING = "warning", "Warning"
    ALERT = "alert", "Alert"


class ConvertedRecord(BaseModel):
    """Amount as entered by the user and its base currency equivalent."""

    amount = models.DecimalField(max_digits=20, decimal_places=6)
    currency = models.CharField(max_length=3)
    amount_in_base = models.DecimalField(max_digits=20, decimal_places=6)
    base_currency = models.CharField(max_length=3)

    class Meta:
        abstract = True


class Income(ConvertedRecord):

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="incomes")
    source_name = models.CharField(max_length=100)
    recurrence = models.CharField(max_length=10, choices=Recurrence.choices, default=Recurrence.MONTHLY)
    start_date = models.DateField()
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-start_date", "-created_at"]

    def __str__(self):
        return f"{self.source_name} | {self.amount} {self.currency} | {self.recurrence}"


class Expense(ConvertedRecord):

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="expenses")
    category = models.CharField(max_length=20, choices=ExpenseCategory.choices, default=ExpenseCategory.OTHER)
    description = models.CharField(max_length=255, blank=True)
    expense_date = models.DateField(db_index=True)
    is_recurring = models.BooleanField(default=False)
    recurrence_type = models.CharField(max_length=10, choices=Recurrence.choices, blank=True, null=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]

    def __str__(self):
        return f"{self.category} | {self.amount} {self.currency} | {self.expense_date}"


class Saving(ConvertedRecord):

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="savings")
    saving_type = models.CharField(max_length=10, choices=SavingType.choices, default=SavingType.MANUAL)
    saving_date = models.DateField()
    notes = models.TextField(blank=True)
    goal_name = models.CharField(max_length=100, blank=True)
    target_amount = models.DecimalField(
        max_digits=20,
        decimal_places=6,
        blank=True,
        null=True,
        help_text="Goal target, in the saving's own currency.",
    )

    class Meta:
        ordering = ["-saving_date", "-created_at"]

    def __str__(self):
        return f"{self.saving_type} | {self.amount} {self.currency} | {self.saving_date}"


class Investment(BaseModel):
    """Prices are per unit and expressed in `currency`."""

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="investments")
    asset_name = models.CharField(max_length=100)
    asset_type = models.CharField(max_length=20, choices=AssetType.choices)
    symbol = models.CharField(
        max_length=50,
        blank=True,
        help_text="Ticker (stocks) or coin id (crypto). Needed for price refresh.",
    )
    quantity = models.DecimalField(max_digits=20, decimal_places=8)
    buy_price = models.DecimalField(max_digits=20, decimal_places=6)
    current_value = models.DecimalField(max_digits=20, decimal_places=6)
    currency = models.CharField(max_length=3)
    purchase_date = models.DateField()
    status = models.CharField(max_length=10, choices=InvestmentStatus.choices, default=InvestmentStatus.ACTIVE)
    sell_price = models.DecimalField(max_digits=20, decimal_places=6, blank=True, null=True)
    close_date = models.DateField(blank=True, null=True)
    last_price_update = models.DateTimeField(blank=True, null=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-purchase_date", "-created_at"]

    @property
    def is_active(self) -> bool:
        return self.status == InvestmentStatus.ACTIVE

    def __str__(self):
        return f"{self.asset_name} ({self.asset_type}) | {self.quantity} @ {self.current_value} {self.currency}"


class Notification(BaseModel):

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications")
    type = models.CharField(max_length=10, choices=NotificationType.choices, default=NotificationType.INFO)
    category = models.CharField(max_length=20, blank=True)
    title = models.CharField(max_length=200)
    message = models.TextField()
    is_read = models.BooleanField(default=False, db_index=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        state = "read" if self.is_read else "unread"
        return f"{self.title} | {state}"
