import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


RECURRENCE_CHOICES = [
    ("once", "Once"),
    ("daily", "Daily"),
    ("weekly", "Weekly"),
    ("monthly", "Monthly"),
    ("yearly", "Yearly"),
]


def base_fields():
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("updated_at", models.DateTimeField(auto_now=True)),
    ]


def converted_fields():
    return [
        ("amount", models.DecimalField(decimal_places=6, max_digits=20)),
        ("currency", models.CharField(max_length=3)),
        ("amount_in_base", models.DecimalField(decimal_places=6, max_digits=20)),
        ("base_currency", models.CharField(max_length=3)),
    ]


def user_field(related_name):
    return (
        "user",
        models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE,
            related_name=related_name,
            to=settings.AUTH_USER_MODEL,
        ),
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Income",
            fields=base_fields() + converted_fields() + [
                ("source_name", models.CharField(max_length=100)),
                ("recurrence", models.CharField(choices=RECURRENCE_CHOICES, default="monthly", max_length=10)),
                ("start_date", models.DateField()),
                ("is_active", models.BooleanField(default=True)),
                user_field("incomes"),
            ],
            options={
                "ordering": ["-start_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=base_fields() + converted_fields() + [
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("food", "Food"),
                            ("transport", "Transport"),
                            ("entertainment", "Entertainment"),
                            ("utilities", "Utilities"),
                            ("healthcare", "Healthcare"),
                            ("education", "Education"),
                            ("shopping", "Shopping"),
                            ("housing", "Housing"),
                            ("other", "Other"),
                        ],
                        default="other",
                        max_length=20,
                    ),
                ),
                ("description", models.CharField(blank=True, max_length=255)),
                ("expense_date", models.DateField(db_index=True)),
                ("is_recurring", models.BooleanField(default=False)),
                ("recurrence_type", models.CharField(blank=True, choices=RECURRENCE_CHOICES, max_length=10, null=True)),
                user_field("expenses"),
            ],
            options={
                "ordering": ["-expense_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Saving",
            fields=base_fields() + converted_fields() + [
                (
                    "saving_type",
                    models.CharField(
                        choices=[("manual", "Manual"), ("automatic", "Automatic"), ("goal", "Goal")],
                        default="manual",
                        max_length=10,
                    ),
                ),
                ("saving_date", models.DateField()),
                ("notes", models.TextField(blank=True)),
                ("goal_name", models.CharField(blank=True, max_length=100)),
                (
                    "target_amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=6,
                        help_text="Goal target, in the saving's own currency.",
                        max_digits=20,
                        null=True,
                    ),
                ),
                user_field("savings"),
            ],
            options={
                "ordering": ["-saving_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Investment",
            fields=base_fields() + [
                ("asset_name", models.CharField(max_length=100)),
                (
                    "asset_type",
                    models.CharField(
                        choices=[
                            ("stocks", "Stocks"),
                            ("crypto", "Crypto"),
                            ("bonds", "Bonds"),
                            ("real_estate", "Real estate"),
                            ("other", "Other"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "symbol",
                    models.CharField(
                        blank=True,
                        help_text="Ticker (stocks) or coin id (crypto). Needed for price refresh.",
                        max_length=50,
                    ),
                ),
                ("quantity", models.DecimalField(decimal_places=8, max_digits=20)),
                ("buy_price", models.DecimalField(decimal_places=6, max_digits=20)),
                ("current_value", models.DecimalField(decimal_places=6, max_digits=20)),
                ("currency", models.CharField(max_length=3)),
                ("purchase_date", models.DateField()),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("closed", "Closed")],
                        default="active",
                        max_length=10,
                    ),
                ),
                ("sell_price", models.DecimalField(blank=True, decimal_places=6, max_digits=20, null=True)),
                ("close_date", models.DateField(blank=True, null=True)),
                ("last_price_update", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True)),
                user_field("investments"),
            ],
            options={
                "ordering": ["-purchase_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=base_fields() + [
                (
                    "type",
                    models.CharField(
                        choices=[("info", "Info"), ("warning", "Warning"), ("alert", "Alert")],
                        default="info",
                        max_length=10,
                    ),
                ),
                ("category", models.CharField(blank=True, max_length=20)),
                ("title", models.CharField(max_length=200)),
                ("message", models.TextField()),
                ("is_read", models.BooleanField(db_index=True, default=False)),
                user_field("notifications"),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
