import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Currency",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("code", models.CharField(max_length=3, unique=True)),
                ("name", models.CharField(db_index=True, max_length=40)),
                ("symbol", models.CharField(max_length=10)),
            ],
            options={
                "verbose_name_plural": "currencies",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="CurrencyExchangeRate",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("currency_code", models.CharField(max_length=3, unique=True)),
                ("rate", models.DecimalField(decimal_places=8, max_digits=20)),
                ("last_updated", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "is_manual",
                    models.BooleanField(
                        default=False,
                        help_text="Manual overrides are never replaced by automatic sync.",
                    ),
                ),
            ],
            options={
                "ordering": ["currency_code"],
            },
        ),
        migrations.CreateModel(
            name="Provider",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "name",
                    models.CharField(
                        choices=[
                            ("currency_beacon", "CurrencyBeacon"),
                            ("mock", "Mock"),
                            ("exchange_rate", "ExchangeRate"),
                        ],
                        max_length=50,
                        unique=True,
                    ),
                ),
                (
                    "priority",
                    models.PositiveSmallIntegerField(
                        help_text="Lower number = higher priority. Determines the fallback order.",
                        unique=True,
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Uncheck to exclude this provider from rate synchronization.",
                    ),
                ),
            ],
            options={
                "ordering": ["priority"],
            },
        ),
    ]
