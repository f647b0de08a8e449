from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("exchange", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="currencyexchangerate",
            name="rate",
            field=models.DecimalField(decimal_places=18, max_digits=30),
        ),
    ]
