from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("stations", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="stockmovement",
            name="source_type",
            field=models.CharField(
                choices=[
                    ("DAILY_ENTRY", "Approved daily entry"),
                    ("PURCHASE", "Stock purchase"),
                    ("CAPACITY_CHANGE", "Capacity reduced below stock"),
                ],
                max_length=20,
            ),
        ),
    ]
