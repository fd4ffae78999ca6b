from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("ticketing", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="checkoutreceipt",
            name="completed_at",
            field=models.DateTimeField(blank=True, null=True),
        ),
    ]
