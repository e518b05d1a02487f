from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("profile", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="vibeprofile",
            name="max_distance_km",
            field=models.FloatField(blank=True, null=True),
        ),
    ]
