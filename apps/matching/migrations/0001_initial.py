from __future__ import annotations

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="VibeMatch",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                ("pair_key", models.CharField(max_length=64, unique=True)),
                ("compatibility_score", models.FloatField()),
                ("matching_reasons", models.JSONField(blank=True, default=dict)),
                ("rules_version", models.CharField(default="v1", max_length=32)),
                ("chat_started", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                (
                    "user_a",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "user_b",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user_a", "is_active"], name="matching_vi_user_a__3f9b1e_idx"),
                    models.Index(fields=["user_b", "is_active"], name="matching_vi_user_b__8c2d4a_idx"),
                ],
            },
        ),
    ]
