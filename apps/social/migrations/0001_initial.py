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
            name="VibeEcho",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "mood",
                    models.CharField(
                        choices=[
                            ("happy", "happy"),
                            ("excited", "excited"),
                            ("calm", "calm"),
                            ("adventurous", "adventurous"),
                            ("creative", "creative"),
                            ("social", "social"),
                            ("thoughtful", "thoughtful"),
                            ("energetic", "energetic"),
                        ],
                        max_length=16,
                    ),
                ),
                ("activity", models.CharField(blank=True, max_length=64)),
                ("content", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("expires_at", models.DateTimeField(blank=True, null=True)),
                (
                    "author",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vibe_echoes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["author", "is_active", "created_at"], name="social_vibe_author__a1d3c2_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="VibeEchoLike",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.BigAutoField(primary_key=True, serialize=False)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vibe_likes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "vibe_echo",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="likes",
                        to="social.vibeecho",
                    ),
                ),
            ],
            options={
                "unique_together": {("user", "vibe_echo")},
            },
        ),
    ]
