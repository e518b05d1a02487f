from __future__ import annotations

from django.conf import settings
from django.db import models

from apps.core.models import BaseModel


class VibeMatch(BaseModel):
    """One row per unordered pair. user_a/user_b follow the canonical pair order used to build pair_key."""

    pair_key = models.CharField(max_length=64, unique=True)
    user_a = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    user_b = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="+")
    compatibility_score = models.FloatField()
    matching_reasons = models.JSONField(default=dict, blank=True)
    rules_version = models.CharField(max_length=32, default="v1")
    chat_started = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user_a", "is_active"], name="matching_vi_user_a__3f9b1e_idx"),
            models.Index(fields=["user_b", "is_active"], name="matching_vi_user_b__8c2d4a_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - debug helper
        return f"VibeMatch<{self.pair_key}:{self.compatibility_score:.2f}>"
