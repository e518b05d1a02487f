from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.models import BaseModel
from services.matching.schemas import Mood


class VibeEchoQuerySet(models.QuerySet):
    def active(self) -> "VibeEchoQuerySet":
        now = timezone.now()
        return self.filter(is_active=True).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=now))


class VibeEcho(BaseModel):
    MOOD_CHOICES = [(mood.value, mood.value) for mood in Mood]

    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="vibe_echoes")
    mood = models.CharField(max_length=16, choices=MOOD_CHOICES)
    activity = models.CharField(max_length=64, blank=True)
    content = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    expires_at = models.DateTimeField(null=True, blank=True)

    objects = VibeEchoQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["author", "is_active", "created_at"], name="social_vibe_author__a1d3c2_idx"),
        ]

    def __str__(self) -> str:  # pragma: no cover - debug helper
        return f"VibeEcho<{self.id}:{self.mood}>"


class VibeEchoLike(BaseModel):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="vibe_likes")
    vibe_echo = models.ForeignKey(VibeEcho, on_delete=models.CASCADE, related_name="likes")

    class Meta:
        unique_together = ("user", "vibe_echo")
