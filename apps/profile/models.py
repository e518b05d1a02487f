from __future__ import annotations

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


class VibeProfile(BaseModel):
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="vibe_profile")
    display_name = models.CharField(max_length=120, blank=True)
    bio = models.TextField(blank=True)
    vibe_score = models.PositiveIntegerField(default=0)
    latitude = models.FloatField(null=True, blank=True)
    longitude = models.FloatField(null=True, blank=True)
    city = models.CharField(max_length=128, blank=True)
    max_distance_km = models.FloatField(null=True, blank=True)
    is_online = models.BooleanField(default=False)
    last_active = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["is_online", "last_active"], name="profile_vib_is_onli_6c1f0e_idx"),
        ]

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def touch(self) -> None:
        self.last_active = timezone.now()
        self.save(update_fields=["last_active", "updated_at"])

    def __str__(self) -> str:  # pragma: no cover - debug helper
        return f"VibeProfile<{self.user_id}>"
