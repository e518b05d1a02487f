from __future__ import annotations

import logging
from datetime import timedelta

from asgiref.sync import async_to_sync
from celery import shared_task
from django.conf import settings
from django.utils import timezone

from apps.matching import feature_flag
from apps.matching.store import DjangoMatchStore
from apps.notifications.services import DjangoNotificationSink
from apps.profile.models import VibeProfile
from services.matching.config import Settings as MatchingSettings
from services.matching.service import MatchingService

logger = logging.getLogger(__name__)


def build_matching_service() -> MatchingService:
    matching_settings = MatchingSettings()
    matching_settings.rules_version = getattr(settings, "MATCH_RULES_VERSION", matching_settings.rules_version)
    return MatchingService(DjangoMatchStore(), DjangoNotificationSink(), settings=matching_settings)


@shared_task
def run_auto_matching_task(user_id: int) -> dict[str, object]:
    if not feature_flag.is_enabled():
        return {"ok": False, "disabled": True, "created": []}

    service = build_matching_service()
    outcome = async_to_sync(service.run_auto_matching)(str(user_id))
    return {
        "ok": outcome.ok,
        "created": [match.match_id for match in outcome.matches],
        "skipped": outcome.skipped,
        "unpersisted": [candidate.user_id for candidate in outcome.unpersisted],
        "message": outcome.message,
    }


@shared_task
def auto_match_active_users_task(active_hours: int = 24) -> int:
    if not feature_flag.is_enabled():
        return 0
    cutoff = timezone.now() - timedelta(hours=active_hours)
    user_ids = VibeProfile.objects.filter(last_active__gte=cutoff).values_list("user_id", flat=True)
    queued = 0
    for user_id in user_ids:
        run_auto_matching_task.delay(user_id)
        queued += 1
    logger.info("matching.auto_match_queued", extra={"queued": queued, "active_hours": active_hours})
    return queued
