from __future__ import annotations

import json
import logging
from functools import lru_cache

from django.conf import settings
from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_redis_client() -> Redis:
    url = getattr(settings, "PUBSUB_REDIS_URL", "redis://redis:6379/1")
    return Redis.from_url(url)


def user_channel(user_id: int | str) -> str:
    return f"user:{user_id}"


def publish_event(channel: str, payload: dict) -> bool:
    """Best-effort publish; returns False instead of raising when Redis is unavailable."""
    if not getattr(settings, "FEATURE_FLAGS", {}).get("realtime", True):
        return False
    try:
        client = get_redis_client()
        client.publish(channel, json.dumps(payload, default=str))
        return True
    except RedisError as exc:
        logger.warning("Failed to publish event on %s: %s", channel, exc)
        return False
