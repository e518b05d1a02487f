from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple, TypeVar

from django.db import DatabaseError
from django.db.models import Q
from django.utils import timezone

from apps.matching.models import VibeMatch
from apps.profile.models import VibeProfile
from apps.social.models import VibeEcho, VibeEchoLike
from services.matching.errors import PersistenceError, StoreError
from services.matching.schemas import (
    CandidateFilters,
    GeoPoint,
    Match,
    MatchPreferences,
    Post,
    Profile,
    canonical_pair,
    pair_key,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _reads(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except DatabaseError as exc:
            raise StoreError(f"{func.__name__} failed: {exc}") from exc

    return wrapper


def _pk(user_id: str) -> Optional[int]:
    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None


def profile_from_row(row: VibeProfile) -> Profile:
    location = GeoPoint(row.latitude, row.longitude) if row.has_location else None
    return Profile(
        user_id=str(row.user_id),
        vibe_score=row.vibe_score,
        location=location,
        city=row.city or None,
        bio=row.bio or None,
        last_active=row.last_active,
        display_name=row.display_name or None,
        is_online=row.is_online,
    )


def post_from_row(row: VibeEcho) -> Post:
    return Post(
        post_id=str(row.id),
        owner_id=str(row.author_id),
        mood=row.mood,
        activity=row.activity or None,
        content=row.content,
        created_at=row.created_at,
    )


def match_from_row(row: VibeMatch) -> Match:
    return Match(
        match_id=str(row.id),
        user_a=str(row.user_a_id),
        user_b=str(row.user_b_id),
        compatibility_score=row.compatibility_score,
        matching_reasons=row.matching_reasons or {},
        chat_started=row.chat_started,
        is_active=row.is_active,
        rules_version=row.rules_version,
        matched_at=row.created_at,
    )


class DjangoMatchStore:
    """MatchStore backed by the Django async ORM. User ids cross the boundary as strings."""

    @_reads
    async def get_profile(self, user_id: str) -> Optional[Profile]:
        pk = _pk(user_id)
        if pk is None:
            return None
        row = await VibeProfile.objects.filter(user_id=pk).afirst()
        return profile_from_row(row) if row else None

    @_reads
    async def get_preferences(self, user_id: str) -> Optional[MatchPreferences]:
        pk = _pk(user_id)
        if pk is None:
            return None
        row = await VibeProfile.objects.filter(user_id=pk).values("max_distance_km").afirst()
        return MatchPreferences(max_distance_km=row["max_distance_km"]) if row else None

    @_reads
    async def get_recent_posts(self, user_id: str, limit: int, active_only: bool = True) -> List[Post]:
        pk = _pk(user_id)
        if pk is None:
            return []
        queryset = VibeEcho.objects.filter(author_id=pk)
        if active_only:
            queryset = queryset.active()
        queryset = queryset.order_by("-created_at", "-id")[:limit]
        return [post_from_row(row) async for row in queryset]

    @_reads
    async def list_candidates(self, exclude_user_id: str, filters: CandidateFilters) -> List[Profile]:
        queryset = VibeProfile.objects.all()
        pk = _pk(exclude_user_id)
        if pk is not None:
            queryset = queryset.exclude(user_id=pk)
        if filters.online_only:
            queryset = queryset.filter(is_online=True)
        if filters.active_within is not None:
            queryset = queryset.filter(last_active__gte=timezone.now() - filters.active_within)
        queryset = queryset.order_by("-last_active", "user_id")
        if filters.limit:
            queryset = queryset[: filters.limit]
        return [profile_from_row(row) async for row in queryset]

    @_reads
    async def list_matched_user_ids(self, user_id: str) -> Set[str]:
        pk = _pk(user_id)
        if pk is None:
            return set()
        pairs = VibeMatch.objects.filter(Q(user_a_id=pk) | Q(user_b_id=pk)).values_list("user_a_id", "user_b_id")
        matched: Set[str] = set()
        async for user_a_id, user_b_id in pairs:
            matched.add(str(user_b_id if user_a_id == pk else user_a_id))
        return matched

    @_reads
    async def find_existing_match(self, user_a: str, user_b: str) -> Optional[Match]:
        if user_a == user_b:
            return None
        row = await VibeMatch.objects.filter(pair_key=pair_key(user_a, user_b)).afirst()
        return match_from_row(row) if row else None

    @_reads
    async def has_liked(
        self, user_id: str, *, post_id: Optional[str] = None, author_id: Optional[str] = None
    ) -> bool:
        if post_id is None and author_id is None:
            raise ValueError("has_liked needs a post_id or an author_id")
        pk = _pk(user_id)
        if pk is None:
            return False
        likes = VibeEchoLike.objects.filter(user_id=pk)
        if post_id is not None:
            likes = likes.filter(vibe_echo_id=_pk(post_id))
        if author_id is not None:
            likes = likes.filter(vibe_echo__author_id=_pk(author_id))
        return await likes.aexists()

    async def upsert_match(
        self,
        user_a: str,
        user_b: str,
        score: float,
        reasons: Dict[str, Any],
        rules_version: str,
    ) -> Tuple[Match, bool]:
        low, high = canonical_pair(user_a, user_b)
        try:
            # get_or_create retries the lookup on IntegrityError, so a concurrent insert of the same pair
            # comes back as created=False rather than a duplicate row.
            row, created = await VibeMatch.objects.aget_or_create(
                pair_key=pair_key(low, high),
                defaults={
                    "user_a_id": int(low),
                    "user_b_id": int(high),
                    "compatibility_score": score,
                    "matching_reasons": reasons,
                    "rules_version": rules_version,
                },
            )
        except DatabaseError as exc:
            raise PersistenceError(f"Could not store match {low}:{high}") from exc
        if created:
            logger.info("matching.match_created", extra={"pair_key": row.pair_key, "score": round(score, 4)})
        return match_from_row(row), created
