"""Factor scorers.

Each scorer maps one aspect of a user pair onto a score that is normally in
[0, 1]. Scorers never clamp; the aggregator does. Missing input yields a
neutral default instead of an error.
"""
from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Optional, Sequence, Set

from libs.geo import distance_km

from .ports import MatchStore
from .schemas import GeoPoint, Post
from .tables import (
    FAR_PROXIMITY_SCORE,
    LIKED_AUTHOR_SCORE,
    MATCHED_CHAT_STARTED_SCORE,
    MATCHED_NO_CHAT_SCORE,
    MIN_CONTENT_TOKEN_LENGTH,
    NEUTRAL_SCORE,
    PROXIMITY_BREAKPOINTS,
    SAME_CITY_SCORE,
    UNKNOWN_PROXIMITY_SCORE,
    VIBE_SCORE_FLOOR,
    categories_for,
    mood_affinity,
)

MAX_RECENT_MOODS = 5


def mood_compatibility(moods_a: Sequence[str], moods_b: Sequence[str]) -> float:
    """Average affinity over every pairing of the two users' recent moods."""
    recent_a = list(moods_a)[:MAX_RECENT_MOODS]
    recent_b = list(moods_b)[:MAX_RECENT_MOODS]
    if not recent_a or not recent_b:
        return NEUTRAL_SCORE

    total = sum(mood_affinity(first, second) for first in recent_a for second in recent_b)
    return total / (len(recent_a) * len(recent_b))


def _categories(activities: Iterable[str]) -> Set[str]:
    found: Set[str] = set()
    for activity in activities:
        found.update(categories_for(activity))
    return found


def activity_compatibility(activities_a: Sequence[str], activities_b: Sequence[str]) -> float:
    # Doubled overlap ratio, so identical category sets score 2.0.
    categories_a = _categories(activities_a)
    categories_b = _categories(activities_b)
    if not categories_a or not categories_b:
        return NEUTRAL_SCORE
    shared = categories_a & categories_b
    return (len(shared) * 2) / len(categories_a | categories_b)


def vibe_score_similarity(score_a: int, score_b: int) -> float:
    score_a = score_a or 0
    score_b = score_b or 0
    diff = abs(score_a - score_b)
    return 1 - (diff / max(score_a, score_b, VIBE_SCORE_FLOOR))


def proximity_from_distance(distance: float) -> float:
    for upper_bound, score in PROXIMITY_BREAKPOINTS:
        if distance <= upper_bound:
            return score
    return FAR_PROXIMITY_SCORE


def proximity(
    location_a: Optional[GeoPoint],
    location_b: Optional[GeoPoint],
    city_a: Optional[str] = None,
    city_b: Optional[str] = None,
) -> float:
    if location_a is not None and location_b is not None:
        return proximity_from_distance(distance_km(location_a, location_b))
    if city_a and city_b and city_a == city_b:
        return SAME_CITY_SCORE
    return UNKNOWN_PROXIMITY_SCORE


async def interaction_history(store: MatchStore, user_a: str, user_b: str) -> float:
    """Discount pairs that already matched; reward a like from user_a on user_b's posts."""
    existing = await store.find_existing_match(user_a, user_b)
    if existing is not None:
        return MATCHED_CHAT_STARTED_SCORE if existing.chat_started else MATCHED_NO_CHAT_SCORE
    if await store.has_liked(user_a, author_id=user_b):
        return LIKED_AUTHOR_SCORE
    return NEUTRAL_SCORE


def _tokens(text: str) -> Counter:
    return Counter(word for word in text.split() if len(word) >= MIN_CONTENT_TOKEN_LENGTH)


def combined_text(posts: Sequence[Post], bio: Optional[str]) -> str:
    parts: List[str] = [post.content or "" for post in posts]
    parts.append(bio or "")
    return " ".join(parts).lower()


def content_similarity(text_a: str, text_b: str) -> float:
    if not text_a.strip() or not text_b.strip():
        return NEUTRAL_SCORE

    freq_a = _tokens(text_a.lower())
    freq_b = _tokens(text_b.lower())
    union = set(freq_a) | set(freq_b)
    if not union:
        return NEUTRAL_SCORE
    common = set(freq_a) & set(freq_b)
    return len(common) / len(union)
