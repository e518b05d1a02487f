from __future__ import annotations

from typing import List, Optional, Sequence

from libs.geo import distance_km

from . import factors
from .ports import MatchStore
from .schemas import FactorScores, MatchCandidate, MatchReasons, Post, Profile
from .tables import CANONICAL_WEIGHTS, FactorWeights

DEFAULT_MAX_DISTANCE_KM = 50.0


def aggregate(scores: FactorScores, weights: FactorWeights = CANONICAL_WEIGHTS) -> float:
    total = (
        scores.mood * weights.mood
        + scores.activity * weights.activity
        + scores.vibe_score * weights.vibe_score
        + scores.proximity * weights.proximity
        + scores.interaction_history * weights.interaction_history
        + scores.content_similarity * weights.content_similarity
    )
    return min(max(total, 0.0), 1.0)


def _moods(posts: Sequence[Post]) -> List[str]:
    return [post.mood for post in posts if post.mood]


def _activities(posts: Sequence[Post]) -> List[str]:
    return [post.activity for post in posts if post.activity]


def _common(first: Sequence[str], second: Sequence[str]) -> List[str]:
    other = set(second)
    seen: List[str] = []
    for item in first:
        if item in other and item not in seen:
            seen.append(item)
    return seen


def build_reasons(
    user: Profile,
    candidate: Profile,
    user_posts: Sequence[Post],
    candidate_posts: Sequence[Post],
    scores: FactorScores,
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
) -> MatchReasons:
    distance_match = False
    if user.location is not None and candidate.location is not None:
        distance_match = distance_km(user.location, candidate.location) <= max_distance_km / 2

    return MatchReasons(
        distance_match=distance_match,
        mood_match=scores.mood > 0.5,
        activity_match=scores.activity > 0.5,
        common_moods=_common(_moods(user_posts), _moods(candidate_posts)),
        common_activities=_common(_activities(user_posts), _activities(candidate_posts)),
    )


async def score_factors(
    store: MatchStore,
    user: Profile,
    candidate: Profile,
    user_posts: Sequence[Post],
    candidate_posts: Sequence[Post],
) -> FactorScores:
    # interaction history is the only factor that touches the store
    history = await factors.interaction_history(store, user.user_id, candidate.user_id)
    return FactorScores(
        mood=factors.mood_compatibility(_moods(user_posts), _moods(candidate_posts)),
        activity=factors.activity_compatibility(_activities(user_posts), _activities(candidate_posts)),
        vibe_score=factors.vibe_score_similarity(user.vibe_score, candidate.vibe_score),
        proximity=factors.proximity(user.location, candidate.location, user.city, candidate.city),
        interaction_history=history,
        content_similarity=factors.content_similarity(
            factors.combined_text(user_posts, user.bio),
            factors.combined_text(candidate_posts, candidate.bio),
        ),
    )


async def score_candidate(
    store: MatchStore,
    user: Profile,
    candidate: Profile,
    user_posts: Sequence[Post],
    candidate_posts: Sequence[Post],
    *,
    weights: FactorWeights = CANONICAL_WEIGHTS,
    max_distance_km: Optional[float] = None,
) -> MatchCandidate:
    scores = await score_factors(store, user, candidate, user_posts, candidate_posts)
    reasons = build_reasons(
        user,
        candidate,
        user_posts,
        candidate_posts,
        scores,
        max_distance_km=DEFAULT_MAX_DISTANCE_KM if max_distance_km is None else max_distance_km,
    )
    return MatchCandidate(
        user_id=candidate.user_id,
        factors=scores,
        compatibility_score=aggregate(scores, weights),
        reasons=reasons,
        profile=candidate,
    )
