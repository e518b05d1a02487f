from __future__ import annotations

import asyncio

import pytest

from services.matching.schemas import FactorScores, GeoPoint, MatchReasons, Profile
from services.matching.scoring import aggregate, build_reasons, score_candidate
from services.matching.tables import CANONICAL_WEIGHTS, FactorWeights
from services.matching.tests.fakes import FakeStore, post


def _scores(value: float) -> FactorScores:
    return FactorScores(
        mood=value,
        activity=value,
        vibe_score=value,
        proximity=value,
        interaction_history=value,
        content_similarity=value,
    )


def test_canonical_weights_sum_to_one() -> None:
    weights = CANONICAL_WEIGHTS
    total = (
        weights.mood
        + weights.activity
        + weights.vibe_score
        + weights.proximity
        + weights.interaction_history
        + weights.content_similarity
    )
    assert total == pytest.approx(1.0)
    assert weights.version == "v1"


def test_weights_must_sum_to_one() -> None:
    with pytest.raises(ValueError):
        FactorWeights(
            mood=0.5,
            activity=0.5,
            vibe_score=0.5,
            proximity=0.0,
            interaction_history=0.0,
            content_similarity=0.0,
        )


def test_aggregate_is_weighted_sum() -> None:
    scores = FactorScores(
        mood=0.9,
        activity=0.5,
        vibe_score=0.95,
        proximity=0.9,
        interaction_history=0.5,
        content_similarity=0.4,
    )
    expected = 0.9 * 0.25 + 0.5 * 0.20 + 0.95 * 0.15 + 0.9 * 0.20 + 0.5 * 0.10 + 0.4 * 0.10
    assert aggregate(scores) == pytest.approx(expected)


def test_aggregate_neutral_inputs() -> None:
    assert aggregate(_scores(0.5)) == pytest.approx(0.5)


def test_aggregate_clamps_to_unit_interval() -> None:
    assert aggregate(_scores(2.0)) == 1.0
    assert aggregate(_scores(-3.0)) == 0.0

    lopsided = FactorScores(
        mood=1.0,
        activity=2.0,
        vibe_score=1.0,
        proximity=1.0,
        interaction_history=0.8,
        content_similarity=1.0,
    )
    assert aggregate(lopsided) == 1.0


def test_aggregate_with_custom_weights() -> None:
    mood_only = FactorWeights(
        mood=1.0,
        activity=0.0,
        vibe_score=0.0,
        proximity=0.0,
        interaction_history=0.0,
        content_similarity=0.0,
        version="mood-only",
    )
    scores = FactorScores(
        mood=0.3,
        activity=1.0,
        vibe_score=1.0,
        proximity=1.0,
        interaction_history=1.0,
        content_similarity=1.0,
    )
    assert aggregate(scores, mood_only) == pytest.approx(0.3)


def test_build_reasons_flags_and_common_tags() -> None:
    user = Profile(user_id="a", location=GeoPoint(41.7151, 44.8271))
    near = Profile(user_id="b", location=GeoPoint(41.7200, 44.8000))
    user_posts = [
        post("a", "happy", activity="Music", post_id="a1"),
        post("a", "calm", activity="Coffee", post_id="a2"),
        post("a", "happy", activity="Music", post_id="a3"),
    ]
    candidate_posts = [
        post("b", "calm", activity="Music", post_id="b1"),
        post("b", "happy", activity="Art", post_id="b2"),
    ]
    scores = FactorScores(
        mood=0.51,
        activity=0.5,
        vibe_score=1.0,
        proximity=1.0,
        interaction_history=0.5,
        content_similarity=0.5,
    )

    reasons = build_reasons(user, near, user_posts, candidate_posts, scores)

    assert reasons == MatchReasons(
        distance_match=True,
        mood_match=True,
        activity_match=False,
        common_moods=["happy", "calm"],
        common_activities=["Music"],
    )
    assert MatchReasons.from_dict(reasons.to_dict()) == reasons


def test_distance_match_uses_half_the_search_radius() -> None:
    user = Profile(user_id="a", location=GeoPoint(0.0, 0.0))
    # roughly 33 km east along the equator
    candidate = Profile(user_id="b", location=GeoPoint(0.0, 0.3))
    scores = _scores(0.5)

    assert build_reasons(user, candidate, [], [], scores).distance_match is False
    assert build_reasons(user, candidate, [], [], scores, max_distance_km=80.0).distance_match is True

    unknown = Profile(user_id="c")
    assert build_reasons(user, unknown, [], [], scores).distance_match is False


def test_zero_radius_is_not_replaced_by_default() -> None:
    store = FakeStore()
    user = store.add_profile(Profile(user_id="a", location=GeoPoint(0.0, 0.0)))
    same_spot = store.add_profile(Profile(user_id="b", location=GeoPoint(0.0, 0.0)))
    close_by = store.add_profile(Profile(user_id="c", location=GeoPoint(0.0, 0.05)))

    at_zero = asyncio.run(score_candidate(store, user, close_by, [], [], max_distance_km=0.0))
    default = asyncio.run(score_candidate(store, user, close_by, [], []))
    exact = asyncio.run(score_candidate(store, user, same_spot, [], [], max_distance_km=0.0))

    assert at_zero.reasons.distance_match is False
    assert default.reasons.distance_match is True
    assert exact.reasons.distance_match is True
