from __future__ import annotations

from dataclasses import astuple, dataclass
from typing import Dict, FrozenSet, Tuple

from .schemas import Mood

MOODS: Tuple[str, ...] = tuple(mood.value for mood in Mood)

# Neutral value for mood pairs missing from the table.
DEFAULT_MOOD_AFFINITY = 0.5

# Upper triangle only; the lookup is symmetric and identical moods score 1.0.
_MOOD_PAIRS: Dict[Tuple[str, str], float] = {
    ("happy", "excited"): 0.9,
    ("happy", "calm"): 0.6,
    ("happy", "adventurous"): 0.8,
    ("happy", "creative"): 0.7,
    ("happy", "social"): 0.9,
    ("happy", "thoughtful"): 0.5,
    ("happy", "energetic"): 0.8,
    ("excited", "calm"): 0.4,
    ("excited", "adventurous"): 0.9,
    ("excited", "creative"): 0.8,
    ("excited", "social"): 0.9,
    ("excited", "thoughtful"): 0.4,
    ("excited", "energetic"): 1.0,
    ("calm", "adventurous"): 0.5,
    ("calm", "creative"): 0.7,
    ("calm", "social"): 0.5,
    ("calm", "thoughtful"): 0.9,
    ("calm", "energetic"): 0.3,
    ("adventurous", "creative"): 0.8,
    ("adventurous", "social"): 0.8,
    ("adventurous", "thoughtful"): 0.6,
    ("adventurous", "energetic"): 0.9,
    ("creative", "social"): 0.7,
    ("creative", "thoughtful"): 0.8,
    ("creative", "energetic"): 0.7,
    ("social", "thoughtful"): 0.6,
    ("social", "energetic"): 0.8,
    ("thoughtful", "energetic"): 0.4,
}


def _build_mood_table() -> Dict[str, Dict[str, float]]:
    table: Dict[str, Dict[str, float]] = {mood: {mood: 1.0} for mood in MOODS}
    for (first, second), value in _MOOD_PAIRS.items():
        table[first][second] = value
        table[second][first] = value
    return table


MOOD_COMPATIBILITY: Dict[str, Dict[str, float]] = _build_mood_table()


def mood_affinity(first: str, second: str) -> float:
    return MOOD_COMPATIBILITY.get(first, {}).get(second, DEFAULT_MOOD_AFFINITY)


ACTIVITY_CATEGORIES: Dict[str, FrozenSet[str]] = {
    "social": frozenset({"Coffee", "Food", "Dancing", "Movies", "Music"}),
    "creative": frozenset({"Art", "Photography", "Music", "Reading"}),
    "active": frozenset({"Sports", "Dancing", "Nature", "Travel"}),
    "intellectual": frozenset({"Reading", "Studying", "Art"}),
    "entertainment": frozenset({"Gaming", "Movies", "Music"}),
}


def categories_for(activity: str) -> FrozenSet[str]:
    """Category buckets an activity tag belongs to. Tags match case-sensitively."""
    return frozenset(category for category, tags in ACTIVITY_CATEGORIES.items() if activity in tags)


# Step function over distance: (upper bound in km, score). Anything farther scores FAR_PROXIMITY_SCORE.
PROXIMITY_BREAKPOINTS: Tuple[Tuple[float, float], ...] = (
    (1.0, 1.0),
    (5.0, 0.9),
    (10.0, 0.8),
    (20.0, 0.6),
    (50.0, 0.3),
)
FAR_PROXIMITY_SCORE = 0.1
SAME_CITY_SCORE = 0.7
UNKNOWN_PROXIMITY_SCORE = 0.3

VIBE_SCORE_FLOOR = 100

NEUTRAL_SCORE = 0.5
MATCHED_CHAT_STARTED_SCORE = 0.2
MATCHED_NO_CHAT_SCORE = 0.4
LIKED_AUTHOR_SCORE = 0.8

MIN_CONTENT_TOKEN_LENGTH = 4


@dataclass(frozen=True)
class FactorWeights:
    mood: float
    activity: float
    vibe_score: float
    proximity: float
    interaction_history: float
    content_similarity: float
    version: str = "v1"

    def __post_init__(self) -> None:
        total = sum(astuple(self)[:6])
        if abs(total - 1.0) > 1e-9:
            raise ValueError(f"Factor weights must sum to 1.0, got {total:.4f}")


CANONICAL_WEIGHTS = FactorWeights(
    mood=0.25,
    activity=0.20,
    vibe_score=0.15,
    proximity=0.20,
    interaction_history=0.10,
    content_similarity=0.10,
    version="v1",
)
