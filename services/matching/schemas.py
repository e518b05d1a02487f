from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Mood(str, Enum):
    HAPPY = "happy"
    EXCITED = "excited"
    CALM = "calm"
    ADVENTUROUS = "adventurous"
    CREATIVE = "creative"
    SOCIAL = "social"
    THOUGHTFUL = "thoughtful"
    ENERGETIC = "energetic"


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass
class Profile:
    user_id: str
    vibe_score: int = 0
    location: Optional[GeoPoint] = None
    city: Optional[str] = None
    bio: Optional[str] = None
    last_active: Optional[datetime] = None
    display_name: Optional[str] = None
    is_online: bool = False

    def __post_init__(self) -> None:
        if self.vibe_score is None:
            self.vibe_score = 0


@dataclass
class Post:
    post_id: str
    owner_id: str
    mood: str
    content: str = ""
    activity: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class FactorScores:
    mood: float
    activity: float
    vibe_score: float
    proximity: float
    interaction_history: float
    content_similarity: float

    def as_dict(self) -> Dict[str, float]:
        return {
            "mood": self.mood,
            "activity": self.activity,
            "vibe_score": self.vibe_score,
            "proximity": self.proximity,
            "interaction_history": self.interaction_history,
            "content_similarity": self.content_similarity,
        }


@dataclass
class MatchReasons:
    """Snapshot of why a pair scored the way it did. Stored with the match, never re-derived."""

    distance_match: bool = False
    mood_match: bool = False
    activity_match: bool = False
    common_moods: List[str] = field(default_factory=list)
    common_activities: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "distance_match": self.distance_match,
            "mood_match": self.mood_match,
            "activity_match": self.activity_match,
            "common_moods": list(self.common_moods),
            "common_activities": list(self.common_activities),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MatchReasons":
        data = data or {}
        return cls(
            distance_match=bool(data.get("distance_match", False)),
            mood_match=bool(data.get("mood_match", False)),
            activity_match=bool(data.get("activity_match", False)),
            common_moods=list(data.get("common_moods") or []),
            common_activities=list(data.get("common_activities") or []),
        )


@dataclass
class MatchCandidate:
    user_id: str
    factors: FactorScores
    compatibility_score: float
    reasons: MatchReasons
    profile: Optional[Profile] = None


@dataclass
class Match:
    user_a: str
    user_b: str
    compatibility_score: float
    matching_reasons: Dict[str, Any] = field(default_factory=dict)
    chat_started: bool = False
    is_active: bool = True
    rules_version: str = "v1"
    match_id: Optional[str] = None
    matched_at: Optional[datetime] = None

    def other(self, user_id: str) -> str:
        return self.user_b if user_id == self.user_a else self.user_a


@dataclass
class MatchPreferences:
    max_distance_km: Optional[float] = None


@dataclass(frozen=True)
class CandidateFilters:
    online_only: bool = False
    active_within: Optional[timedelta] = None
    limit: Optional[int] = None
    max_distance_km: Optional[float] = None
    # drop candidates beyond the requester's preferred radius when max_distance_km is unset
    within_preferred_distance: bool = False


@dataclass
class RankedMatches:
    candidates: List[MatchCandidate] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


@dataclass
class PersistResult:
    created: List[Match] = field(default_factory=list)
    existing: List[Match] = field(default_factory=list)
    # scored but not stored; pass back to MatchPersister.persist to retry without rescoring
    failed: List[MatchCandidate] = field(default_factory=list)


@dataclass
class MatchRunOutcome:
    ok: bool
    matches: List[Match] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    unpersisted: List[MatchCandidate] = field(default_factory=list)
    message: str = ""


def _id_order(user_id: str) -> Tuple[int, int, str]:
    # numeric ids compare as numbers so "9" sorts before "10"
    if user_id.isdecimal():
        return (0, int(user_id), user_id)
    return (1, 0, user_id)


def canonical_pair(user_a: str, user_b: str) -> Tuple[str, str]:
    if user_a == user_b:
        raise ValueError("A match needs two distinct users.")
    return (user_a, user_b) if _id_order(user_a) < _id_order(user_b) else (user_b, user_a)


def pair_key(user_a: str, user_b: str) -> str:
    low, high = canonical_pair(user_a, user_b)
    return f"{low}:{high}"
