from .errors import MatchingError, PersistenceError, ProfileNotFound, StoreError
from .schemas import (
    CandidateFilters,
    GeoPoint,
    Match,
    MatchCandidate,
    MatchPreferences,
    MatchReasons,
    MatchRunOutcome,
    Mood,
    Post,
    Profile,
)
from .service import MatchingService

__all__ = [
    "CandidateFilters",
    "GeoPoint",
    "Match",
    "MatchCandidate",
    "MatchPreferences",
    "MatchReasons",
    "MatchRunOutcome",
    "MatchingError",
    "MatchingService",
    "Mood",
    "PersistenceError",
    "Post",
    "Profile",
    "ProfileNotFound",
    "StoreError",
]
