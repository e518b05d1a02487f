from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from .schemas import CandidateFilters, Match, MatchPreferences, Post, Profile


class MatchStore(Protocol):
    """Read/write operations the matching core needs from the data store."""

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        ...

    async def get_preferences(self, user_id: str) -> Optional[MatchPreferences]:
        ...

    async def get_recent_posts(self, user_id: str, limit: int, active_only: bool = True) -> List[Post]:
        """Most-recent-first."""
        ...

    async def list_candidates(self, exclude_user_id: str, filters: CandidateFilters) -> List[Profile]:
        ...

    async def list_matched_user_ids(self, user_id: str) -> Set[str]:
        ...

    async def find_existing_match(self, user_a: str, user_b: str) -> Optional[Match]:
        ...

    async def has_liked(
        self, user_id: str, *, post_id: Optional[str] = None, author_id: Optional[str] = None
    ) -> bool:
        """True if user_id liked the given post, or any post written by author_id."""
        ...

    async def upsert_match(
        self,
        user_a: str,
        user_b: str,
        score: float,
        reasons: Dict[str, Any],
        rules_version: str,
    ) -> Tuple[Match, bool]:
        """Insert the pair once; returns (match, created). An existing pair is returned untouched."""
        ...


class NotificationSink(Protocol):
    async def notify(self, user_id: str, type: str, title: str, message: str, data: Dict[str, Any]) -> None:
        ...
