from __future__ import annotations

import logging
import math
from typing import Iterable, Optional

from .errors import PersistenceError
from .ports import MatchStore, NotificationSink
from .schemas import Match, MatchCandidate, PersistResult, Profile

logger = logging.getLogger(__name__)

MATCH_NOTIFICATION_TYPE = "match"
MATCH_NOTIFICATION_TITLE = "New Match! 🎉"


def score_percent(score: float) -> int:
    # half-up, so 0.625 reads as 63%
    return int(math.floor(score * 100 + 0.5))


def match_message(other: Optional[Profile], score: float) -> str:
    name = (other.display_name if other else None) or "someone"
    return f"You matched with {name} ({score_percent(score)}% compatibility)"


class MatchPersister:
    def __init__(self, store: MatchStore, notifier: NotificationSink, rules_version: str = "v1") -> None:
        self.store = store
        self.notifier = notifier
        self.rules_version = rules_version

    async def persist(self, requester: Profile, candidate: MatchCandidate) -> tuple[Match, bool]:
        """Store the pair once and tell both users. Re-running for a stored pair is a no-op."""
        match, created = await self.store.upsert_match(
            requester.user_id,
            candidate.user_id,
            candidate.compatibility_score,
            candidate.reasons.to_dict(),
            self.rules_version,
        )
        if created:
            await self._notify_both(match, requester, candidate.profile)
        return match, created

    async def persist_many(self, requester: Profile, candidates: Iterable[MatchCandidate]) -> PersistResult:
        result = PersistResult()
        for candidate in candidates:
            try:
                match, created = await self.persist(requester, candidate)
            except PersistenceError:
                logger.exception(
                    "matching.persist_failed",
                    extra={"user_id": requester.user_id, "candidate_id": candidate.user_id},
                )
                result.failed.append(candidate)
                continue
            (result.created if created else result.existing).append(match)
        return result

    async def _notify_both(self, match: Match, requester: Profile, candidate: Optional[Profile]) -> None:
        profiles = {requester.user_id: requester}
        if candidate is not None:
            profiles[candidate.user_id] = candidate

        for user_id in (match.user_a, match.user_b):
            other_id = match.other(user_id)
            data = {
                "match_id": match.match_id,
                "other_user_id": other_id,
                "compatibility_score": match.compatibility_score,
            }
            try:
                await self.notifier.notify(
                    user_id,
                    MATCH_NOTIFICATION_TYPE,
                    MATCH_NOTIFICATION_TITLE,
                    match_message(profiles.get(other_id), match.compatibility_score),
                    data,
                )
            except Exception as exc:  # best effort, the match is already stored
                logger.warning(
                    "matching.notify_failed",
                    extra={"user_id": user_id, "match_id": match.match_id, "error": str(exc)},
                )
