from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional, Sequence

from .config import Settings, settings as default_settings
from .errors import MatchingError, ProfileNotFound
from .finder import MatchFinder
from .persister import MatchPersister
from .ports import MatchStore, NotificationSink
from .schemas import CandidateFilters, MatchCandidate, MatchRunOutcome, PersistResult, RankedMatches
from .tables import CANONICAL_WEIGHTS, FactorWeights

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "We couldn't refresh your matches. Please try again."


class MatchingService:
    """Entry point for request handlers and background jobs.

    The store and notification sink are injected so the same service runs
    against the Django ORM in production and in-memory fakes in tests.
    """

    def __init__(
        self,
        store: MatchStore,
        notifier: NotificationSink,
        settings: Settings | None = None,
        weights: FactorWeights = CANONICAL_WEIGHTS,
    ) -> None:
        self.store = store
        self.settings = settings or default_settings
        self.finder = MatchFinder(store, self.settings, weights)
        self.persister = MatchPersister(store, notifier, rules_version=self.settings.rules_version)

    async def score_candidate(self, user_id: str, other_id: str) -> Optional[MatchCandidate]:
        user = await self.store.get_profile(user_id)
        other = await self.store.get_profile(other_id)
        if user is None or other is None:
            return None
        user_posts = await self.store.get_recent_posts(user_id, self.settings.recent_posts_limit, active_only=True)
        radius = await self.finder.search_radius(user_id)
        return await self.finder.score(user, user_posts, other, radius)

    async def calculate_compatibility(self, user_id: str, other_id: str) -> float:
        candidate = await self.score_candidate(user_id, other_id)
        return candidate.compatibility_score if candidate else 0.0

    async def find_matches(
        self, user_id: str, limit: Optional[int] = None, min_score: Optional[float] = None
    ) -> RankedMatches:
        return await self.finder.find(
            user_id,
            limit=self.settings.default_limit if limit is None else limit,
            min_score=self.settings.auto_match_threshold if min_score is None else min_score,
            filters=CandidateFilters(limit=self.settings.candidate_pool_size),
        )

    async def find_local_matches(
        self, user_id: str, limit: Optional[int] = None, min_score: Optional[float] = None
    ) -> RankedMatches:
        """Exploratory search over recently active, online users within the requester's radius, with a lower bar."""
        filters = CandidateFilters(
            online_only=True,
            active_within=timedelta(days=self.settings.active_within_days),
            limit=self.settings.candidate_pool_size,
            within_preferred_distance=True,
        )
        return await self.finder.find(
            user_id,
            limit=self.settings.default_limit if limit is None else limit,
            min_score=self.settings.explore_threshold if min_score is None else min_score,
            filters=filters,
        )

    async def persist_candidates(self, user_id: str, candidates: Sequence[MatchCandidate]) -> PersistResult:
        """Store already scored candidates, e.g. the `unpersisted` list of a previous run, without rescoring."""
        requester = await self.store.get_profile(user_id)
        if requester is None:
            raise ProfileNotFound(user_id)
        return await self.persister.persist_many(requester, candidates)

    async def run_auto_matching(self, user_id: str, limit: Optional[int] = None) -> MatchRunOutcome:
        try:
            requester = await self.store.get_profile(user_id)
            if requester is None:
                logger.warning("matching.profile_missing", extra={"user_id": user_id})
                return MatchRunOutcome(ok=False, message=RETRY_MESSAGE)
            ranked = await self.find_matches(
                user_id, limit=self.settings.auto_match_limit if limit is None else limit
            )
        except MatchingError:
            logger.exception("matching.run_failed", extra={"user_id": user_id})
            return MatchRunOutcome(ok=False, message=RETRY_MESSAGE)

        persisted = await self.persister.persist_many(requester, ranked.candidates)
        logger.info(
            "matching.run_complete",
            extra={
                "user_id": user_id,
                "created_count": len(persisted.created),
                "existing_count": len(persisted.existing),
                "failed_count": len(persisted.failed),
                "skipped_count": len(ranked.skipped),
            },
        )
        return MatchRunOutcome(
            ok=not persisted.failed,
            matches=persisted.created,
            skipped=ranked.skipped,
            unpersisted=persisted.failed,
            message="" if not persisted.failed else RETRY_MESSAGE,
        )
