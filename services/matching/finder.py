from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from libs.geo import distance_km

from .config import Settings, settings as default_settings
from .errors import MatchingError, ProfileNotFound, StoreError
from .ports import MatchStore
from .schemas import CandidateFilters, MatchCandidate, Post, Profile, RankedMatches
from .scoring import score_candidate
from .tables import CANONICAL_WEIGHTS, FactorWeights

logger = logging.getLogger(__name__)


def rank_candidates(candidates: Iterable[MatchCandidate], min_score: float, limit: int) -> List[MatchCandidate]:
    """Keep candidates at or above min_score, best first. Equal scores fall back to user id ascending."""
    accepted = [candidate for candidate in candidates if candidate.compatibility_score >= min_score]
    accepted.sort(key=lambda candidate: (-candidate.compatibility_score, candidate.user_id))
    return accepted[: max(limit, 0)]


def within_distance(user: Profile, candidate: Profile, max_distance_km: Optional[float]) -> bool:
    if max_distance_km is None or user.location is None or candidate.location is None:
        return True
    return distance_km(user.location, candidate.location) <= max_distance_km


class MatchFinder:
    def __init__(
        self,
        store: MatchStore,
        settings: Settings | None = None,
        weights: FactorWeights = CANONICAL_WEIGHTS,
    ) -> None:
        self.store = store
        self.settings = settings or default_settings
        self.weights = weights

    async def find(
        self,
        user_id: str,
        *,
        limit: Optional[int] = None,
        min_score: Optional[float] = None,
        filters: Optional[CandidateFilters] = None,
    ) -> RankedMatches:
        limit = self.settings.default_limit if limit is None else limit
        min_score = self.settings.auto_match_threshold if min_score is None else min_score
        filters = filters or CandidateFilters(limit=self.settings.candidate_pool_size)

        user = await self.store.get_profile(user_id)
        if user is None:
            raise ProfileNotFound(user_id)
        user_posts = await self.store.get_recent_posts(user_id, self.settings.recent_posts_limit, active_only=True)
        radius = await self.search_radius(user_id)
        distance_limit = filters.max_distance_km
        if distance_limit is None and filters.within_preferred_distance:
            distance_limit = radius

        try:
            pool = await asyncio.wait_for(
                self._candidate_pool(user, filters, distance_limit), timeout=self.settings.pool_timeout
            )
        except asyncio.TimeoutError as exc:
            raise StoreError(f"Candidate pool for {user_id} timed out") from exc

        semaphore = asyncio.Semaphore(max(1, self.settings.max_concurrency))

        async def _bounded(candidate: Profile) -> Optional[MatchCandidate]:
            async with semaphore:
                return await self._score_isolated(user, user_posts, candidate, radius)

        results = await asyncio.gather(*(_bounded(candidate) for candidate in pool))

        scored = [result for result in results if result is not None]
        skipped = [candidate.user_id for candidate, result in zip(pool, results) if result is None]
        ranked = rank_candidates(scored, min_score, limit)
        logger.info(
            "matching.find_complete",
            extra={
                "user_id": user_id,
                "pool_size": len(pool),
                "scored": len(scored),
                "skipped": len(skipped),
                "accepted": len(ranked),
            },
        )
        return RankedMatches(candidates=ranked, skipped=skipped)

    async def search_radius(self, user_id: str) -> float:
        """The user's preferred radius in km, or the configured default when they have not set one."""
        preferences = await self.store.get_preferences(user_id)
        if preferences is None or preferences.max_distance_km is None:
            return self.settings.max_distance_km
        return preferences.max_distance_km

    async def _candidate_pool(
        self, user: Profile, filters: CandidateFilters, max_distance_km: Optional[float]
    ) -> List[Profile]:
        candidates = await self.store.list_candidates(user.user_id, filters)
        already_matched = await self.store.list_matched_user_ids(user.user_id)
        return [
            candidate
            for candidate in candidates
            if candidate.user_id != user.user_id
            and candidate.user_id not in already_matched
            and within_distance(user, candidate, max_distance_km)
        ]

    async def _score_isolated(
        self, user: Profile, user_posts: Sequence[Post], candidate: Profile, radius: float
    ) -> Optional[MatchCandidate]:
        try:
            return await asyncio.wait_for(
                self.score(user, user_posts, candidate, radius), timeout=self.settings.candidate_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "matching.candidate_timeout",
                extra={"user_id": user.user_id, "candidate_id": candidate.user_id},
            )
        except MatchingError as exc:
            logger.warning(
                "matching.candidate_failed",
                extra={"user_id": user.user_id, "candidate_id": candidate.user_id, "error": str(exc)},
            )
        except Exception:
            # any other failure is also confined to this candidate
            logger.exception(
                "matching.candidate_crashed",
                extra={"user_id": user.user_id, "candidate_id": candidate.user_id},
            )
        return None

    async def score(
        self,
        user: Profile,
        user_posts: Sequence[Post],
        candidate: Profile,
        max_distance_km: Optional[float] = None,
    ) -> MatchCandidate:
        candidate_posts = await self.store.get_recent_posts(
            candidate.user_id, self.settings.recent_posts_limit, active_only=True
        )
        return await score_candidate(
            self.store,
            user,
            candidate,
            user_posts,
            candidate_posts,
            weights=self.weights,
            max_distance_km=self.settings.max_distance_km if max_distance_km is None else max_distance_km,
        )
