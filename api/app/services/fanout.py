import asyncio
import logging
from datetime import date
from typing import Any, Optional

from ..config import FANOUT_CONCURRENCY
from ..repo import UserDirectory
from .analysis import CompatibilityAnalyzer
from .eligibility import SegmentPredicate, allow_all, is_eligible_candidate

logger = logging.getLogger(__name__)


def eligible_candidates(
    me: Any,
    users: list[Any],
    with_profiles: set[str],
    segment: SegmentPredicate = allow_all,
    today: Optional[date] = None,
) -> list[Any]:
    return [
        u
        for u in users
        if is_eligible_candidate(me, u, has_profile=str(u.id) in with_profiles, segment=segment, today=today)
    ]


class FanOutOrchestrator:
    """Runs one narrative analysis per eligible candidate, at most ``concurrency`` at a time.

    A failing pair is logged and left out of the count; it never stops the batch.
    Pairs that already have a stored analysis return immediately from the analyzer.
    """

    def __init__(
        self,
        analyzer: CompatibilityAnalyzer,
        directory: UserDirectory,
        concurrency: int = FANOUT_CONCURRENCY,
        segment: SegmentPredicate = allow_all,
    ) -> None:
        self.analyzer = analyzer
        self.directory = directory
        self.concurrency = max(1, int(concurrency))
        self.segment = segment

    def _candidates(self, user_id: str) -> tuple[Any, list[Any]]:
        me = self.directory.require_user(user_id)
        users = self.directory.list_users()
        with_profiles = self.directory.user_ids_with_profiles()
        return me, eligible_candidates(me, users, with_profiles, segment=self.segment)

    async def analyze_all_for_user(self, user_id: str) -> dict[str, int]:
        me, candidates = await asyncio.to_thread(self._candidates, user_id)
        logger.info("[fanout] user=%s eligible=%s concurrency=%s", user_id, len(candidates), self.concurrency)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def _one(candidate) -> bool:
            async with semaphore:
                try:
                    await self.analyzer.analyze(str(me.id), str(candidate.id))
                    return True
                except Exception:
                    logger.exception("[fanout] analysis failed user=%s candidate=%s", me.id, candidate.id)
                    return False

        results = await asyncio.gather(*(_one(c) for c in candidates))
        analyzed = sum(1 for ok in results if ok)
        logger.info("[fanout] completed user=%s analyzed=%s/%s", user_id, analyzed, len(candidates))
        return {"analyzed": analyzed, "total": len(candidates)}
