import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional

from ..repo import UserDirectory
from .cooldown import RegenerationGate
from .fanout import FanOutOrchestrator

logger = logging.getLogger(__name__)

# External profile extraction; receives the user id.
ProfileExtractor = Callable[[str], None]


class ProfileNotReadyError(Exception):
    pass


def begin_profile_audit(directory: UserDirectory, user_id: str, now: Optional[datetime] = None) -> bool:
    """Validates the trigger and stamps the audit timestamp (first completion only)."""
    directory.require_user(user_id)
    if not directory.has_profile(user_id):
        raise ProfileNotReadyError(f"profile for user {user_id} is not ready")
    stamped = directory.stamp_audit_completed(user_id, now)
    logger.info("[fanout] profile audit completed user=%s first_time=%s", user_id, stamped)
    return stamped


async def complete_profile_audit(
    directory: UserDirectory,
    orchestrator: FanOutOrchestrator,
    user_id: str,
    now: Optional[datetime] = None,
) -> dict[str, int]:
    await asyncio.to_thread(begin_profile_audit, directory, user_id, now)
    return await orchestrator.analyze_all_for_user(user_id)


def request_profile_regeneration(
    gate: RegenerationGate,
    user_id: str,
    extractor: ProfileExtractor,
    now: Optional[datetime] = None,
) -> dict[str, bool]:
    gate.try_begin(user_id, now)
    extractor(user_id)
    return {"scheduled": True}
