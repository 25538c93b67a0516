import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import or_, update

from ..config import REGENERATE_PROFILE_COOLDOWN_SECONDS
from ..database import SessionLocal
from ..models import User
from ..repo import UserNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class CooldownDecision:
    allowed: bool
    retry_after_seconds: int

    def __bool__(self) -> bool:
        return self.allowed


class RegenerationCooldownError(Exception):
    def __init__(self, retry_after_seconds: int) -> None:
        self.retry_after_seconds = retry_after_seconds
        minutes = max(1, math.ceil(retry_after_seconds / 60))
        super().__init__(f"Profile regeneration is limited to once per cooldown window. Try again in {minutes}m.")


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def can_regenerate(user: Any, now: datetime, cooldown_seconds: int = REGENERATE_PROFILE_COOLDOWN_SECONDS) -> CooldownDecision:
    last = _aware(user.last_profile_regenerated_at)
    if last is None:
        return CooldownDecision(allowed=True, retry_after_seconds=0)
    remaining = (last + timedelta(seconds=cooldown_seconds) - _aware(now)).total_seconds()
    if remaining > 0:
        return CooldownDecision(allowed=False, retry_after_seconds=max(1, math.ceil(remaining)))
    return CooldownDecision(allowed=True, retry_after_seconds=0)


class RegenerationGate:
    """Check-and-set of last_profile_regenerated_at in a single conditional UPDATE."""

    def __init__(self, session_factory=SessionLocal, cooldown_seconds: int = REGENERATE_PROFILE_COOLDOWN_SECONDS) -> None:
        self.session_factory = session_factory
        self.cooldown_seconds = cooldown_seconds

    def try_begin(self, user_id: str, now: Optional[datetime] = None) -> CooldownDecision:
        now = _aware(now) or datetime.now(timezone.utc)
        cutoff = now - timedelta(seconds=self.cooldown_seconds)
        with self.session_factory() as db:
            result = db.execute(
                update(User)
                .where(
                    User.id == str(user_id),
                    or_(User.last_profile_regenerated_at.is_(None), User.last_profile_regenerated_at <= cutoff),
                )
                .values(last_profile_regenerated_at=now)
            )
            if result.rowcount:
                db.commit()
                logger.info("[cooldown] regeneration started user=%s", user_id)
                return CooldownDecision(allowed=True, retry_after_seconds=0)
            db.rollback()
            user = db.get(User, str(user_id))
        if user is None:
            raise UserNotFoundError(user_id)
        decision = can_regenerate(user, now, self.cooldown_seconds)
        if decision.allowed:
            # the row moved between the UPDATE and the read; report a minimal wait
            decision = CooldownDecision(allowed=False, retry_after_seconds=1)
        logger.info("[cooldown] regeneration denied user=%s retry_after=%ss", user_id, decision.retry_after_seconds)
        raise RegenerationCooldownError(decision.retry_after_seconds)
