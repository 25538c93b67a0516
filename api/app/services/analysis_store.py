import logging
from typing import Any, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from ..database import SessionLocal
from ..models import CompatibilityAnalysis
from .matching import canonical_pair, pair_key

logger = logging.getLogger(__name__)


class AnalysisStore:
    """Zero or one CompatibilityAnalysis per unordered pair.

    Uniqueness is enforced by the pair_key constraint; a losing concurrent
    insert is rolled back and the winner's row is returned instead.
    """

    def __init__(self, session_factory=SessionLocal) -> None:
        self.session_factory = session_factory

    def get_by_pair(self, user_a: str, user_b: str) -> Optional[CompatibilityAnalysis]:
        with self.session_factory() as db:
            return db.execute(
                select(CompatibilityAnalysis).where(CompatibilityAnalysis.pair_key == pair_key(user_a, user_b))
            ).scalar_one_or_none()

    def create(self, user_a: str, user_b: str, fields: dict[str, Any]) -> CompatibilityAnalysis:
        user1_id, user2_id = canonical_pair(user_a, user_b)
        row = CompatibilityAnalysis(
            pair_key=pair_key(user_a, user_b),
            user1_id=user1_id,
            user2_id=user2_id,
            **fields,
        )
        with self.session_factory() as db:
            db.add(row)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                existing = self.get_by_pair(user_a, user_b)
                if existing is None:
                    raise
                logger.info("[store] lost insert race pair=%s; keeping existing analysis id=%s", row.pair_key, existing.id)
                return existing
            db.refresh(row)
        logger.info("[store] stored analysis pair=%s overall=%s", row.pair_key, row.overall_score)
        return row

    def list_for_user(self, user_id: str) -> list[CompatibilityAnalysis]:
        with self.session_factory() as db:
            rows = db.execute(
                select(CompatibilityAnalysis).where(
                    or_(CompatibilityAnalysis.user1_id == user_id, CompatibilityAnalysis.user2_id == user_id)
                )
            ).scalars()
            return list(rows)

    def count_for_user(self, user_id: str) -> int:
        with self.session_factory() as db:
            return int(
                db.execute(
                    select(func.count())
                    .select_from(CompatibilityAnalysis)
                    .where(or_(CompatibilityAnalysis.user1_id == user_id, CompatibilityAnalysis.user2_id == user_id))
                ).scalar_one()
            )
