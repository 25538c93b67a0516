from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update

from .database import SessionLocal
from .models import User, UserProfile
from .schemas import UserProfileData


class UserNotFoundError(Exception):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"user {user_id} not found")
        self.user_id = user_id


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class UserDirectory:
    def __init__(self, session_factory=SessionLocal) -> None:
        self.session_factory = session_factory

    def get_user(self, user_id: str) -> Optional[User]:
        with self.session_factory() as db:
            return db.get(User, str(user_id))

    def require_user(self, user_id: str) -> User:
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def list_users(self) -> list[User]:
        with self.session_factory() as db:
            return list(db.execute(select(User).order_by(User.created_at, User.id)).scalars())

    def get_profile(self, user_id: str) -> Optional[UserProfileData]:
        with self.session_factory() as db:
            doc = db.execute(select(UserProfile.profile).where(UserProfile.user_id == str(user_id))).scalar_one_or_none()
        if doc is None:
            return None
        return UserProfileData.model_validate(doc)

    def has_profile(self, user_id: str) -> bool:
        with self.session_factory() as db:
            return db.execute(select(UserProfile.id).where(UserProfile.user_id == str(user_id))).first() is not None

    def user_ids_with_profiles(self) -> set[str]:
        with self.session_factory() as db:
            return {str(v) for v in db.execute(select(UserProfile.user_id)).scalars()}

    def stamp_audit_completed(self, user_id: str, now: Optional[datetime] = None) -> bool:
        """Sets profile_audit_completed_at once; returns False when it was already set."""
        with self.session_factory() as db:
            result = db.execute(
                update(User)
                .where(User.id == str(user_id), User.profile_audit_completed_at.is_(None))
                .values(profile_audit_completed_at=now or _now_utc())
            )
            db.commit()
            return result.rowcount > 0
