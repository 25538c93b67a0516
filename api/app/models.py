import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import JSONB

from .database import Base

JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "user_account"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=True)
    gender = Column(String, nullable=True)
    sexuality = Column(String, nullable=True)
    birthdate = Column(Date, nullable=True)
    age_range_min = Column(Integer, nullable=True)
    age_range_max = Column(Integer, nullable=True)
    age_range_dealbreaker = Column(Boolean, nullable=False, default=False)
    profile_audit_completed_at = Column(DateTime(timezone=True), nullable=True)
    last_profile_regenerated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserProfile(Base):
    __tablename__ = "user_profile"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    profile = Column(JSONDocument, nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (UniqueConstraint("user_id", name="uq_user_profile_user"),)


class CompatibilityAnalysis(Base):
    __tablename__ = "compatibility_analysis"

    id = Column(String(36), primary_key=True, default=_new_id)
    pair_key = Column(String, nullable=False)
    user1_id = Column(String(36), ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    user2_id = Column(String(36), ForeignKey("user_account.id", ondelete="CASCADE"), nullable=False)
    summary = Column(Text, nullable=False)
    green_flags = Column(JSONDocument, nullable=False, default=list)
    yellow_flags = Column(JSONDocument, nullable=False, default=list)
    red_flags = Column(JSONDocument, nullable=False, default=list)
    category_scores = Column(JSONDocument, nullable=False)
    raw_score = Column(Integer, nullable=False)
    overall_score = Column(Integer, nullable=False)
    model = Column(String, nullable=False)
    generated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        UniqueConstraint("pair_key", name="uq_compatibility_analysis_pair"),
        Index("idx_compatibility_analysis_user1", "user1_id"),
        Index("idx_compatibility_analysis_user2", "user2_id"),
    )

    def other_user_id(self, user_id: str) -> str:
        return self.user2_id if self.user1_id == user_id else self.user1_id
