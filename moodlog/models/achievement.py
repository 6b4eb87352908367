"""
UnlockedAchievement — the durable ("remote") copy of a user's unlock set.
UsedFactor — every factor name the user has ever tagged, kept even after
the entry that used it is replaced or deleted.

Both are append-only: rows are never deleted, so the sets only grow. The
unique constraints keep one row per user and id.
"""
from datetime import datetime
from sqlalchemy import Integer, String, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from moodlog.db.base import Base


class UnlockedAchievement(Base):
    __tablename__ = "unlocked_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_unlocked_user_achievement"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    achievement_id: Mapped[str] = mapped_column(String(64), nullable=False)
    unlocked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class UsedFactor(Base):
    __tablename__ = "used_factors"
    __table_args__ = (
        UniqueConstraint("user_id", "factor", name="uq_used_factor_user_factor"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    factor: Mapped[str] = mapped_column(String(64), nullable=False)
    first_used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
