"""
Notification tables.

NotificationEvent — append-only log of every notification the service
emitted for delivery by the host (push delivery itself is external).

kind values (see moodlog/services/notifications.py):
  "achievement_unlocked" — an achievement crossed its threshold
  "pattern_insight"      — a factor/mood correlation was detected
  "reengagement"         — exactly 7 or 14 days since the last entry
  "weekly_review_ready"  — a weekly review was generated

NotificationPreference — per-user switches, one row per user.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, Boolean, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from moodlog.db.base import Base


class NotificationEvent(Base):
    __tablename__ = "notification_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    payload: Mapped[str | None] = mapped_column(
        Text, nullable=True,
        comment="JSON-encoded dict with context specific to each kind",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class NotificationPreference(Base):
    __tablename__ = "notification_preferences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    daily_reminder_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    daily_reminder_hour: Mapped[int] = mapped_column(Integer, nullable=False, default=19)
    daily_reminder_minute: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekly_review_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    pattern_insights_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    reengagement_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
