"""
MoodEntry — one row per logged mood, scoped by user_id.

`logged_at` is naive local time (see moodlog.core.calendar). At most one
row per user per calendar day is kept by the entry service; the table
itself does not enforce it.

factors: JSON-encoded {factor_name: "positive" | "negative"} stored as Text.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, Float, DateTime, func, Index
from sqlalchemy.orm import Mapped, mapped_column

from moodlog.db.base import Base


class MoodEntry(Base):
    __tablename__ = "mood_entries"
    __table_args__ = (
        Index("ix_mood_entries_user_logged_at", "user_id", "logged_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    logged_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    mood_level: Mapped[float] = mapped_column(Float, nullable=False)
    factors: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    photo_asset_ref: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
