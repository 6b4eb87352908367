from datetime import datetime
from sqlalchemy import Integer, String, Text, Float, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from moodlog.db.base import Base


class PendingEntry(Base):
    """Candidate entry waiting for a replace-or-cancel decision. One per user."""

    __tablename__ = "pending_entries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    logged_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    mood_level: Mapped[float] = mapped_column(Float, nullable=False)
    factors: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    note: Mapped[str] = mapped_column(Text, nullable=False, default="")
    photo_asset_ref: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
