from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class NotificationPreferencesOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    daily_reminder_enabled: bool
    daily_reminder_hour: int
    daily_reminder_minute: int
    weekly_review_enabled: bool
    pattern_insights_enabled: bool
    reengagement_enabled: bool


class NotificationPreferencesUpdate(BaseModel):
    daily_reminder_enabled: Optional[bool] = None
    daily_reminder_hour: Optional[int] = Field(default=None, ge=0, le=23)
    daily_reminder_minute: Optional[int] = Field(default=None, ge=0, le=59)
    weekly_review_enabled: Optional[bool] = None
    pattern_insights_enabled: Optional[bool] = None
    reengagement_enabled: Optional[bool] = None


class NotificationEventOut(BaseModel):
    id: int
    kind: str = Field(
        description='"achievement_unlocked" | "pattern_insight" | "reengagement" | "weekly_review_ready"'
    )
    title: str
    body: str
    payload: Optional[dict[str, Any]] = None
    created_at: str


class NotificationEventListResponse(BaseModel):
    total: int
    items: list[NotificationEventOut]


class ReengagementResponse(BaseModel):
    days_inactive: Optional[int] = Field(
        description="Days since the last entry when a reminder fired (7 or 14), else null."
    )
    notified: bool
