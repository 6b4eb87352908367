"""
Mood entry request / response schemas.

POST  /users/{user_id}/entries                  → EntryCreate → EntryResponse | 409
GET   /users/{user_id}/entries/pending          → PendingEntryResponse
POST  /users/{user_id}/entries/pending/confirm  → SaveResponse
PATCH /users/{user_id}/entries/{entry_id}       → EntryUpdate → EditResponse
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import BaseModel, Field, field_validator

from moodlog.schemas.achievement import AchievementOut
from moodlog.schemas.review import ReviewResponse
from moodlog.services.records import Impact


class EntryFields(BaseModel):
    mood_level: Annotated[float, Field(
        ge=0,
        le=10,
        description="Mood score on a continuous 0..10 scale.",
        examples=[6.5],
    )]
    factors: dict[str, Impact] = Field(
        default_factory=dict,
        description='Factor name → "positive" | "negative". Omitted factors are not recorded.',
        examples=[{"Sleep": "positive", "Work": "negative"}],
    )
    note: str = Field(default="", max_length=10_000)
    photo_asset_ref: Optional[str] = Field(
        default=None,
        max_length=1024,
        description="Opaque reference to a photo held by external storage.",
    )

    @field_validator("photo_asset_ref", mode="before")
    @classmethod
    def blank_ref_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class EntryCreate(EntryFields):
    date: Optional[datetime] = Field(
        default=None,
        description="When the mood was felt. Defaults to now in the service's local zone.",
        examples=["2026-02-20T21:15:00"],
    )


class EntryUpdate(EntryFields):
    pass


class EntryResponse(BaseModel):
    id: Optional[int]
    date: str
    day: str
    mood_level: float
    factors: dict[str, str]
    note: str
    photo_asset_ref: Optional[str]


class SaveResponse(BaseModel):
    status: str = Field(description='"committed" or "pending"')
    entry: EntryResponse
    replaced: Optional[EntryResponse] = None
    new_achievements: list[AchievementOut] = Field(default_factory=list)


class PendingEntryResponse(BaseModel):
    pending: EntryResponse


class EditResponse(BaseModel):
    entry: EntryResponse
    rebuilt_reviews: list[ReviewResponse] = Field(default_factory=list)
    new_achievements: list[AchievementOut] = Field(default_factory=list)


class EntryListResponse(BaseModel):
    total: int
    items: list[EntryResponse]
