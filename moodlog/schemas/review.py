"""
Weekly review response schemas.
"""
from typing import Optional
from pydantic import BaseModel, Field


class FactorImpactPairOut(BaseModel):
    factor: str
    impact: str


class MoodSummaryOut(BaseModel):
    average_mood: float
    highest_mood: float
    lowest_mood: float
    best_day: str
    most_frequent_factors: list[FactorImpactPairOut]


class HighlightOut(BaseModel):
    id: Optional[int]
    date: str
    mood_level: float
    note: str
    photo_asset_ref: Optional[str]


class ReviewResponse(BaseModel):
    id: str
    week_start: str
    week_end: str
    mood_summary: MoodSummaryOut
    highlights: list[HighlightOut]
    photo_refs: list[str]
    notes: list[str]
    viewed: bool
    is_valid: bool = Field(description="Passes the display validity check.")


class ReviewListResponse(BaseModel):
    total: int
    items: list[ReviewResponse]


class ReviewCheckResponse(BaseModel):
    status: str = Field(description='"created" | "not_trigger_day" | "already_exists" | "no_entries"')
    week_start: str
    week_end: str
    review: Optional[ReviewResponse] = None
