"""
Snapshot dataclass → response model conversion shared by the routers.
"""
from __future__ import annotations

from typing import Optional

from moodlog.core.catalog import AchievementDefinition
from moodlog.schemas.achievement import AchievementOut
from moodlog.schemas.entry import EntryResponse
from moodlog.schemas.review import (
    FactorImpactPairOut,
    HighlightOut,
    MoodSummaryOut,
    ReviewResponse,
)
from moodlog.services.records import MoodRecord, ReviewRecord
from moodlog.services.weekly_review import is_review_valid


def entry_to_response(r: MoodRecord) -> EntryResponse:
    return EntryResponse(
        id=r.id,
        date=r.date.isoformat(),
        day=str(r.day),
        mood_level=r.mood_level,
        factors={name: impact.value for name, impact in sorted(r.factors.items())},
        note=r.note,
        photo_asset_ref=r.photo_asset_ref,
    )


def optional_entry(r: Optional[MoodRecord]) -> Optional[EntryResponse]:
    return entry_to_response(r) if r is not None else None


def achievement_to_out(d: AchievementDefinition) -> AchievementOut:
    return AchievementOut(
        id=d.id,
        title=d.title,
        description=d.description,
        icon=d.icon,
        rule=d.rule,
        params=dict(d.params),
    )


def review_to_response(review: ReviewRecord) -> ReviewResponse:
    s = review.mood_summary
    return ReviewResponse(
        id=review.id,
        week_start=review.week_start.isoformat(),
        week_end=review.week_end.isoformat(),
        mood_summary=MoodSummaryOut(
            average_mood=s.average_mood,
            highest_mood=s.highest_mood,
            lowest_mood=s.lowest_mood,
            best_day=s.best_day.isoformat(),
            most_frequent_factors=[
                FactorImpactPairOut(factor=p.factor, impact=p.impact.value)
                for p in s.most_frequent_factors
            ],
        ),
        highlights=[
            HighlightOut(
                id=h.id,
                date=h.date.isoformat(),
                mood_level=h.mood_level,
                note=h.note,
                photo_asset_ref=h.photo_asset_ref,
            )
            for h in review.highlights
        ],
        photo_refs=list(review.photo_refs),
        notes=list(review.notes),
        viewed=review.viewed,
        is_valid=is_review_valid(review),
    )
