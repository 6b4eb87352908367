"""
Pattern insights and re-engagement.

detect_patterns() looks for three factor/mood correlations once a user
has enough history:

  Exercise  >= 5 entries record Exercise, >= 3 positive, and the mood
            average on positive-Exercise days beats the overall average
            by more than 1.0
  Social    same shape as Exercise, for Social
  Sleep     >= 5 entries record Sleep, >= 3 positive AND >= 3 negative,
            and good-sleep days beat bad-sleep days by more than 1.5

reengagement_due() fires only when the last entry is exactly 7 or 14
calendar days old; a user who is not seen on those exact days gets no
reminder.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from moodlog.core.calendar import today_local
from moodlog.services.records import Impact, MoodRecord

MIN_FACTOR_ENTRIES = 5
MIN_SIGNED_ENTRIES = 3
FACTOR_LIFT = 1.0
SLEEP_LIFT = 1.5
REENGAGEMENT_DAYS = (7, 14)


def _avg(records: list[MoodRecord]) -> float:
    if not records:
        return 0.0
    return sum(r.mood_level for r in records) / len(records)


def _signed(records: list[MoodRecord], factor: str, impact: Impact) -> list[MoodRecord]:
    return [r for r in records if r.factors.get(factor) == impact]


def _exercise_pattern(records: list[MoodRecord]) -> Optional[str]:
    recorded = [r for r in records if "Exercise" in r.factors]
    if len(recorded) < MIN_FACTOR_ENTRIES:
        return None
    positive = _signed(recorded, "Exercise", Impact.positive)
    overall = _avg(records)
    with_exercise = _avg(positive)
    if len(positive) >= MIN_SIGNED_ENTRIES and with_exercise > overall + FACTOR_LIFT:
        return (
            "You tend to feel better on days when you exercise. "
            f"Your mood averages {with_exercise:.1f} with exercise vs {overall:.1f} overall."
        )
    return None


def _social_pattern(records: list[MoodRecord]) -> Optional[str]:
    recorded = [r for r in records if "Social" in r.factors]
    if len(recorded) < MIN_FACTOR_ENTRIES:
        return None
    positive = _signed(recorded, "Social", Impact.positive)
    if len(positive) >= MIN_SIGNED_ENTRIES and _avg(positive) > _avg(records) + FACTOR_LIFT:
        return (
            "Social activities appear to boost your mood. "
            "Consider scheduling more time with friends!"
        )
    return None


def _sleep_pattern(records: list[MoodRecord]) -> Optional[str]:
    recorded = [r for r in records if "Sleep" in r.factors]
    if len(recorded) < MIN_FACTOR_ENTRIES:
        return None
    good = _signed(recorded, "Sleep", Impact.positive)
    bad = _signed(recorded, "Sleep", Impact.negative)
    if len(good) < MIN_SIGNED_ENTRIES or len(bad) < MIN_SIGNED_ENTRIES:
        return None
    gap = _avg(good) - _avg(bad)
    if gap > SLEEP_LIFT:
        return (
            "Quality sleep makes a big difference in your mood. "
            f"Your mood is {gap:.1f} points higher after good sleep."
        )
    return None


def detect_patterns(records: list[MoodRecord], min_entries: int = 10) -> list[str]:
    if len(records) < min_entries:
        return []
    found = (_exercise_pattern(records), _social_pattern(records), _sleep_pattern(records))
    return [text for text in found if text]


def days_since_last_entry(records: list[MoodRecord], today: Optional[date] = None) -> Optional[int]:
    if not records:
        return None
    latest = max(r.day for r in records)
    return ((today or today_local()) - latest).days


def reengagement_due(records: list[MoodRecord], today: Optional[date] = None) -> Optional[int]:
    """Days inactive when exactly 7 or 14, else None."""
    days = days_since_last_entry(records, today)
    if days in REENGAGEMENT_DAYS:
        return days
    return None
