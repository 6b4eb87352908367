"""
Streak calculator.

The current streak is the length of the trailing run of entries whose
calendar days are exactly one apart, walking the entries in ascending date
order. Two entries on the same day break the run (difference 0), which is
why the entry service keeps one entry per day.
"""
from __future__ import annotations

from moodlog.services.records import MoodRecord


def current_streak(records: list[MoodRecord]) -> int:
    if not records:
        return 0
    ordered = sorted(records, key=lambda r: r.date)
    streak = 1
    previous = ordered[0].day
    for record in ordered[1:]:
        if (record.day - previous).days == 1:
            streak += 1
        else:
            streak = 1
        previous = record.day
    return streak


def longest_streak(records: list[MoodRecord]) -> int:
    """Longest run anywhere in history (reported alongside the current one)."""
    if not records:
        return 0
    ordered = sorted(records, key=lambda r: r.date)
    best = run = 1
    previous = ordered[0].day
    for record in ordered[1:]:
        run = run + 1 if (record.day - previous).days == 1 else 1
        best = max(best, run)
        previous = record.day
    return best
