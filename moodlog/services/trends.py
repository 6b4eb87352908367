"""
Trend aggregator — pure functions over a list of MoodRecord.

Every function here is total: an empty or degenerate input yields an empty
list or a zero value, never an exception.

Public API
----------
mood_trend(records, window, today)    -> list[TrendPoint]        (ascending)
factor_impact(records)                -> list[FactorImpactEntry] (|net| desc)
factor_counts(records)                -> dict[str, FactorCount]
weekly_averages(records)              -> list[WeeklyAverage]     (key asc)
consistency(records, today)           -> float                   (0..1)
insights(records, today)              -> list[str]
"""
from __future__ import annotations

import enum
import statistics
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from moodlog.core.calendar import today_local, week_start
from moodlog.services.records import Impact, MoodRecord


class TrendRange(str, enum.Enum):
    week = "week"
    month = "month"


MONTH_WINDOW_DAYS = 30
INSIGHT_MIN_TREND_POINTS = 7

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrendPoint:
    date: datetime
    mood_level: float


@dataclass
class FactorCount:
    positive: int = 0
    negative: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative


@dataclass(frozen=True)
class FactorImpactEntry:
    name: str
    positive: int
    negative: int

    @property
    def net_impact(self) -> int:
        return self.positive - self.negative


@dataclass(frozen=True)
class WeeklyAverage:
    week: str       # "W<iso week>\n<Mon>"
    average: float
    count: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def week_key(moment: datetime) -> str:
    return f"W{moment.isocalendar()[1]}\n{_MONTH_ABBR[moment.month - 1]}"


def factor_counts(records: list[MoodRecord]) -> dict[str, FactorCount]:
    """Positive / negative tallies per factor name seen in `records`."""
    counts: dict[str, FactorCount] = {}
    for record in records:
        for name, impact in record.factors.items():
            tally = counts.setdefault(name, FactorCount())
            if impact == Impact.positive:
                tally.positive += 1
            else:
                tally.negative += 1
    return counts


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def mood_trend(
    records: list[MoodRecord],
    window: TrendRange = TrendRange.week,
    today: Optional[date] = None,
) -> list[TrendPoint]:
    """
    Week: entries inside the Monday..Sunday week containing today (both ends
    inclusive). Month: entries at most 30 days before today.
    """
    today = today or today_local()
    if TrendRange(window) == TrendRange.week:
        start = week_start(today)
        end = start + timedelta(days=6)
        selected = [r for r in records if start <= r.day <= end]
    else:
        selected = [r for r in records if (today - r.day).days <= MONTH_WINDOW_DAYS]
    selected.sort(key=lambda r: r.date)
    return [TrendPoint(date=r.date, mood_level=r.mood_level) for r in selected]


def factor_impact(records: list[MoodRecord]) -> list[FactorImpactEntry]:
    entries = [
        FactorImpactEntry(name=name, positive=c.positive, negative=c.negative)
        for name, c in sorted(factor_counts(records).items())
    ]
    entries.sort(key=lambda e: abs(e.net_impact), reverse=True)
    return entries


def weekly_averages(records: list[MoodRecord]) -> list[WeeklyAverage]:
    groups: dict[str, list[float]] = {}
    for record in records:
        groups.setdefault(week_key(record.date), []).append(record.mood_level)
    return [
        WeeklyAverage(week=key, average=_mean(levels), count=len(levels))
        for key, levels in sorted(groups.items())
        if levels
    ]


def consistency(records: list[MoodRecord], today: Optional[date] = None) -> float:
    """
    Stability of the current week's moods: 1 - stdev/3, clamped to [0, 1].
    Fewer than two points carry no spread information and score 0.
    """
    levels = [p.mood_level for p in mood_trend(records, TrendRange.week, today)]
    if len(levels) < 2:
        return 0.0
    stddev = statistics.stdev(levels)
    return max(0.0, min(1.0, 1.0 - stddev / 3.0))


def stability_label(score: float) -> str:
    if score > 0.7:
        return "Your mood has been very stable"
    if score > 0.4:
        return "Your mood has been moderately stable"
    return "Your mood has fluctuated significantly"


def insights(records: list[MoodRecord], today: Optional[date] = None) -> list[str]:
    """Short natural-language observations; every factor sharing the top count is listed."""
    result: list[str] = []
    counts = factor_counts(records)

    max_positive = max((c.positive for c in counts.values()), default=0)
    max_negative = max((c.negative for c in counts.values()), default=0)
    top_positive = [
        f"{name} ({c.positive})" for name, c in sorted(counts.items())
        if max_positive > 0 and c.positive == max_positive
    ]
    top_negative = [
        f"{name} ({c.negative})" for name, c in sorted(counts.items())
        if max_negative > 0 and c.negative == max_negative
    ]
    if top_positive:
        result.append(f"Top positive factors: {', '.join(top_positive)}")
    if top_negative:
        result.append(f"Top negative factors: {', '.join(top_negative)}")

    trend = mood_trend(records, TrendRange.week, today)
    if len(trend) >= INSIGHT_MIN_TREND_POINTS:
        recent = _mean([p.mood_level for p in trend])
        result.append(f"Your average mood for the past week is {recent:.1f}")

    score = consistency(records, today)
    if score > 0:
        result.append(f"{stability_label(score)} over the past week")
    return result
