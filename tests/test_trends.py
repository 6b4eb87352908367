"""
Tests for the trend aggregator: trend windows, factor impact ordering,
weekly grouping, consistency score and the generated insights.

Reference week: Monday 2026-03-02 .. Sunday 2026-03-08 (ISO week 10).
"""
import statistics
from datetime import date, datetime

import pytest

from conftest import record
from moodlog.services.trends import (
    TrendRange,
    consistency,
    factor_counts,
    factor_impact,
    insights,
    mood_trend,
    stability_label,
    week_key,
    weekly_averages,
)

MONDAY = datetime(2026, 3, 2, 9, 0)


def _week(levels, start=MONDAY):
    return [record(start.replace(day=start.day + i), level) for i, level in enumerate(levels)]


class TestMoodTrend:
    def test_week_covers_monday_to_sunday_inclusive(self):
        records = [
            record(datetime(2026, 3, 1, 23, 59), 1),   # Sunday before
            record(datetime(2026, 3, 2, 0, 0), 2),     # Monday
            record(datetime(2026, 3, 8, 23, 59), 3),   # Sunday
            record(datetime(2026, 3, 9, 0, 0), 4),     # next Monday
        ]
        points = mood_trend(records, TrendRange.week, today=date(2026, 3, 4))
        assert [p.mood_level for p in points] == [2, 3]

    def test_month_keeps_entries_at_most_30_days_old(self):
        today = date(2026, 3, 31)
        records = [
            record(datetime(2026, 2, 28, 12), 1),   # 31 days
            record(datetime(2026, 3, 1, 12), 2),    # 30 days
            record(datetime(2026, 3, 31, 8), 3),    # today
        ]
        points = mood_trend(records, TrendRange.month, today=today)
        assert [p.mood_level for p in points] == [2, 3]

    def test_points_sorted_ascending(self):
        records = [record(datetime(2026, 3, 5, 8), 5), record(datetime(2026, 3, 3, 8), 3)]
        points = mood_trend(records, TrendRange.week, today=date(2026, 3, 4))
        assert [p.date for p in points] == sorted(p.date for p in points)

    def test_empty_input(self):
        assert mood_trend([], TrendRange.month, today=date(2026, 3, 4)) == []


class TestFactorImpact:
    def test_counts_by_sign(self):
        records = [
            record(MONDAY, 5, Work="negative", Sleep="positive"),
            record(MONDAY, 5, Work="negative", Sleep="negative"),
        ]
        counts = factor_counts(records)
        assert counts["Work"].negative == 2
        assert counts["Work"].positive == 0
        assert counts["Sleep"].total == 2

    def test_sorted_by_absolute_net_impact(self):
        records = [
            record(MONDAY, 5, Work="negative", Exercise="positive", Sleep="positive"),
            record(MONDAY, 5, Work="negative", Exercise="positive", Sleep="negative"),
            record(MONDAY, 5, Work="negative"),
        ]
        items = factor_impact(records)
        assert [i.name for i in items] == ["Work", "Exercise", "Sleep"]
        assert [i.net_impact for i in items] == [-3, 2, 0]

    def test_equal_magnitude_keeps_name_order(self):
        records = [record(MONDAY, 5, Social="negative", Food="positive")]
        assert [i.name for i in factor_impact(records)] == ["Food", "Social"]

    def test_no_factors(self):
        assert factor_impact([record(MONDAY, 5)]) == []


class TestWeeklyAverages:
    def test_week_key_format(self):
        assert week_key(MONDAY) == "W10\nMar"

    def test_groups_by_iso_week(self):
        records = [
            record(datetime(2026, 3, 2, 8), 4),
            record(datetime(2026, 3, 8, 8), 6),
            record(datetime(2026, 3, 9, 8), 9),
        ]
        result = weekly_averages(records)
        assert [(w.week, w.average, w.count) for w in result] == [
            ("W10\nMar", 5.0, 2),
            ("W11\nMar", 9.0, 1),
        ]

    def test_empty_input(self):
        assert weekly_averages([]) == []


class TestConsistency:
    def test_identical_moods_score_one(self):
        assert consistency(_week([6, 6, 6]), today=date(2026, 3, 4)) == 1.0

    def test_single_point_scores_zero(self):
        assert consistency(_week([6]), today=date(2026, 3, 4)) == 0.0

    def test_no_entries_scores_zero(self):
        assert consistency([], today=date(2026, 3, 4)) == 0.0

    def test_uses_sample_standard_deviation(self):
        levels = [3, 5, 9, 2, 7, 6, 8]
        expected = 1 - statistics.stdev(levels) / 3
        assert consistency(_week(levels), today=date(2026, 3, 4)) == pytest.approx(expected)

    def test_clamped_to_zero(self):
        assert consistency(_week([0, 10, 0, 10]), today=date(2026, 3, 4)) == 0.0

    def test_ignores_entries_outside_current_week(self):
        records = _week([5, 5]) + [record(datetime(2026, 2, 20, 8), 0)]
        assert consistency(records, today=date(2026, 3, 4)) == 1.0

    @pytest.mark.parametrize("score,label", [
        (0.9, "Your mood has been very stable"),
        (0.5, "Your mood has been moderately stable"),
        (0.4, "Your mood has fluctuated significantly"),
    ])
    def test_stability_label(self, score, label):
        assert stability_label(score) == label


class TestInsights:
    def test_full_week(self):
        records = _week([3, 5, 9, 2, 7, 6, 8])
        result = insights(records, today=date(2026, 3, 8))
        assert "Your average mood for the past week is 5.7" in result
        assert "Your mood has fluctuated significantly over the past week" in result

    def test_lists_every_factor_sharing_the_top_count(self):
        records = [
            record(MONDAY, 5, Sleep="positive", Food="positive", Work="negative"),
            record(MONDAY, 5, Sleep="positive", Food="positive"),
        ]
        result = insights(records, today=date(2026, 3, 4))
        assert "Top positive factors: Food (2), Sleep (2)" in result
        assert "Top negative factors: Work (1)" in result

    def test_short_week_has_no_average_line(self):
        result = insights(_week([5, 5, 5]), today=date(2026, 3, 4))
        assert not any(line.startswith("Your average mood") for line in result)
        assert "Your mood has been very stable over the past week" in result

    def test_empty(self):
        assert insights([], today=date(2026, 3, 4)) == []
