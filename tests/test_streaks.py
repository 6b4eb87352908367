"""
Tests for the streak calculator.
"""
from datetime import datetime, timedelta

from conftest import record
from moodlog.services.streaks import current_streak, longest_streak

START = datetime(2026, 3, 2, 21, 0)


def _days(*offsets, hour=21):
    return [record(START.replace(hour=hour) + timedelta(days=o), 5) for o in offsets]


class TestCurrentStreak:
    def test_empty(self):
        assert current_streak([]) == 0

    def test_single_entry(self):
        assert current_streak(_days(0)) == 1

    def test_consecutive_days(self):
        assert current_streak(_days(0, 1, 2, 3)) == 4

    def test_gap_resets(self):
        assert current_streak(_days(0, 1, 3, 4)) == 2

    def test_calendar_days_not_24h_windows(self):
        records = [
            record(datetime(2026, 3, 2, 23, 50), 5),
            record(datetime(2026, 3, 3, 0, 10), 5),
        ]
        assert current_streak(records) == 2

    def test_input_order_irrelevant(self):
        assert current_streak(list(reversed(_days(0, 1, 2)))) == 3

    def test_same_day_twice_breaks_run(self):
        records = _days(0, 1) + [record(START + timedelta(days=1, hours=1), 5)]
        assert current_streak(records) == 1


class TestLongestStreak:
    def test_empty(self):
        assert longest_streak([]) == 0

    def test_longest_run_in_history(self):
        assert longest_streak(_days(0, 1, 2, 3, 10, 11)) == 4
        assert current_streak(_days(0, 1, 2, 3, 10, 11)) == 2
