"""
Tests for weekly review generation.

Reference week: Monday 2026-03-02 .. Sunday 2026-03-08, summarised on
Monday 2026-03-09 with moods [3, 5, 9, 2, 7, 6, 8].
"""
from datetime import date, datetime, timedelta

import pytest

from conftest import record
from moodlog.core.errors import ReviewNotFoundError, ReviewNotReadyError
from moodlog.services.entries import EntryChanges, EntryService
from moodlog.services.notifications import NotificationKind
from moodlog.services.records import FactorImpactPair, Impact, MoodSummary, ReviewRecord
from moodlog.services.stores import EntryStore, ReviewStore
from moodlog.services.trends import factor_impact, weekly_averages
from moodlog.services.weekly_review import (
    GenerationStatus,
    WeeklyReviewService,
    build_review,
    displayable_reviews,
    is_review_valid,
    select_highlights,
    summarize,
    top_factors,
)

WEEK_START = datetime(2026, 3, 2)
WEEK_END = datetime(2026, 3, 9)
TRIGGER_DAY = date(2026, 3, 9)
LEVELS = [3, 5, 9, 2, 7, 6, 8]


def _week_records():
    return [record(WEEK_START + timedelta(days=i, hours=20), level) for i, level in enumerate(LEVELS)]


def _seed(db, user_id, records):
    store = EntryStore(db)
    ids = [store.put_entry(user_id, r) for r in records]
    db.commit()
    return ids


def _review(start=WEEK_START, end=WEEK_END, average=5.0, highest=8.0, lowest=2.0, review_id="r1"):
    return ReviewRecord(
        id=review_id,
        week_start=start,
        week_end=end,
        mood_summary=MoodSummary(average, highest, lowest, start),
    )


@pytest.fixture()
def service(db, notifier):
    return WeeklyReviewService(db, notifier)


class TestBuilders:
    def test_summary(self):
        summary = summarize(_week_records())
        assert summary.average_mood == pytest.approx(40 / 7)
        assert summary.highest_mood == 9
        assert summary.lowest_mood == 2
        assert summary.best_day == WEEK_START + timedelta(days=2, hours=20)

    def test_best_day_is_first_maximum(self):
        records = [record(WEEK_START + timedelta(days=i), 7) for i in range(3)]
        assert summarize(records).best_day == WEEK_START

    def test_top_factors_by_frequency(self):
        records = [
            record(WEEK_START, 5, Work="negative", Sleep="positive", Food="positive"),
            record(WEEK_START, 5, Work="negative", Sleep="negative", Food="positive"),
            record(WEEK_START, 5, Work="positive", News="negative"),
        ]
        assert top_factors(records) == [
            FactorImpactPair("Work", Impact.negative),
            FactorImpactPair("Food", Impact.positive),
            FactorImpactPair("Sleep", Impact.negative),
        ]

    def test_highlights_need_photo_or_note(self):
        records = [
            record(WEEK_START, 5, note="walked by the sea"),
            record(WEEK_START, 5, note="   "),
            record(WEEK_START, 5, photo="asset://p1"),
            record(WEEK_START, 5),
        ]
        highlights = select_highlights(records)
        assert [(h.note, h.photo_asset_ref) for h in highlights] == [
            ("walked by the sea", None),
            ("", "asset://p1"),
        ]

    def test_build_review_half_open_range(self):
        records = _week_records() + [record(WEEK_END, 1), record(WEEK_START - timedelta(minutes=1), 1)]
        review = build_review(records, WEEK_START, WEEK_END)
        assert review.mood_summary.lowest_mood == 2
        assert review.viewed is False

    def test_build_review_empty_range(self):
        assert build_review([], WEEK_START, WEEK_END) is None

    def test_photo_refs_and_notes(self):
        records = [
            record(WEEK_START, 5, note="a", photo="asset://1"),
            record(WEEK_START + timedelta(days=1), 5, note="b"),
        ]
        review = build_review(records, WEEK_START, WEEK_END)
        assert review.photo_refs == ["asset://1"]
        assert review.notes == ["a", "b"]


class TestValidity:
    def test_valid(self):
        assert is_review_valid(_review())

    def test_start_must_precede_end(self):
        assert not is_review_valid(_review(end=WEEK_START))

    def test_negative_values_rejected(self):
        assert not is_review_valid(_review(lowest=-1))

    def test_average_above_highest_passes_default_check(self):
        review = _review(average=9.5, highest=8.0)
        assert is_review_valid(review)
        assert not is_review_valid(review, strict=True)

    def test_displayable_unique_by_week_start(self):
        older = _review(start=WEEK_START - timedelta(days=7), end=WEEK_START, review_id="old")
        reviews = [_review(review_id="a"), older, _review(review_id="b")]
        shown = displayable_reviews(reviews)
        assert [r.id for r in shown] == ["a", "old"]


class TestRoundTrip:
    def _annotated_week(self):
        return [
            record(WEEK_START + timedelta(hours=20), 3, Work="negative", Sleep="negative"),
            record(WEEK_START + timedelta(days=1, hours=20), 5, note="long day", Work="negative"),
            record(WEEK_START + timedelta(days=2, hours=20), 9, note="hike", photo="asset://hike.jpg",
                   Exercise="positive", Weather="positive"),
            record(WEEK_START + timedelta(days=3, hours=20), 2, Sleep="negative", News="negative"),
            record(WEEK_START + timedelta(days=4, hours=20), 7, photo="asset://dinner.jpg", Food="positive"),
            record(WEEK_START + timedelta(days=5, hours=20), 6, Social="positive"),
            record(WEEK_START + timedelta(days=6, hours=20), 8, note="caf\u00e9 with friends",
                   Social="positive", Food="positive"),
            record(WEEK_END + timedelta(hours=9), 4, Work="negative"),
        ]

    def test_stored_review_reads_back_unchanged(self, db, user_id):
        _seed(db, user_id, self._annotated_week())
        stored_entries = EntryStore(db).list_entries(user_id)
        review = build_review(stored_entries, WEEK_START, WEEK_END)
        store = ReviewStore(db)
        store.put_review(user_id, review)
        db.commit()

        loaded = store.get_review(user_id, review.id)
        assert loaded.mood_summary == review.mood_summary
        assert loaded.highlights == review.highlights
        assert loaded.photo_refs == ["asset://hike.jpg", "asset://dinner.jpg"]
        assert loaded.photo_refs == review.photo_refs
        assert loaded.notes == review.notes
        assert [h.note for h in loaded.highlights] == ["long day", "hike", "", "caf\u00e9 with friends"]

    def test_aggregates_match_on_stored_entries(self, db, user_id):
        in_memory = self._annotated_week()
        _seed(db, user_id, in_memory)
        stored = EntryStore(db).list_entries(user_id)

        assert len(stored) == len(in_memory)
        assert factor_impact(stored) == factor_impact(in_memory)
        assert weekly_averages(stored) == weekly_averages(in_memory)
        assert build_review(stored, WEEK_START, WEEK_END).mood_summary == \
            build_review(in_memory, WEEK_START, WEEK_END).mood_summary


class TestTrigger:
    def test_creates_review_for_previous_week(self, service, db, user_id, notifier):
        _seed(db, user_id, _week_records())
        result = service.check_and_generate(user_id, today=TRIGGER_DAY)

        assert result.status == GenerationStatus.created
        assert result.week_start == WEEK_START
        assert result.week_end == WEEK_END
        assert result.review.mood_summary.average_mood == pytest.approx(40 / 7)
        assert len(notifier.of_kind(NotificationKind.WEEKLY_REVIEW_READY)) == 1
        assert [r.id for r in service.list_reviews(user_id)] == [result.review.id]

    def test_second_trigger_same_week_is_noop(self, service, db, user_id, notifier):
        _seed(db, user_id, _week_records())
        first = service.check_and_generate(user_id, today=TRIGGER_DAY)
        second = service.check_and_generate(user_id, today=TRIGGER_DAY)

        assert second.status == GenerationStatus.already_exists
        assert second.review.id == first.review.id
        assert len(ReviewStore(db).list_reviews(user_id)) == 1
        assert len(notifier.of_kind(NotificationKind.WEEKLY_REVIEW_READY)) == 1

    def test_only_on_review_weekday(self, service, db, user_id):
        _seed(db, user_id, _week_records())
        result = service.check_and_generate(user_id, today=TRIGGER_DAY + timedelta(days=1))
        assert result.status == GenerationStatus.not_trigger_day
        assert service.list_reviews(user_id) == []

    def test_force_skips_weekday_check(self, service, db, user_id):
        _seed(db, user_id, _week_records())
        result = service.check_and_generate(user_id, today=TRIGGER_DAY + timedelta(days=2), force=True)
        assert result.status == GenerationStatus.created
        assert result.week_start == WEEK_START

    def test_empty_week_stores_nothing(self, service, user_id, notifier):
        result = service.check_and_generate(user_id, today=TRIGGER_DAY)
        assert result.status == GenerationStatus.no_entries
        assert service.list_reviews(user_id) == []
        assert notifier.sent == []


class TestRebuildOnEdit:
    def test_edit_recomputes_covering_review(self, db, user_id, notifier):
        ids = _seed(db, user_id, _week_records())
        reviews = WeeklyReviewService(db, notifier)
        created = reviews.check_and_generate(user_id, today=TRIGGER_DAY).review

        outcome = EntryService(db, notifier).edit_entry(
            user_id, ids[1], EntryChanges(mood_level=10, note="great day"),
        )
        assert [r.id for r in outcome.rebuilt_reviews] == [created.id]

        stored = reviews.list_reviews(user_id)
        assert len(stored) == 1
        rebuilt = stored[0]
        assert rebuilt.id == created.id
        assert rebuilt.viewed is True
        assert rebuilt.mood_summary.average_mood == pytest.approx(45 / 7)
        assert rebuilt.mood_summary.highest_mood == 10
        assert rebuilt.notes == ["great day"]

    def test_edit_outside_reviewed_week(self, db, user_id, notifier):
        _seed(db, user_id, _week_records())
        later = _seed(db, user_id, [record(WEEK_END + timedelta(days=1), 4)])
        WeeklyReviewService(db, notifier).check_and_generate(user_id, today=TRIGGER_DAY)

        outcome = EntryService(db, notifier).edit_entry(user_id, later[0], EntryChanges(mood_level=6))
        assert outcome.rebuilt_reviews == []


class TestViewedAndCurrent:
    def test_mark_viewed(self, service, db, user_id):
        _seed(db, user_id, _week_records())
        review = service.check_and_generate(user_id, today=TRIGGER_DAY).review
        assert service.mark_viewed(user_id, review.id).viewed is True

    def test_mark_viewed_unknown(self, service, user_id):
        with pytest.raises(ReviewNotFoundError):
            service.mark_viewed(user_id, "does-not-exist")

    def test_current_review(self, service, db, user_id):
        _seed(db, user_id, _week_records())
        review = service.check_and_generate(user_id, today=TRIGGER_DAY).review
        current = service.await_current_review(user_id, attempts=1, sleep=lambda s: None)
        assert current.id == review.id

    def test_current_review_exhausts_attempts(self, service, user_id):
        waits = []
        with pytest.raises(ReviewNotReadyError) as exc:
            service.await_current_review(user_id, attempts=3, backoff=0.5, timeout=10, sleep=waits.append)
        assert waits == [0.5, 0.5]
        assert exc.value.details == {"attempts": 3, "reason": "exhausted"}
