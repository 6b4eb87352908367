"""
Weekly review builder.

Public API
----------
build_review(records, start, end, review_id, viewed) -> ReviewRecord | None
summarize(records)                                   -> MoodSummary
top_factors(records, limit)                          -> list[FactorImpactPair]
select_highlights(records)                           -> list[MoodRecord]
is_review_valid(review, strict)                      -> bool
displayable_reviews(reviews)                         -> list[ReviewRecord]

WeeklyReviewService(db, notifier)
  .check_and_generate(user_id, today, force)  — weekly trigger
  .rebuild_for_entry(user_id, moment)         — rebuild-on-edit
  .await_current_review(user_id)              — bounded readiness wait

Trigger
-------
Fires when today's weekday equals REVIEW_WEEKDAY (Monday by default) and
summarises the previous full week, [Monday 00:00, next Monday 00:00).
No-op when a review with the same week_start day already exists or when
the week has no entries.
"""
from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from moodlog.core.calendar import previous_week, today_local
from moodlog.core.config import settings
from moodlog.core.errors import ReviewNotFoundError
from moodlog.services.locks import user_lock
from moodlog.services.notifications import Notifier
from moodlog.services.records import (
    FactorImpactPair,
    Impact,
    MoodRecord,
    MoodSummary,
    ReviewRecord,
)
from moodlog.services.retry import retry_until
from moodlog.services.stores import EntryStore, ReviewStore
from moodlog.services.trends import factor_counts

logger = logging.getLogger("moodlog.reviews")

TOP_FACTOR_LIMIT = 3


# ---------------------------------------------------------------------------
# Pure builders
# ---------------------------------------------------------------------------

def top_factors(records: list[MoodRecord], limit: int = TOP_FACTOR_LIMIT) -> list[FactorImpactPair]:
    """
    Most frequent factors (positive + negative occurrences), ties broken by
    name. Impact is positive only when positives strictly outnumber negatives.
    """
    counts = factor_counts(records)
    ranked = sorted(counts.items(), key=lambda item: (-item[1].total, item[0]))
    return [
        FactorImpactPair(
            factor=name,
            impact=Impact.positive if c.positive > c.negative else Impact.negative,
        )
        for name, c in ranked[:limit]
    ]


def summarize(records: list[MoodRecord]) -> MoodSummary:
    """`records` must be non-empty; best day is the first maximum in date order."""
    ordered = sorted(records, key=lambda r: r.date)
    levels = [r.mood_level for r in ordered]
    best = ordered[0]
    for record in ordered[1:]:
        if record.mood_level > best.mood_level:
            best = record
    return MoodSummary(
        average_mood=sum(levels) / len(levels),
        highest_mood=max(levels),
        lowest_mood=min(levels),
        best_day=best.date,
        most_frequent_factors=top_factors(ordered),
    )


def select_highlights(records: list[MoodRecord]) -> list[MoodRecord]:
    """Entries with a photo or a non-blank note."""
    return [r for r in records if r.photo_asset_ref or r.has_note]


def build_review(
    records: list[MoodRecord],
    start: datetime,
    end: datetime,
    review_id: Optional[str] = None,
    viewed: bool = False,
) -> Optional[ReviewRecord]:
    """Review of the entries in [start, end), or None when that range is empty."""
    week = sorted((r for r in records if start <= r.date < end), key=lambda r: r.date)
    if not week:
        return None
    return ReviewRecord(
        id=review_id or str(uuid.uuid4()),
        week_start=start,
        week_end=end,
        mood_summary=summarize(week),
        highlights=select_highlights(week),
        photo_refs=[r.photo_asset_ref for r in week if r.photo_asset_ref],
        notes=[r.note for r in week if r.note],
        viewed=viewed,
    )


def is_review_valid(review: ReviewRecord, strict: bool = False) -> bool:
    """
    Display gate. The default check only requires start < end and each mood
    value >= 0, so an average above the highest value still passes.
    `strict=True` also requires lowest <= average <= highest.
    """
    s = review.mood_summary
    if not review.week_start < review.week_end:
        return False
    if s.average_mood < 0 or s.highest_mood < 0 or s.lowest_mood < 0:
        return False
    if strict and not (s.lowest_mood <= s.average_mood <= s.highest_mood):
        return False
    return True


def displayable_reviews(reviews: list[ReviewRecord]) -> list[ReviewRecord]:
    """Newest first, one review per week_start day (the first one seen wins)."""
    seen: set[date] = set()
    result: list[ReviewRecord] = []
    for review in sorted(reviews, key=lambda r: r.week_start, reverse=True):
        day = review.week_start.date()
        if day in seen:
            continue
        seen.add(day)
        result.append(review)
    return result


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class GenerationStatus(str, enum.Enum):
    created = "created"
    not_trigger_day = "not_trigger_day"
    already_exists = "already_exists"
    no_entries = "no_entries"


@dataclass
class GenerationResult:
    status: GenerationStatus
    week_start: datetime
    week_end: datetime
    review: Optional[ReviewRecord] = None


# user_id -> id of the review generated most recently in this process
_current_review_ids: dict[str, str] = {}


class WeeklyReviewService:
    def __init__(self, db: Session, notifier: Notifier):
        self.db = db
        self.notifier = notifier
        self.entries = EntryStore(db)
        self.reviews = ReviewStore(db)

    def list_reviews(self, user_id: str) -> list[ReviewRecord]:
        return displayable_reviews(self.reviews.list_reviews(user_id))

    def check_and_generate(
        self,
        user_id: str,
        today: Optional[date] = None,
        force: bool = False,
    ) -> GenerationResult:
        """Weekly trigger. `force` skips the weekday check (on-demand generation)."""
        today = today or today_local()
        start, end = previous_week(today)
        if not force and today.weekday() != settings.REVIEW_WEEKDAY:
            logger.debug("Not the review weekday (%s), skipping", today)
            return GenerationResult(GenerationStatus.not_trigger_day, start, end)

        with user_lock(user_id):
            existing = [
                r for r in self.reviews.list_reviews(user_id)
                if r.week_start.date() == start.date()
            ]
            if existing:
                logger.debug("Review for week of %s already exists for user %s", start.date(), user_id)
                return GenerationResult(GenerationStatus.already_exists, start, end, existing[0])

            review = build_review(self.entries.entries_between(user_id, start, end), start, end)
            if review is None:
                logger.debug("No entries in week of %s for user %s", start.date(), user_id)
                return GenerationResult(GenerationStatus.no_entries, start, end)

            self.reviews.put_review(user_id, review)
            self.db.commit()
            _current_review_ids[user_id] = review.id
            logger.info("Created weekly review %s for user %s (week of %s)",
                        review.id, user_id, start.date())

        self.notifier.weekly_review_ready(user_id, review)
        return GenerationResult(GenerationStatus.created, start, end, review)

    def rebuild_for_entry(self, user_id: str, moment: datetime) -> list[ReviewRecord]:
        """
        Fully recompute every stored review whose [start, end) contains
        `moment`, keeping its id and marking it viewed.
        """
        rebuilt: list[ReviewRecord] = []
        with user_lock(user_id):
            for stored in self.reviews.list_reviews(user_id):
                if not stored.contains(moment):
                    continue
                week = self.entries.entries_between(user_id, stored.week_start, stored.week_end)
                review = build_review(week, stored.week_start, stored.week_end,
                                      review_id=stored.id, viewed=True)
                if review is None:
                    logger.info("Review %s has no entries left; kept as is", stored.id)
                    continue
                self.reviews.put_review(user_id, review)
                rebuilt.append(review)
            if rebuilt:
                self.db.commit()
                logger.info("Rebuilt %d review(s) for user %s after edit", len(rebuilt), user_id)
        return rebuilt

    def mark_viewed(self, user_id: str, review_id: str) -> ReviewRecord:
        if not self.reviews.mark_viewed(user_id, review_id):
            raise ReviewNotFoundError(review_id)
        self.db.commit()
        return self.reviews.get_review(user_id, review_id)

    def current_review(self, user_id: str) -> Optional[ReviewRecord]:
        """Review generated most recently in this process, else the newest stored one."""
        review_id = _current_review_ids.get(user_id)
        if review_id:
            review = self.reviews.get_review(user_id, review_id)
            if review is not None:
                return review
        reviews = self.list_reviews(user_id)
        return reviews[0] if reviews else None

    def await_current_review(
        self,
        user_id: str,
        attempts: Optional[int] = None,
        backoff: Optional[float] = None,
        timeout: Optional[float] = None,
        sleep=None,
    ) -> ReviewRecord:
        def fetch() -> Optional[ReviewRecord]:
            self.db.expire_all()
            return self.current_review(user_id)

        kwargs = {"sleep": sleep} if sleep is not None else {}
        return retry_until(
            fetch,
            is_review_valid,
            attempts=attempts if attempts is not None else settings.REVIEW_READY_ATTEMPTS,
            backoff=backoff if backoff is not None else settings.REVIEW_READY_BACKOFF_SECONDS,
            timeout=timeout if timeout is not None else settings.REVIEW_READY_TIMEOUT_SECONDS,
            **kwargs,
        )
