"""
Persistence adapters for the entry, unlock-state and review stores.

Each store wraps one SQLAlchemy session and exchanges snapshot dataclasses
(moodlog.services.records) with the caller. Stores flush; the calling
service owns the commit, except for RemoteUnlockStore whose writes are
fire-and-forget and commit on their own.

Unlock state lives in two places:
  LocalUnlockCache   — process-local, fast, lost on restart
  RemoteUnlockStore  — durable `unlocked_achievements` rows
UnlockStateRepository merges them by union. Nothing is ever removed.

UsedFactorStore keeps the cumulative set of factor names a user has tagged,
union-only in the same way, so a replaced entry does not take its factors
out of the set.
"""
from __future__ import annotations

import json
import logging
import threading
from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from moodlog.models.achievement import UnlockedAchievement, UsedFactor
from moodlog.models.mood_entry import MoodEntry
from moodlog.models.weekly_review import WeeklyReview
from moodlog.services.records import (
    MoodRecord,
    ReviewRecord,
    decode_entries,
    decode_reviews,
    encode_factors,
    encode_highlights,
    encode_summary,
    entry_from_row,
    RecordDecodeError,
)

logger = logging.getLogger("moodlog.stores")


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------

class EntryStore:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, user_id: str, entry_id: int) -> Optional[MoodEntry]:
        return (
            self.db.query(MoodEntry)
            .filter(MoodEntry.user_id == user_id, MoodEntry.id == entry_id)
            .first()
        )

    def list_entries(self, user_id: str) -> list[MoodRecord]:
        """All entries for the user, newest first. Undecodable rows are skipped."""
        rows = (
            self.db.query(MoodEntry)
            .filter(MoodEntry.user_id == user_id)
            .order_by(MoodEntry.logged_at.desc(), MoodEntry.id.desc())
            .all()
        )
        return decode_entries(rows)

    def entries_between(self, user_id: str, start: datetime, end: datetime) -> list[MoodRecord]:
        """Entries with start <= logged_at < end."""
        rows = (
            self.db.query(MoodEntry)
            .filter(
                MoodEntry.user_id == user_id,
                MoodEntry.logged_at >= start,
                MoodEntry.logged_at < end,
            )
            .order_by(MoodEntry.logged_at.asc())
            .all()
        )
        return decode_entries(rows)

    def get_entry(self, user_id: str, entry_id: int) -> Optional[MoodRecord]:
        row = self._row(user_id, entry_id)
        if row is None:
            return None
        try:
            return entry_from_row(row)
        except RecordDecodeError as exc:
            logger.warning("Entry %s is undecodable: %s", entry_id, exc)
            return None

    def put_entry(self, user_id: str, record: MoodRecord) -> int:
        """Insert, or overwrite the row with `record.id`. Returns the row id."""
        row = self._row(user_id, record.id) if record.id is not None else None
        if row is None:
            row = MoodEntry(user_id=user_id)
            self.db.add(row)
        row.logged_at = record.date
        row.mood_level = record.mood_level
        row.factors = encode_factors(record.factors)
        row.note = record.note
        row.photo_asset_ref = record.photo_asset_ref
        self.db.flush()
        return row.id

    def delete_entry(self, user_id: str, entry_id: int) -> bool:
        row = self._row(user_id, entry_id)
        if row is None:
            return False
        try:
            self.db.delete(row)
            self.db.flush()
        except SQLAlchemyError:
            logger.exception("Deleting entry %s for user %s failed", entry_id, user_id)
            self.db.rollback()
            return False
        return True


# ---------------------------------------------------------------------------
# Unlock state
# ---------------------------------------------------------------------------

class LocalUnlockCache:
    """Process-local cache of unlock sets keyed by user id."""

    def __init__(self):
        self._lock = threading.Lock()
        self._sets: dict[str, frozenset[str]] = {}

    def load(self, user_id: str) -> set[str]:
        with self._lock:
            return set(self._sets.get(user_id, frozenset()))

    def save(self, user_id: str, ids: Iterable[str]) -> None:
        with self._lock:
            self._sets[user_id] = frozenset(ids)

    def clear(self, user_id: Optional[str] = None) -> None:
        with self._lock:
            if user_id is None:
                self._sets.clear()
            else:
                self._sets.pop(user_id, None)


local_unlock_cache = LocalUnlockCache()


class RemoteUnlockStore:
    def __init__(self, db: Session):
        self.db = db

    def load(self, user_id: str) -> set[str]:
        rows = (
            self.db.query(UnlockedAchievement.achievement_id)
            .filter(UnlockedAchievement.user_id == user_id)
            .all()
        )
        return {r.achievement_id for r in rows}

    def save(self, user_id: str, ids: Iterable[str]) -> bool:
        """Insert the ids not yet stored. Returns False if the write failed."""
        try:
            missing = set(ids) - self.load(user_id)
            for achievement_id in sorted(missing):
                self.db.add(UnlockedAchievement(user_id=user_id, achievement_id=achievement_id))
            if missing:
                self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning("Remote unlock write failed for user %s", user_id, exc_info=True)
            return False
        return True


class UnlockStateRepository:
    def __init__(self, local: LocalUnlockCache, remote: RemoteUnlockStore):
        self.local = local
        self.remote = remote

    def load(self, user_id: str) -> set[str]:
        """local ∪ remote; the merged set is written back to the local cache."""
        merged = self.local.load(user_id)
        try:
            merged |= self.remote.load(user_id)
        except SQLAlchemyError:
            logger.warning("Remote unlock read failed for user %s; using local cache", user_id,
                           exc_info=True)
        self.local.save(user_id, merged)
        return merged

    def save(self, user_id: str, ids: Iterable[str]) -> None:
        ids = set(ids)
        self.local.save(user_id, ids | self.local.load(user_id))
        # Fire-and-forget: a failed remote write does not undo the local unlock.
        self.remote.save(user_id, ids)


class UsedFactorStore:
    def __init__(self, db: Session):
        self.db = db

    def load(self, user_id: str) -> set[str]:
        rows = (
            self.db.query(UsedFactor.factor)
            .filter(UsedFactor.user_id == user_id)
            .all()
        )
        return {r.factor for r in rows}

    def add(self, user_id: str, factors: Iterable[str]) -> set[str]:
        """Store the factors not seen before. Returns the merged set."""
        stored = self.load(user_id)
        missing = set(factors) - stored
        if not missing:
            return stored
        try:
            for factor in sorted(missing):
                self.db.add(UsedFactor(user_id=user_id, factor=factor))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning("Used-factor write failed for user %s", user_id, exc_info=True)
        return stored | missing


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------

class ReviewStore:
    def __init__(self, db: Session):
        self.db = db

    def _row(self, user_id: str, review_id: str) -> Optional[WeeklyReview]:
        return (
            self.db.query(WeeklyReview)
            .filter(WeeklyReview.user_id == user_id, WeeklyReview.id == review_id)
            .first()
        )

    def list_reviews(self, user_id: str) -> list[ReviewRecord]:
        rows = (
            self.db.query(WeeklyReview)
            .filter(WeeklyReview.user_id == user_id)
            .order_by(WeeklyReview.week_start.desc(), WeeklyReview.created_at.desc())
            .all()
        )
        return decode_reviews(rows)

    def get_review(self, user_id: str, review_id: str) -> Optional[ReviewRecord]:
        row = self._row(user_id, review_id)
        if row is None:
            return None
        reviews = decode_reviews([row])
        return reviews[0] if reviews else None

    def put_review(self, user_id: str, review: ReviewRecord) -> None:
        """Upsert by review id."""
        row = self._row(user_id, review.id)
        if row is None:
            row = WeeklyReview(id=review.id, user_id=user_id)
            self.db.add(row)
        row.week_start = review.week_start
        row.week_end = review.week_end
        row.mood_summary = encode_summary(review.mood_summary)
        row.highlights = encode_highlights(review.highlights)
        row.photo_refs = _json_list(review.photo_refs)
        row.notes = _json_list(review.notes)
        row.viewed = review.viewed
        self.db.flush()

    def mark_viewed(self, user_id: str, review_id: str) -> bool:
        row = self._row(user_id, review_id)
        if row is None:
            return False
        row.viewed = True
        self.db.flush()
        return True


def _json_list(items: list[str]) -> str:
    return json.dumps(list(items), ensure_ascii=False)
