"""
Entry lifecycle: save, duplicate-day resolution, edit.

Duplicate-day resolution
------------------------
  Idle --save on an already-logged day--> PendingConfirmation
  PendingConfirmation --confirm_replace--> Idle  (old entry replaced)
  PendingConfirmation --cancel_pending-->  Idle  (storage unchanged)

The candidate lives in `pending_entries` (one row per user) so the decision
can arrive in a later request. confirm_replace deletes the most recent
stored entry of that day and inserts the candidate in one transaction; if
the delete fails nothing is committed and the candidate stays pending.
Two entries for one day are never committed together.

After every commit (save, replace, edit) the achievement engine and the
pattern detector run; edits also rebuild the weekly reviews covering the
edited entry's date.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from moodlog.core.calendar import now_local, to_local, today_local
from moodlog.core.catalog import AchievementDefinition, Catalog, get_catalog
from moodlog.core.config import settings
from moodlog.core.errors import (
    EntryNotFoundError,
    InvalidEntryError,
    NoPendingEntryError,
    ReplaceFailedError,
)
from moodlog.models.pending_entry import PendingEntry
from moodlog.services.achievements import AchievementService
from moodlog.services.insights import detect_patterns, reengagement_due
from moodlog.services.locks import user_lock
from moodlog.services.notifications import Notifier
from moodlog.services.records import (
    Impact,
    MoodRecord,
    ReviewRecord,
    encode_factors,
    entry_from_row,
    RecordDecodeError,
)
from moodlog.services.stores import EntryStore
from moodlog.services.weekly_review import WeeklyReviewService

logger = logging.getLogger("moodlog.entries")

MOOD_MIN = 0.0
MOOD_MAX = 10.0


# ---------------------------------------------------------------------------
# DTOs
# ---------------------------------------------------------------------------

@dataclass
class EntryDraft:
    """What the caller wants saved; `date` defaults to now."""
    mood_level: float
    factors: dict[str, Impact] = field(default_factory=dict)
    note: str = ""
    photo_asset_ref: Optional[str] = None
    date: Optional[datetime] = None


@dataclass
class EntryChanges:
    mood_level: float
    factors: dict[str, Impact] = field(default_factory=dict)
    note: str = ""
    photo_asset_ref: Optional[str] = None


class SaveStatus(str, enum.Enum):
    committed = "committed"
    pending = "pending"


@dataclass
class SaveOutcome:
    status: SaveStatus
    entry: MoodRecord
    existing: Optional[MoodRecord] = None
    new_achievements: list[AchievementDefinition] = field(default_factory=list)


@dataclass
class EditOutcome:
    entry: MoodRecord
    rebuilt_reviews: list[ReviewRecord] = field(default_factory=list)
    new_achievements: list[AchievementDefinition] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class EntryService:
    def __init__(self, db: Session, notifier: Notifier, catalog: Optional[Catalog] = None):
        self.db = db
        self.notifier = notifier
        self.catalog = catalog or get_catalog()
        self.entries = EntryStore(db)
        self.achievements = AchievementService(db, notifier, self.catalog)
        self.reviews = WeeklyReviewService(db, notifier)

    # --- validation ---

    def _validate(self, mood_level: float, factors: dict[str, Impact]) -> None:
        if not MOOD_MIN <= mood_level <= MOOD_MAX:
            raise InvalidEntryError(
                f"Mood level must be between {MOOD_MIN:g} and {MOOD_MAX:g}.", field="mood_level"
            )
        unknown = sorted(set(factors) - set(self.catalog.factors))
        if unknown:
            raise InvalidEntryError(
                f"Unknown factor(s): {', '.join(unknown)}.", field="factors"
            )

    # --- reads ---

    def list_entries(self, user_id: str) -> list[MoodRecord]:
        return self.entries.list_entries(user_id)

    def _same_day(self, user_id: str, day: date) -> list[MoodRecord]:
        return [r for r in self.entries.list_entries(user_id) if r.day == day]

    def _pending_row(self, user_id: str) -> Optional[PendingEntry]:
        return self.db.query(PendingEntry).filter(PendingEntry.user_id == user_id).first()

    def get_pending(self, user_id: str) -> Optional[MoodRecord]:
        row = self._pending_row(user_id)
        if row is None:
            return None
        try:
            return entry_from_row(row)
        except RecordDecodeError as exc:
            logger.warning("Pending entry for user %s is undecodable: %s", user_id, exc)
            return None

    # --- save ---

    def save_entry(self, user_id: str, draft: EntryDraft) -> SaveOutcome:
        self._validate(draft.mood_level, draft.factors)
        candidate = MoodRecord(
            date=to_local(draft.date) if draft.date else now_local(),
            mood_level=float(draft.mood_level),
            factors=dict(draft.factors),
            note=draft.note or "",
            photo_asset_ref=draft.photo_asset_ref,
        )

        with user_lock(user_id):
            same_day = self._same_day(user_id, candidate.day)
            if same_day:
                self._hold_pending(user_id, candidate)
                self.db.commit()
                logger.info("User %s already logged %s; awaiting replace-or-cancel",
                            user_id, candidate.day)
                existing = max(same_day, key=lambda r: r.date)
                return SaveOutcome(SaveStatus.pending, candidate, existing=existing)

            entry_id = self.entries.put_entry(user_id, candidate)
            self.db.commit()
            saved = replace(candidate, id=entry_id)
            logger.info("Saved entry %s for user %s on %s", entry_id, user_id, saved.day)

        unlocked = self._after_commit(user_id)
        return SaveOutcome(SaveStatus.committed, saved, new_achievements=unlocked)

    def _hold_pending(self, user_id: str, candidate: MoodRecord) -> None:
        row = self._pending_row(user_id)
        if row is None:
            row = PendingEntry(user_id=user_id)
            self.db.add(row)
        row.logged_at = candidate.date
        row.mood_level = candidate.mood_level
        row.factors = encode_factors(candidate.factors)
        row.note = candidate.note
        row.photo_asset_ref = candidate.photo_asset_ref
        self.db.flush()

    # --- duplicate-day decisions ---

    def confirm_replace(self, user_id: str) -> SaveOutcome:
        with user_lock(user_id):
            row = self._pending_row(user_id)
            if row is None:
                raise NoPendingEntryError()
            candidate = entry_from_row(row)
            candidate = replace(candidate, id=None)

            same_day = self._same_day(user_id, candidate.day)
            replaced: Optional[MoodRecord] = None
            if same_day:
                replaced = max(same_day, key=lambda r: r.date)
                if not self.entries.delete_entry(user_id, replaced.id):
                    self.db.rollback()
                    logger.warning("Replace for user %s on %s aborted: delete failed",
                                   user_id, candidate.day)
                    raise ReplaceFailedError(candidate.day, replaced.id)

            try:
                entry_id = self.entries.put_entry(user_id, candidate)
                self.db.delete(self._pending_row(user_id))
                self.db.commit()
            except SQLAlchemyError as exc:
                self.db.rollback()
                logger.exception("Replace for user %s on %s failed", user_id, candidate.day)
                raise ReplaceFailedError(candidate.day) from exc

            saved = replace(candidate, id=entry_id)
            logger.info("Replaced entry %s with %s for user %s on %s",
                        replaced.id if replaced else None, entry_id, user_id, saved.day)

        unlocked = self._after_commit(user_id)
        return SaveOutcome(SaveStatus.committed, saved, existing=replaced, new_achievements=unlocked)

    def cancel_pending(self, user_id: str) -> MoodRecord:
        with user_lock(user_id):
            row = self._pending_row(user_id)
            if row is None:
                raise NoPendingEntryError()
            discarded = self.get_pending(user_id)
            self.db.delete(row)
            self.db.commit()
        logger.info("Discarded pending entry for user %s", user_id)
        return discarded

    # --- edit ---

    def edit_entry(self, user_id: str, entry_id: int, changes: EntryChanges) -> EditOutcome:
        self._validate(changes.mood_level, changes.factors)
        with user_lock(user_id):
            existing = self.entries.get_entry(user_id, entry_id)
            if existing is None:
                raise EntryNotFoundError(entry_id)

            updated = replace(
                existing,
                mood_level=float(changes.mood_level),
                factors=dict(changes.factors),
                note=changes.note or "",
                photo_asset_ref=changes.photo_asset_ref,
            )
            self.entries.put_entry(user_id, updated)
            self.db.commit()
        logger.info("Edited entry %s for user %s", entry_id, user_id)

        rebuilt = self.reviews.rebuild_for_entry(user_id, updated.date)
        unlocked = self._after_commit(user_id)
        return EditOutcome(updated, rebuilt_reviews=rebuilt, new_achievements=unlocked)

    # --- post-commit hooks ---

    def _after_commit(self, user_id: str) -> list[AchievementDefinition]:
        records = self.entries.list_entries(user_id)
        result = self.achievements.evaluate_and_unlock(user_id, records)
        for insight in detect_patterns(records, settings.PATTERN_MIN_ENTRIES):
            self.notifier.pattern_insight(user_id, insight)
        return result.newly_unlocked

    def check_inactivity(self, user_id: str, today: Optional[date] = None) -> Optional[int]:
        """Emit a re-engagement notification on exactly 7 or 14 idle days."""
        days = reengagement_due(self.entries.list_entries(user_id), today or today_local())
        if days is not None:
            self.notifier.reengagement(user_id, days)
        return days
