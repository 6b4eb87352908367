"""
Notification emission.

The service never delivers pushes itself; it records what should be
delivered and leaves scheduling/delivery to the host. Emission is
fire-and-forget: a failure is logged and swallowed, never raised into the
operation that triggered it.

Notifier subclasses decide where events go:
  DatabaseNotifier   — append to `notification_events`, honouring the
                       user's NotificationPreference switches
  RecordingNotifier  — keep events in memory (tests, embedding hosts)
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from moodlog.core.catalog import AchievementDefinition
from moodlog.models.notification import NotificationEvent, NotificationPreference
from moodlog.services.records import ReviewRecord

logger = logging.getLogger("moodlog.notifications")


class NotificationKind:
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
    PATTERN_INSIGHT      = "pattern_insight"
    REENGAGEMENT         = "reengagement"
    WEEKLY_REVIEW_READY  = "weekly_review_ready"


ALL_KINDS = (
    NotificationKind.ACHIEVEMENT_UNLOCKED,
    NotificationKind.PATTERN_INSIGHT,
    NotificationKind.REENGAGEMENT,
    NotificationKind.WEEKLY_REVIEW_READY,
)

_DEFAULT_PREFERENCES: dict[str, Any] = {
    "daily_reminder_enabled": True,
    "daily_reminder_hour": 19,
    "daily_reminder_minute": 0,
    "weekly_review_enabled": True,
    "pattern_insights_enabled": True,
    "reengagement_enabled": True,
}


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class Notifier:
    """Composes the messages; subclasses implement `_enabled` and `_emit`."""

    def achievement_unlocked(self, user_id: str, definition: AchievementDefinition) -> None:
        self._send(
            user_id,
            NotificationKind.ACHIEVEMENT_UNLOCKED,
            title="Achievement Unlocked!",
            body=f"{definition.title}: {definition.description}",
            payload={"achievement_id": definition.id},
        )

    def pattern_insight(self, user_id: str, insight: str) -> None:
        self._send(
            user_id,
            NotificationKind.PATTERN_INSIGHT,
            title="Mood Pattern Discovered",
            body=insight,
        )

    def reengagement(self, user_id: str, days_inactive: int) -> None:
        if days_inactive <= 10:
            body = (
                f"It's been {days_inactive} days since you logged your mood. "
                "A quick check-in helps keep your insights accurate."
            )
        else:
            body = "Your mood tracker misses you! Log your mood today to maintain your progress."
        self._send(
            user_id,
            NotificationKind.REENGAGEMENT,
            title="We've Missed You!",
            body=body,
            payload={"days_inactive": days_inactive},
        )

    def weekly_review_ready(self, user_id: str, review: ReviewRecord) -> None:
        self._send(
            user_id,
            NotificationKind.WEEKLY_REVIEW_READY,
            title="Your Weekly Mood Summary",
            body="Your weekly mood review is ready. See your patterns and insights!",
            payload={"review_id": review.id, "week_start": review.week_start.isoformat()},
        )

    def _send(
        self,
        user_id: str,
        kind: str,
        title: str,
        body: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        try:
            if not self._enabled(user_id, kind):
                logger.debug("Notification %s suppressed for user %s", kind, user_id)
                return
            self._emit(user_id, kind, title, body, payload or {})
            logger.info("Notification %s emitted for user %s", kind, user_id)
        except Exception:
            logger.exception("Notification %s for user %s could not be emitted", kind, user_id)

    def _enabled(self, user_id: str, kind: str) -> bool:
        return True

    def _emit(self, user_id: str, kind: str, title: str, body: str, payload: dict) -> None:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------

@dataclass
class SentNotification:
    user_id: str
    kind: str
    title: str
    body: str
    payload: dict = field(default_factory=dict)


class RecordingNotifier(Notifier):
    def __init__(self, disabled_kinds: tuple[str, ...] = ()):
        self.sent: list[SentNotification] = []
        self.disabled_kinds = set(disabled_kinds)

    def _enabled(self, user_id: str, kind: str) -> bool:
        return kind not in self.disabled_kinds

    def _emit(self, user_id: str, kind: str, title: str, body: str, payload: dict) -> None:
        self.sent.append(SentNotification(user_id, kind, title, body, payload))

    def of_kind(self, kind: str) -> list[SentNotification]:
        return [n for n in self.sent if n.kind == kind]


class DatabaseNotifier(Notifier):
    """Writes one NotificationEvent per emission. Call after the triggering commit."""

    def __init__(self, db: Session):
        self.db = db

    def _enabled(self, user_id: str, kind: str) -> bool:
        prefs = get_preferences(self.db, user_id)
        if kind == NotificationKind.PATTERN_INSIGHT:
            return prefs.pattern_insights_enabled
        if kind == NotificationKind.REENGAGEMENT:
            return prefs.reengagement_enabled
        if kind == NotificationKind.WEEKLY_REVIEW_READY:
            return prefs.weekly_review_enabled
        return True

    def _emit(self, user_id: str, kind: str, title: str, body: str, payload: dict) -> None:
        try:
            self.db.add(NotificationEvent(
                user_id=user_id,
                kind=kind,
                title=title,
                body=body,
                payload=json.dumps(payload, default=str) if payload else None,
            ))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise


# ---------------------------------------------------------------------------
# Preferences and event queries
# ---------------------------------------------------------------------------

def get_preferences(db: Session, user_id: str) -> NotificationPreference:
    """Stored preferences, or an unsaved row holding the defaults."""
    prefs = (
        db.query(NotificationPreference)
        .filter(NotificationPreference.user_id == user_id)
        .first()
    )
    if prefs is None:
        prefs = NotificationPreference(user_id=user_id, **_DEFAULT_PREFERENCES)
    return prefs


def update_preferences(db: Session, user_id: str, changes: dict[str, Any]) -> NotificationPreference:
    prefs = (
        db.query(NotificationPreference)
        .filter(NotificationPreference.user_id == user_id)
        .first()
    )
    if prefs is None:
        prefs = NotificationPreference(user_id=user_id, **_DEFAULT_PREFERENCES)
        db.add(prefs)
    for key, value in changes.items():
        if key in _DEFAULT_PREFERENCES and value is not None:
            setattr(prefs, key, value)
    db.commit()
    db.refresh(prefs)
    return prefs


def get_notification_events(
    db: Session,
    user_id: str,
    kind: Optional[str] = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[int, list[NotificationEvent]]:
    """Return (total, page) of NotificationEvents ordered newest first."""
    q = db.query(NotificationEvent).filter(NotificationEvent.user_id == user_id)
    if kind:
        q = q.filter(NotificationEvent.kind == kind)
    total = q.count()
    items = (
        q.order_by(NotificationEvent.created_at.desc(), NotificationEvent.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, items
