"""
Request-scoped service construction.

Tests override `get_notifier` to capture emissions instead of writing them.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from moodlog.db.base import get_db
from moodlog.services.achievements import AchievementService
from moodlog.services.entries import EntryService
from moodlog.services.notifications import DatabaseNotifier, Notifier
from moodlog.services.weekly_review import WeeklyReviewService


def get_notifier(db: Session = Depends(get_db)) -> Notifier:
    return DatabaseNotifier(db)


def get_entry_service(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> EntryService:
    return EntryService(db, notifier)


def get_achievement_service(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> AchievementService:
    return AchievementService(db, notifier)


def get_review_service(
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
) -> WeeklyReviewService:
    return WeeklyReviewService(db, notifier)
