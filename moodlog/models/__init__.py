from .mood_entry import MoodEntry
from .pending_entry import PendingEntry
from .achievement import UnlockedAchievement, UsedFactor
from .weekly_review import WeeklyReview
from .notification import NotificationEvent, NotificationPreference

__all__ = [
    "MoodEntry",
    "PendingEntry",
    "UnlockedAchievement",
    "UsedFactor",
    "WeeklyReview",
    "NotificationEvent",
    "NotificationPreference",
]
