"""
Notification router.

GET  /users/{user_id}/notifications/preferences
PUT  /users/{user_id}/notifications/preferences
GET  /users/{user_id}/notifications/events
POST /users/{user_id}/reengagement/check
"""
from __future__ import annotations

import json
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from moodlog.db.base import get_db
from moodlog.models.notification import NotificationEvent
from moodlog.routers.deps import get_entry_service
from moodlog.schemas.notification import (
    NotificationEventListResponse,
    NotificationEventOut,
    NotificationPreferencesOut,
    NotificationPreferencesUpdate,
    ReengagementResponse,
)
from moodlog.services.entries import EntryService
from moodlog.services.notifications import (
    NotificationKind,
    get_notification_events,
    get_preferences,
    update_preferences,
)

router = APIRouter(prefix="/users/{user_id}", tags=["notifications"])


def _parse_payload(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return None


def _event_to_response(ev: NotificationEvent) -> NotificationEventOut:
    return NotificationEventOut(
        id=ev.id,
        kind=ev.kind,
        title=ev.title,
        body=ev.body,
        payload=_parse_payload(ev.payload),
        created_at=ev.created_at.isoformat() if ev.created_at else "",
    )


# ---------------------------------------------------------------------------
# Preferences
# ---------------------------------------------------------------------------

@router.get("/notifications/preferences", response_model=NotificationPreferencesOut,
            summary="Notification preferences (defaults when never set)")
def read_preferences(
    user_id: str = Path(..., min_length=1, max_length=128),
    db: Session = Depends(get_db),
):
    return NotificationPreferencesOut.model_validate(get_preferences(db, user_id))


@router.put("/notifications/preferences", response_model=NotificationPreferencesOut,
            summary="Update notification preferences")
def write_preferences(
    payload: NotificationPreferencesUpdate,
    user_id: str = Path(..., min_length=1, max_length=128),
    db: Session = Depends(get_db),
):
    """Only the fields present in the body are changed."""
    prefs = update_preferences(db, user_id, payload.model_dump(exclude_unset=True))
    return NotificationPreferencesOut.model_validate(prefs)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

@router.get("/notifications/events", response_model=NotificationEventListResponse,
            summary="Emitted notifications (newest first)")
def list_events(
    user_id: str = Path(..., min_length=1, max_length=128),
    kind: Optional[str] = Query(
        default=None,
        description=(
            f'Filter by kind: "{NotificationKind.ACHIEVEMENT_UNLOCKED}", '
            f'"{NotificationKind.PATTERN_INSIGHT}", '
            f'"{NotificationKind.REENGAGEMENT}", '
            f'"{NotificationKind.WEEKLY_REVIEW_READY}". Omit for all.'
        ),
    ),
    limit: int = Query(default=50, ge=1, le=200, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    db: Session = Depends(get_db),
):
    total, items = get_notification_events(db, user_id, kind=kind, limit=limit, offset=offset)
    return NotificationEventListResponse(total=total, items=[_event_to_response(e) for e in items])


# ---------------------------------------------------------------------------
# POST /users/{user_id}/reengagement/check
# ---------------------------------------------------------------------------

@router.post("/reengagement/check", response_model=ReengagementResponse,
             summary="Send a re-engagement reminder after 7 or 14 idle days")
def check_reengagement(
    user_id: str = Path(..., min_length=1, max_length=128),
    today: Optional[date] = Query(default=None, description="Reference day. Defaults to today (local)."),
    service: EntryService = Depends(get_entry_service),
):
    days = service.check_inactivity(user_id, today)
    return ReengagementResponse(days_inactive=days, notified=days is not None)
