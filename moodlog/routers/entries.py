"""
Mood entry router.

GET    /users/{user_id}/entries                  — list entries (newest first)
POST   /users/{user_id}/entries                  — save; 409 when the day is already logged
GET    /users/{user_id}/entries/pending          — the candidate awaiting replace-or-cancel
POST   /users/{user_id}/entries/pending/confirm  — replace the day's entry with the candidate
DELETE /users/{user_id}/entries/pending          — discard the candidate
PATCH  /users/{user_id}/entries/{entry_id}       — edit in place, rebuilding affected reviews
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Response, status

from moodlog.core.errors import DuplicateDayError, NoPendingEntryError
from moodlog.routers.deps import get_entry_service
from moodlog.routers.serializers import (
    achievement_to_out,
    entry_to_response,
    optional_entry,
    review_to_response,
)
from moodlog.schemas.common import ErrorResponse
from moodlog.schemas.entry import (
    EditResponse,
    EntryCreate,
    EntryListResponse,
    EntryUpdate,
    PendingEntryResponse,
    SaveResponse,
)
from moodlog.services.entries import (
    EntryChanges,
    EntryDraft,
    EntryService,
    SaveOutcome,
    SaveStatus,
)

router = APIRouter(prefix="/users/{user_id}/entries", tags=["entries"])


def _save_to_response(outcome: SaveOutcome) -> SaveResponse:
    return SaveResponse(
        status=outcome.status.value,
        entry=entry_to_response(outcome.entry),
        replaced=optional_entry(outcome.existing),
        new_achievements=[achievement_to_out(d) for d in outcome.new_achievements],
    )


# ---------------------------------------------------------------------------
# GET /users/{user_id}/entries
# ---------------------------------------------------------------------------

@router.get("", response_model=EntryListResponse, summary="List mood entries (newest first)")
def list_entries(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: EntryService = Depends(get_entry_service),
):
    records = service.list_entries(user_id)
    return EntryListResponse(total=len(records), items=[entry_to_response(r) for r in records])


# ---------------------------------------------------------------------------
# POST /users/{user_id}/entries
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=SaveResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a mood entry",
    responses={
        201: {"description": "Entry committed."},
        409: {"model": ErrorResponse, "description": "Day already logged; candidate held pending."},
        422: {"model": ErrorResponse, "description": "Mood out of range or unknown factor."},
    },
)
def create_entry(
    payload: EntryCreate,
    user_id: str = Path(..., min_length=1, max_length=128),
    service: EntryService = Depends(get_entry_service),
):
    """
    Persist one mood entry.

    If an entry already exists for the same local calendar day the new one
    is **not** written. It is held as the pending candidate and the response
    is `409 DUPLICATE_DAY_PENDING`, carrying both the candidate and the
    existing entry. Resolve with `POST .../pending/confirm` or
    `DELETE .../pending`.
    """
    outcome = service.save_entry(
        user_id,
        EntryDraft(
            mood_level=payload.mood_level,
            factors=dict(payload.factors),
            note=payload.note,
            photo_asset_ref=payload.photo_asset_ref,
            date=payload.date,
        ),
    )
    if outcome.status is SaveStatus.pending:
        raise DuplicateDayError(
            outcome.entry.day,
            pending={
                "candidate": entry_to_response(outcome.entry).model_dump(),
                "existing": entry_to_response(outcome.existing).model_dump(),
            },
        )
    return _save_to_response(outcome)


# ---------------------------------------------------------------------------
# Pending candidate
# ---------------------------------------------------------------------------

@router.get(
    "/pending",
    response_model=PendingEntryResponse,
    summary="Show the entry awaiting replace-or-cancel",
    responses={409: {"model": ErrorResponse, "description": "Nothing pending."}},
)
def get_pending(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: EntryService = Depends(get_entry_service),
):
    pending = service.get_pending(user_id)
    if pending is None:
        raise NoPendingEntryError()
    return PendingEntryResponse(pending=entry_to_response(pending))


@router.post(
    "/pending/confirm",
    response_model=SaveResponse,
    summary="Replace the day's entry with the pending candidate",
    responses={
        409: {"model": ErrorResponse, "description": "Nothing pending."},
        500: {"model": ErrorResponse, "description": "Replace aborted; candidate still pending."},
    },
)
def confirm_pending(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: EntryService = Depends(get_entry_service),
):
    return _save_to_response(service.confirm_replace(user_id))


@router.delete(
    "/pending",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Discard the pending candidate",
    responses={409: {"model": ErrorResponse, "description": "Nothing pending."}},
)
def cancel_pending(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: EntryService = Depends(get_entry_service),
):
    service.cancel_pending(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# PATCH /users/{user_id}/entries/{entry_id}
# ---------------------------------------------------------------------------

@router.patch(
    "/{entry_id}",
    response_model=EditResponse,
    summary="Edit an entry in place",
    responses={
        404: {"model": ErrorResponse, "description": "Entry not found."},
        422: {"model": ErrorResponse, "description": "Mood out of range or unknown factor."},
    },
)
def edit_entry(
    payload: EntryUpdate,
    user_id: str = Path(..., min_length=1, max_length=128),
    entry_id: int = Path(..., ge=1),
    service: EntryService = Depends(get_entry_service),
):
    """
    Overwrite mood, factors, note and photo of an existing entry. The id and
    the date are kept. Every stored weekly review whose week contains the
    entry is recomputed and returned under `rebuilt_reviews`.
    """
    outcome = service.edit_entry(
        user_id,
        entry_id,
        EntryChanges(
            mood_level=payload.mood_level,
            factors=dict(payload.factors),
            note=payload.note,
            photo_asset_ref=payload.photo_asset_ref,
        ),
    )
    return EditResponse(
        entry=entry_to_response(outcome.entry),
        rebuilt_reviews=[review_to_response(r) for r in outcome.rebuilt_reviews],
        new_achievements=[achievement_to_out(d) for d in outcome.new_achievements],
    )
