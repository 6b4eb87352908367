"""
Weekly review router.

GET  /users/{user_id}/reviews                  — displayable reviews, newest first
POST /users/{user_id}/reviews/check            — weekly trigger (idempotent per week)
GET  /users/{user_id}/reviews/current          — most recent review once it is valid
POST /users/{user_id}/reviews/{review_id}/viewed
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from moodlog.routers.deps import get_review_service
from moodlog.routers.serializers import review_to_response
from moodlog.schemas.common import ErrorResponse
from moodlog.schemas.review import ReviewCheckResponse, ReviewListResponse, ReviewResponse
from moodlog.services.weekly_review import WeeklyReviewService

router = APIRouter(prefix="/users/{user_id}/reviews", tags=["reviews"])


@router.get("", response_model=ReviewListResponse, summary="List weekly reviews (newest first)")
def list_reviews(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: WeeklyReviewService = Depends(get_review_service),
):
    reviews = service.list_reviews(user_id)
    return ReviewListResponse(total=len(reviews), items=[review_to_response(r) for r in reviews])


@router.post("/check", response_model=ReviewCheckResponse, summary="Run the weekly review trigger")
def check_reviews(
    user_id: str = Path(..., min_length=1, max_length=128),
    today: Optional[date] = Query(default=None, description="Reference day. Defaults to today (local)."),
    force: bool = Query(default=False, description="Skip the weekday check."),
    service: WeeklyReviewService = Depends(get_review_service),
):
    """
    On the review weekday, summarize the previous Monday-to-Monday week.

    | status | meaning |
    |---|---|
    | `created`         | a new review was stored and announced |
    | `not_trigger_day` | today is not the review weekday |
    | `already_exists`  | a review for that week is already stored |
    | `no_entries`      | the week has no entries, nothing stored |
    """
    result = service.check_and_generate(user_id, today=today, force=force)
    return ReviewCheckResponse(
        status=result.status.value,
        week_start=result.week_start.isoformat(),
        week_end=result.week_end.isoformat(),
        review=review_to_response(result.review) if result.review else None,
    )


@router.get(
    "/current",
    response_model=ReviewResponse,
    summary="Most recent review, waiting briefly until it is valid",
    responses={503: {"model": ErrorResponse, "description": "No valid review within the retry budget."}},
)
def current_review(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: WeeklyReviewService = Depends(get_review_service),
):
    return review_to_response(service.await_current_review(user_id))


@router.post(
    "/{review_id}/viewed",
    response_model=ReviewResponse,
    summary="Mark a review as viewed",
    responses={404: {"model": ErrorResponse, "description": "Review not found."}},
)
def mark_viewed(
    user_id: str = Path(..., min_length=1, max_length=128),
    review_id: str = Path(..., min_length=1, max_length=36),
    service: WeeklyReviewService = Depends(get_review_service),
):
    return review_to_response(service.mark_viewed(user_id, review_id))
