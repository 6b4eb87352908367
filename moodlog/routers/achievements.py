"""
Achievements router.

GET  /users/{user_id}/achievements           — catalog with per-user unlock flags
POST /users/{user_id}/achievements/evaluate  — run the rule engine now
"""
from fastapi import APIRouter, Depends, Path

from moodlog.routers.deps import get_achievement_service
from moodlog.routers.serializers import achievement_to_out
from moodlog.schemas.achievement import (
    AchievementListResponse,
    AchievementStatusOut,
    EvaluationResponse,
)
from moodlog.services.achievements import AchievementService

router = APIRouter(prefix="/users/{user_id}/achievements", tags=["achievements"])


@router.get("", response_model=AchievementListResponse, summary="List achievements with unlock state")
def list_achievements(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: AchievementService = Depends(get_achievement_service),
):
    statuses = service.statuses(user_id)
    return AchievementListResponse(
        total=len(statuses),
        unlocked_count=sum(1 for s in statuses if s.unlocked),
        items=[
            AchievementStatusOut(**achievement_to_out(s.definition).model_dump(), unlocked=s.unlocked)
            for s in statuses
        ],
    )


@router.post("/evaluate", response_model=EvaluationResponse, summary="Evaluate achievement rules")
def evaluate_achievements(
    user_id: str = Path(..., min_length=1, max_length=128),
    service: AchievementService = Depends(get_achievement_service),
):
    """
    Evaluate every rule against the current entries. Unlocks are permanent
    and idempotent: a second call with unchanged entries unlocks nothing.
    """
    result = service.evaluate_and_unlock(user_id)
    return EvaluationResponse(
        newly_unlocked=[achievement_to_out(d) for d in result.newly_unlocked],
        unlocked=sorted(result.unlocked),
    )
