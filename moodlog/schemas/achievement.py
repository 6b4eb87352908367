from typing import Any
from pydantic import BaseModel, Field


class AchievementOut(BaseModel):
    id: str
    title: str
    description: str
    icon: str
    rule: str
    params: dict[str, Any] = Field(default_factory=dict)


class AchievementStatusOut(AchievementOut):
    unlocked: bool


class AchievementListResponse(BaseModel):
    total: int
    unlocked_count: int
    items: list[AchievementStatusOut]


class EvaluationResponse(BaseModel):
    newly_unlocked: list[AchievementOut]
    unlocked: list[str]
