"""
Analytics response schemas.
"""
from pydantic import BaseModel, Field


class TrendPointOut(BaseModel):
    date: str
    mood_level: float


class TrendResponse(BaseModel):
    range: str
    points: list[TrendPointOut]


class FactorImpactOut(BaseModel):
    name: str
    positive: int
    negative: int
    net_impact: int


class FactorImpactResponse(BaseModel):
    items: list[FactorImpactOut]


class WeeklyAverageOut(BaseModel):
    week: str = Field(description='"W<iso week>\\n<month>" grouping key.')
    average: float
    count: int


class WeeklyAveragesResponse(BaseModel):
    items: list[WeeklyAverageOut]


class SummaryResponse(BaseModel):
    total_entries: int
    current_streak: int
    longest_streak: int
    consistency: float = Field(ge=0, le=1)
    insights: list[str]
