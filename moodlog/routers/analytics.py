"""
Analytics router: pure computations over the user's entry snapshot.

GET /users/{user_id}/analytics/trend?range=week|month
GET /users/{user_id}/analytics/factors
GET /users/{user_id}/analytics/weekly-averages
GET /users/{user_id}/analytics/summary
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from moodlog.core.calendar import today_local
from moodlog.db.base import get_db
from moodlog.schemas.analytics import (
    FactorImpactOut,
    FactorImpactResponse,
    SummaryResponse,
    TrendPointOut,
    TrendResponse,
    WeeklyAverageOut,
    WeeklyAveragesResponse,
)
from moodlog.services import streaks, trends
from moodlog.services.stores import EntryStore

router = APIRouter(prefix="/users/{user_id}/analytics", tags=["analytics"])


@router.get("/trend", response_model=TrendResponse, summary="Mood trend for the week or the last 30 days")
def mood_trend(
    user_id: str = Path(..., min_length=1, max_length=128),
    range: trends.TrendRange = Query(default=trends.TrendRange.week, description='"week" or "month"'),
    today: Optional[date] = Query(default=None, description="Reference day. Defaults to today (local)."),
    db: Session = Depends(get_db),
):
    """
    `week` covers Monday through Sunday of the reference day's week.
    `month` covers every entry at most 30 calendar days old. Points are
    sorted by date ascending.
    """
    points = trends.mood_trend(EntryStore(db).list_entries(user_id), range, today or today_local())
    return TrendResponse(
        range=range.value,
        points=[TrendPointOut(date=p.date.isoformat(), mood_level=p.mood_level) for p in points],
    )


@router.get("/factors", response_model=FactorImpactResponse, summary="Per-factor positive/negative counts")
def factor_impact(
    user_id: str = Path(..., min_length=1, max_length=128),
    db: Session = Depends(get_db),
):
    items = trends.factor_impact(EntryStore(db).list_entries(user_id))
    return FactorImpactResponse(items=[
        FactorImpactOut(name=i.name, positive=i.positive, negative=i.negative, net_impact=i.net_impact)
        for i in items
    ])


@router.get("/weekly-averages", response_model=WeeklyAveragesResponse, summary="Average mood per ISO week")
def weekly_averages(
    user_id: str = Path(..., min_length=1, max_length=128),
    db: Session = Depends(get_db),
):
    items = trends.weekly_averages(EntryStore(db).list_entries(user_id))
    return WeeklyAveragesResponse(items=[
        WeeklyAverageOut(week=w.week, average=w.average, count=w.count) for w in items
    ])


@router.get("/summary", response_model=SummaryResponse, summary="Streaks, consistency and insights")
def summary(
    user_id: str = Path(..., min_length=1, max_length=128),
    today: Optional[date] = Query(default=None, description="Reference day. Defaults to today (local)."),
    db: Session = Depends(get_db),
):
    records = EntryStore(db).list_entries(user_id)
    today = today or today_local()
    return SummaryResponse(
        total_entries=len(records),
        current_streak=streaks.current_streak(records),
        longest_streak=streaks.longest_streak(records),
        consistency=trends.consistency(records, today),
        insights=trends.insights(records, today),
    )
