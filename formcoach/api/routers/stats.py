"""Progress statistics endpoint.

Loads the full session history, then derives totals, streaks, achievements
and chart series for the requested range.
"""
from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from formcoach.analytics.stats import (
    TimeRange,
    all_achievements,
    daily_breakdown,
    resolve_tz,
    summarize,
    today_minutes,
    weekly_breakdown,
    weekly_goal_progress,
    weekly_minutes,
)
from formcoach.api.schemas import Envelope
from formcoach.core.dal import get_session_results, get_user_profile, to_session_result
from formcoach.core.db import get_db

router = APIRouter()


@router.get("/stats", response_model=Envelope)
def get_stats(
    time_range: TimeRange = Query(TimeRange.WEEK, alias="range"),
    db: Session = Depends(get_db),
) -> Envelope:
    profile = get_user_profile(db)
    tz = resolve_tz(profile.timezone)
    results = [to_session_result(row) for row in get_session_results(db)]

    summary = summarize(results, time_range, tz=tz)
    week_minutes = weekly_minutes(results, tz=tz)
    daily = [
        {**asdict(d), "date": d.date.isoformat()} for d in daily_breakdown(results, tz=tz)
    ]
    weekly = [
        {**asdict(w), "week_start": w.week_start.isoformat()} for w in weekly_breakdown(results)
    ]
    return Envelope(
        success=True,
        data={
            "summary": summary.to_dict(),
            "achievements": [asdict(a) for a in all_achievements(summary)],
            "daily": daily,
            "weekly": weekly,
            "today_minutes": today_minutes(results, tz=tz),
            "weekly_minutes": week_minutes,
            "weekly_goal_minutes": profile.weekly_goal_minutes,
            "weekly_goal_progress": weekly_goal_progress(week_minutes, profile.weekly_goal_minutes),
        },
    )
