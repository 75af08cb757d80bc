from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from formcoach.analytics.stats import (
    TimeRange,
    compute_streaks,
    daily_breakdown,
    evaluate_achievements,
    filter_by_range,
    resolve_tz,
    summarize,
    today_minutes,
    weekly_breakdown,
    weekly_goal_progress,
)
from formcoach.session import SessionResult

NOW = datetime(2024, 3, 15, 18, 0, tzinfo=timezone.utc)


def _result(start: datetime, minutes: int = 20, score: float = 0.8, calories: int = 0) -> SessionResult:
    return SessionResult(
        started_at=start,
        ended_at=start + timedelta(minutes=minutes),
        total_duration_seconds=minutes * 60,
        exercises_completed=1,
        exercises_planned=1,
        average_form_score=score,
        calories_burned=calories or minutes * 7,
    )


def _on_days(*days: int) -> list[SessionResult]:
    return [_result(datetime(2024, 3, d, 8, 0, tzinfo=timezone.utc)) for d in days]


def test_streak_with_skipped_day():
    streaks = compute_streaks(_on_days(1, 2, 3, 5))
    assert streaks.longest == 3
    assert streaks.current == 1


def test_same_day_sessions_do_not_extend_streak():
    results = _on_days(1, 2, 2, 3)
    assert compute_streaks(results).longest == 3
    assert compute_streaks(results).current == 3


def test_empty_history():
    streaks = compute_streaks([])
    assert (streaks.current, streaks.longest) == (0, 0)
    stats = summarize([], TimeRange.ALL_TIME, now=NOW)
    assert stats.total_workouts == 0
    assert stats.average_form_score == 0.0
    assert evaluate_achievements(stats) == []


def test_streak_days_use_the_given_timezone():
    # 03:00 UTC on the 2nd is still the 1st in New York.
    results = [
        _result(datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)),
        _result(datetime(2024, 3, 2, 3, 0, tzinfo=timezone.utc)),
    ]
    assert compute_streaks(results).longest == 2
    assert compute_streaks(results, ZoneInfo("America/New_York")).longest == 1


def test_summary_respects_range():
    results = [
        _result(NOW - timedelta(days=1), minutes=30, score=0.9),
        _result(NOW - timedelta(days=3), minutes=15, score=0.0),
        _result(NOW - timedelta(days=20), minutes=45, score=0.7),
    ]
    week = summarize(results, TimeRange.WEEK, now=NOW)
    assert week.total_workouts == 2
    assert week.total_minutes == 45
    assert week.total_calories == 45 * 7
    # Sessions without scored reps do not drag the average down.
    assert week.average_form_score == pytest.approx(0.9)

    month = summarize(results, TimeRange.MONTH, now=NOW)
    assert month.total_workouts == 3
    assert month.average_form_score == pytest.approx(0.8)
    assert month.to_dict()["time_range"] == "month"


def test_filter_treats_naive_datetimes_as_utc():
    naive = _result(datetime(2024, 3, 14, 12, 0))
    assert filter_by_range([naive], TimeRange.WEEK, now=NOW) == [naive]
    assert filter_by_range([naive], TimeRange.ALL_TIME) == [naive]


def test_achievements_are_recomputed():
    results = [_result(NOW - timedelta(days=d), score=0.95) for d in range(7)]
    stats = summarize(results, TimeRange.ALL_TIME, now=NOW)
    unlocked = {a.id for a in evaluate_achievements(stats)}
    assert unlocked == {"first_workout", "week_streak", "perfect_form"}

    fewer = summarize(results[:1], TimeRange.ALL_TIME, now=NOW)
    assert {a.id for a in evaluate_achievements(fewer)} == {"first_workout", "perfect_form"}


def test_daily_breakdown_covers_last_seven_days():
    results = [_result(NOW - timedelta(hours=2), minutes=10), _result(NOW - timedelta(days=6), minutes=5)]
    days = daily_breakdown(results, now=NOW)
    assert len(days) == 7
    assert days[-1].date == NOW.date()
    assert days[-1].minutes == 10
    assert days[0].minutes == 5
    assert days[-1].day_name == "Fri"
    assert sum(d.workout_count for d in days) == 2


def test_weekly_breakdown_and_goal():
    results = [_result(NOW - timedelta(days=2), minutes=60), _result(NOW - timedelta(days=10), minutes=30)]
    weeks = weekly_breakdown(results, now=NOW)
    assert len(weeks) == 4
    assert [w.minutes for w in weeks] == [0, 0, 30, 60]
    assert today_minutes(results, now=NOW) == 0
    assert weekly_goal_progress(75, 150) == 0.5
    assert weekly_goal_progress(300, 150) == 1.0
    assert weekly_goal_progress(10, 0) == 0.0


def test_resolve_tz():
    assert resolve_tz(None) is timezone.utc
    assert resolve_tz("utc") is timezone.utc
    assert resolve_tz("Europe/Madrid").key == "Europe/Madrid"
