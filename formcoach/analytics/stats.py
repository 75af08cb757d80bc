"""Statistics over finished sessions: totals, streaks, achievements, charts.

Everything here is a pure function of the session history; nothing is
stored between calls. Naive datetimes are treated as UTC.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence
from zoneinfo import ZoneInfo

from formcoach.session.models import SessionResult


class TimeRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL_TIME = "all"

    @property
    def window(self) -> Optional[timedelta]:
        return {
            TimeRange.WEEK: timedelta(days=7),
            TimeRange.MONTH: timedelta(days=30),
            TimeRange.YEAR: timedelta(days=365),
        }.get(self)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return _aware(now) if now is not None else datetime.now(timezone.utc)


def resolve_tz(name: Optional[str]) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def session_day(result: SessionResult, tz: tzinfo = timezone.utc) -> date:
    return _aware(result.started_at).astimezone(tz).date()


def filter_by_range(
    results: Iterable[SessionResult], time_range: TimeRange, now: Optional[datetime] = None
) -> List[SessionResult]:
    window = time_range.window
    if window is None:
        return list(results)
    cutoff = _now(now) - window
    return [r for r in results if _aware(r.started_at) >= cutoff]


@dataclass(frozen=True)
class StreakSummary:
    current: int = 0
    longest: int = 0


def compute_streaks(results: Iterable[SessionResult], tz: tzinfo = timezone.utc) -> StreakSummary:
    """Walk session days newest first.

    A one-day gap extends the run, a larger gap closes it, a same-day session
    neither extends nor breaks it. ``current`` is the run holding the newest
    session, ``longest`` the maximum over all runs.
    """
    days = sorted((session_day(r, tz) for r in results), reverse=True)
    streak = 0
    longest = 0
    current: Optional[int] = None
    last: Optional[date] = None
    for day in days:
        if last is None:
            streak = 1
        else:
            gap = (last - day).days
            if gap == 1:
                streak += 1
            elif gap > 1:
                if current is None:
                    current = streak
                longest = max(longest, streak)
                streak = 1
        last = day
    longest = max(longest, streak)
    return StreakSummary(current=streak if current is None else current, longest=longest)


@dataclass(frozen=True)
class SessionStats:
    time_range: TimeRange
    total_workouts: int
    total_minutes: int
    total_calories: int
    average_form_score: float
    current_streak: int
    longest_streak: int

    def to_dict(self) -> dict:
        data = asdict(self)
        data["time_range"] = self.time_range.value
        return data


def summarize(
    results: Sequence[SessionResult],
    time_range: TimeRange = TimeRange.WEEK,
    now: Optional[datetime] = None,
    tz: tzinfo = timezone.utc,
) -> SessionStats:
    """Totals over the range; streaks always use the full history."""
    filtered = filter_by_range(results, time_range, now)
    scores = [r.average_form_score for r in filtered if r.average_form_score > 0]
    streaks = compute_streaks(results, tz)
    return SessionStats(
        time_range=time_range,
        total_workouts=len(filtered),
        total_minutes=sum(r.minutes for r in filtered),
        total_calories=sum(r.calories_burned for r in filtered),
        average_form_score=sum(scores) / len(scores) if scores else 0.0,
        current_streak=streaks.current,
        longest_streak=streaks.longest,
    )


# --- Achievements -------------------------------------------------------------


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    icon: str
    unlocked: bool = True


@dataclass(frozen=True)
class _Rule:
    id: str
    name: str
    description: str
    icon: str
    check: Callable[[SessionStats], bool] = field(repr=False)


_RULES = (
    _Rule("first_workout", "First Steps", "Complete your first workout", "figure.walk",
          lambda s: s.total_workouts >= 1),
    _Rule("week_streak", "Week Warrior", "7-day workout streak", "flame.fill",
          lambda s: s.current_streak >= 7),
    _Rule("month_streak", "Monthly Master", "30-day workout streak", "star.fill",
          lambda s: s.current_streak >= 30),
    _Rule("perfect_form", "Perfect Form", "Average form score above 90%", "checkmark.seal.fill",
          lambda s: s.average_form_score >= 0.9),
    _Rule("ten_workouts", "Getting Serious", "Complete 10 workouts", "10.circle.fill",
          lambda s: s.total_workouts >= 10),
    _Rule("fifty_workouts", "Dedicated", "Complete 50 workouts", "50.circle.fill",
          lambda s: s.total_workouts >= 50),
)


def all_achievements(stats: SessionStats) -> List[Achievement]:
    return [
        Achievement(r.id, r.name, r.description, r.icon, unlocked=r.check(stats))
        for r in _RULES
    ]


def evaluate_achievements(stats: SessionStats) -> List[Achievement]:
    """Unlocked achievements, recomputed from scratch on every call."""
    return [a for a in all_achievements(stats) if a.unlocked]


# --- Chart data -----------------------------------------------------------------


@dataclass(frozen=True)
class DailyStats:
    date: date
    day_name: str
    minutes: int
    calories: int
    workout_count: int


@dataclass(frozen=True)
class WeeklyStats:
    week_start: datetime
    week_number: int
    minutes: int
    calories: int
    workout_count: int


def daily_breakdown(
    results: Sequence[SessionResult], now: Optional[datetime] = None, tz: tzinfo = timezone.utc
) -> List[DailyStats]:
    """Last seven calendar days, oldest first, today included."""
    today = _now(now).astimezone(tz).date()
    out = []
    for days_ago in range(6, -1, -1):
        day = today - timedelta(days=days_ago)
        same_day = [r for r in results if session_day(r, tz) == day]
        out.append(
            DailyStats(
                date=day,
                day_name=day.strftime("%a"),
                minutes=sum(r.minutes for r in same_day),
                calories=sum(r.calories_burned for r in same_day),
                workout_count=len(same_day),
            )
        )
    return out


def weekly_breakdown(
    results: Sequence[SessionResult], now: Optional[datetime] = None
) -> List[WeeklyStats]:
    """Four rolling seven-day windows ending at ``now``, oldest first.

    Each window is open at its start and closed at its end.
    """
    current = _now(now)
    out = []
    for weeks_ago in range(3, -1, -1):
        end = current - timedelta(weeks=weeks_ago)
        start = end - timedelta(days=7)
        window = [r for r in results if start < _aware(r.started_at) <= end]
        out.append(
            WeeklyStats(
                week_start=start,
                week_number=start.isocalendar()[1],
                minutes=sum(r.minutes for r in window),
                calories=sum(r.calories_burned for r in window),
                workout_count=len(window),
            )
        )
    return out


def today_minutes(
    results: Iterable[SessionResult], now: Optional[datetime] = None, tz: tzinfo = timezone.utc
) -> int:
    today = _now(now).astimezone(tz).date()
    return sum(r.minutes for r in results if session_day(r, tz) == today)


def weekly_minutes(
    results: Iterable[SessionResult], now: Optional[datetime] = None, tz: tzinfo = timezone.utc
) -> int:
    local_now = _now(now).astimezone(tz)
    start_of_today = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    cutoff = start_of_today - timedelta(days=7)
    return sum(r.minutes for r in results if _aware(r.started_at) >= cutoff)


def weekly_goal_progress(minutes: int, goal_minutes: int) -> float:
    if goal_minutes <= 0:
        return 0.0
    return min(minutes / goal_minutes, 1.0)
