"""Data access layer utilities."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from formcoach.core.config import get_settings
from formcoach.session.models import SessionResult

from .models import SessionResultRow, UserProfile


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def add_session_result(db: Session, result: SessionResult) -> SessionResultRow:
    row = SessionResultRow(
        started_at_utc=_naive_utc(result.started_at),
        ended_at_utc=_naive_utc(result.ended_at),
        total_duration_sec=result.total_duration_seconds,
        exercises_completed=result.exercises_completed,
        exercises_planned=result.exercises_planned,
        average_form_score=result.average_form_score,
        calories_burned=result.calories_burned,
        total_reps=result.total_reps,
        plan_name=result.plan_name,
        exercise_name=result.exercise_name,
        form_scores=",".join(f"{s:.6f}" for s in result.form_scores),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def to_session_result(row: SessionResultRow) -> SessionResult:
    scores = tuple(float(s) for s in (row.form_scores or "").split(",") if s)
    return SessionResult(
        started_at=row.started_at_utc.replace(tzinfo=timezone.utc),
        ended_at=row.ended_at_utc.replace(tzinfo=timezone.utc),
        total_duration_seconds=row.total_duration_sec or 0,
        exercises_completed=row.exercises_completed or 0,
        exercises_planned=row.exercises_planned or 0,
        average_form_score=row.average_form_score or 0.0,
        calories_burned=row.calories_burned or 0,
        total_reps=row.total_reps or 0,
        plan_name=row.plan_name,
        exercise_name=row.exercise_name,
        form_scores=scores,
    )


def get_last_session_result(db: Session) -> Optional[SessionResultRow]:
    return (
        db.query(SessionResultRow)
        .order_by(SessionResultRow.started_at_utc.desc(), SessionResultRow.id.desc())
        .first()
    )


def get_session_results(db: Session, limit: Optional[int] = None) -> list[SessionResultRow]:
    """Newest first. ``limit=None`` returns the full history."""
    q = db.query(SessionResultRow).order_by(
        SessionResultRow.started_at_utc.desc(), SessionResultRow.id.desc()
    )
    if limit is not None:
        q = q.limit(limit)
    return list(q)


def get_user_profile(db: Session) -> UserProfile:
    profile = db.query(UserProfile).filter(UserProfile.id == 1).first()
    if not profile:
        settings = get_settings()
        profile = UserProfile(
            id=1,
            weekly_goal_minutes=settings.weekly_goal_minutes,
            timezone=settings.timezone,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile


def save_user_profile(db: Session, **kwargs) -> UserProfile:
    profile = get_user_profile(db)
    for k, v in kwargs.items():
        if hasattr(profile, k) and v is not None:
            setattr(profile, k, v)
    db.add(profile)
    db.commit()
    db.refresh(profile)
    return profile
