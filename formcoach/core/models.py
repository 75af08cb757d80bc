"""ORM models for persistence."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text

from .db import Base


def _utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionResultRow(Base):
    __tablename__ = "session_result"

    id = Column(Integer, primary_key=True, autoincrement=True)
    started_at_utc = Column(DateTime, nullable=False, index=True)
    ended_at_utc = Column(DateTime, nullable=False)
    total_duration_sec = Column(Integer, default=0)
    exercises_completed = Column(Integer, default=0)
    exercises_planned = Column(Integer, default=0)
    average_form_score = Column(Float, default=0.0)
    calories_burned = Column(Integer, default=0)
    total_reps = Column(Integer, default=0)
    plan_name = Column(String, nullable=True)
    exercise_name = Column(String, nullable=True)
    # Comma separated per-rep scores.
    form_scores = Column(Text, default="")
    created_at_utc = Column(DateTime, default=_utcnow_naive)


class UserProfile(Base):
    __tablename__ = "user_profile"

    id = Column(Integer, primary_key=True, default=1)
    name = Column(String, default="Athlete")
    weekly_goal_minutes = Column(Integer, default=150)
    timezone = Column(String, default="UTC")
