"""Pydantic schemas for request/response payloads.

All endpoints use a standardized JSON envelope: {"success": bool, "data": any, "error": str|None}
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from formcoach.analytics.stats import resolve_tz


class Envelope(BaseModel):
    success: bool = True
    data: Optional[dict] = None
    error: Optional[str] = None


class JointInput(BaseModel):
    name: str
    x: float
    y: float
    z: float = 0.0
    score: float = Field(ge=0.0, le=1.0, default=1.0)


class PostureInput(BaseModel):
    joints: List[JointInput] = Field(default_factory=list)
    # Camera frame counter; omitted means the server counts frames itself.
    frame_index: Optional[int] = Field(default=None, ge=0)


class SessionStartInput(BaseModel):
    exercise: Optional[str] = None
    plan: Optional[str] = None
    autoplay: bool = False


class ProfileInput(BaseModel):
    name: Optional[str] = None
    weekly_goal_minutes: Optional[int] = Field(default=None, ge=0)
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            resolve_tz(value)
        except (KeyError, ValueError) as exc:
            raise ValueError(f"unknown timezone: {value}") from exc
        return value


class ProfileOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    weekly_goal_minutes: int
    timezone: str


class SessionResultOutput(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    session_id: int = Field(validation_alias="id")
    started_at_utc: datetime
    ended_at_utc: datetime
    total_duration_sec: int
    exercises_completed: int
    exercises_planned: int
    average_form_score: float
    calories_burned: int
    total_reps: int
    plan_name: str | None = None
    exercise_name: str | None = None
