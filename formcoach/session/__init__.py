"""Session package exports."""

from .clock import SessionClock
from .engine import CoachingEngine
from .machine import SessionState, SessionStatus, WorkoutSessionMachine
from .models import Exercise, ExercisePlan, SessionResult

__all__ = [
    "CoachingEngine",
    "SessionClock",
    "SessionState",
    "SessionStatus",
    "WorkoutSessionMachine",
    "Exercise",
    "ExercisePlan",
    "SessionResult",
]
