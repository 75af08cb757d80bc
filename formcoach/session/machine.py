"""Workout session state machine.

Drives exercise -> rep -> set -> rest -> next exercise -> completion from two
inputs: user/detector events (play, pause, rep_completed...) and 1 Hz ticks.
The machine itself is not thread-safe; callers serialize access (see
``formcoach.session.engine.CoachingEngine``).
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple, Union

from loguru import logger

from formcoach.core.config import get_settings
from formcoach.core.errors import InvalidTransition
from formcoach.session.models import Exercise, ExercisePlan, SessionResult
from formcoach.vision.scoring import Feedback, FormScore


class SessionStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    RESTING = "resting"
    COMPLETED = "completed"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _mmss(seconds: int) -> str:
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


@dataclass(frozen=True)
class SessionState:
    """Read-only snapshot handed to display collaborators."""

    status: SessionStatus
    exercise_name: Optional[str]
    plan_name: Optional[str]
    exercise_index: int
    exercises_planned: int
    exercises_completed: int
    duration_seconds: int
    elapsed_seconds: int
    remaining_seconds: int
    current_rep: int
    target_reps: Optional[int]
    current_set: int
    target_sets: int
    rest_remaining_seconds: int
    form_score_history: Tuple[float, ...]
    average_form_score: float
    current_form_score: float
    feedback: Feedback
    total_reps: int
    total_elapsed_seconds: int
    session_start: Optional[datetime]

    @property
    def is_paused(self) -> bool:
        return self.status is SessionStatus.PAUSED

    @property
    def progress(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return self.elapsed_seconds / self.duration_seconds

    @property
    def timer_display(self) -> str:
        return _mmss(self.remaining_seconds)

    @property
    def rest_timer_display(self) -> str:
        return _mmss(self.rest_remaining_seconds)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "exercise": self.exercise_name,
            "plan": self.plan_name,
            "exercise_index": self.exercise_index,
            "exercises_planned": self.exercises_planned,
            "exercises_completed": self.exercises_completed,
            "duration_sec": self.duration_seconds,
            "elapsed_sec": self.elapsed_seconds,
            "remaining_sec": self.remaining_seconds,
            "current_rep": self.current_rep,
            "target_reps": self.target_reps,
            "current_set": self.current_set,
            "target_sets": self.target_sets,
            "rest_remaining_sec": self.rest_remaining_seconds,
            "average_form_score": round(self.average_form_score, 4),
            "current_form_score": self.current_form_score,
            "feedback_code": self.feedback.value,
            "feedback": self.feedback.message,
            "total_reps": self.total_reps,
            "total_elapsed_sec": self.total_elapsed_seconds,
            "progress": round(self.progress, 4),
            "timer": self.timer_display,
            "rest_timer": self.rest_timer_display,
            "started_at": self.session_start.isoformat() if self.session_start else None,
        }


SessionTarget = Union[Exercise, ExercisePlan, Sequence[Exercise]]


class WorkoutSessionMachine:
    """One workout session from ``start()`` to its single ``SessionResult``.

    Events sent in a state that does not accept them are ignored and return
    False. Pass ``strict=True`` to raise ``InvalidTransition`` instead.
    """

    def __init__(
        self,
        *,
        calories_per_minute: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
        on_complete: Optional[Callable[[SessionResult], None]] = None,
        strict: bool = False,
    ) -> None:
        if calories_per_minute is None:
            calories_per_minute = get_settings().calories_per_minute
        self.calories_per_minute = int(calories_per_minute)
        self.strict = strict
        self._clock = clock
        self._on_complete = on_complete

        self.status = SessionStatus.IDLE
        self.plan: Optional[ExercisePlan] = None
        self.exercise: Optional[Exercise] = None
        self.exercise_index = 0
        self.elapsed_seconds = 0
        self.remaining_seconds = 0
        self.current_rep = 0
        self.current_set = 1
        self.rest_remaining_seconds = 0
        self.form_score_history: List[float] = []
        self.average_form_score = 0.0
        self.current_score = FormScore.none()
        self.total_reps = 0
        self.total_elapsed_seconds = 0
        self.exercises_completed = 0
        self.session_start: Optional[datetime] = None
        self.result: Optional[SessionResult] = None
        self._paused_from: Optional[SessionStatus] = None

    # --- Queries ----------------------------------------------------------

    @property
    def started(self) -> bool:
        return self.session_start is not None

    @property
    def exercises_planned(self) -> int:
        return len(self.plan.exercises) if self.plan else (1 if self.exercise else 0)

    @property
    def is_ticking(self) -> bool:
        return self.status in (SessionStatus.RUNNING, SessionStatus.RESTING)

    def snapshot(self) -> SessionState:
        ex = self.exercise
        return SessionState(
            status=self.status,
            exercise_name=ex.name if ex else None,
            plan_name=self.plan.name if self.plan else None,
            exercise_index=self.exercise_index,
            exercises_planned=self.exercises_planned,
            exercises_completed=self.exercises_completed,
            duration_seconds=ex.duration_seconds if ex else 0,
            elapsed_seconds=self.elapsed_seconds,
            remaining_seconds=self.remaining_seconds,
            current_rep=self.current_rep,
            target_reps=ex.reps if ex else None,
            current_set=self.current_set,
            target_sets=ex.total_sets if ex else 1,
            rest_remaining_seconds=self.rest_remaining_seconds,
            form_score_history=tuple(self.form_score_history),
            average_form_score=self.average_form_score,
            current_form_score=self.current_score.score,
            feedback=self.current_score.feedback,
            total_reps=self.total_reps,
            total_elapsed_seconds=self.total_elapsed_seconds,
            session_start=self.session_start,
        )

    # --- Events -----------------------------------------------------------

    def start(self, target: SessionTarget) -> bool:
        """Load an exercise or plan. The session stays IDLE until ``play()``."""
        if self.started:
            return self._reject("start")
        if isinstance(target, Exercise):
            plan, first = None, target.validate()
        else:
            if not isinstance(target, ExercisePlan):
                target = ExercisePlan(name="Custom", exercises=tuple(target))
            plan = target.validate()
            first = plan.exercises[0]

        self.plan = plan
        self.exercise = first
        self.exercise_index = 0
        self.form_score_history = []
        self.average_form_score = 0.0
        self.total_reps = 0
        self.total_elapsed_seconds = 0
        self.exercises_completed = 0
        self._reset_exercise()
        self.status = SessionStatus.IDLE
        self.session_start = self._clock()
        logger.info(
            "Session loaded exercise={} plan={} planned={}",
            first.name,
            plan.name if plan else None,
            self.exercises_planned,
        )
        return True

    def play(self) -> bool:
        if not self.started or self.status is SessionStatus.COMPLETED:
            return self._reject("play")
        if self.status is SessionStatus.PAUSED:
            return self.resume()
        if self.status is SessionStatus.IDLE:
            self.status = SessionStatus.RUNNING
            logger.info("Session playing exercise={}", self.exercise.name if self.exercise else None)
        return True

    def pause(self) -> bool:
        if not self.is_ticking:
            return self._reject("pause")
        self._paused_from = self.status
        self.status = SessionStatus.PAUSED
        logger.info("Session paused")
        return True

    def resume(self) -> bool:
        if self.status is not SessionStatus.PAUSED:
            return self._reject("resume")
        self.status = self._paused_from or SessionStatus.RUNNING
        self._paused_from = None
        logger.info("Session resumed status={}", self.status.value)
        return True

    def stop(self) -> Optional[SessionResult]:
        """Finalize the session. Repeated calls return the same result."""
        if self.status is SessionStatus.COMPLETED:
            return self.result
        if not self.started:
            self._reject("stop")
            return None
        ended = self._clock()
        total = self.total_elapsed_seconds
        self.result = SessionResult(
            started_at=self.session_start,
            ended_at=ended,
            total_duration_seconds=total,
            exercises_completed=self.exercises_completed,
            exercises_planned=self.exercises_planned,
            average_form_score=self.average_form_score,
            calories_burned=self.calories_per_minute * (total // 60),
            total_reps=self.total_reps,
            plan_name=self.plan.name if self.plan else None,
            exercise_name=self.exercise.name if self.exercise else None,
            form_scores=tuple(self.form_score_history),
        )
        self.status = SessionStatus.COMPLETED
        self._paused_from = None
        logger.info(
            "Session completed duration={} exercises={}/{} avg_form={:.2f}",
            total,
            self.exercises_completed,
            self.exercises_planned,
            self.average_form_score,
        )
        if self._on_complete is not None:
            self._on_complete(self.result)
        return self.result

    def record_score(self, form_score: FormScore) -> bool:
        """Store the latest frame score; it is appended on the next rep."""
        if self.status is SessionStatus.COMPLETED:
            return self._reject("record_score")
        self.current_score = form_score
        return True

    def rep_completed(self) -> bool:
        if self.status is not SessionStatus.RUNNING:
            return self._reject("rep_completed")
        assert self.exercise is not None
        self.current_rep += 1
        self.total_reps += 1
        self.form_score_history.append(self.current_score.score)
        self.average_form_score = sum(self.form_score_history) / len(self.form_score_history)
        target = self.exercise.reps
        if target and self.current_rep >= target:
            self._complete_set()
        return True

    def tick(self) -> bool:
        """Advance timers by one second. No-op unless RUNNING or RESTING."""
        if not self.is_ticking:
            return False
        assert self.exercise is not None
        self.total_elapsed_seconds += 1
        if self.status is SessionStatus.RESTING:
            self.rest_remaining_seconds = max(0, self.rest_remaining_seconds - 1)
            if self.rest_remaining_seconds == 0:
                self._start_next_set()
            return True

        self.elapsed_seconds += 1
        duration = self.exercise.duration_seconds
        self.remaining_seconds = max(0, duration - self.elapsed_seconds)
        if duration > 0 and self.remaining_seconds == 0:
            self._complete_exercise()
        return True

    def skip(self) -> bool:
        if not self.started or self.status is SessionStatus.COMPLETED:
            return self._reject("skip")
        logger.info("Skipping exercise={}", self.exercise.name if self.exercise else None)
        self._complete_exercise()
        return True

    def restart(self) -> bool:
        """Reset the current exercise's counters; playback waits for ``play()``."""
        if not self.started or self.status is SessionStatus.COMPLETED:
            return self._reject("restart")
        self._reset_exercise()
        self.status = SessionStatus.IDLE
        self._paused_from = None
        logger.info("Exercise restarted exercise={}", self.exercise.name if self.exercise else None)
        return True

    # --- Internal helpers ---------------------------------------------------

    def _reject(self, event: str) -> bool:
        if self.strict:
            raise InvalidTransition(event, self.status.value)
        logger.debug("Ignoring {} while {}", event, self.status.value)
        return False

    def _reset_exercise(self) -> None:
        self.elapsed_seconds = 0
        self.remaining_seconds = self.exercise.duration_seconds if self.exercise else 0
        self.current_rep = 0
        self.current_set = 1
        self.rest_remaining_seconds = 0

    def _complete_set(self) -> None:
        assert self.exercise is not None
        if self.current_set >= self.exercise.total_sets:
            self._complete_exercise()
            return
        self.current_set += 1
        self.current_rep = 0
        rest = self.exercise.rest_between_sets_seconds
        logger.info("Set complete; next set={} rest={}s", self.current_set, rest)
        if rest > 0:
            self.rest_remaining_seconds = rest
            self.status = SessionStatus.RESTING
        else:
            self._start_next_set()

    def _start_next_set(self) -> None:
        assert self.exercise is not None
        self.rest_remaining_seconds = 0
        self.elapsed_seconds = 0
        self.remaining_seconds = self.exercise.duration_seconds
        self.status = SessionStatus.RUNNING

    def _complete_exercise(self) -> None:
        self.exercises_completed += 1
        if self.plan is not None and self.exercise_index + 1 < len(self.plan.exercises):
            self.exercise_index += 1
            self.exercise = self.plan.exercises[self.exercise_index]
            self._reset_exercise()
            self._paused_from = None
            self.status = SessionStatus.RUNNING
            logger.info(
                "Advanced to exercise {}/{}: {}",
                self.exercise_index + 1,
                len(self.plan.exercises),
                self.exercise.name,
            )
            return
        self.stop()
