from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from formcoach.core.errors import ConfigurationError, InvalidTransition
from formcoach.session import Exercise, ExercisePlan, SessionStatus, WorkoutSessionMachine
from formcoach.vision import Feedback, FormScore


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 3, 4, 7, 30, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


def _machine(**kwargs) -> WorkoutSessionMachine:
    kwargs.setdefault("calories_per_minute", 7)
    kwargs.setdefault("clock", FakeClock())
    return WorkoutSessionMachine(**kwargs)


def _ticks(machine: WorkoutSessionMachine, n: int) -> None:
    for _ in range(n):
        machine.tick()


def test_start_loads_first_exercise_but_waits_for_play():
    m = _machine()
    assert m.start(Exercise("Squats", duration_seconds=45, reps=12, sets=3))
    assert m.status is SessionStatus.IDLE
    assert m.remaining_seconds == 45
    assert m.tick() is False
    assert m.play()
    assert m.status is SessionStatus.RUNNING


def test_reps_complete_a_set_and_start_rest():
    m = _machine()
    m.start(Exercise("Squats", duration_seconds=45, reps=3, sets=2, rest_between_sets_seconds=10))
    m.play()
    for _ in range(3):
        assert m.rep_completed()
    assert m.status is SessionStatus.RESTING
    assert m.rest_remaining_seconds == 10
    assert m.current_set == 2
    assert m.current_rep == 0

    _ticks(m, 9)
    assert m.status is SessionStatus.RESTING
    m.tick()
    assert m.status is SessionStatus.RUNNING
    assert m.elapsed_seconds == 0
    assert m.remaining_seconds == 45


def test_final_set_completes_the_session():
    m = _machine()
    m.start(Exercise("Squats", duration_seconds=45, reps=2, sets=2, rest_between_sets_seconds=0))
    m.play()
    m.rep_completed()
    m.rep_completed()
    # Zero rest moves straight into the next set.
    assert m.status is SessionStatus.RUNNING
    assert m.current_set == 2
    m.rep_completed()
    m.rep_completed()
    assert m.status is SessionStatus.COMPLETED
    assert m.result.total_reps == 4
    assert m.result.exercises_completed == 1


def test_plan_advances_then_completes():
    results = []
    m = _machine(on_complete=results.append)
    plan = ExercisePlan(
        "Pair",
        exercises=(Exercise("Plank", duration_seconds=3), Exercise("Jumping Jacks", duration_seconds=2)),
    )
    m.start(plan)
    m.play()
    _ticks(m, 3)
    assert m.exercise_index == 1
    assert m.exercise.name == "Jumping Jacks"
    assert m.status is SessionStatus.RUNNING
    assert m.remaining_seconds == 2

    _ticks(m, 2)
    assert m.status is SessionStatus.COMPLETED
    assert len(results) == 1
    result = results[0]
    assert result.exercises_completed == 2
    assert result.exercises_planned == 2
    assert result.plan_name == "Pair"
    assert result.total_duration_seconds == 5


def test_stop_twice_yields_one_result():
    results = []
    m = _machine(on_complete=results.append)
    m.start(Exercise("Plank", duration_seconds=30))
    m.play()
    first = m.stop()
    second = m.stop()
    assert first is second
    assert len(results) == 1
    assert first.total_duration_seconds == 0
    assert first.average_form_score == 0.0


def test_stop_before_start_is_rejected():
    m = _machine()
    assert m.stop() is None
    assert m.result is None


def test_average_form_score_tracks_reps():
    m = _machine()
    m.start(Exercise("Squats", duration_seconds=60, reps=10))
    m.play()
    assert m.average_form_score == 0.0
    m.record_score(FormScore(0.8, Feedback.GREAT))
    m.rep_completed()
    m.record_score(FormScore(0.6, Feedback.NEEDS_ADJUSTMENT))
    m.rep_completed()
    assert m.form_score_history == [0.8, 0.6]
    assert m.average_form_score == pytest.approx(0.7)
    state = m.snapshot()
    assert state.current_form_score == 0.6
    assert state.feedback is Feedback.NEEDS_ADJUSTMENT


def test_pause_freezes_timers_and_resume_restores_rest():
    m = _machine()
    m.start(Exercise("Squats", duration_seconds=45, reps=1, sets=2, rest_between_sets_seconds=10))
    m.play()
    m.rep_completed()
    assert m.status is SessionStatus.RESTING
    assert m.pause()
    assert m.tick() is False
    assert m.rest_remaining_seconds == 10
    assert m.resume()
    assert m.status is SessionStatus.RESTING


def test_invalid_events_are_ignored():
    m = _machine()
    assert m.rep_completed() is False
    assert m.pause() is False
    assert m.resume() is False
    assert m.play() is False
    m.start(Exercise("Plank", duration_seconds=30))
    assert m.start(Exercise("Plank", duration_seconds=30)) is False
    assert m.rep_completed() is False  # still idle
    assert m.total_reps == 0


def test_strict_machine_raises_on_invalid_event():
    m = _machine(strict=True)
    with pytest.raises(InvalidTransition) as info:
        m.rep_completed()
    assert info.value.event == "rep_completed"
    assert info.value.status == "idle"
    # Ticks outside a running session stay silent even in strict mode.
    assert m.tick() is False


def test_skip_and_restart():
    m = _machine()
    m.start([Exercise("Plank", duration_seconds=30), Exercise("Burpees", duration_seconds=45, reps=10)])
    assert m.plan.name == "Custom"
    m.play()
    _ticks(m, 5)
    assert m.skip()
    assert m.exercise.name == "Burpees"
    _ticks(m, 4)
    m.rep_completed()
    assert m.restart()
    assert m.status is SessionStatus.IDLE
    assert m.elapsed_seconds == 0
    assert m.current_rep == 0
    # Session totals survive a restart.
    assert m.total_reps == 1
    assert m.total_elapsed_seconds == 9
    m.play()
    assert m.skip()
    assert m.status is SessionStatus.COMPLETED
    assert m.result.exercises_completed == 2


def test_untimed_exercise_waits_for_reps():
    m = _machine()
    m.start(Exercise("Push-ups", duration_seconds=0, reps=2))
    m.play()
    _ticks(m, 100)
    assert m.status is SessionStatus.RUNNING
    m.rep_completed()
    m.rep_completed()
    assert m.status is SessionStatus.COMPLETED


def test_calories_follow_whole_minutes():
    clock = FakeClock()
    m = _machine(clock=clock)
    m.start(Exercise("Jumping Jacks", duration_seconds=600))
    started = clock.now
    m.play()
    _ticks(m, 150)
    clock.now = started + timedelta(seconds=150)
    result = m.stop()
    assert result.total_duration_seconds == 150
    assert result.calories_burned == 14
    assert result.started_at == started
    assert result.ended_at == clock.now


def test_bad_definitions_are_configuration_errors():
    m = _machine()
    with pytest.raises(ConfigurationError):
        m.start(Exercise("Nothing", duration_seconds=0))
    with pytest.raises(ConfigurationError):
        m.start(Exercise("Hold", duration_seconds=0, sets=3))
    with pytest.raises(ConfigurationError):
        m.start(Exercise("Hold", duration_seconds=0, reps=0, sets=3))
    with pytest.raises(ConfigurationError):
        m.start(ExercisePlan("Empty", exercises=()))
    with pytest.raises(ConfigurationError):
        m.start(Exercise("Negative", duration_seconds=-5))
    assert not m.started


def test_snapshot_display_values():
    m = _machine()
    m.start(Exercise("Lunges", duration_seconds=75, reps=10, sets=3))
    m.play()
    _ticks(m, 15)
    state = m.snapshot()
    assert state.timer_display == "01:00"
    assert state.progress == pytest.approx(0.2)
    assert state.target_sets == 3
    data = state.to_dict()
    assert data["status"] == "running"
    assert data["exercise"] == "Lunges"
    assert data["feedback_code"] == "no_pose"
