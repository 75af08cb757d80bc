from __future__ import annotations

import threading

from formcoach.session import CoachingEngine, Exercise, SessionStatus
from formcoach.vision import Feedback, KeypointFrame

LEVEL_BODY = KeypointFrame.from_landmarks(
    {
        "left_shoulder": (0.4, 0.3, 0.9),
        "right_shoulder": (0.6, 0.3, 0.9),
        "left_hip": (0.42, 0.6, 0.9),
        "right_hip": (0.58, 0.6, 0.9),
    }
)


def test_submit_frame_applies_throttle():
    engine = CoachingEngine(stride=3)
    engine.start(Exercise("Squats", duration_seconds=45, reps=12, sets=3))
    outcomes = [engine.submit_frame(LEVEL_BODY) for _ in range(6)]
    assert [o is not None for o in outcomes] == [False, False, True, False, False, True]
    assert outcomes[2].score == 1.0
    assert engine.snapshot().feedback is Feedback.EXCELLENT


def test_submit_frame_with_explicit_index():
    engine = CoachingEngine(stride=3)
    assert engine.submit_frame(LEVEL_BODY, frame_index=4) is None
    assert engine.submit_frame(LEVEL_BODY, frame_index=9).score == 1.0


def test_finished_session_is_handed_off_once():
    results = []
    engine = CoachingEngine(stride=1, on_result=results.append)
    engine.start(Exercise("Plank", duration_seconds=2))
    engine.play()
    engine.tick()
    engine.tick()
    assert engine.snapshot().status is SessionStatus.COMPLETED
    assert engine.stop() is results[0]
    assert len(results) == 1
    assert engine.last_result is results[0]


def test_start_after_completion_opens_a_new_session():
    engine = CoachingEngine(stride=1)
    engine.start(Exercise("Plank", duration_seconds=30))
    engine.play()
    assert engine.start(Exercise("Squats", duration_seconds=45)) is False
    engine.stop()
    assert engine.start(Exercise("Squats", duration_seconds=45))
    state = engine.snapshot()
    assert state.exercise_name == "Squats"
    assert state.status is SessionStatus.IDLE
    assert engine.throttle.counter == 0


def test_is_ticking_follows_status():
    engine = CoachingEngine(stride=1)
    assert engine.is_ticking is False
    engine.start(Exercise("Plank", duration_seconds=30))
    assert engine.is_ticking is False
    engine.play()
    assert engine.is_ticking is True
    engine.pause()
    assert engine.is_ticking is False


def test_new_session_refuses_to_drop_a_running_one():
    engine = CoachingEngine(stride=1)
    engine.start(Exercise("Plank", duration_seconds=30))
    engine.play()
    assert engine.new_session() is False
    engine.stop()
    assert engine.new_session() is True
    assert engine.snapshot().status is SessionStatus.IDLE


def test_frames_and_ticks_from_threads_stay_consistent():
    engine = CoachingEngine(stride=1)
    engine.start(Exercise("Squats", duration_seconds=10_000, reps=10_000))
    engine.play()
    ticks_per_thread, reps_per_thread = 200, 100

    def ticker():
        for _ in range(ticks_per_thread):
            engine.tick()

    def scorer():
        for _ in range(reps_per_thread):
            engine.submit_frame(LEVEL_BODY)
            engine.rep_completed()

    threads = [threading.Thread(target=ticker) for _ in range(2)]
    threads += [threading.Thread(target=scorer) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    state = engine.snapshot()
    assert state.elapsed_seconds == 2 * ticks_per_thread
    assert state.total_elapsed_seconds == 2 * ticks_per_thread
    assert state.current_rep == 2 * reps_per_thread
    assert len(state.form_score_history) == state.total_reps == 2 * reps_per_thread
    assert state.form_score_history == (1.0,) * (2 * reps_per_thread)
    assert state.average_form_score == 1.0
