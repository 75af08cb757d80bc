"""CoachingEngine: the serialized owner of one workout session.

Frame scoring is pure and runs outside the lock; folding the score into the
session, clock ticks and user events all go through the same lock. Finished
session results are handed to ``on_result`` after the lock is released.
"""
from __future__ import annotations

import threading
from datetime import datetime
from typing import Callable, List, Optional, TypeVar

from loguru import logger

from formcoach.core.config import get_settings
from formcoach.session.machine import (
    SessionState,
    SessionStatus,
    SessionTarget,
    WorkoutSessionMachine,
    utcnow,
)
from formcoach.session.models import SessionResult
from formcoach.vision.keypoints import KeypointFrame
from formcoach.vision.scoring import FormScore, FormScorer
from formcoach.vision.throttle import FrameThrottle, should_process

ResultHandler = Callable[[SessionResult], None]
T = TypeVar("T")


class CoachingEngine:
    def __init__(
        self,
        *,
        stride: Optional[int] = None,
        scorer: Optional[FormScorer] = None,
        on_result: Optional[ResultHandler] = None,
        clock: Callable[[], datetime] = utcnow,
        strict: bool = False,
    ) -> None:
        settings = get_settings()
        self.throttle = FrameThrottle(stride if stride is not None else settings.frame_stride)
        self.scorer = scorer or FormScorer()
        self.on_result = on_result
        self._clock = clock
        self._strict = strict
        self._lock = threading.RLock()
        self._pending: List[SessionResult] = []
        self.last_result: Optional[SessionResult] = None
        self.machine = self._new_machine()

    def _new_machine(self) -> WorkoutSessionMachine:
        return WorkoutSessionMachine(
            clock=self._clock, on_complete=self._pending.append, strict=self._strict
        )

    def _call(self, fn: Callable[[], T]) -> T:
        with self._lock:
            out = fn()
            pending = list(self._pending)
            self._pending.clear()
        for result in pending:
            self._dispatch(result)
        return out

    def _dispatch(self, result: SessionResult) -> None:
        self.last_result = result
        if self.on_result is None:
            return
        try:
            self.on_result(result)
        except Exception as exc:  # pragma: no cover - persistence fallback
            logger.warning("Failed to hand off session result: {}", exc)

    # --- Frames -----------------------------------------------------------

    def submit_frame(
        self, frame: KeypointFrame, frame_index: Optional[int] = None
    ) -> Optional[FormScore]:
        """Score ``frame`` unless throttled; returns None for dropped frames."""
        with self._lock:
            if frame_index is None:
                accepted = self.throttle.next()
            else:
                accepted = should_process(frame_index, self.throttle.stride)
        if not accepted:
            return None
        form_score = self.scorer.score(frame)
        with self._lock:
            self.machine.record_score(form_score)
        return form_score

    # --- Session events ---------------------------------------------------

    def new_session(self) -> bool:
        """Replace a finished (or never started) machine with a fresh one."""
        with self._lock:
            if self.machine.started and self.machine.status is not SessionStatus.COMPLETED:
                return False
            self.machine = self._new_machine()
            self.throttle.reset()
            return True

    def start(self, target: SessionTarget) -> bool:
        def _start() -> bool:
            if self.machine.status is SessionStatus.COMPLETED:
                self.machine = self._new_machine()
                self.throttle.reset()
            return self.machine.start(target)

        return self._call(_start)

    def play(self) -> bool:
        return self._call(lambda: self.machine.play())

    def pause(self) -> bool:
        return self._call(lambda: self.machine.pause())

    def resume(self) -> bool:
        return self._call(lambda: self.machine.resume())

    def stop(self) -> Optional[SessionResult]:
        return self._call(lambda: self.machine.stop())

    def skip(self) -> bool:
        return self._call(lambda: self.machine.skip())

    def restart(self) -> bool:
        return self._call(lambda: self.machine.restart())

    def rep_completed(self) -> bool:
        return self._call(lambda: self.machine.rep_completed())

    def tick(self) -> bool:
        return self._call(lambda: self.machine.tick())

    @property
    def is_ticking(self) -> bool:
        with self._lock:
            return self.machine.is_ticking

    def snapshot(self) -> SessionState:
        with self._lock:
            return self.machine.snapshot()
