"""SessionClock: the single 1 Hz driver of an engine's timers.

- ``advance(n)`` delivers ticks synchronously (tests, replays)
- ``run(stop_event)`` is the asyncio loop used by the API lifespan; each
  tick runs in a worker thread so result hand-off never blocks the loop
- ticks are delivered only while the session is running or resting
"""
from __future__ import annotations

import asyncio
import time
from typing import Protocol

from loguru import logger


class Tickable(Protocol):
    @property
    def is_ticking(self) -> bool: ...

    def tick(self) -> bool: ...


class SessionClock:
    def __init__(self, engine: Tickable, interval: float = 1.0) -> None:
        self.engine = engine
        self.interval = max(0.01, float(interval))
        self.ticks_delivered = 0

    def advance(self, seconds: int = 1) -> int:
        """Deliver up to ``seconds`` ticks; returns how many changed state."""
        applied = 0
        for _ in range(max(0, int(seconds))):
            if self._tick_once():
                applied += 1
        return applied

    def _tick_once(self) -> bool:
        if not self.engine.is_ticking:
            return False
        changed = self.engine.tick()
        if changed:
            self.ticks_delivered += 1
        return changed

    async def run(self, stop_event: asyncio.Event) -> None:
        # Deadlines advance by a fixed interval from a monotonic origin.
        next_deadline = time.monotonic() + self.interval
        try:
            while not stop_event.is_set():
                delay = max(0.0, next_deadline - time.monotonic())
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=delay)
                    break
                except asyncio.TimeoutError:
                    pass
                next_deadline += self.interval
                try:
                    await asyncio.to_thread(self._tick_once)
                except Exception as exc:
                    logger.warning("Session clock tick error: {}", exc)
        except asyncio.CancelledError:  # pragma: no cover
            logger.info("Session clock task cancelled")
            raise
